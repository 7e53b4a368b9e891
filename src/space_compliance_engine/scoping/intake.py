"""Intake: turn in-scope questionnaire answers into an OperatorProfile.

The questionnaire captures the regulatory shape of the operator (activity,
establishment, size, constellation, orbit). The establishment country and the
licensing jurisdictions come from the organisation record and are passed in
explicitly.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from space_compliance_engine.core.models import (
    EU_MEMBER_STATES,
    ActivityType,
    EntitySize,
    Jurisdiction,
    OperatorProfile,
    OperatorType,
    OrbitRegime,
)
from space_compliance_engine.errors import ValidationError
from space_compliance_engine.scoping.evaluator import ScopingVerdict

# (activity_type, launch_role) -> (operator type, activity)
_ACTIVITY_MAPPING: dict[tuple[str, str | None], tuple[OperatorType, ActivityType]] = {
    ("spacecraft", None): (OperatorType.SCO, ActivityType.SPACECRAFT_OPERATION),
    ("launch", "launch_vehicle"): (OperatorType.LO, ActivityType.LAUNCH),
    ("launch", "launch_site"): (OperatorType.LSO, ActivityType.LAUNCH_SITE),
    ("isos", None): (OperatorType.ISOS, ActivityType.IN_ORBIT_SERVICES),
    ("collision_avoidance", None): (OperatorType.CAP, ActivityType.COLLISION_AVOIDANCE_SERVICES),
    ("data_provider", None): (OperatorType.PDP, ActivityType.PRIMARY_DATA_PROVISION),
}

_ORBIT_MAPPING: dict[str, OrbitRegime] = {
    "LEO": OrbitRegime.LEO,
    "MEO": OrbitRegime.MEO,
    "GEO": OrbitRegime.GEO,
    "beyond": OrbitRegime.CISLUNAR,
}


def _require_in_scope(verdict: ScopingVerdict) -> Mapping[str, Any]:
    if not verdict.in_scope:
        raise ValidationError(
            f"Cannot build a profile from a {verdict.outcome} scoping verdict for {verdict.framework}"
        )
    return verdict.classification_inputs


def profile_from_eu_scoping(
    verdict: ScopingVerdict,
    establishment_country: Jurisdiction | str,
    jurisdictions: Iterable[Jurisdiction | str] = (),
    **overrides: Any,
) -> OperatorProfile:
    """Build a profile from an in-scope EU Space Act verdict.

    Args:
        verdict: In-scope verdict of the EU Space Act questionnaire.
        establishment_country: Country of legal establishment.
        jurisdictions: Additional licensing jurisdictions.
        **overrides: Extra profile fields, e.g. capability flags.

    Returns:
        The validated OperatorProfile.

    Raises:
        ValidationError: If the verdict is not in scope, or the answers
            contradict the establishment country.
    """
    inputs = _require_in_scope(verdict)
    activity = inputs["activity_type"]
    operator_type, activity_type = _ACTIVITY_MAPPING[(activity, inputs.get("launch_role"))]
    operator_types = {operator_type}

    establishment = inputs["establishment"]
    try:
        in_eu = Jurisdiction(establishment_country) in EU_MEMBER_STATES
    except ValueError as exc:
        raise ValidationError(f"Unknown establishment country {establishment_country!r}") from exc
    if establishment == "eu" and not in_eu:
        raise ValidationError(f"Establishment answer 'eu' contradicts country {establishment_country}")
    if establishment != "eu" and in_eu:
        raise ValidationError(f"Third-country answer contradicts EU country {establishment_country}")
    provides_eu_services = bool(inputs["offers_eu_services"]) or establishment == "third_country_eu_services"
    if establishment == "third_country_eu_services":
        operator_types.add(OperatorType.TCO)

    size = inputs["entity_size"]
    is_research = size == "research"
    entity_size = EntitySize.SMALL if is_research else EntitySize(size)

    operates_constellation = bool(inputs["operates_constellation"])
    satellite_count = int(inputs["constellation_size"]) if operates_constellation else 1

    fields: dict[str, Any] = {
        "operator_types": operator_types,
        "activity_types": {activity_type},
        "jurisdictions": set(jurisdictions),
        "establishment_country": establishment_country,
        "entity_size": entity_size,
        "orbit_regime": _ORBIT_MAPPING[inputs["primary_orbit"]],
        "satellite_count": satellite_count,
        "operates_constellation": operates_constellation,
        "provides_eu_services": provides_eu_services,
        "is_research_institution": is_research,
        "is_defense_only": False,
    }
    fields.update(overrides)
    return OperatorProfile.parse(fields)


def apply_nis2_scoping(profile: OperatorProfile, verdict: ScopingVerdict) -> OperatorProfile:
    """Return a new profile refined with in-scope NIS2 answers.

    Args:
        profile: Existing profile.
        verdict: In-scope verdict of the NIS2 questionnaire.

    Returns:
        A new validated OperatorProfile; the input profile is unchanged.

    Raises:
        ValidationError: If the verdict is not in scope.
    """
    inputs = _require_in_scope(verdict)
    sub_sector = inputs.get("space_sub_sector")
    fields = profile.model_dump()
    fields.update(
        entity_size=inputs["entity_size"],
        member_state_count=inputs["member_state_count"],
        operates_ground_infrastructure=(
            bool(inputs["operates_ground_infra"]) or sub_sector == "ground_infrastructure"
        ),
        operates_satellite_communications=(
            profile.operates_satellite_communications or sub_sector == "satellite_communications"
        ),
    )
    return OperatorProfile.parse(fields)
