"""Classification engine: ordered, first-match-wins rule lists per framework.

Each framework has a tuple of ClassificationRule entries. A rule pairs a
predicate over the OperatorProfile with the label, reason and article
reference it produces. Rules are evaluated top to bottom and the first
predicate that holds decides the result; the final rule of every list is
unconditional, so every profile gets exactly one label.

Rule sets:
- eu_space_act: standard | light | out_of_scope
- nis2: essential | important | out_of_scope
- uk_space_act: launch_operations | orbital_operations | out_of_scope
- us_regulatory: multi_agency | single_agency | out_of_scope
- constellation tier: single_satellite ... mega_constellation

Cross-framework overlap is computed against the static crosswalk table.
"""

import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from space_compliance_engine.catalog.crosswalk import Crosswalk
from space_compliance_engine.core.models import (
    OUT_OF_SCOPE,
    ActivityType,
    ClassificationResult,
    EntitySize,
    Framework,
    Jurisdiction,
    OperatorProfile,
    OperatorType,
    OverlapPair,
    OverlapSummary,
)
from space_compliance_engine.errors import ComputationError, NotFoundError

# Estimated weeks saved per crosswalk link when evidence is reused
SAVINGS_WEEKS_PER_RELATIONSHIP: dict[str, float] = {
    "supersedes": 3.0,
    "overlaps": 1.5,
}

CONSTELLATION_TIER = "constellation_tier"


@dataclass(frozen=True)
class ClassificationRule:
    """One predicate -> result pair."""

    predicate: Callable[[OperatorProfile], bool]
    label: str
    reason: str
    article_ref: str = ""


def _always(_: OperatorProfile) -> bool:
    return True


def evaluate_rules(
    framework: str,
    rules: Iterable[ClassificationRule],
    profile: OperatorProfile,
) -> ClassificationResult:
    """Evaluate an ordered rule list and return the first matching result.

    Args:
        framework: Framework or dimension the rules classify.
        rules: Ordered rules.
        profile: Operator profile.

    Returns:
        ClassificationResult of the first rule whose predicate holds.

    Raises:
        ComputationError: If no rule matches, which means the rule list
            lacks its unconditional fallback.
    """
    for rule in rules:
        if rule.predicate(profile):
            return ClassificationResult(
                framework=framework,
                label=rule.label,
                reason=rule.reason,
                article_ref=rule.article_ref,
            )
    raise ComputationError(f"No classification rule matched for {framework}")


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def _has_launch_activity(profile: OperatorProfile) -> bool:
    launch_activities = {
        ActivityType.LAUNCH,
        ActivityType.REENTRY,
        ActivityType.LAUNCH_SITE,
        ActivityType.RANGE_CONTROL,
        ActivityType.SUBORBITAL,
        ActivityType.HUMAN_SPACEFLIGHT,
    }
    return bool(profile.activity_types & launch_activities) or bool(
        profile.operator_types & {OperatorType.LO, OperatorType.LSO}
    )


def _has_orbital_activity(profile: OperatorProfile) -> bool:
    return ActivityType.SPACECRAFT_OPERATION in profile.activity_types or bool(
        profile.operator_types & {OperatorType.SCO, OperatorType.ISOS}
    )


def _has_nexus(profile: OperatorProfile, country: Jurisdiction) -> bool:
    return profile.establishment_country == country or country in profile.jurisdictions


def _is_satcom(profile: OperatorProfile) -> bool:
    return profile.operates_satellite_communications or (
        ActivityType.SATELLITE_COMMUNICATIONS in profile.activity_types
    )


def us_agencies(profile: OperatorProfile) -> list[str]:
    """Return the US agencies with licensing authority over the profile's activities.

    FAA licenses launch, reentry and launch sites; FCC licenses every space
    station that transmits; NOAA licenses private remote sensing.
    """
    agencies: list[str] = []
    if profile.activity_types & {ActivityType.LAUNCH, ActivityType.REENTRY, ActivityType.LAUNCH_SITE}:
        agencies.append("FAA")
    if _is_satcom(profile) or _has_orbital_activity(profile):
        agencies.append("FCC")
    if ActivityType.REMOTE_SENSING in profile.activity_types:
        agencies.append("NOAA")
    return agencies


# ---------------------------------------------------------------------------
# Rule sets
# ---------------------------------------------------------------------------

EU_SPACE_ACT_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        predicate=lambda p: p.is_defense_only,
        label=OUT_OF_SCOPE,
        reason="Assets used exclusively for defence or national security are excluded.",
        article_ref="Art. 2(3)(a)",
    ),
    ClassificationRule(
        predicate=lambda p: not p.is_eu_established and not p.provides_eu_services,
        label=OUT_OF_SCOPE,
        reason="Operator is established outside the EU and provides no space services in the Union.",
        article_ref="Art. 2(1)",
    ),
    ClassificationRule(
        predicate=lambda p: p.is_research_institution,
        label="light",
        reason="Research and educational institutions qualify for the light regime.",
        article_ref="Art. 10",
    ),
    ClassificationRule(
        predicate=lambda p: p.entity_size in (EntitySize.MICRO, EntitySize.SMALL),
        label="light",
        reason="Micro and small enterprises qualify for the light regime.",
        article_ref="Art. 10",
    ),
    ClassificationRule(
        predicate=_always,
        label="standard",
        reason="Medium and large operators are subject to the full authorisation regime.",
        article_ref="Art. 6",
    ),
)

NIS2_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        predicate=lambda p: not p.is_eu_established,
        label=OUT_OF_SCOPE,
        reason="NIS2 applies to entities established in the EU.",
        article_ref="Art. 26",
    ),
    ClassificationRule(
        predicate=lambda p: p.entity_size == EntitySize.MICRO and _is_satcom(p),
        label="important",
        reason="Satellite communication providers fall within scope regardless of size.",
        article_ref="Art. 2(2)(a)",
    ),
    ClassificationRule(
        predicate=lambda p: p.entity_size == EntitySize.MICRO,
        label=OUT_OF_SCOPE,
        reason="Micro enterprises are outside NIS2 unless they provide satellite communications.",
        article_ref="Art. 2(1)",
    ),
    ClassificationRule(
        predicate=lambda p: p.entity_size == EntitySize.LARGE,
        label="essential",
        reason="Large entities in the space sector are essential entities.",
        article_ref="Art. 3(1)(a)",
    ),
    ClassificationRule(
        predicate=lambda p: p.entity_size == EntitySize.MEDIUM
        and (p.operates_ground_infrastructure or _is_satcom(p)),
        label="essential",
        reason="Medium entities operating ground infrastructure or satellite communications are essential.",
        article_ref="Art. 3(1)(e)",
    ),
    ClassificationRule(
        predicate=lambda p: p.entity_size == EntitySize.MEDIUM,
        label="important",
        reason="Medium entities in the space sector are important entities.",
        article_ref="Art. 3(2)",
    ),
    ClassificationRule(
        predicate=lambda p: p.operates_ground_infrastructure or _is_satcom(p) or _has_launch_activity(p),
        label="important",
        reason="Small entities with critical space infrastructure are important entities.",
        article_ref="Art. 2(2)(b)",
    ),
    ClassificationRule(
        predicate=_always,
        label=OUT_OF_SCOPE,
        reason="Small entities without critical space infrastructure are outside NIS2.",
        article_ref="Art. 2(1)",
    ),
)

UK_SPACE_ACT_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        predicate=lambda p: not _has_nexus(p, Jurisdiction.UK),
        label=OUT_OF_SCOPE,
        reason="Operator has no UK establishment and no UK licensing jurisdiction.",
        article_ref="SIA s.1",
    ),
    ClassificationRule(
        predicate=_has_launch_activity,
        label="launch_operations",
        reason="Launch, return, spaceport or range activities require CAA launch-side licensing.",
        article_ref="SIA s.3",
    ),
    ClassificationRule(
        predicate=_has_orbital_activity,
        label="orbital_operations",
        reason="Procuring or operating satellites in orbit requires an orbital operator licence.",
        article_ref="SIA s.7",
    ),
    ClassificationRule(
        predicate=_always,
        label=OUT_OF_SCOPE,
        reason="No activity licensable under the Space Industry Act.",
        article_ref="SIA s.1",
    ),
)

US_REGULATORY_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        predicate=lambda p: not _has_nexus(p, Jurisdiction.US),
        label=OUT_OF_SCOPE,
        reason="Operator has no US establishment and no US licensing jurisdiction.",
        article_ref="51 U.S.C. 50904",
    ),
    ClassificationRule(
        predicate=lambda p: len(us_agencies(p)) >= 2,
        label="multi_agency",
        reason="Activities require licences from more than one of FAA, FCC and NOAA.",
        article_ref="14 CFR 450 / 47 CFR 25 / 15 CFR 960",
    ),
    ClassificationRule(
        predicate=lambda p: len(us_agencies(p)) == 1,
        label="single_agency",
        reason="Activities fall under a single US licensing agency.",
        article_ref="14 CFR 450 / 47 CFR 25 / 15 CFR 960",
    ),
    ClassificationRule(
        predicate=_always,
        label=OUT_OF_SCOPE,
        reason="No activity licensable by FAA, FCC or NOAA.",
        article_ref="51 U.S.C. 50904",
    ),
)

CONSTELLATION_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        predicate=lambda p: p.satellite_count >= 1000,
        label="mega_constellation",
        reason="1,000 or more spacecraft.",
        article_ref="Art. 68",
    ),
    ClassificationRule(
        predicate=lambda p: p.satellite_count >= 100,
        label="large_constellation",
        reason="100 to 999 spacecraft.",
        article_ref="Art. 68",
    ),
    ClassificationRule(
        predicate=lambda p: p.satellite_count >= 10,
        label="medium_constellation",
        reason="10 to 99 spacecraft.",
        article_ref="Art. 68",
    ),
    ClassificationRule(
        predicate=lambda p: p.satellite_count >= 2,
        label="small_constellation",
        reason="2 to 9 spacecraft.",
        article_ref="Art. 68",
    ),
    ClassificationRule(
        predicate=_always,
        label="single_satellite",
        reason="A single spacecraft or none.",
    ),
)

_RULE_SETS: dict[str, tuple[ClassificationRule, ...]] = {
    Framework.EU_SPACE_ACT: EU_SPACE_ACT_RULES,
    Framework.NIS2: NIS2_RULES,
    Framework.UK_SPACE_ACT: UK_SPACE_ACT_RULES,
    Framework.US_REGULATORY: US_REGULATORY_RULES,
    CONSTELLATION_TIER: CONSTELLATION_RULES,
}


def get_rules(framework: str) -> tuple[ClassificationRule, ...]:
    """Return the ordered rule list for a framework or dimension.

    Raises:
        NotFoundError: If no rule set exists for framework.
    """
    rules = _RULE_SETS.get(framework)
    if rules is None:
        raise NotFoundError("Classification rule set", str(framework))
    return rules


def classify(framework: str, profile: OperatorProfile) -> ClassificationResult:
    """Classify a profile under one framework.

    Args:
        framework: Framework code, or CONSTELLATION_TIER.
        profile: Operator profile.

    Returns:
        The ClassificationResult of the first matching rule.
    """
    return evaluate_rules(str(framework), get_rules(framework), profile)


def classify_constellation(profile: OperatorProfile) -> ClassificationResult:
    """Return the constellation size tier of a profile."""
    return classify(CONSTELLATION_TIER, profile)


def compute_overlap(
    source_framework: str,
    source_ids: Iterable[str],
    target_framework: str,
    target_ids: Iterable[str],
    crosswalk: Crosswalk,
) -> OverlapSummary:
    """Intersect two frameworks' applicable requirements against the crosswalk.

    A link counts when one endpoint is applicable in the source framework and
    the other in the target framework, in either direction.

    Args:
        source_framework: First framework code.
        source_ids: Applicable requirement ids of the first framework.
        target_framework: Second framework code.
        target_ids: Applicable requirement ids of the second framework.
        crosswalk: Static mapping table.

    Returns:
        OverlapSummary with the matching links in crosswalk order and the
        estimated weeks saved by reusing evidence.
    """
    source = frozenset(source_ids)
    target = frozenset(target_ids)
    pairs: list[OverlapPair] = []
    for entry in crosswalk:
        if entry.source_id in source and entry.target_id in target:
            pairs.append(OverlapPair(entry.source_id, entry.target_id, entry.relationship, entry.description))
        elif entry.source_id in target and entry.target_id in source:
            pairs.append(OverlapPair(entry.target_id, entry.source_id, entry.relationship, entry.description))

    savings = sum(SAVINGS_WEEKS_PER_RELATIONSHIP.get(pair.relationship, 0.0) for pair in pairs)
    return OverlapSummary(
        source_framework=str(source_framework),
        target_framework=str(target_framework),
        pairs=tuple(pairs),
        potential_savings_weeks=float(math.floor(savings + 0.5)),
    )
