"""Tests for the classification engine and cross-framework overlap.

Each rule list is first-match-wins with an unconditional fallback, so every
test pins the label a representative profile receives.
"""

from collections.abc import Callable

import pytest

from space_compliance_engine.assessment.applicability import resolve_for_profile
from space_compliance_engine.assessment.classification import (
    ClassificationRule,
    classify,
    classify_constellation,
    compute_overlap,
    evaluate_rules,
    get_rules,
    us_agencies,
)
from space_compliance_engine.catalog.crosswalk import Crosswalk, CrosswalkEntry
from space_compliance_engine.catalog.inventory import RequirementCatalog
from space_compliance_engine.core.models import Framework, OperatorProfile
from space_compliance_engine.errors import ComputationError, NotFoundError

ProfileFactory = Callable[..., OperatorProfile]


class TestEuSpaceActClassification:
    """Tests for EU Space Act regimes."""

    def test_medium_operator_is_standard(self, baseline_profile: OperatorProfile) -> None:
        """Medium EU operators fall under the standard regime."""
        result = classify(Framework.EU_SPACE_ACT, baseline_profile)
        assert result.label == "standard"
        assert result.article_ref == "Art. 6"
        assert result.in_scope

    @pytest.mark.parametrize("entity_size", ["micro", "small"])
    def test_small_enterprises_are_light(self, make_profile: ProfileFactory, entity_size: str) -> None:
        """Micro and small enterprises qualify for the light regime."""
        assert classify(Framework.EU_SPACE_ACT, make_profile(entity_size=entity_size)).label == "light"

    def test_research_institution_is_light(self, make_profile: ProfileFactory) -> None:
        """Research institutions qualify for the light regime regardless of size."""
        profile = make_profile(entity_size="large", is_research_institution=True)
        assert classify(Framework.EU_SPACE_ACT, profile).label == "light"

    def test_defense_only_is_out_of_scope(self, make_profile: ProfileFactory) -> None:
        """Defense-only assets are excluded before any size rule applies."""
        result = classify(Framework.EU_SPACE_ACT, make_profile(entity_size="small", is_defense_only=True))
        assert result.label == "out_of_scope"
        assert not result.in_scope
        assert result.article_ref == "Art. 2(3)(a)"

    def test_non_eu_without_eu_services_is_out_of_scope(self, make_profile: ProfileFactory) -> None:
        """Third-country operators with no EU activity are out of scope."""
        assert classify(Framework.EU_SPACE_ACT, make_profile(establishment_country="US")).label == "out_of_scope"

    def test_non_eu_serving_union_is_in_scope(self, make_profile: ProfileFactory) -> None:
        """Third-country operators serving the EU are classified by size."""
        profile = make_profile(establishment_country="US", provides_eu_services=True)
        assert classify(Framework.EU_SPACE_ACT, profile).label == "standard"


class TestNis2Classification:
    """Tests for NIS2 entity classes."""

    @pytest.mark.parametrize(
        ("overrides", "expected"),
        [
            ({}, "important"),
            ({"entity_size": "large"}, "essential"),
            ({"operates_ground_infrastructure": True}, "essential"),
            ({"entity_size": "micro"}, "out_of_scope"),
            ({"entity_size": "micro", "operates_satellite_communications": True}, "important"),
            ({"entity_size": "small"}, "out_of_scope"),
            ({"entity_size": "small", "operates_ground_infrastructure": True}, "important"),
            ({"establishment_country": "US", "entity_size": "large"}, "out_of_scope"),
        ],
    )
    def test_labels(self, make_profile: ProfileFactory, overrides: dict, expected: str) -> None:
        """Size and critical infrastructure decide the NIS2 entity class."""
        assert classify(Framework.NIS2, make_profile(**overrides)).label == expected


class TestNationalClassification:
    """Tests for the UK and US regimes."""

    def test_uk_without_nexus_is_out_of_scope(self, baseline_profile: OperatorProfile) -> None:
        """An operator with no UK establishment or licence is out of UK scope."""
        assert classify(Framework.UK_SPACE_ACT, baseline_profile).label == "out_of_scope"

    def test_uk_orbital_operator(self, make_profile: ProfileFactory) -> None:
        """A UK-established spacecraft operator needs an orbital operator licence."""
        result = classify(Framework.UK_SPACE_ACT, make_profile(establishment_country="UK"))
        assert result.label == "orbital_operations"
        assert result.article_ref == "SIA s.7"

    def test_uk_launch_rule_precedes_orbital_rule(self, make_profile: ProfileFactory) -> None:
        """Launch activity wins over orbital activity for UK licensing."""
        profile = make_profile(
            operator_types=["SCO", "LO"],
            activity_types=["spacecraft_operation", "launch"],
            jurisdictions=["UK"],
        )
        assert classify(Framework.UK_SPACE_ACT, profile).label == "launch_operations"

    def test_uk_without_licensable_activity(self, make_profile: ProfileFactory) -> None:
        """A UK data provider has nothing licensable under the Space Industry Act."""
        profile = make_profile(
            operator_types=["PDP"],
            activity_types=["primary_data_provision"],
            establishment_country="UK",
        )
        assert classify(Framework.UK_SPACE_ACT, profile).label == "out_of_scope"

    def test_us_single_agency(self, make_profile: ProfileFactory) -> None:
        """A spacecraft operator licensed in the US answers to the FCC only."""
        profile = make_profile(jurisdictions=["US"])
        assert us_agencies(profile) == ["FCC"]
        assert classify(Framework.US_REGULATORY, profile).label == "single_agency"

    def test_us_multi_agency(self, make_profile: ProfileFactory) -> None:
        """Remote sensing adds NOAA on top of the FCC."""
        profile = make_profile(
            activity_types=["spacecraft_operation", "remote_sensing"],
            establishment_country="US",
        )
        assert us_agencies(profile) == ["FCC", "NOAA"]
        assert classify(Framework.US_REGULATORY, profile).label == "multi_agency"

    def test_us_launch_operator(self, make_profile: ProfileFactory) -> None:
        """A launch operator answers to the FAA."""
        profile = make_profile(operator_types=["LO"], activity_types=["launch"], jurisdictions=["US"])
        assert us_agencies(profile) == ["FAA"]

    def test_us_without_nexus(self, baseline_profile: OperatorProfile) -> None:
        """No US establishment or licence means out of US scope."""
        assert classify(Framework.US_REGULATORY, baseline_profile).label == "out_of_scope"


class TestConstellationTier:
    """Tests for the constellation size tier."""

    @pytest.mark.parametrize(
        ("satellite_count", "expected"),
        [
            (0, "single_satellite"),
            (1, "single_satellite"),
            (2, "small_constellation"),
            (9, "small_constellation"),
            (10, "medium_constellation"),
            (100, "large_constellation"),
            (999, "large_constellation"),
            (1000, "mega_constellation"),
        ],
    )
    def test_tier_boundaries(self, make_profile: ProfileFactory, satellite_count: int, expected: str) -> None:
        """Tier boundaries follow the satellite count."""
        assert classify_constellation(make_profile(satellite_count=satellite_count)).label == expected


class TestRuleEvaluation:
    """Tests for the generic rule evaluator."""

    def test_unknown_rule_set_raises_not_found(self) -> None:
        """Unknown framework codes have no rule set."""
        with pytest.raises(NotFoundError):
            get_rules("mars_act")

    def test_rule_list_without_fallback_raises(self, baseline_profile: OperatorProfile) -> None:
        """A rule list where nothing matches is a computation error."""
        rules = (ClassificationRule(predicate=lambda profile: False, label="never", reason="never"),)
        with pytest.raises(ComputationError, match="No classification rule matched"):
            evaluate_rules("custom", rules, baseline_profile)

    def test_first_match_wins(self, baseline_profile: OperatorProfile) -> None:
        """Earlier rules shadow later ones."""
        rules = (
            ClassificationRule(predicate=lambda profile: True, label="first", reason="first"),
            ClassificationRule(predicate=lambda profile: True, label="second", reason="second"),
        )
        assert evaluate_rules("custom", rules, baseline_profile).label == "first"

    def test_every_rule_list_ends_with_fallback(self) -> None:
        """Every rule list ends with an unconditional rule."""
        for framework in Framework:
            last = get_rules(framework)[-1]
            assert last.predicate.__name__ == "_always"


class TestComputeOverlap:
    """Tests for crosswalk overlap between frameworks."""

    def test_eu_nis2_overlap_for_baseline(
        self,
        catalog: RequirementCatalog,
        baseline_profile: OperatorProfile,
    ) -> None:
        """Only links whose endpoints both apply are counted."""
        eu_ids = [
            item.id for item in resolve_for_profile(catalog.framework(Framework.EU_SPACE_ACT).root, baseline_profile)
        ]
        nis2_ids = [item.id for item in resolve_for_profile(catalog.framework(Framework.NIS2).root, baseline_profile)]
        overlap = compute_overlap(Framework.EU_SPACE_ACT, eu_ids, Framework.NIS2, nis2_ids, catalog.crosswalk)

        assert overlap.count == 6
        assert ("eu-art-76", "nis2-space-ground") not in {(p.source_id, p.target_id) for p in overlap.pairs}
        assert overlap.potential_savings_weeks == 11.0

    def test_overlap_is_symmetric(
        self,
        catalog: RequirementCatalog,
        baseline_profile: OperatorProfile,
    ) -> None:
        """Swapping source and target keeps the count and orients the pairs."""
        eu_ids = [
            item.id for item in resolve_for_profile(catalog.framework(Framework.EU_SPACE_ACT).root, baseline_profile)
        ]
        nis2_ids = [item.id for item in resolve_for_profile(catalog.framework(Framework.NIS2).root, baseline_profile)]
        overlap = compute_overlap(Framework.NIS2, nis2_ids, Framework.EU_SPACE_ACT, eu_ids, catalog.crosswalk)

        assert overlap.count == 6
        assert all(pair.source_id.startswith("nis2-") for pair in overlap.pairs)

    def test_savings_round_half_up(self) -> None:
        """1.5 weeks of savings rounds up to 2."""
        crosswalk = Crosswalk((CrosswalkEntry("a", "b", "overlaps"),))
        overlap = compute_overlap("x", ["a"], "y", ["b"], crosswalk)
        assert overlap.potential_savings_weeks == 2.0

    def test_no_applicable_endpoints(self) -> None:
        """No applicable endpoints means no overlap."""
        crosswalk = Crosswalk((CrosswalkEntry("a", "b", "supersedes"),))
        overlap = compute_overlap("x", ["a"], "y", ["c"], crosswalk)
        assert overlap.count == 0
        assert overlap.potential_savings_weeks == 0.0
