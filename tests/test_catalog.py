"""Tests for the requirement catalog, remediation table and crosswalk.

Covers:
- Loading the bundled YAML documents
- Structural validation of framework documents (weights, leaves, duplicates)
- Remediation lookup fallbacks
- Crosswalk validation
"""

import copy
from pathlib import Path
from typing import Any

import pytest

from space_compliance_engine.catalog.crosswalk import load_crosswalk
from space_compliance_engine.catalog.inventory import (
    RequirementCatalog,
    load_catalog,
    parse_framework,
    validate_weights,
)
from space_compliance_engine.catalog.remediation import load_remediation_table
from space_compliance_engine.core.models import Framework, Severity
from space_compliance_engine.errors import ComputationError, NotFoundError


class TestBundledCatalog:
    """Tests for the catalog shipped with the package."""

    def test_loads_every_framework_in_canonical_order(self, catalog: RequirementCatalog) -> None:
        """All four frameworks are loaded and listed in enum order."""
        assert catalog.frameworks() == list(Framework)
        assert [framework.code for framework in catalog] == list(Framework)

    def test_weights_sum_to_one(self, catalog: RequirementCatalog) -> None:
        """Every framework weight table sums to 1."""
        for code in catalog.frameworks():
            assert sum(catalog.weights(code).values()) == pytest.approx(1.0)

    def test_records_keep_declaration_order(self, catalog: RequirementCatalog) -> None:
        """Flattened records follow the YAML declaration order."""
        records = catalog.requirements(Framework.EU_SPACE_ACT)
        assert [record.id for record in records[:3]] == ["eu-art-2", "eu-art-3", "eu-art-6"]
        assert [record.position for record in records] == list(range(len(records)))

    def test_group_path_records_enclosing_labels(self, catalog: RequirementCatalog) -> None:
        """Nested records carry the labels of their enclosing groups."""
        record = catalog.get("eu-art-6")
        assert record.group_path[0] == "Title II: Authorisation and registration"
        assert record.group_path[1] == "Chapter I: Authorisation of space activities"

    def test_get_returns_record(self, catalog: RequirementCatalog) -> None:
        """get() returns the typed record for a known id."""
        record = catalog.get("eu-art-74")
        assert record.framework == Framework.EU_SPACE_ACT
        assert record.mandatory is True
        assert record.severity == Severity.CRITICAL
        assert record.is_universal

    def test_get_unknown_requirement_raises_not_found(self, catalog: RequirementCatalog) -> None:
        """Unknown requirement ids raise NotFoundError."""
        with pytest.raises(NotFoundError, match="eu-art-9999"):
            catalog.get("eu-art-9999")

    def test_unknown_framework_raises_not_found(self, catalog: RequirementCatalog) -> None:
        """Unknown framework codes raise NotFoundError."""
        with pytest.raises(NotFoundError, match="Framework 'mars_act' not found"):
            catalog.framework("mars_act")

    def test_contains_checks_requirement_ids(self, catalog: RequirementCatalog) -> None:
        """The in operator checks requirement ids across frameworks."""
        assert "nis2-art-21-2a" in catalog
        assert "unknown" not in catalog

    def test_metadata_shape(self, catalog: RequirementCatalog) -> None:
        """to_metadata exposes counts and weight categories."""
        metadata = catalog.framework(Framework.US_REGULATORY).to_metadata()
        assert metadata["code"] == "us_regulatory"
        assert metadata["categories"] == ["FAA", "FCC", "NOAA"]
        assert metadata["requirement_count"] == len(catalog.requirements(Framework.US_REGULATORY))
        assert metadata["mandatory_count"] <= metadata["requirement_count"]

    def test_remediation_and_crosswalk_loaded(self, catalog: RequirementCatalog) -> None:
        """The static remediation and crosswalk tables are attached."""
        assert len(catalog.remediation) > 0
        assert len(catalog.crosswalk) > 0

    def test_jurisdiction_table_loaded(self, catalog: RequirementCatalog) -> None:
        """The national licensing table is attached."""
        assert len(catalog.jurisdictions) == 10

    def test_weight_table_is_read_only(self, catalog: RequirementCatalog) -> None:
        """Weight tables cannot be mutated after loading."""
        weights = catalog.weights(Framework.NIS2)
        with pytest.raises(TypeError):
            weights["governance"] = 1.0  # type: ignore[index]

    def test_missing_catalog_dir_raises_computation_error(self, tmp_path: Path) -> None:
        """A directory without the framework documents fails loading."""
        with pytest.raises(ComputationError, match="Cannot read catalog document"):
            load_catalog(tmp_path)


class TestParseFramework:
    """Tests for structural validation of one framework document."""

    def test_parses_tiny_framework(self, tiny_document: dict[str, Any]) -> None:
        """A well-formed document yields records and weights."""
        framework = parse_framework(tiny_document)
        assert framework.code == Framework.NIS2
        assert [record.id for record in framework.records] == [
            "t-gov-1",
            "t-gov-2",
            "t-risk-1",
            "t-risk-2",
            "t-risk-3",
            "t-risk-sat",
        ]

    def test_weights_not_summing_to_one_rejected(self, tiny_document: dict[str, Any]) -> None:
        """A weight table summing to 0.9 is rejected."""
        document = tiny_document
        document["weights"] = {"governance": 0.3, "risk_management": 0.6}
        with pytest.raises(ComputationError, match="sum to"):
            parse_framework(document)

    def test_weight_tolerance_is_configurable(self) -> None:
        """A looser tolerance accepts small rounding errors."""
        weights = validate_weights("nis2", {"a": 0.333, "b": 0.333, "c": 0.333}, tolerance=0.01)
        assert set(weights) == {"a", "b", "c"}

    def test_negative_weight_rejected(self) -> None:
        """Negative weights are rejected."""
        with pytest.raises(ComputationError, match="invalid weight"):
            validate_weights("nis2", {"a": 1.5, "b": -0.5})

    def test_leaf_missing_field_rejected(self, tiny_document: dict[str, Any]) -> None:
        """A leaf without applies_to is rejected with its id in the message."""
        document = tiny_document
        del document["items"][0]["items"][0]["applies_to"]
        with pytest.raises(ComputationError, match="t-gov-1.*applies_to"):
            parse_framework(document)

    def test_category_absent_from_weights_rejected(self, tiny_document: dict[str, Any]) -> None:
        """A leaf category missing from the weight table is rejected."""
        document = tiny_document
        document["items"][0]["items"][0]["category"] = "finance"
        with pytest.raises(ComputationError, match="absent from the weight table"):
            parse_framework(document)

    def test_duplicate_id_rejected(self, tiny_document: dict[str, Any]) -> None:
        """Two leaves with the same id are rejected."""
        document = tiny_document
        duplicate = copy.deepcopy(document["items"][0]["items"][0])
        document["items"][1]["items"].append(duplicate)
        with pytest.raises(ComputationError, match="Duplicate requirement id 't-gov-1'"):
            parse_framework(document)

    def test_unknown_severity_rejected(self, tiny_document: dict[str, Any]) -> None:
        """Severity outside critical/major/minor is rejected."""
        document = tiny_document
        document["items"][0]["items"][0]["severity"] = "catastrophic"
        with pytest.raises(ComputationError, match="unknown severity"):
            parse_framework(document)

    def test_non_boolean_mandatory_rejected(self, tiny_document: dict[str, Any]) -> None:
        """The mandatory flag must be a boolean."""
        document = tiny_document
        document["items"][0]["items"][0]["mandatory"] = "yes"
        with pytest.raises(ComputationError, match="non-boolean mandatory"):
            parse_framework(document)

    def test_unknown_framework_code_rejected(self, tiny_document: dict[str, Any]) -> None:
        """Documents with an unknown code are rejected."""
        document = tiny_document
        document["code"] = "mars_act"
        with pytest.raises(ComputationError, match="Unknown framework code"):
            parse_framework(document)

    def test_item_neither_group_nor_leaf_rejected(self, tiny_document: dict[str, Any]) -> None:
        """Items without id or items are rejected."""
        document = tiny_document
        document["items"].append({"label": "Empty"})
        with pytest.raises(ComputationError, match="neither a group nor a requirement"):
            parse_framework(document)

    def test_single_applies_to_string_accepted(self, tiny_document: dict[str, Any]) -> None:
        """A scalar applies_to is treated as a one-element list."""
        document = tiny_document
        document["items"][0]["items"][0]["applies_to"] = "SCO"
        framework = parse_framework(document)
        assert framework.records[0].applies_to == frozenset({"SCO"})


class TestRemediationTable:
    """Tests for remediation lookups and validation."""

    def test_entry_takes_precedence(self, catalog: RequirementCatalog) -> None:
        """A requirement's own entry is used when present."""
        entry = catalog.remediation.lookup(catalog.get("eu-art-74"))
        assert entry.effort == "high"
        assert entry.weeks == 12.0

    def test_category_default_used_without_entry(self, tiny_document: dict[str, Any]) -> None:
        """The framework category default applies when no entry exists."""
        framework = parse_framework(tiny_document)
        known = {record.id: record for record in framework.records}
        table = load_remediation_table(
            {
                "defaults": {
                    "nis2": {
                        "_default": {"recommendation": "Generic", "effort": "medium", "weeks": 4},
                        "governance": {"recommendation": "Governance fix", "effort": "low", "weeks": 2},
                    }
                }
            },
            known,
        )
        assert table.lookup(known["t-gov-1"]).recommendation == "Governance fix"
        assert table.lookup(known["t-risk-1"]).recommendation == "Generic"

    def test_missing_guidance_raises(self, tiny_document: dict[str, Any]) -> None:
        """A framework without defaults cannot remediate unlisted records."""
        framework = parse_framework(tiny_document)
        known = {record.id: record for record in framework.records}
        table = load_remediation_table({}, known)
        with pytest.raises(ComputationError, match="No remediation guidance"):
            table.lookup(known["t-gov-1"])

    def test_unknown_requirement_entry_rejected(self) -> None:
        """Entries for ids absent from the catalog are rejected."""
        with pytest.raises(ComputationError, match="unknown requirement 'ghost'"):
            load_remediation_table({"entries": {"ghost": {"recommendation": "x"}}}, {})

    def test_invalid_effort_rejected(self, tiny_document: dict[str, Any]) -> None:
        """Effort labels outside low/medium/high are rejected."""
        framework = parse_framework(tiny_document)
        known = {record.id: record for record in framework.records}
        with pytest.raises(ComputationError, match="unknown effort"):
            load_remediation_table(
                {"entries": {"t-gov-1": {"recommendation": "x", "effort": "huge"}}},
                known,
            )


class TestCrosswalk:
    """Tests for crosswalk loading and lookups."""

    def test_links_for_matches_both_directions(self, catalog: RequirementCatalog) -> None:
        """links_for returns links where the id is source or target."""
        links = catalog.crosswalk.links_for("nis2-art-21-2a")
        assert [(link.source_id, link.relationship) for link in links] == [("eu-art-74", "supersedes")]

    def test_unknown_relationship_rejected(self, catalog: RequirementCatalog) -> None:
        """Relationships outside the fixed vocabulary are rejected."""
        known = {"eu-art-74": catalog.get("eu-art-74"), "nis2-art-27": catalog.get("nis2-art-27")}
        with pytest.raises(ComputationError, match="unknown relationship"):
            load_crosswalk(
                {"mappings": [{"source": "eu-art-74", "target": "nis2-art-27", "relationship": "replaces"}]},
                known,
            )

    def test_same_framework_link_rejected(self, catalog: RequirementCatalog) -> None:
        """Links inside a single framework are rejected."""
        known = {"eu-art-74": catalog.get("eu-art-74"), "eu-art-83": catalog.get("eu-art-83")}
        with pytest.raises(ComputationError, match="stays within one framework"):
            load_crosswalk(
                {"mappings": [{"source": "eu-art-74", "target": "eu-art-83", "relationship": "overlaps"}]},
                known,
            )

    def test_unknown_endpoint_rejected(self) -> None:
        """Links to unknown ids are rejected."""
        with pytest.raises(ComputationError, match="unknown requirement 'a'"):
            load_crosswalk({"mappings": [{"source": "a", "target": "b", "relationship": "overlaps"}]}, {})
