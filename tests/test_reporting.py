"""Tests for report assembly.

Covers:
- Fixed section order, numbering and empty-section skipping
- Content-derived report ids
- Framework, unified and regulator notification report builders
"""

import json
from datetime import datetime
from typing import Any

import pytest

from space_compliance_engine.assessment.engine import AssessmentEngine
from space_compliance_engine.catalog.inventory import RequirementCatalog
from space_compliance_engine.core.models import Framework, Jurisdiction, LicensingPreferences, OperatorProfile
from space_compliance_engine.errors import ComputationError, NotFoundError
from space_compliance_engine.reporting import (
    AlertBlock,
    AnnualComplianceData,
    IncidentReportData,
    ReportKind,
    SignificantChangeData,
    TextBlock,
    aggregate,
    assemble_report,
    build_annual_compliance_report,
    build_framework_report,
    build_incident_report,
    build_significant_change_report,
    build_unified_report,
    get_section_order,
)
from space_compliance_engine.settings import Settings


def incident_data(**overrides: Any) -> IncidentReportData:
    """Build a minimal incident record."""
    fields: dict[str, Any] = {
        "incident_number": "INC-2026-001",
        "organization": "Orbital Logistics GmbH",
        "title": "Ground station intrusion",
        "category": "cybersecurity",
        "severity": "high",
        "status": "contained",
        "detected_at": "2026-03-01T10:00:00Z",
        "detected_by": "SOC",
        "detection_method": "IDS alert",
        "description": "Unauthorised access to the mission control network.",
    }
    fields.update(overrides)
    return IncidentReportData.model_validate(fields)


def annual_data(**overrides: Any) -> AnnualComplianceData:
    """Build a minimal annual compliance record."""
    fields: dict[str, Any] = {
        "report_year": "2025",
        "organization": "Orbital Logistics GmbH",
        "operator_type": "SCO",
        "operator": {"legal_name": "Orbital Logistics GmbH", "primary_authority": "DLR"},
        "fleet": {"total_spacecraft": 3, "active_spacecraft": 2, "orbital_regime": "LEO"},
        "overall_score": 82,
    }
    fields.update(overrides)
    return AnnualComplianceData.model_validate(fields)


def change_data(**overrides: Any) -> SignificantChangeData:
    """Build a minimal significant-change record."""
    fields: dict[str, Any] = {
        "notification_number": "SCN-2026-004",
        "organization": "Orbital Logistics GmbH",
        "authorization_number": "AUTH-77",
        "primary_authority": "DLR",
        "change_type": "ownership_transfer",
        "change_title": "Acquisition by parent company",
        "change_description": "Majority shares move to the parent company.",
        "justification": "Group restructuring.",
        "effective_date": "2026-06-01T00:00:00Z",
    }
    fields.update(overrides)
    return SignificantChangeData.model_validate(fields)


# ---------------------------------------------------------------------------
# Assembler
# ---------------------------------------------------------------------------


class TestAssembleReport:
    """Tests for assemble_report()."""

    def test_sections_follow_fixed_order(self, fixed_time: datetime) -> None:
        """Content keys given in any order come out in the kind's order, numbered."""
        report = assemble_report(
            ReportKind.FRAMEWORK_ASSESSMENT,
            "Title",
            "Subject",
            {
                "gaps": [TextBlock(value="gaps")],
                "overview": [TextBlock(value="overview")],
                "risk": [TextBlock(value="risk")],
            },
            fixed_time,
        )
        assert report.section_keys == ["overview", "risk", "gaps"]
        assert [section.title for section in report.sections] == [
            "1. Assessment Overview",
            "2. Risk Assessment",
            "3. Compliance Gaps",
        ]

    def test_empty_sections_are_skipped(self, fixed_time: datetime) -> None:
        """Sections without blocks are left out and numbering closes up."""
        report = assemble_report(
            ReportKind.INCIDENT,
            "Title",
            "Subject",
            {"overview": [TextBlock(value="a")], "timeline": [], "description": [TextBlock(value="b")]},
            fixed_time,
        )
        assert report.section_keys == ["overview", "description"]
        assert report.sections[1].title == "2. Incident Description"

    def test_unknown_section_key_raises(self, fixed_time: datetime) -> None:
        """A content key outside the kind's order is a computation error."""
        with pytest.raises(ComputationError, match="not part of"):
            assemble_report(ReportKind.INCIDENT, "Title", "Subject", {"gaps": [TextBlock(value="x")]}, fixed_time)

    def test_unknown_kind_raises_not_found(self) -> None:
        """Unknown report kinds have no section order."""
        with pytest.raises(NotFoundError):
            get_section_order("press_release")

    def test_report_id_depends_on_content_only(self, fixed_time: datetime) -> None:
        """Identical content yields the same id regardless of the generation time."""
        contents = {"overview": [TextBlock(value="same")]}
        first = assemble_report(ReportKind.INCIDENT, "Title", "Subject", contents, fixed_time)
        second = assemble_report(ReportKind.INCIDENT, "Title", "Subject", contents)
        changed = assemble_report(ReportKind.INCIDENT, "Title", "Subject", {"overview": [TextBlock(value="other")]})

        assert first.metadata.report_id == second.metadata.report_id
        assert first.metadata.report_id.startswith("incident-")
        assert len(first.metadata.report_id) == len("incident-") + 16
        assert changed.metadata.report_id != first.metadata.report_id

    def test_every_kind_has_an_order(self) -> None:
        """Each report kind declares its section order."""
        for kind in ReportKind:
            assert get_section_order(kind)


# ---------------------------------------------------------------------------
# Engine-backed reports
# ---------------------------------------------------------------------------


class TestFrameworkReport:
    """Tests for build_framework_report()."""

    def test_in_scope_report_has_every_section(
        self,
        engine: AssessmentEngine,
        baseline_profile: OperatorProfile,
        settings: Settings,
        fixed_time: datetime,
    ) -> None:
        """An in-scope assessment fills all six sections in order."""
        assessment = engine.assess(Framework.EU_SPACE_ACT, baseline_profile)
        report = build_framework_report(assessment, "Orbital Logistics GmbH", fixed_time, settings)

        assert report.section_keys == [key for key, _ in get_section_order(ReportKind.FRAMEWORK_ASSESSMENT)]
        assert report.metadata.subject == "Orbital Logistics GmbH"
        json.dumps(report.to_dict())

    def test_gap_table_is_truncated(
        self,
        engine: AssessmentEngine,
        baseline_profile: OperatorProfile,
        settings: Settings,
        fixed_time: datetime,
    ) -> None:
        """Only the configured number of gaps is listed, with a note."""
        assessment = engine.assess(Framework.EU_SPACE_ACT, baseline_profile)
        report = build_framework_report(assessment, "Org", fixed_time, settings)
        gaps = report.section("gaps")

        assert gaps is not None
        gap_table = gaps.blocks[1]
        assert len(gap_table.rows) == settings.gap_summary_limit
        assert isinstance(gaps.blocks[-1], AlertBlock)
        assert gaps.blocks[-1].message.startswith(f"Showing the {settings.gap_summary_limit} highest-priority")

    def test_out_of_scope_report(
        self,
        engine: AssessmentEngine,
        baseline_profile: OperatorProfile,
        settings: Settings,
        fixed_time: datetime,
    ) -> None:
        """Out-of-scope assessments only report overview and classification."""
        assessment = engine.assess(Framework.UK_SPACE_ACT, baseline_profile)
        report = build_framework_report(assessment, "Org", fixed_time, settings)

        assert report.section_keys == ["overview", "classification"]
        alert = report.sections[1].blocks[0]
        assert isinstance(alert, AlertBlock)
        assert alert.message.startswith("Out of scope:")

    def test_scoping_detail_explains_exclusion(
        self,
        engine: AssessmentEngine,
        baseline_profile: OperatorProfile,
        settings: Settings,
        fixed_time: datetime,
    ) -> None:
        """A scoping exclusion is explained with the questionnaire's detail text."""
        answers = {"activity_type": "spacecraft", "is_defense_only": True}
        assessment = engine.assess(Framework.EU_SPACE_ACT, baseline_profile, scoping_answers=answers)
        report = build_framework_report(assessment, "Org", fixed_time, settings)

        alert = report.sections[1].blocks[0]
        assert isinstance(alert, AlertBlock)
        assert "defense or national security" in alert.message

    def test_reports_are_reproducible(
        self,
        engine: AssessmentEngine,
        baseline_profile: OperatorProfile,
        settings: Settings,
        fixed_time: datetime,
    ) -> None:
        """Two runs over identical inputs give identical reports."""
        first = build_framework_report(engine.assess(Framework.NIS2, baseline_profile), "Org", fixed_time, settings)
        second = build_framework_report(engine.assess(Framework.NIS2, baseline_profile), "Org", fixed_time, settings)
        assert first.to_dict() == second.to_dict()


class TestUnifiedReport:
    """Tests for build_unified_report()."""

    def test_baseline_unified_report(
        self,
        engine: AssessmentEngine,
        catalog: RequirementCatalog,
        baseline_profile: OperatorProfile,
        settings: Settings,
        fixed_time: datetime,
    ) -> None:
        """The unified report lists every framework and the EU/NIS2 overlap."""
        assessments = engine.assess_all(baseline_profile)
        summary = aggregate(assessments, catalog.crosswalk, settings)
        report = build_unified_report(baseline_profile, assessments, summary, "Org", fixed_time)

        assert report.section_keys == [
            "company_summary",
            "framework_results",
            "unified_risk",
            "immediate_actions",
            "overlap",
        ]
        results = report.section("framework_results")
        assert results is not None
        assert len(results.blocks[0].rows) == 4
        risk_alert = report.section("unified_risk").blocks[0]
        assert risk_alert.message == "Unified risk: CRITICAL"
        assert risk_alert.severity == "error"

    def test_national_licensing_section(
        self,
        engine: AssessmentEngine,
        catalog: RequirementCatalog,
        baseline_profile: OperatorProfile,
        settings: Settings,
        fixed_time: datetime,
    ) -> None:
        """A national comparison adds a ranked licensing section after the overlap."""
        assessments = engine.assess_all(baseline_profile)
        comparison = engine.compare_jurisdictions(
            LicensingPreferences(
                interested_jurisdictions=(Jurisdiction.DE, Jurisdiction.LU),
                requires_english_process=True,
            )
        )
        summary = aggregate(assessments, catalog.crosswalk, settings, comparison)
        report = build_unified_report(baseline_profile, assessments, summary, "Org", fixed_time)

        assert report.section_keys[-1] == "national_licensing"
        section = report.section("national_licensing")
        assert section is not None
        assert section.title == "6. National Licensing Comparison"
        assert section.blocks[0].message.startswith("Luxembourg scores highest")
        assert [row.cells[0] for row in section.blocks[1].rows] == ["Luxembourg (LU)", "Germany (DE)"]

    def test_empty_comparison_has_no_licensing_section(
        self,
        engine: AssessmentEngine,
        catalog: RequirementCatalog,
        baseline_profile: OperatorProfile,
        settings: Settings,
        fixed_time: datetime,
    ) -> None:
        """Without compared jurisdictions the section is dropped."""
        assessments = engine.assess_all(baseline_profile)
        summary = aggregate(assessments, catalog.crosswalk, settings, engine.compare_jurisdictions(LicensingPreferences()))
        report = build_unified_report(baseline_profile, assessments, summary, "Org", fixed_time)
        assert "national_licensing" not in report.section_keys


# ---------------------------------------------------------------------------
# Regulator notification reports
# ---------------------------------------------------------------------------


class TestIncidentReport:
    """Tests for build_incident_report()."""

    def test_minimal_incident_skips_empty_sections(self, fixed_time: datetime) -> None:
        """Without assets, actions or contact those sections are omitted."""
        report = build_incident_report(incident_data(), fixed_time)
        assert report.section_keys == ["overview", "timeline", "description", "regulatory_compliance"]
        assert report.metadata.title == "Incident Report - INC-2026-001"

    def test_pending_notification_shows_deadline(self, fixed_time: datetime) -> None:
        """An unreported notifiable incident warns with the computed deadline."""
        report = build_incident_report(incident_data(requires_authority_notification=True), fixed_time)
        alert = report.section("regulatory_compliance").blocks[0]

        assert isinstance(alert, AlertBlock)
        assert alert.severity == "warning"
        assert "within 24 hours" in alert.message
        assert "2026-03-02 10:00 UTC" in alert.message

    def test_full_incident(self, fixed_time: datetime) -> None:
        """Assets, response actions and contact each get a section."""
        data = incident_data(
            affected_assets=[{"name": "SAT-1", "norad_id": "99999"}],
            immediate_actions=["Isolated the network segment"],
            contact={"name": "Jo Weber", "email": "security@example.com"},
            root_cause="Phished credentials",
        )
        report = build_incident_report(data, fixed_time)

        assert "affected_assets" in report.section_keys
        assert "response_actions" in report.section_keys
        assert report.section_keys[-1] == "contact"
        assert report.section("affected_assets").blocks[0].rows[0].cells == ("SAT-1", "N/A", "99999")


class TestAnnualComplianceReport:
    """Tests for build_annual_compliance_report()."""

    @pytest.mark.parametrize(
        ("score", "label"),
        [(95, "Excellent"), (82, "Good"), (60, "Satisfactory"), (40, "Requires Improvement")],
    )
    def test_performance_label(self, fixed_time: datetime, score: float, label: str) -> None:
        """The executive summary rates performance from the overall score."""
        report = build_annual_compliance_report(annual_data(overall_score=score), fixed_time)
        summary = report.section("executive_summary").blocks[0]
        assert f'"{label}"' in summary.value

    def test_planned_activities_optional(self, fixed_time: datetime) -> None:
        """The planned activities section only appears when activities exist."""
        without = build_annual_compliance_report(annual_data(), fixed_time)
        with_plans = build_annual_compliance_report(annual_data(planned_activities=["Deorbit SAT-1"]), fixed_time)

        assert "planned_activities" not in without.section_keys
        assert "planned_activities" in with_plans.section_keys

    def test_incident_totals(self, fixed_time: datetime) -> None:
        """Incident counts are totalled across severities."""
        report = build_annual_compliance_report(annual_data(incidents={"high": 2, "low": 3}), fixed_time)
        totals = report.section("incidents_summary").blocks[1]
        assert totals.items[0].value == "5"


class TestSignificantChangeReport:
    """Tests for build_significant_change_report()."""

    def test_pre_approval_change_warns(self, fixed_time: datetime) -> None:
        """Ownership transfers need prior approval and open with a warning."""
        report = build_significant_change_report(change_data(), fixed_time)
        first = report.section("change_overview").blocks[0]

        assert isinstance(first, AlertBlock)
        assert first.severity == "warning"
        assert "30 days" in first.message

    def test_notification_only_change(self, fixed_time: datetime) -> None:
        """Contact changes only need a notification."""
        report = build_significant_change_report(change_data(change_type="contact_change"), fixed_time)
        first = report.section("change_overview").blocks[0]
        assert not isinstance(first, AlertBlock)

    def test_comparison_merges_fields(self, fixed_time: datetime) -> None:
        """Fields present on only one side are shown with a dash on the other."""
        data = change_data(
            current_state=[{"field": "Owner", "value": "Orbital Logistics GmbH"}],
            proposed_state=[
                {"field": "Owner", "value": "Parent Holding AG"},
                {"field": "Board seat", "value": "Parent Holding AG"},
            ],
        )
        report = build_significant_change_report(data, fixed_time)
        rows = [row.cells for row in report.section("comparison").blocks[0].rows]
        assert rows == [
            ("Owner", "Orbital Logistics GmbH", "Parent Holding AG"),
            ("Board seat", "-", "Parent Holding AG"),
        ]

    def test_empty_comparison_is_skipped(self, fixed_time: datetime) -> None:
        """Without state fields there is no comparison section."""
        report = build_significant_change_report(change_data(), fixed_time)
        assert "comparison" not in report.section_keys
        assert "affected_spacecraft" not in report.section_keys
