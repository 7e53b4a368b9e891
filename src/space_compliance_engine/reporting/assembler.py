"""Report assembler: composes engine results into sectioned Report models.

Every report kind has a fixed section order. Builders produce content per
section key; the assembler then:
1. Drops sections without content
2. Orders the remaining sections by the kind's fixed order
3. Numbers the section titles by final position
4. Derives report_id from the ordered content

Apart from generated_at, identical inputs always produce identical reports.
"""

import hashlib
import json
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

from space_compliance_engine.assessment.applicability import group_by_display_category
from space_compliance_engine.assessment.engine import FrameworkAssessment
from space_compliance_engine.assessment.gaps import summarize_gaps, top_gaps
from space_compliance_engine.core.models import OperatorProfile, RiskLevel
from space_compliance_engine.errors import ComputationError, NotFoundError
from space_compliance_engine.observability import get_logger
from space_compliance_engine.reporting.aggregator import UnifiedSummary
from space_compliance_engine.reporting.blocks import (
    AlertBlock,
    Block,
    HeadingBlock,
    Report,
    ReportKind,
    ReportMetadata,
    Section,
    SpacerBlock,
    TableBlock,
    TableRow,
    TextBlock,
    bullet_list,
    key_values,
    table,
)
from space_compliance_engine.reporting.inputs import (
    AffectedAsset,
    AnnualComplianceData,
    ChangeType,
    ContactDetails,
    IncidentReportData,
    SignificantChangeData,
)
from space_compliance_engine.settings import Settings, get_settings

logger = get_logger(__name__)

# Fixed section order per report kind: (section key, base title)
SECTION_ORDER: dict[ReportKind, tuple[tuple[str, str], ...]] = {
    ReportKind.FRAMEWORK_ASSESSMENT: (
        ("overview", "Assessment Overview"),
        ("classification", "Classification"),
        ("score_breakdown", "Score Breakdown"),
        ("risk", "Risk Assessment"),
        ("gaps", "Compliance Gaps"),
        ("applicable_requirements", "Applicable Requirements"),
    ),
    ReportKind.INCIDENT: (
        ("overview", "Incident Overview"),
        ("timeline", "Timeline"),
        ("description", "Incident Description"),
        ("affected_assets", "Affected Assets"),
        ("response_actions", "Response Actions"),
        ("regulatory_compliance", "Regulatory Compliance"),
        ("contact", "Designated Contact"),
    ),
    ReportKind.ANNUAL_COMPLIANCE: (
        ("executive_summary", "Executive Summary"),
        ("operator_information", "Operator Information"),
        ("fleet_overview", "Fleet Overview"),
        ("compliance_status", "Compliance Status"),
        ("incidents_summary", "Incidents Summary"),
        ("planned_activities", "Planned Activities"),
        ("contact", "Designated Contact"),
    ),
    ReportKind.SIGNIFICANT_CHANGE: (
        ("change_overview", "Change Notification Overview"),
        ("authorization_reference", "Authorization Reference"),
        ("change_description", "Change Description"),
        ("comparison", "Before/After Comparison"),
        ("affected_spacecraft", "Affected Spacecraft"),
        ("impact_assessment", "Impact Assessment"),
    ),
    ReportKind.UNIFIED_PROFILE: (
        ("company_summary", "Company Summary"),
        ("framework_results", "Framework Results"),
        ("unified_risk", "Unified Risk"),
        ("immediate_actions", "Immediate Actions"),
        ("overlap", "Cross-Framework Overlap"),
        ("national_licensing", "National Licensing Comparison"),
    ),
}

# (description, article reference, notification deadline in days, pre-approval required)
CHANGE_TYPE_INFO: dict[ChangeType, tuple[str, str, int, bool]] = {
    ChangeType.OWNERSHIP_TRANSFER: ("Transfer of Ownership or Control", "EU Space Act Art. 27(1)(a)", 30, True),
    ChangeType.MISSION_MODIFICATION: (
        "Mission Objectives or Parameters Modification",
        "EU Space Act Art. 27(1)(b)",
        30,
        True,
    ),
    ChangeType.TECHNICAL_CHANGE: ("Significant Technical Modification", "EU Space Act Art. 27(1)(c)", 30, True),
    ChangeType.OPERATIONAL_CHANGE: ("Operational Procedures Change", "EU Space Act Art. 27(1)(d)", 14, False),
    ChangeType.ORBITAL_CHANGE: ("Orbital Parameters Modification", "EU Space Act Art. 27(1)(e)", 30, True),
    ChangeType.END_OF_LIFE_UPDATE: ("End-of-Life Plan Update", "EU Space Act Art. 27(1)(f)", 30, True),
    ChangeType.INSURANCE_CHANGE: ("Insurance Coverage Change", "EU Space Act Art. 27(1)(g)", 14, False),
    ChangeType.CONTACT_CHANGE: ("Designated Contact Change", "EU Space Act Art. 27(2)", 7, False),
    ChangeType.OTHER: ("Other Significant Change", "EU Space Act Art. 27", 30, False),
}

_RISK_ALERT_SEVERITY: dict[RiskLevel, str] = {
    RiskLevel.CRITICAL: "error",
    RiskLevel.HIGH: "error",
    RiskLevel.MEDIUM: "warning",
    RiskLevel.LOW: "info",
}

_NOT_SPECIFIED = "Not specified"


def get_section_order(kind: str) -> tuple[tuple[str, str], ...]:
    """Return the fixed (key, title) section order of a report kind.

    Raises:
        NotFoundError: If the report kind is unknown.
    """
    order = SECTION_ORDER.get(kind)
    if order is None:
        raise NotFoundError("Report kind", str(kind))
    return order


def _fmt_datetime(value: datetime | None) -> str:
    if value is None:
        return "N/A"
    return value.strftime("%Y-%m-%d %H:%M %Z").strip()


def _fmt_date(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d") if value is not None else "N/A"


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def _content_id(kind: ReportKind, title: str, subject: str, sections: Sequence[Section]) -> str:
    payload = {
        "kind": str(kind),
        "title": title,
        "subject": subject,
        "sections": [section.model_dump(mode="json") for section in sections],
    }
    digest = hashlib.sha256(
        json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    ).hexdigest()
    return f"{kind}-{digest[:16]}"


def assemble_report(
    kind: str,
    title: str,
    subject: str,
    contents: Mapping[str, Sequence[Block]],
    generated_at: datetime | None = None,
) -> Report:
    """Order, number and identify report sections.

    Args:
        kind: Report kind.
        title: Report title.
        subject: Organisation or asset the report is about.
        contents: Blocks per section key. Keys may be given in any order;
            sections with no blocks are left out.
        generated_at: Generation timestamp; defaults to now (UTC).

    Returns:
        The assembled Report.

    Raises:
        NotFoundError: If the report kind is unknown.
        ComputationError: If contents holds a key outside the kind's section order.
    """
    order = get_section_order(kind)
    report_kind = ReportKind(kind)
    known_keys = {key for key, _ in order}
    unknown = sorted(set(contents) - known_keys)
    if unknown:
        raise ComputationError(f"Sections {unknown} are not part of a {report_kind} report")

    sections: list[Section] = []
    for key, base_title in order:
        blocks = contents.get(key)
        if not blocks:
            continue
        sections.append(Section(key=key, title=f"{len(sections) + 1}. {base_title}", blocks=tuple(blocks)))

    report = Report(
        metadata=ReportMetadata(
            report_id=_content_id(report_kind, title, subject, sections),
            report_kind=report_kind,
            title=title,
            subject=subject,
            generated_at=generated_at or datetime.now(UTC),
        ),
        sections=tuple(sections),
    )
    logger.info(
        "Report assembled",
        report_kind=str(report_kind),
        report_id=report.metadata.report_id,
        section_count=len(sections),
    )
    return report


def _contact_blocks(contact: ContactDetails) -> list[Block]:
    if contact.is_empty:
        return []
    return [
        key_values(
            ("Name", contact.name or _NOT_SPECIFIED),
            ("Role", contact.role or _NOT_SPECIFIED),
            ("Email", contact.email or _NOT_SPECIFIED),
            ("Phone", contact.phone or _NOT_SPECIFIED),
        )
    ]


def _asset_blocks(assets: Sequence[AffectedAsset]) -> list[Block]:
    if not assets:
        return []
    return [
        table(
            ("Asset Name", "COSPAR ID", "NORAD ID"),
            [(asset.name, asset.cospar_id or "N/A", asset.norad_id or "N/A") for asset in assets],
        )
    ]


# ---------------------------------------------------------------------------
# Framework assessment report
# ---------------------------------------------------------------------------


def build_framework_report(
    assessment: FrameworkAssessment,
    subject: str,
    generated_at: datetime | None = None,
    settings: Settings | None = None,
) -> Report:
    """Build the report for one framework assessment.

    Out-of-scope assessments yield overview and classification sections only.

    Args:
        assessment: Result of AssessmentEngine.assess.
        subject: Organisation the report is about.
        generated_at: Generation timestamp; defaults to now (UTC).
        settings: Service settings supplying the gap summary limit.

    Returns:
        The assembled Report.
    """
    settings = settings or get_settings()
    contents: dict[str, list[Block]] = {}

    contents["overview"] = [
        key_values(
            ("Organisation", subject),
            ("Framework", assessment.framework_name),
            ("Catalog Version", assessment.catalog_version),
            ("In Scope", _yes_no(assessment.in_scope)),
            ("Applicable Requirements", len(assessment.applicable)),
            ("Constellation Tier", assessment.constellation_tier.label),
        )
    ]

    classification = assessment.classification
    classification_blocks: list[Block] = []
    if not assessment.in_scope:
        scoping = assessment.scoping
        detail = scoping.detail if scoping is not None and scoping.detail else classification.reason
        classification_blocks.append(AlertBlock(severity="info", message=f"Out of scope: {detail}"))
    classification_blocks.append(
        key_values(
            ("Classification", classification.label),
            ("Reason", classification.reason),
            ("Article Reference", classification.article_ref or "N/A"),
        )
    )
    contents["classification"] = classification_blocks

    scoring = assessment.scoring
    if scoring is not None:
        contents["score_breakdown"] = [
            key_values(
                ("Overall Score", f"{scoring.overall:.2f}"),
                ("Grade", scoring.grade),
                ("Status", scoring.status),
                ("Mandatory Score", f"{scoring.mandatory_score:.2f}"),
            ),
            table(
                ("Category", "Score", "Weight", "Weighted Score", "Compliant / Applicable"),
                [
                    (
                        category,
                        f"{entry.score:.2f}",
                        f"{entry.weight:.4f}",
                        f"{entry.weighted_score:.4f}",
                        f"{entry.compliant_count} / {entry.applicable_count}",
                    )
                    for category, entry in scoring.breakdown.items()
                ],
            ),
        ]
        contents["risk"] = [
            AlertBlock(
                severity=_RISK_ALERT_SEVERITY[scoring.risk_level],
                message=f"Risk level: {str(scoring.risk_level).upper()} "
                f"(mandatory score {scoring.mandatory_score:.2f}%)",
            )
        ]

    if assessment.gaps:
        summary = summarize_gaps(assessment.gaps)
        shown = top_gaps(assessment.gaps, settings.gap_summary_limit)
        gap_blocks: list[Block] = [
            key_values(
                ("Open Gaps", summary["total"]),
                *((f"{label.title()} Priority", count) for label, count in summary["by_priority"].items()),
                ("Estimated Effort (weeks)", summary["estimated_weeks"]),
            ),
            table(
                ("Priority", "Requirement", "Article", "Status", "Recommendation", "Effort"),
                [
                    (
                        gap.priority,
                        gap.title,
                        gap.article_ref,
                        gap.status,
                        gap.recommendation,
                        f"{gap.estimated_effort} ({gap.effort_weeks:g} weeks)",
                    )
                    for gap in shown
                ],
            ),
        ]
        if len(shown) < len(assessment.gaps):
            gap_blocks.append(
                AlertBlock(
                    severity="info",
                    message=f"Showing the {len(shown)} highest-priority gaps of {len(assessment.gaps)}",
                )
            )
        contents["gaps"] = gap_blocks

    if assessment.applicable:
        rows: list[TableRow] = []
        for display_category, items in group_by_display_category(assessment.applicable).items():
            if not items:
                continue
            rows.append(
                TableRow(
                    cells=(display_category, str(len(items))),
                    nested=table(
                        ("No.", "Requirement", "Article", "Mandatory", "Status"),
                        [
                            (
                                item.sequence_number,
                                item.record.title,
                                item.record.article_ref,
                                _yes_no(item.record.mandatory),
                                assessment.statuses.get(item.id, "not_started"),
                            )
                            for item in items
                        ],
                    ),
                )
            )
        contents["applicable_requirements"] = [TableBlock(headers=("Category", "Requirements"), rows=tuple(rows))]

    return assemble_report(
        ReportKind.FRAMEWORK_ASSESSMENT,
        f"{assessment.framework_name} Compliance Assessment",
        subject,
        contents,
        generated_at,
    )


# ---------------------------------------------------------------------------
# Unified profile report
# ---------------------------------------------------------------------------


def build_unified_report(
    profile: OperatorProfile,
    assessments: Sequence[FrameworkAssessment],
    summary: UnifiedSummary,
    subject: str,
    generated_at: datetime | None = None,
) -> Report:
    """Build the cross-framework compliance profile report.

    Args:
        profile: Operator profile the assessments were run for.
        assessments: One assessment per framework, in framework order.
        summary: Aggregated summary of the assessments.
        subject: Organisation the report is about.
        generated_at: Generation timestamp; defaults to now (UTC).

    Returns:
        The assembled Report.
    """
    contents: dict[str, list[Block]] = {
        "company_summary": [
            key_values(
                ("Organisation", subject),
                ("Establishment", profile.establishment_country),
                ("EU Established", _yes_no(profile.is_eu_established)),
                ("Entity Size", profile.entity_size),
                ("Operator Types", ", ".join(sorted(str(code) for code in profile.operator_types))),
                ("Activities", ", ".join(sorted(str(code) for code in profile.activity_types)) or "N/A"),
                ("Primary Orbit", profile.orbit_regime),
                ("Spacecraft", profile.satellite_count),
            )
        ],
        "framework_results": [
            table(
                ("Framework", "In Scope", "Classification", "Applicable", "Score", "Grade", "Risk"),
                [
                    (
                        assessment.framework_name,
                        _yes_no(assessment.in_scope),
                        assessment.classification.label,
                        len(assessment.applicable),
                        f"{assessment.scoring.overall:.2f}" if assessment.scoring is not None else "N/A",
                        assessment.scoring.grade if assessment.scoring is not None else "N/A",
                        assessment.risk_level or "N/A",
                    )
                    for assessment in assessments
                ],
            )
        ],
        "unified_risk": [
            AlertBlock(
                severity=_RISK_ALERT_SEVERITY[summary.unified_risk],
                message=f"Unified risk: {str(summary.unified_risk).upper()}",
            ),
            key_values(
                ("Frameworks In Scope", ", ".join(summary.frameworks_in_scope) or "None"),
                ("Total Requirements", summary.total_requirements),
                ("Estimated Months", summary.estimated_months),
            ),
        ],
    }
    if summary.immediate_actions:
        contents["immediate_actions"] = [bullet_list(summary.immediate_actions, ordered=True)]
    if summary.overlap:
        contents["overlap"] = [
            TableBlock(
                headers=("Frameworks", "Linked Requirements", "Potential Savings (weeks)"),
                rows=tuple(
                    TableRow(
                        cells=(
                            f"{overlap.source_framework} / {overlap.target_framework}",
                            str(overlap.count),
                            f"{overlap.potential_savings_weeks:g}",
                        ),
                        nested=table(
                            ("Source", "Target", "Relationship"),
                            [(pair.source_id, pair.target_id, pair.relationship) for pair in overlap.pairs],
                        ),
                    )
                    for overlap in summary.overlap
                ),
            )
        ]
    comparison = summary.national_comparison
    if comparison is not None and comparison.analyzed_count:
        contents["national_licensing"] = [
            AlertBlock(severity="info", message=comparison.recommendation_reason),
            table(
                ("Jurisdiction", "Score", "Advantages", "Drawbacks"),
                [
                    (
                        f"{score.name} ({score.code})",
                        score.score,
                        "; ".join(score.pros) or "-",
                        "; ".join(score.cons) or "-",
                    )
                    for score in comparison.scores
                ],
            ),
        ]

    return assemble_report(ReportKind.UNIFIED_PROFILE, "Unified Compliance Profile", subject, contents, generated_at)


# ---------------------------------------------------------------------------
# Regulator notification reports
# ---------------------------------------------------------------------------


def build_incident_report(data: IncidentReportData, generated_at: datetime | None = None) -> Report:
    """Build an incident notification report."""
    timeline: list[tuple[str, Any]] = [
        ("Detection Time", _fmt_datetime(data.detected_at)),
        ("Detected By", data.detected_by),
        ("Detection Method", data.detection_method),
    ]
    if data.contained_at is not None:
        timeline.append(("Contained At", _fmt_datetime(data.contained_at)))
    if data.resolved_at is not None:
        timeline.append(("Resolved At", _fmt_datetime(data.resolved_at)))

    description: list[Block] = [HeadingBlock(value="Summary"), TextBlock(value=data.description)]
    if data.root_cause:
        description += [SpacerBlock(), HeadingBlock(value="Root Cause Analysis"), TextBlock(value=data.root_cause)]
    if data.impact_assessment:
        description += [
            SpacerBlock(),
            HeadingBlock(value="Impact Assessment"),
            TextBlock(value=data.impact_assessment),
        ]

    response: list[Block] = []
    for heading, items in (
        ("Immediate Actions Taken", data.immediate_actions),
        ("Containment Measures", data.containment_measures),
        ("Resolution Steps", data.resolution_steps),
    ):
        if items:
            response += [HeadingBlock(value=heading), bullet_list(items, ordered=True)]
    if data.lessons_learned:
        response += [HeadingBlock(value="Lessons Learned"), TextBlock(value=data.lessons_learned)]

    compliance: list[Block] = []
    if data.requires_authority_notification:
        if data.reported_to_authority:
            message = f"Authority notification completed on {_fmt_date(data.authority_report_date)}"
        else:
            deadline = data.detected_at + timedelta(hours=data.notification_deadline_hours)
            message = (
                f"Authority notification required within {data.notification_deadline_hours} hours "
                f"of detection (deadline: {_fmt_datetime(deadline)})"
            )
        compliance.append(
            AlertBlock(severity="info" if data.reported_to_authority else "warning", message=message)
        )
    compliance.append(
        key_values(
            ("Notification Required", _yes_no(data.requires_authority_notification)),
            ("Notification Deadline", f"{data.notification_deadline_hours} hours from detection"),
            ("Reported to Authority", "Yes" if data.reported_to_authority else "Pending"),
            ("Authority Reference", data.authority_reference or "Not yet assigned"),
        )
    )

    contents: dict[str, list[Block]] = {
        "overview": [
            key_values(
                ("Incident Number", data.incident_number),
                ("Title", data.title),
                (
                    "Category",
                    f"{data.category} - {data.category_description}" if data.category_description else data.category,
                ),
                ("Severity", data.severity.upper()),
                ("Current Status", data.status),
                ("Article Reference", data.article_ref or "N/A"),
            )
        ],
        "timeline": [key_values(*timeline)],
        "description": description,
        "affected_assets": _asset_blocks(data.affected_assets),
        "response_actions": response,
        "regulatory_compliance": compliance,
        "contact": _contact_blocks(data.contact),
    }
    return assemble_report(
        ReportKind.INCIDENT,
        f"Incident Report - {data.incident_number}",
        data.organization,
        contents,
        generated_at,
    )


def _performance_label(score: float) -> str:
    if score >= 90:
        return "Excellent"
    if score >= 75:
        return "Good"
    if score >= 60:
        return "Satisfactory"
    return "Requires Improvement"


def build_annual_compliance_report(data: AnnualComplianceData, generated_at: datetime | None = None) -> Report:
    """Build an annual compliance report."""
    label = _performance_label(data.overall_score)
    operator = data.operator
    fleet = data.fleet

    fleet_blocks: list[Block] = [
        key_values(
            ("Total Spacecraft", fleet.total_spacecraft),
            ("Active", fleet.active_spacecraft),
            ("Decommissioned", fleet.decommissioned),
            ("Primary Orbital Regime", fleet.orbital_regime),
        )
    ]
    if fleet.mission_types:
        fleet_blocks += [HeadingBlock(value="Mission Types"), bullet_list(fleet.mission_types)]

    if data.overall_score >= 75:
        alert_severity = "info"
    elif data.overall_score >= 60:
        alert_severity = "warning"
    else:
        alert_severity = "error"
    status_blocks: list[Block] = [
        AlertBlock(severity=alert_severity, message=f"Overall compliance score: {data.overall_score:g}% - {label}")
    ]
    if data.areas:
        status_blocks.append(
            table(
                ("Area", "Status", "Notes"),
                [
                    (area.area, "Compliant" if area.compliant else "Action Required", area.notes or "-")
                    for area in data.areas
                ],
            )
        )

    incidents = data.incidents
    contents: dict[str, list[Block]] = {
        "executive_summary": [
            TextBlock(
                value=f"This Annual Compliance Report summarizes {data.organization}'s space operations "
                f"and regulatory compliance status for the year {data.report_year}. Overall compliance "
                f'performance is rated as "{label}" with a score of {data.overall_score:g}%.'
            ),
            key_values(
                ("Reporting Period", data.report_year),
                ("Operator Type", data.operator_type),
                ("Primary Authority", operator.primary_authority),
                ("Overall Compliance Score", f"{data.overall_score:g}%"),
            ),
        ],
        "operator_information": [
            key_values(
                ("Legal Name", operator.legal_name),
                ("Registration Number", operator.registration_number or "N/A"),
                ("Address", operator.address or "N/A"),
                ("Authorization Number", operator.authorization_number or "Pending"),
                ("Authorization Date", _fmt_date(operator.authorization_date)),
            )
        ],
        "fleet_overview": fleet_blocks,
        "compliance_status": status_blocks,
        "incidents_summary": [
            table(
                ("Severity", "Count"),
                [
                    ("Critical", incidents.critical),
                    ("High", incidents.high),
                    ("Medium", incidents.medium),
                    ("Low", incidents.low),
                ],
            ),
            key_values(
                ("Total Incidents", incidents.total),
                ("Resolved", incidents.resolved),
                ("Authority Notifications Made", incidents.authority_notifications),
            ),
        ],
        "planned_activities": (
            [bullet_list(data.planned_activities, ordered=True)] if data.planned_activities else []
        ),
        "contact": _contact_blocks(data.contact),
    }
    return assemble_report(
        ReportKind.ANNUAL_COMPLIANCE,
        f"Annual Compliance Report {data.report_year}",
        data.organization,
        contents,
        generated_at,
    )


def build_significant_change_report(data: SignificantChangeData, generated_at: datetime | None = None) -> Report:
    """Build a significant-change notification report."""
    description, article_ref, deadline_days, pre_approval = CHANGE_TYPE_INFO[data.change_type]

    overview: list[Block] = []
    if pre_approval:
        overview.append(
            AlertBlock(
                severity="warning",
                message=f"This change requires prior approval. Notify the authority at least "
                f"{deadline_days} days before the effective date.",
            )
        )
    overview.append(
        key_values(
            ("Notification Number", data.notification_number),
            ("Change Type", description),
            ("Article Reference", article_ref),
            ("Notification Deadline", f"{deadline_days} days"),
            ("Prior Approval Required", _yes_no(pre_approval)),
            ("Effective Date", _fmt_date(data.effective_date)),
        )
    )

    comparison: list[Block] = []
    if data.current_state or data.proposed_state:
        proposed = {item.field: item.value for item in data.proposed_state}
        fields = [item.field for item in data.current_state]
        fields += [item.field for item in data.proposed_state if item.field not in fields]
        current = {item.field: item.value for item in data.current_state}
        comparison.append(
            table(
                ("Parameter", "Current", "Proposed"),
                [(name, current.get(name, "-"), proposed.get(name, "-")) for name in fields],
            )
        )

    impact = data.impact
    impact_blocks: list[Block] = [
        key_values(
            ("Safety Impact", str(impact.safety).upper()),
            ("Debris/Environment Impact", str(impact.debris).upper()),
            ("Third Party Impact", str(impact.third_party).upper()),
            ("Regulatory Compliance Impact", str(impact.regulatory).upper()),
        )
    ]
    if data.impact_description:
        impact_blocks += [HeadingBlock(value="Impact Details"), TextBlock(value=data.impact_description)]
    if data.mitigation_measures:
        impact_blocks += [HeadingBlock(value="Mitigation Measures"), bullet_list(data.mitigation_measures, ordered=True)]

    contents: dict[str, list[Block]] = {
        "change_overview": overview,
        "authorization_reference": [
            key_values(
                ("Authorization Number", data.authorization_number),
                ("Authorization Date", _fmt_date(data.authorization_date)),
                ("Primary Authority", data.primary_authority),
            )
        ],
        "change_description": [
            HeadingBlock(value=data.change_title),
            TextBlock(value=data.change_description),
            HeadingBlock(value="Justification"),
            TextBlock(value=data.justification),
        ],
        "comparison": comparison,
        "affected_spacecraft": _asset_blocks(data.affected_spacecraft),
        "impact_assessment": impact_blocks,
    }
    return assemble_report(
        ReportKind.SIGNIFICANT_CHANGE,
        f"Significant Change Notification - {data.notification_number}",
        data.organization,
        contents,
        generated_at,
    )
