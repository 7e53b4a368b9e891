"""Report assembly, cross-framework aggregation and rendering.

Public API:
- aggregate: merge framework assessments into a UnifiedSummary
- build_*_report: assemble a Report of a given kind
- render_report: timeout-bounded rendering to a complete document
"""

from space_compliance_engine.reporting.aggregator import UnifiedSummary, aggregate
from space_compliance_engine.reporting.assembler import (
    SECTION_ORDER,
    assemble_report,
    build_annual_compliance_report,
    build_framework_report,
    build_incident_report,
    build_significant_change_report,
    build_unified_report,
    get_section_order,
)
from space_compliance_engine.reporting.blocks import (
    AlertBlock,
    Block,
    HeadingBlock,
    KeyValueBlock,
    ListBlock,
    Report,
    ReportKind,
    ReportMetadata,
    Section,
    SpacerBlock,
    TableBlock,
    TableRow,
    TextBlock,
)
from space_compliance_engine.reporting.inputs import (
    AnnualComplianceData,
    ChangeType,
    IncidentReportData,
    SignificantChangeData,
)
from space_compliance_engine.reporting.rendering import (
    JsonReportRenderer,
    RenderCancelled,
    RenderFailure,
    RenderOutcome,
    ReportRenderer,
    render_report,
)

__all__ = [
    "SECTION_ORDER",
    "AlertBlock",
    "AnnualComplianceData",
    "Block",
    "ChangeType",
    "HeadingBlock",
    "IncidentReportData",
    "JsonReportRenderer",
    "KeyValueBlock",
    "ListBlock",
    "RenderCancelled",
    "RenderFailure",
    "RenderOutcome",
    "Report",
    "ReportKind",
    "ReportMetadata",
    "ReportRenderer",
    "Section",
    "SignificantChangeData",
    "SpacerBlock",
    "TableBlock",
    "TableRow",
    "TextBlock",
    "UnifiedSummary",
    "aggregate",
    "assemble_report",
    "build_annual_compliance_report",
    "build_framework_report",
    "build_incident_report",
    "build_significant_change_report",
    "build_unified_report",
    "get_section_order",
    "render_report",
]
