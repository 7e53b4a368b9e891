"""Assessment engines.

Public API:
- resolve_for_profile: applicable requirements for a profile
- classify / classify_constellation: regime and tier labels
- score_requirements: weighted score, grade and risk level
- analyze_gaps: prioritized remediation list
- compare_jurisdictions: national licensing comparison

The orchestrating AssessmentEngine lives in assessment.engine and is imported
from there directly, since it depends on the catalog package.
"""

from space_compliance_engine.assessment.applicability import (
    flatten,
    group_by_display_category,
    normalize_category,
    resolve_applicable,
    resolve_for_profile,
)
from space_compliance_engine.assessment.classification import (
    classify,
    classify_constellation,
    compute_overlap,
    us_agencies,
)
from space_compliance_engine.assessment.gaps import GapPolicy, analyze_gaps, summarize_gaps, top_gaps
from space_compliance_engine.assessment.jurisdictions import (
    JurisdictionComparison,
    JurisdictionScore,
    compare_jurisdictions,
    score_jurisdiction,
)
from space_compliance_engine.assessment.scoring import score_requirements

__all__ = [
    "GapPolicy",
    "JurisdictionComparison",
    "JurisdictionScore",
    "analyze_gaps",
    "classify",
    "classify_constellation",
    "compare_jurisdictions",
    "compute_overlap",
    "flatten",
    "group_by_display_category",
    "normalize_category",
    "resolve_applicable",
    "resolve_for_profile",
    "score_requirements",
    "score_jurisdiction",
    "summarize_gaps",
    "top_gaps",
    "us_agencies",
]
