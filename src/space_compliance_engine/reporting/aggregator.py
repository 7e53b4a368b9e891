"""Cross-framework aggregator.

Merges independent framework assessments into one UnifiedSummary:
- total_requirements: sum of applicable counts across frameworks
- unified_risk: worst-case (maximum) risk over in-scope frameworks, never an average
- immediate_actions: de-duplicated union of each framework's top gap
  descriptions, in framework order, capped
- estimated_months: rough remediation horizon from the framework regimes,
  plus a fixed allowance once any national licensing work is involved
- overlap: pairwise crosswalk overlap between in-scope frameworks
- national_comparison: ranked national licensing regimes, when requested
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from itertools import combinations
from typing import Any

from space_compliance_engine.assessment.classification import compute_overlap
from space_compliance_engine.assessment.engine import FrameworkAssessment
from space_compliance_engine.assessment.gaps import top_gaps
from space_compliance_engine.assessment.jurisdictions import JurisdictionComparison
from space_compliance_engine.catalog.crosswalk import Crosswalk
from space_compliance_engine.core.models import Framework, OverlapSummary, RiskLevel
from space_compliance_engine.observability import get_logger
from space_compliance_engine.settings import Settings, get_settings

logger = get_logger(__name__)

# Months to reach compliance, keyed by (framework, classification label)
REGIME_MONTHS: dict[tuple[str, str], int] = {
    (Framework.EU_SPACE_ACT, "light"): 6,
    (Framework.EU_SPACE_ACT, "standard"): 12,
    (Framework.NIS2, "essential"): 9,
    (Framework.NIS2, "important"): 6,
}

NATIONAL_FRAMEWORKS: frozenset[str] = frozenset({Framework.UK_SPACE_ACT, Framework.US_REGULATORY})
# Added once, however many national regimes are involved
NATIONAL_LICENSING_MONTHS = 3
MAX_ESTIMATED_MONTHS = 24


@dataclass(frozen=True)
class UnifiedSummary:
    """Worst-case summary across several framework assessments.

    Attributes:
        total_requirements: Applicable requirements summed across frameworks.
        unified_risk: Maximum risk over in-scope frameworks; low when none is in scope.
        immediate_actions: Highest-priority gap descriptions, de-duplicated.
        frameworks_in_scope: In-scope framework codes, in framework order.
        framework_risks: Risk per framework; None when out of scope.
        estimated_months: Estimated months to reach compliance.
        overlap: Pairwise crosswalk overlap between in-scope frameworks.
        national_comparison: National licensing comparison; None when not requested.
    """

    total_requirements: int
    unified_risk: RiskLevel
    immediate_actions: tuple[str, ...] = ()
    frameworks_in_scope: tuple[str, ...] = ()
    framework_risks: Mapping[str, RiskLevel | None] = field(default_factory=dict)
    estimated_months: int = 0
    overlap: tuple[OverlapSummary, ...] = ()
    national_comparison: JurisdictionComparison | None = None

    @property
    def potential_savings_weeks(self) -> float:
        return sum(summary.potential_savings_weeks for summary in self.overlap)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_requirements": self.total_requirements,
            "unified_risk": str(self.unified_risk),
            "immediate_actions": list(self.immediate_actions),
            "frameworks_in_scope": list(self.frameworks_in_scope),
            "framework_risks": {
                code: str(risk) if risk is not None else None for code, risk in self.framework_risks.items()
            },
            "estimated_months": self.estimated_months,
            "overlap": [summary.to_dict() for summary in self.overlap],
            "potential_savings_weeks": self.potential_savings_weeks,
            "national_comparison": (
                self.national_comparison.to_dict() if self.national_comparison is not None else None
            ),
        }


def unified_risk(assessments: Sequence[FrameworkAssessment]) -> RiskLevel:
    """Return the maximum risk over in-scope assessments, or low if none is in scope."""
    risks = [assessment.risk_level for assessment in assessments if assessment.risk_level is not None]
    if not risks:
        return RiskLevel.LOW
    return max(risks, key=lambda risk: risk.rank)


def immediate_actions(
    assessments: Sequence[FrameworkAssessment],
    per_framework: int,
    cap: int,
) -> list[str]:
    """Collect the top gap descriptions of each framework, de-duplicated and capped.

    Args:
        assessments: Framework assessments, in framework order.
        per_framework: Gaps taken from the head of each framework's sorted gap list.
        cap: Maximum number of actions returned.

    Returns:
        Action descriptions in framework order, first occurrence kept.
    """
    actions: list[str] = []
    seen: set[str] = set()
    for assessment in assessments:
        for gap in top_gaps(assessment.gaps, per_framework):
            if gap.description in seen:
                continue
            seen.add(gap.description)
            actions.append(gap.description)
    return actions[:cap]


def estimated_months(
    assessments: Sequence[FrameworkAssessment],
    national_comparison: JurisdictionComparison | None = None,
) -> int:
    """Estimate months to compliance, capped at 24.

    EU Space Act and NIS2 contribute per regime. National licensing adds a
    single fixed allowance when a national framework is in scope or at least
    one jurisdiction was compared.
    """
    months = 0
    national = national_comparison is not None and national_comparison.analyzed_count > 0
    for assessment in assessments:
        if not assessment.in_scope:
            continue
        if assessment.framework in NATIONAL_FRAMEWORKS:
            national = True
        else:
            months += REGIME_MONTHS.get((assessment.framework, assessment.classification.label), 0)
    if national:
        months += NATIONAL_LICENSING_MONTHS
    return min(MAX_ESTIMATED_MONTHS, months)


def pairwise_overlap(
    assessments: Sequence[FrameworkAssessment],
    crosswalk: Crosswalk,
) -> list[OverlapSummary]:
    """Compute crosswalk overlap for every pair of in-scope assessments."""
    in_scope = [assessment for assessment in assessments if assessment.in_scope]
    summaries: list[OverlapSummary] = []
    for first, second in combinations(in_scope, 2):
        summary = compute_overlap(
            first.framework,
            first.applicable_ids,
            second.framework,
            second.applicable_ids,
            crosswalk,
        )
        if summary.count:
            summaries.append(summary)
    return summaries


def aggregate(
    assessments: Sequence[FrameworkAssessment],
    crosswalk: Crosswalk | None = None,
    settings: Settings | None = None,
    national_comparison: JurisdictionComparison | None = None,
) -> UnifiedSummary:
    """Merge independent framework assessments into a UnifiedSummary.

    Args:
        assessments: One assessment per framework, in framework order.
        crosswalk: Cross-framework mapping table; overlap is omitted when None.
        settings: Service settings supplying the immediate-action limits.
        national_comparison: Ranked national licensing regimes, if compared.

    Returns:
        The UnifiedSummary.
    """
    settings = settings or get_settings()
    summary = UnifiedSummary(
        total_requirements=sum(len(assessment.applicable) for assessment in assessments),
        unified_risk=unified_risk(assessments),
        immediate_actions=tuple(
            immediate_actions(
                assessments,
                settings.immediate_actions_per_framework,
                settings.immediate_actions_cap,
            )
        ),
        frameworks_in_scope=tuple(assessment.framework for assessment in assessments if assessment.in_scope),
        framework_risks={assessment.framework: assessment.risk_level for assessment in assessments},
        estimated_months=estimated_months(assessments, national_comparison),
        overlap=tuple(pairwise_overlap(assessments, crosswalk)) if crosswalk is not None else (),
        national_comparison=national_comparison,
    )
    logger.info(
        "Unified summary computed",
        framework_count=len(assessments),
        frameworks_in_scope=list(summary.frameworks_in_scope),
        unified_risk=str(summary.unified_risk),
        total_requirements=summary.total_requirements,
    )
    return summary
