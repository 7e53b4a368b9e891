"""Scoring and risk engine.

Aggregates per-requirement statuses into:
- A per-category (or per-authority) breakdown {score, weight, weighted_score}
- An overall score in [0, 100], a letter grade and a coarse status
- A risk level computed from the mandatory subset, with a critical override

Rules:
- category score = compliant / applicable x 100, exactly 0 when nothing applies
- not_applicable statuses leave the denominator
- weights of categories with no applicable requirement drop to 0 and the
  remaining configured weights are renormalized, so every breakdown sums to 1
- overall = sum of weighted scores
- any open critical mandatory requirement forces risk to critical
"""

import math
from collections.abc import Mapping, Sequence

from space_compliance_engine.core.models import (
    OPEN_STATUSES,
    ApplicableRequirement,
    CategoryScore,
    ComplianceStatus,
    Grade,
    OverallStatus,
    RiskLevel,
    ScoringResult,
    Severity,
    freeze_mapping,
)
from space_compliance_engine.errors import ComputationError

# (minimum overall score, grade), checked top to bottom
GRADE_THRESHOLDS: tuple[tuple[float, Grade], ...] = (
    (90.0, Grade.A),
    (80.0, Grade.B),
    (70.0, Grade.C),
    (60.0, Grade.D),
)

# (minimum overall score, status), checked top to bottom
STATUS_THRESHOLDS: tuple[tuple[float, OverallStatus], ...] = (
    (80.0, OverallStatus.COMPLIANT),
    (60.0, OverallStatus.MOSTLY_COMPLIANT),
)

# (mandatory score strictly below, risk), checked top to bottom
RISK_THRESHOLDS: tuple[tuple[float, RiskLevel], ...] = (
    (50.0, RiskLevel.CRITICAL),
    (70.0, RiskLevel.HIGH),
    (85.0, RiskLevel.MEDIUM),
)

_SCORE_PRECISION = 2


def percentage(numerator: int, denominator: int) -> float:
    """Return numerator / denominator x 100, or 0.0 when the denominator is 0."""
    if denominator <= 0:
        return 0.0
    return numerator / denominator * 100.0


def grade_for(score: float) -> Grade:
    """Map an overall score to a letter grade."""
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return Grade.F


def status_for(score: float, assessed: bool) -> OverallStatus:
    """Map an overall score to a coarse status.

    Args:
        score: Overall score.
        assessed: Whether any applicable requirement has left not_started.

    Returns:
        The OverallStatus; not_assessed when nothing has been assessed yet.
    """
    if not assessed:
        return OverallStatus.NOT_ASSESSED
    for threshold, status in STATUS_THRESHOLDS:
        if score >= threshold:
            return status
    if score > 0:
        return OverallStatus.PARTIAL
    return OverallStatus.NON_COMPLIANT


def status_of(requirement: ApplicableRequirement, statuses: Mapping[str, ComplianceStatus]) -> ComplianceStatus:
    """Return a requirement's current status, defaulting to not_started."""
    return statuses.get(requirement.id, ComplianceStatus.NOT_STARTED)


def mandatory_score(
    applicable: Sequence[ApplicableRequirement],
    statuses: Mapping[str, ComplianceStatus],
) -> float:
    """Score over the mandatory subset only, rounded to two decimals."""
    considered = [
        status_of(item, statuses)
        for item in applicable
        if item.record.mandatory and status_of(item, statuses) != ComplianceStatus.NOT_APPLICABLE
    ]
    compliant = sum(1 for status in considered if status == ComplianceStatus.COMPLIANT)
    return round(percentage(compliant, len(considered)), _SCORE_PRECISION)


def risk_level_for(
    applicable: Sequence[ApplicableRequirement],
    statuses: Mapping[str, ComplianceStatus],
) -> RiskLevel:
    """Compute the risk level from the mandatory subset.

    Any open mandatory requirement of critical severity forces critical risk
    regardless of the aggregate score. With no mandatory requirement in play
    the risk is low.

    Args:
        applicable: Applicable requirements.
        statuses: Current statuses keyed by requirement id.

    Returns:
        The RiskLevel.
    """
    mandatory = [
        item
        for item in applicable
        if item.record.mandatory and status_of(item, statuses) != ComplianceStatus.NOT_APPLICABLE
    ]
    if not mandatory:
        return RiskLevel.LOW
    if any(
        item.record.severity == Severity.CRITICAL and status_of(item, statuses) in OPEN_STATUSES
        for item in mandatory
    ):
        return RiskLevel.CRITICAL
    score = mandatory_score(applicable, statuses)
    for threshold, risk in RISK_THRESHOLDS:
        if score < threshold:
            return risk
    return RiskLevel.LOW


def effective_weights(
    configured: Mapping[str, float],
    active_categories: set[str],
) -> dict[str, float]:
    """Renormalize configured weights over the categories that have requirements.

    Args:
        configured: Framework weight table (sums to 1).
        active_categories: Categories with at least one applicable requirement.

    Returns:
        Weights keyed like configured, summing to 1. Inactive categories get 0.
        When no category is active, or every active weight is 0, the
        configured weights are returned unchanged.
    """
    active_total = math.fsum(weight for category, weight in configured.items() if category in active_categories)
    if active_total <= 0:
        return dict(configured)
    return {
        category: (weight / active_total if category in active_categories else 0.0)
        for category, weight in configured.items()
    }


def score_requirements(
    applicable: Sequence[ApplicableRequirement],
    statuses: Mapping[str, ComplianceStatus],
    weights: Mapping[str, float],
) -> ScoringResult:
    """Score applicable requirements against their current statuses.

    Args:
        applicable: Applicable requirements of one framework.
        statuses: Current statuses keyed by requirement id; missing ids count
            as not_started.
        weights: Framework weight table keyed by category or authority.

    Returns:
        The ScoringResult. Breakdown keys follow the weight table order.

    Raises:
        ComputationError: If a requirement's category is absent from the weight table.
    """
    applicable_counts: dict[str, int] = {category: 0 for category in weights}
    compliant_counts: dict[str, int] = {category: 0 for category in weights}
    assessed = False

    for item in applicable:
        category = item.record.category
        if category not in weights:
            raise ComputationError(f"Requirement '{item.id}' has category '{category}' with no weight")
        status = status_of(item, statuses)
        if status != ComplianceStatus.NOT_STARTED:
            assessed = True
        if status == ComplianceStatus.NOT_APPLICABLE:
            continue
        applicable_counts[category] += 1
        if status == ComplianceStatus.COMPLIANT:
            compliant_counts[category] += 1

    active = {category for category, count in applicable_counts.items() if count > 0}
    weight_table = effective_weights(weights, active)

    breakdown: dict[str, CategoryScore] = {}
    weighted_total: list[float] = []
    for category in weights:
        raw_score = percentage(compliant_counts[category], applicable_counts[category])
        weight = weight_table[category]
        weighted_total.append(raw_score * weight)
        breakdown[category] = CategoryScore(
            score=round(raw_score, _SCORE_PRECISION),
            weight=weight,
            weighted_score=round(raw_score * weight, _SCORE_PRECISION + 2),
            applicable_count=applicable_counts[category],
            compliant_count=compliant_counts[category],
        )

    overall = round(math.fsum(weighted_total), _SCORE_PRECISION)
    assessed = assessed and bool(active)
    return ScoringResult(
        overall=overall,
        grade=grade_for(overall),
        status=status_for(overall, assessed),
        breakdown=freeze_mapping(breakdown),
        mandatory_score=mandatory_score(applicable, statuses),
        risk_level=risk_level_for(applicable, statuses),
    )
