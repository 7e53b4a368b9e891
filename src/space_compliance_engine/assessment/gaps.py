"""Gap analysis engine.

Diffs required vs. current status into a prioritized remediation list:
- every mandatory requirement that is not compliant (and not marked
  not_applicable) becomes a GapRecord
- priority combines severity with status
- recommendation and effort come from the static remediation table

Ordering is deterministic: priority rank descending, then category, then
declaration order. Truncation for summaries keeps that order.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from space_compliance_engine.catalog.remediation import RemediationTable
from space_compliance_engine.core.models import (
    ApplicableRequirement,
    ComplianceStatus,
    GapRecord,
    Severity,
)

SEVERITY_WEIGHT: dict[Severity, int] = {
    Severity.CRITICAL: 3,
    Severity.MAJOR: 2,
    Severity.MINOR: 1,
}

# (severity, status rank) -> priority label; status rank 2 = non_compliant/not_started, 1 = partial
_PRIORITY_LABELS: dict[tuple[Severity, int], str] = {
    (Severity.CRITICAL, 2): "critical",
    (Severity.CRITICAL, 1): "high",
    (Severity.MAJOR, 2): "high",
    (Severity.MAJOR, 1): "medium",
    (Severity.MINOR, 2): "medium",
    (Severity.MINOR, 1): "low",
}

_STATUS_VERBS: dict[ComplianceStatus, str] = {
    ComplianceStatus.NON_COMPLIANT: "Resolve non-compliance",
    ComplianceStatus.NOT_STARTED: "Address",
    ComplianceStatus.PARTIAL: "Complete",
}


@dataclass(frozen=True)
class GapPolicy:
    """Tie-break policy between statuses at equal severity.

    Attributes:
        status_rank: Rank per open status; higher ranks sort first. By default
            non_compliant and not_started rank strictly above partial.
    """

    status_rank: Mapping[ComplianceStatus, int] = field(
        default_factory=lambda: {
            ComplianceStatus.NON_COMPLIANT: 2,
            ComplianceStatus.NOT_STARTED: 2,
            ComplianceStatus.PARTIAL: 1,
        }
    )

    @classmethod
    def from_settings(cls, partial_ranks_with_non_compliant: bool) -> "GapPolicy":
        """Build the policy from the configured tie-break flag."""
        if not partial_ranks_with_non_compliant:
            return cls()
        return cls(
            status_rank={
                ComplianceStatus.NON_COMPLIANT: 2,
                ComplianceStatus.NOT_STARTED: 2,
                ComplianceStatus.PARTIAL: 2,
            }
        )

    def rank(self, severity: Severity, status: ComplianceStatus) -> int:
        """Return the numeric priority rank of a gap."""
        return SEVERITY_WEIGHT[severity] * 10 + self.status_rank[status]


DEFAULT_GAP_POLICY = GapPolicy()


def is_gap(requirement: ApplicableRequirement, status: ComplianceStatus) -> bool:
    """Whether a requirement with this status is an open mandatory gap."""
    return requirement.record.mandatory and status not in (
        ComplianceStatus.COMPLIANT,
        ComplianceStatus.NOT_APPLICABLE,
    )


def priority_label(
    severity: Severity,
    status: ComplianceStatus,
    policy: GapPolicy = DEFAULT_GAP_POLICY,
) -> str:
    """Return the priority label for a severity and open status.

    The label follows the same status rank the policy sorts by, so gaps of
    equal rank always carry equal labels.
    """
    return _PRIORITY_LABELS[(severity, policy.status_rank[status])]


def analyze_gaps(
    applicable: Sequence[ApplicableRequirement],
    statuses: Mapping[str, ComplianceStatus],
    remediation: RemediationTable,
    policy: GapPolicy = DEFAULT_GAP_POLICY,
) -> list[GapRecord]:
    """Produce the prioritized gap list for one framework.

    Args:
        applicable: Applicable requirements in declaration order.
        statuses: Current statuses keyed by requirement id; missing ids count
            as not_started.
        remediation: Static remediation table.
        policy: Status tie-break policy.

    Returns:
        GapRecords sorted by priority rank descending, then category, then
        declaration order.
    """
    keyed: list[tuple[int, str, int, GapRecord]] = []
    for item in applicable:
        status = statuses.get(item.id, ComplianceStatus.NOT_STARTED)
        if not is_gap(item, status):
            continue
        record = item.record
        guidance = remediation.lookup(record)
        rank = policy.rank(record.severity, status)
        gap = GapRecord(
            requirement_id=record.id,
            article_ref=record.article_ref,
            title=record.title,
            category=record.category,
            severity=record.severity,
            status=status,
            priority=priority_label(record.severity, status, policy),
            priority_rank=rank,
            description=f"{_STATUS_VERBS[status]}: {record.title} ({record.article_ref})",
            recommendation=guidance.recommendation,
            estimated_effort=guidance.effort,
            effort_weeks=guidance.weeks,
        )
        keyed.append((rank, record.category, item.sequence_number, gap))

    keyed.sort(key=lambda entry: (-entry[0], entry[1], entry[2]))
    return [entry[3] for entry in keyed]


def top_gaps(gaps: Sequence[GapRecord], limit: int) -> list[GapRecord]:
    """Return the first limit gaps of an already sorted list, preserving order."""
    if limit <= 0:
        return []
    return list(gaps[:limit])


def summarize_gaps(gaps: Sequence[GapRecord]) -> dict[str, object]:
    """Count gaps by priority label and sum the estimated remediation effort."""
    by_priority = {label: 0 for label in ("critical", "high", "medium", "low")}
    for gap in gaps:
        by_priority[gap.priority] += 1
    return {
        "total": len(gaps),
        "by_priority": by_priority,
        "estimated_weeks": sum(gap.effort_weeks for gap in gaps),
    }
