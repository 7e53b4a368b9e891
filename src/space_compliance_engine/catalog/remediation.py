"""Static requirement-to-remediation table.

Recommendation text and effort estimates for gaps are looked up here and
never computed ad hoc. Lookup order:
1. The requirement's own entry
2. The framework default for the requirement's category
3. The framework-wide default
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from space_compliance_engine.core.models import RequirementRecord, freeze_mapping
from space_compliance_engine.errors import ComputationError

EFFORT_LEVELS: tuple[str, ...] = ("low", "medium", "high")

# Key of the framework-wide fallback inside a framework's defaults block
FRAMEWORK_DEFAULT_KEY = "_default"


@dataclass(frozen=True)
class RemediationEntry:
    """Remediation guidance for one requirement or category.

    Attributes:
        recommendation: What the operator should do to close the gap.
        effort: Effort label: low | medium | high.
        weeks: Estimated remediation duration in weeks.
    """

    recommendation: str
    effort: str
    weeks: float


class RemediationTable:
    """Read-only remediation lookup.

    Args:
        entries: Entries keyed by requirement id.
        defaults: Per-framework defaults keyed by category, plus
            FRAMEWORK_DEFAULT_KEY for the framework-wide fallback.
    """

    def __init__(
        self,
        entries: Mapping[str, RemediationEntry],
        defaults: Mapping[str, Mapping[str, RemediationEntry]],
    ) -> None:
        self._entries = freeze_mapping(entries)
        self._defaults = freeze_mapping({code: freeze_mapping(table) for code, table in defaults.items()})

    def __len__(self) -> int:
        return len(self._entries)

    def has_entry(self, requirement_id: str) -> bool:
        """Whether the requirement has its own remediation entry."""
        return requirement_id in self._entries

    def lookup(self, record: RequirementRecord) -> RemediationEntry:
        """Return remediation guidance for a requirement.

        Args:
            record: The requirement with an open gap.

        Returns:
            The most specific RemediationEntry available.

        Raises:
            ComputationError: If neither the requirement nor its framework
                has any remediation guidance.
        """
        entry = self._entries.get(record.id)
        if entry is not None:
            return entry
        framework_defaults = self._defaults.get(str(record.framework), {})
        entry = framework_defaults.get(record.category) or framework_defaults.get(FRAMEWORK_DEFAULT_KEY)
        if entry is None:
            raise ComputationError(f"No remediation guidance for requirement '{record.id}'")
        return entry


def _parse_entry(key: str, raw: Any) -> RemediationEntry:
    if not isinstance(raw, dict) or not raw.get("recommendation"):
        raise ComputationError(f"Remediation entry '{key}' needs a recommendation")
    effort = str(raw.get("effort", "medium"))
    if effort not in EFFORT_LEVELS:
        raise ComputationError(f"Remediation entry '{key}' has unknown effort {effort!r}")
    weeks = raw.get("weeks", 0)
    if not isinstance(weeks, (int, float)) or weeks < 0:
        raise ComputationError(f"Remediation entry '{key}' has invalid weeks {weeks!r}")
    return RemediationEntry(
        recommendation=" ".join(str(raw["recommendation"]).split()),
        effort=effort,
        weeks=float(weeks),
    )


def load_remediation_table(
    raw: dict[str, Any],
    known_ids: Mapping[str, RequirementRecord],
) -> RemediationTable:
    """Build the remediation table from its parsed YAML document.

    Args:
        raw: Parsed remediation document.
        known_ids: Catalog records keyed by id, used to reject stale entries.

    Returns:
        The RemediationTable.

    Raises:
        ComputationError: If an entry is malformed or references an unknown requirement.
    """
    entries: dict[str, RemediationEntry] = {}
    for requirement_id, raw_entry in (raw.get("entries") or {}).items():
        if requirement_id not in known_ids:
            raise ComputationError(f"Remediation entry references unknown requirement '{requirement_id}'")
        entries[requirement_id] = _parse_entry(requirement_id, raw_entry)

    defaults: dict[str, dict[str, RemediationEntry]] = {}
    for framework, table in (raw.get("defaults") or {}).items():
        if not isinstance(table, dict):
            raise ComputationError(f"Remediation defaults for '{framework}' must be a mapping")
        defaults[str(framework)] = {
            str(category): _parse_entry(f"{framework}.{category}", raw_entry)
            for category, raw_entry in table.items()
        }
    return RemediationTable(entries, defaults)
