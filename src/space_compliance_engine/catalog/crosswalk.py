"""Static cross-framework id-to-id mapping table.

Links requirements in one framework to equivalent or related requirements in
another. The table is maintained by hand alongside the catalog and is never
discovered at runtime.

Relationships:
- supersedes: satisfying the source fully satisfies the target
- overlaps: the two obligations share most of their evidence
- extends: the source adds obligations on top of the target
- implements: the source is a concrete implementation of the target
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from space_compliance_engine.core.models import RequirementRecord
from space_compliance_engine.errors import ComputationError

RELATIONSHIPS: tuple[str, ...] = ("supersedes", "overlaps", "extends", "implements")


@dataclass(frozen=True)
class CrosswalkEntry:
    """One directional link between two requirements."""

    source_id: str
    target_id: str
    relationship: str
    description: str = ""


class Crosswalk:
    """Immutable collection of crosswalk links.

    Args:
        entries: Links in declaration order.
    """

    def __init__(self, entries: tuple[CrosswalkEntry, ...] = ()) -> None:
        self._entries = tuple(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CrosswalkEntry]:
        return iter(self._entries)

    def links_for(self, requirement_id: str) -> list[CrosswalkEntry]:
        """Return every link touching a requirement, in either direction."""
        return [
            entry
            for entry in self._entries
            if requirement_id in (entry.source_id, entry.target_id)
        ]


def load_crosswalk(
    raw: dict[str, Any],
    known_ids: Mapping[str, RequirementRecord],
) -> Crosswalk:
    """Build the crosswalk from its parsed YAML document.

    Args:
        raw: Parsed crosswalk document with a ``mappings`` list.
        known_ids: Catalog records keyed by id.

    Returns:
        The Crosswalk.

    Raises:
        ComputationError: If a link references an unknown requirement, links a
            framework to itself or uses an unknown relationship.
    """
    entries: list[CrosswalkEntry] = []
    for raw_entry in raw.get("mappings") or []:
        source_id = str(raw_entry.get("source", ""))
        target_id = str(raw_entry.get("target", ""))
        relationship = str(raw_entry.get("relationship", ""))
        for requirement_id in (source_id, target_id):
            if requirement_id not in known_ids:
                raise ComputationError(f"Crosswalk references unknown requirement '{requirement_id}'")
        if known_ids[source_id].framework == known_ids[target_id].framework:
            raise ComputationError(f"Crosswalk link {source_id} -> {target_id} stays within one framework")
        if relationship not in RELATIONSHIPS:
            raise ComputationError(f"Crosswalk link {source_id} -> {target_id} has unknown relationship {relationship!r}")
        entries.append(
            CrosswalkEntry(
                source_id=source_id,
                target_id=target_id,
                relationship=relationship,
                description=" ".join(str(raw_entry.get("description", "")).split()),
            )
        )
    return Crosswalk(tuple(entries))
