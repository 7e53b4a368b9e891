"""Static table of national space licensing regimes.

Each entry describes how demanding a country's authorisation process is:
lead time, language, minimum insurance, complexity and how closely it
already follows the EU Space Act. The table feeds the national licensing
comparison in the unified summary and is maintained by hand alongside the
requirement catalog.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from space_compliance_engine.core.models import Jurisdiction, freeze_mapping
from space_compliance_engine.errors import ComputationError, NotFoundError


@dataclass(frozen=True)
class JurisdictionRecord:
    """Licensing characteristics of one national regime.

    Attributes:
        code: Country code.
        name: Country name.
        law: Governing national space legislation.
        authority: Licensing authority.
        processing_months: Typical authorisation lead time.
        english_process: Whether the application can be run in English.
        insurance_min_meur: Minimum third-party liability cover in EUR millions.
        complexity: 1 (streamlined) to 5 (most demanding).
        new_space_friendly: Whether the regime caters for start-ups.
        eu_alignment: 0-100 closeness to the EU Space Act model.
    """

    code: Jurisdiction
    name: str
    law: str
    authority: str
    processing_months: int
    english_process: bool
    insurance_min_meur: int
    complexity: int
    new_space_friendly: bool
    eu_alignment: int


class JurisdictionTable:
    """Read-only lookup of national licensing regimes, in declaration order."""

    def __init__(self, records: Mapping[Jurisdiction, JurisdictionRecord]) -> None:
        self._records = freeze_mapping(records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[JurisdictionRecord]:
        return iter(self._records.values())

    def __contains__(self, code: object) -> bool:
        return code in self._records

    def codes(self) -> list[Jurisdiction]:
        return list(self._records)

    def get(self, code: str) -> JurisdictionRecord:
        """Return one regime by country code.

        Raises:
            NotFoundError: If the country has no licensing entry.
        """
        record = self._records.get(code)
        if record is None:
            raise NotFoundError("Jurisdiction", str(code))
        return record


def _int_field(code: str, raw: Mapping[str, Any], key: str, low: int, high: int) -> int:
    value = raw.get(key)
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise ComputationError(f"Jurisdiction '{code}' has invalid {key} {value!r}")
    return value


def load_jurisdiction_table(raw: dict[str, Any]) -> JurisdictionTable:
    """Build the jurisdiction table from its parsed YAML document.

    Args:
        raw: Parsed document with a ``jurisdictions`` mapping keyed by country code.

    Returns:
        The JurisdictionTable.

    Raises:
        ComputationError: If a country code is unknown or an entry is malformed.
    """
    records: dict[Jurisdiction, JurisdictionRecord] = {}
    for code, entry in (raw.get("jurisdictions") or {}).items():
        try:
            jurisdiction = Jurisdiction(str(code))
        except ValueError as exc:
            raise ComputationError(f"Unknown jurisdiction code '{code}'") from exc
        if not isinstance(entry, dict) or not entry.get("name") or not entry.get("law"):
            raise ComputationError(f"Jurisdiction '{code}' needs a name and a law")
        records[jurisdiction] = JurisdictionRecord(
            code=jurisdiction,
            name=str(entry["name"]),
            law=str(entry["law"]),
            authority=str(entry.get("authority", "")),
            processing_months=_int_field(code, entry, "processing_months", 1, 60),
            english_process=bool(entry.get("english_process", False)),
            insurance_min_meur=_int_field(code, entry, "insurance_min_meur", 0, 10_000),
            complexity=_int_field(code, entry, "complexity", 1, 5),
            new_space_friendly=bool(entry.get("new_space_friendly", False)),
            eu_alignment=_int_field(code, entry, "eu_alignment", 0, 100),
        )
    if not records:
        raise ComputationError("Jurisdiction table has no entries")
    return JurisdictionTable(records)
