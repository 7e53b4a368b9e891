"""Requirement catalog: versioned, immutable knowledge base of regulatory requirements.

Each supported framework ships as one YAML document holding:
- Framework metadata (name, issuing body, catalog version)
- A weight table per scoring category or authority
- A labelled tree of groups terminating in leaf requirement records

The catalog is loaded once at process start and shared by reference. Nothing
in it can be mutated after loading: records are frozen dataclasses, groups
are tuples and weight tables are read-only mappings.

A malformed leaf, a duplicate id or an invalid weight table raises
ComputationError; an unknown framework or requirement id raises
NotFoundError.
"""

import itertools
import math
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from space_compliance_engine.assessment.applicability import MAX_CATALOG_DEPTH, flatten
from space_compliance_engine.catalog.crosswalk import Crosswalk, load_crosswalk
from space_compliance_engine.catalog.jurisdictions import JurisdictionTable, load_jurisdiction_table
from space_compliance_engine.catalog.remediation import RemediationTable, load_remediation_table
from space_compliance_engine.core.models import (
    Framework,
    RequirementGroup,
    RequirementRecord,
    Severity,
    freeze_mapping,
)
from space_compliance_engine.errors import ComputationError, NotFoundError
from space_compliance_engine.observability import get_logger

logger = get_logger(__name__)

# Path to the bundled catalog documents
_DATA_DIR = Path(__file__).parent / "data"

_REQUIRED_LEAF_FIELDS: tuple[str, ...] = ("id", "title", "text", "category", "mandatory", "applies_to")

_DEFAULT_WEIGHT_TOLERANCE = 1e-6


@dataclass(frozen=True)
class FrameworkCatalog:
    """Complete catalog of one framework.

    Attributes:
        code: Framework code.
        name: Short human-readable name.
        full_name: Full official name.
        issuing_body: Legislator or regulator.
        version: Catalog document version.
        weights: Read-only weight per scoring category or authority.
        root: Root group of the requirement tree.
        records: All leaf records, flattened in declaration order.
    """

    code: Framework
    name: str
    full_name: str
    issuing_body: str
    version: str
    weights: Mapping[str, float]
    root: RequirementGroup
    records: tuple[RequirementRecord, ...]

    def to_metadata(self) -> dict[str, Any]:
        """Build a metadata dictionary for API responses."""
        return {
            "code": str(self.code),
            "name": self.name,
            "full_name": self.full_name,
            "issuing_body": self.issuing_body,
            "version": self.version,
            "requirement_count": len(self.records),
            "mandatory_count": sum(1 for record in self.records if record.mandatory),
            "categories": list(self.weights.keys()),
        }


class RequirementCatalog:
    """Read-only index over all loaded frameworks.

    Args:
        frameworks: Framework catalogs keyed by framework code.
        remediation: Static requirement-to-remediation table.
        crosswalk: Static cross-framework id-to-id mapping table.
        jurisdictions: Static table of national licensing regimes.
    """

    def __init__(
        self,
        frameworks: Mapping[Framework, FrameworkCatalog],
        remediation: RemediationTable,
        crosswalk: Crosswalk,
        jurisdictions: JurisdictionTable,
    ) -> None:
        self._frameworks = freeze_mapping(frameworks)
        self._records = freeze_mapping(
            {record.id: record for catalog in frameworks.values() for record in catalog.records}
        )
        self.remediation = remediation
        self.crosswalk = crosswalk
        self.jurisdictions = jurisdictions

    def frameworks(self) -> list[Framework]:
        """Return the loaded framework codes in canonical order."""
        return [code for code in Framework if code in self._frameworks]

    def framework(self, code: str) -> FrameworkCatalog:
        """Return the catalog for a framework.

        Args:
            code: Framework code.

        Returns:
            The FrameworkCatalog.

        Raises:
            NotFoundError: If no such framework is loaded.
        """
        catalog = self._frameworks.get(code)
        if catalog is None:
            raise NotFoundError("Framework", str(code))
        return catalog

    def requirements(self, code: str) -> tuple[RequirementRecord, ...]:
        """Return a framework's records in declaration order."""
        return self.framework(code).records

    def weights(self, code: str) -> Mapping[str, float]:
        """Return a framework's read-only weight table."""
        return self.framework(code).weights

    def get(self, requirement_id: str) -> RequirementRecord:
        """Return one requirement record by id.

        Raises:
            NotFoundError: If the id is not in any loaded framework.
        """
        record = self._records.get(requirement_id)
        if record is None:
            raise NotFoundError("Requirement", requirement_id)
        return record

    def __contains__(self, requirement_id: object) -> bool:
        return requirement_id in self._records

    def __iter__(self) -> Iterator[FrameworkCatalog]:
        return (self._frameworks[code] for code in self.frameworks())


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def read_yaml(path: Path) -> dict[str, Any]:
    """Read one YAML document and require a mapping at its top level.

    Raises:
        ComputationError: If the file is missing, unparsable or not a mapping.
    """
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ComputationError(f"Cannot read catalog document {path.name}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ComputationError(f"Catalog document {path.name} must be a mapping")
    return raw


def validate_weights(
    framework: str,
    raw_weights: Any,
    tolerance: float = _DEFAULT_WEIGHT_TOLERANCE,
) -> Mapping[str, float]:
    """Validate a weight table and return it as a read-only mapping.

    Args:
        framework: Framework code, for error messages.
        raw_weights: Parsed weights mapping.
        tolerance: Allowed deviation of the sum from 1.0.

    Returns:
        Read-only mapping of category to weight.

    Raises:
        ComputationError: If the table is empty, holds negative weights or
            does not sum to 1 within tolerance.
    """
    if not isinstance(raw_weights, dict) or not raw_weights:
        raise ComputationError(f"Framework '{framework}' has no weight table")
    weights: dict[str, float] = {}
    for category, value in raw_weights.items():
        if not isinstance(value, (int, float)) or isinstance(value, bool) or value < 0:
            raise ComputationError(f"Framework '{framework}' has invalid weight for '{category}': {value!r}")
        weights[str(category)] = float(value)
    total = math.fsum(weights.values())
    if abs(total - 1.0) > tolerance:
        raise ComputationError(f"Weights for framework '{framework}' sum to {total}, expected 1.0")
    return freeze_mapping(weights)


def _build_record(
    raw: dict[str, Any],
    framework: Framework,
    group_path: tuple[str, ...],
    position: int,
    weights: Mapping[str, float],
) -> RequirementRecord:
    missing = [name for name in _REQUIRED_LEAF_FIELDS if raw.get(name) in (None, "")]
    if missing:
        raise ComputationError(
            f"Catalog entry {raw.get('id', '<unknown>')!r} in '{framework}' is missing {', '.join(missing)}"
        )
    requirement_id = str(raw["id"])
    if raw["category"] not in weights:
        raise ComputationError(
            f"Requirement '{requirement_id}' uses category '{raw['category']}' absent from the weight table"
        )
    applies_to = raw["applies_to"]
    if isinstance(applies_to, str):
        applies_to = [applies_to]
    if not isinstance(applies_to, list) or not applies_to:
        raise ComputationError(f"Requirement '{requirement_id}' has an empty applicability predicate")
    if not isinstance(raw["mandatory"], bool):
        raise ComputationError(f"Requirement '{requirement_id}' has a non-boolean mandatory flag")
    try:
        severity = Severity(raw.get("severity", Severity.MAJOR))
    except ValueError as exc:
        raise ComputationError(f"Requirement '{requirement_id}' has unknown severity {raw.get('severity')!r}") from exc

    return RequirementRecord(
        id=requirement_id,
        framework=framework,
        article_ref=str(raw.get("article_ref", "")),
        title=str(raw["title"]).strip(),
        text=" ".join(str(raw["text"]).split()),
        category=str(raw["category"]),
        sub_category=str(raw.get("sub_category") or ""),
        mandatory=raw["mandatory"],
        severity=severity,
        applies_to=frozenset(str(code) for code in applies_to),
        excludes=frozenset(str(code) for code in raw.get("excludes") or ()),
        group_path=group_path,
        position=position,
    )


def _build_group(
    label: str,
    raw_items: Any,
    framework: Framework,
    weights: Mapping[str, float],
    path: tuple[str, ...],
    counter: Iterator[int],
) -> RequirementGroup:
    if len(path) > MAX_CATALOG_DEPTH:
        raise ComputationError(f"Catalog group '{label}' in '{framework}' nests deeper than {MAX_CATALOG_DEPTH} levels")
    if not isinstance(raw_items, list):
        raise ComputationError(f"Catalog group '{label}' in '{framework}' must hold a list of items")

    children: list[RequirementGroup | RequirementRecord] = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            raise ComputationError(f"Catalog group '{label}' in '{framework}' holds a non-mapping item")
        if "id" in raw:
            children.append(_build_record(raw, framework, path, next(counter), weights))
        elif "items" in raw:
            child_label = str(raw.get("label", ""))
            children.append(
                _build_group(child_label, raw["items"], framework, weights, path + (child_label,), counter)
            )
        else:
            raise ComputationError(
                f"Catalog item under '{label}' in '{framework}' is neither a group nor a requirement"
            )
    return RequirementGroup(label=label, children=tuple(children))


def parse_framework(raw: dict[str, Any], weight_tolerance: float = _DEFAULT_WEIGHT_TOLERANCE) -> FrameworkCatalog:
    """Build a FrameworkCatalog from a parsed YAML document.

    Args:
        raw: Parsed framework document.
        weight_tolerance: Allowed deviation of the weight sum from 1.0.

    Returns:
        The immutable FrameworkCatalog.

    Raises:
        ComputationError: On any structural problem in the document.
    """
    try:
        code = Framework(raw.get("code"))
    except ValueError as exc:
        raise ComputationError(f"Unknown framework code {raw.get('code')!r} in catalog") from exc

    weights = validate_weights(code, raw.get("weights"), weight_tolerance)
    name = str(raw.get("name", code))
    root = _build_group(name, raw.get("items"), code, weights, (), itertools.count())
    records = tuple(flatten(root))

    seen: set[str] = set()
    for record in records:
        if record.id in seen:
            raise ComputationError(f"Duplicate requirement id '{record.id}' in '{code}'")
        seen.add(record.id)

    return FrameworkCatalog(
        code=code,
        name=name,
        full_name=str(raw.get("full_name", name)),
        issuing_body=str(raw.get("issuing_body", "")),
        version=str(raw.get("version", "")),
        weights=weights,
        root=root,
        records=records,
    )


def load_catalog(
    catalog_dir: Path | str | None = None,
    weight_tolerance: float = _DEFAULT_WEIGHT_TOLERANCE,
) -> RequirementCatalog:
    """Load every framework document plus the remediation, crosswalk and jurisdiction tables.

    Args:
        catalog_dir: Directory holding the YAML documents. Defaults to the
            catalog bundled with the package.
        weight_tolerance: Allowed deviation of each weight sum from 1.0.

    Returns:
        The immutable RequirementCatalog.

    Raises:
        ComputationError: If any document is missing or malformed.
    """
    data_dir = Path(catalog_dir) if catalog_dir is not None else _DATA_DIR

    frameworks: dict[Framework, FrameworkCatalog] = {}
    for code in Framework:
        catalog = parse_framework(read_yaml(data_dir / f"{code}.yaml"), weight_tolerance)
        frameworks[catalog.code] = catalog
        logger.debug(
            "Loaded framework catalog",
            framework=str(catalog.code),
            version=catalog.version,
            requirement_count=len(catalog.records),
        )

    known_ids = {record.id: record for catalog in frameworks.values() for record in catalog.records}
    remediation = load_remediation_table(read_yaml(data_dir / "remediation.yaml"), known_ids)
    crosswalk = load_crosswalk(read_yaml(data_dir / "crosswalk.yaml"), known_ids)
    jurisdictions = load_jurisdiction_table(read_yaml(data_dir / "jurisdictions.yaml"))

    logger.info(
        "Requirement catalog loaded",
        catalog_dir=str(data_dir),
        frameworks=[str(code) for code in frameworks],
        requirement_count=len(known_ids),
        crosswalk_links=len(crosswalk),
        jurisdiction_count=len(jurisdictions),
    )
    return RequirementCatalog(frameworks, remediation, crosswalk, jurisdictions)
