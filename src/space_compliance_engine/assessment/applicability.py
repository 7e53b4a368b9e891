"""Applicability resolver: flatten the catalog tree and filter it against a profile.

Responsibilities:
- Visit every leaf record of a labelled catalog tree in declaration order,
  regardless of nesting depth
- Keep records whose applicability predicate matches the profile's codes
  (or that declare the wildcard), minus explicit exclusions
- Annotate each kept record with a normalized display category and a
  1-based sequence number

Declaration order drives numbering and pagination downstream, so it is
preserved exactly.
"""

from collections.abc import Iterable, Iterator

from space_compliance_engine.core.models import (
    ApplicableRequirement,
    OperatorProfile,
    RequirementGroup,
    RequirementRecord,
)
from space_compliance_engine.errors import ComputationError
from space_compliance_engine.observability import get_logger

logger = get_logger(__name__)

# Maximum group nesting below the framework root
MAX_CATALOG_DEPTH = 16

DEFAULT_DISPLAY_CATEGORY = "informational"

DISPLAY_CATEGORIES: tuple[str, ...] = (
    "mandatory_pre_activity",
    "mandatory_ongoing",
    "design_technical",
    "conditional_simplified",
    "informational",
)

# Raw sub-type label -> canonical display category
CATEGORY_NORMALIZATION: dict[str, str] = {
    # Obligations to satisfy before the activity starts
    "mandatory_pre_activity": "mandatory_pre_activity",
    "pre_activity": "mandatory_pre_activity",
    "pre_authorization": "mandatory_pre_activity",
    "authorization_condition": "mandatory_pre_activity",
    "licensing_prerequisite": "mandatory_pre_activity",
    "licence_application": "mandatory_pre_activity",
    "registration": "mandatory_pre_activity",
    "prior_approval": "mandatory_pre_activity",
    "insurance_prerequisite": "mandatory_pre_activity",
    "financial_responsibility": "mandatory_pre_activity",
    # Continuing obligations during operations
    "mandatory_ongoing": "mandatory_ongoing",
    "ongoing_obligation": "mandatory_ongoing",
    "continuous": "mandatory_ongoing",
    "reporting_obligation": "mandatory_ongoing",
    "incident_reporting": "mandatory_ongoing",
    "monitoring": "mandatory_ongoing",
    "supervision": "mandatory_ongoing",
    "record_keeping": "mandatory_ongoing",
    "periodic_review": "mandatory_ongoing",
    "notification": "mandatory_ongoing",
    # Engineering and technical design requirements
    "design_technical": "design_technical",
    "technical_requirement": "design_technical",
    "design_requirement": "design_technical",
    "technical_standard": "design_technical",
    "engineering": "design_technical",
    "security_control": "design_technical",
    "safety_case": "design_technical",
    "disposal_design": "design_technical",
    # Conditional or proportionate obligations
    "conditional_simplified": "conditional_simplified",
    "conditional": "conditional_simplified",
    "simplified": "conditional_simplified",
    "light_regime": "conditional_simplified",
    "proportionate": "conditional_simplified",
    "derogation": "conditional_simplified",
    "exemption": "conditional_simplified",
    # Context without a direct obligation
    "informational": "informational",
    "definition": "informational",
    "scope": "informational",
    "recital": "informational",
    "guidance": "informational",
    "procedural": "informational",
    "transitional": "informational",
    "cooperation": "informational",
    "enforcement": "informational",
}


def flatten(
    root: RequirementGroup,
    max_depth: int = MAX_CATALOG_DEPTH,
) -> Iterator[RequirementRecord]:
    """Yield every leaf record of a catalog tree in declaration order.

    Uses an explicit stack, so arbitrarily nested catalogs never hit the
    interpreter recursion limit. Children are pushed in reverse so they pop
    in declaration order.

    Args:
        root: Framework root group.
        max_depth: Deepest group nesting accepted below the root.

    Yields:
        RequirementRecord leaves, outermost group first.

    Raises:
        ComputationError: If the tree nests deeper than max_depth.
    """
    stack: list[tuple[RequirementGroup | RequirementRecord, int]] = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        if isinstance(node, RequirementRecord):
            yield node
            continue
        if depth > max_depth:
            raise ComputationError(
                f"Catalog group '{node.label}' nests deeper than {max_depth} levels"
            )
        for child in reversed(node.children):
            stack.append((child, depth + 1))


def normalize_category(raw_label: str | None) -> str:
    """Map a raw sub-type label onto one of the canonical display categories.

    Labels absent from the table fall into the informational bucket.

    Args:
        raw_label: Raw label from the catalog; may be None or empty.

    Returns:
        One of DISPLAY_CATEGORIES.
    """
    if not raw_label:
        return DEFAULT_DISPLAY_CATEGORY
    key = raw_label.strip().lower().replace("-", "_").replace(" ", "_")
    category = CATEGORY_NORMALIZATION.get(key)
    if category is None:
        logger.debug("Unmapped category label, using default bucket", raw_label=raw_label)
        return DEFAULT_DISPLAY_CATEGORY
    return category


def resolve_applicable(
    records: Iterable[RequirementRecord],
    codes: frozenset[str],
) -> list[ApplicableRequirement]:
    """Filter flattened records against a set of applicability codes.

    Args:
        records: Flattened records in declaration order.
        codes: Profile applicability codes.

    Returns:
        Applicable requirements in declaration order, numbered from 1.
    """
    applicable: list[ApplicableRequirement] = []
    for record in records:
        if not record.matches(codes):
            continue
        applicable.append(
            ApplicableRequirement(
                record=record,
                display_category=normalize_category(record.sub_category),
                sequence_number=len(applicable) + 1,
            )
        )
    return applicable


def resolve_for_profile(
    root: RequirementGroup,
    profile: OperatorProfile,
) -> list[ApplicableRequirement]:
    """Flatten a framework tree and resolve it against a profile.

    Args:
        root: Framework root group.
        profile: Validated operator profile.

    Returns:
        Applicable requirements in declaration order.
    """
    codes = profile.applicability_codes()
    applicable = resolve_applicable(flatten(root), codes)
    logger.debug(
        "Resolved applicable requirements",
        catalog_root=root.label,
        code_count=len(codes),
        applicable_count=len(applicable),
    )
    return applicable


def group_by_display_category(
    applicable: Iterable[ApplicableRequirement],
) -> dict[str, list[ApplicableRequirement]]:
    """Group applicable requirements by display category in canonical order.

    Args:
        applicable: Applicable requirements.

    Returns:
        Dict keyed by every display category (possibly empty lists), in the
        order of DISPLAY_CATEGORIES.
    """
    grouped: dict[str, list[ApplicableRequirement]] = {name: [] for name in DISPLAY_CATEGORIES}
    for item in applicable:
        grouped[item.display_category].append(item)
    return grouped
