"""Domain model for the space compliance engine.

Defines:
- Enumerations for frameworks, operator and activity codes, jurisdictions,
  statuses, severities, grades and risk levels
- OperatorProfile, the validated, immutable input snapshot for one run
- LicensingPreferences, the inputs of the national licensing comparison
- Catalog records (RequirementRecord, RequirementGroup)
- Derived, ephemeral results (ScoringResult, GapRecord, ClassificationResult,
  OverlapSummary)

All derived types are frozen. They are recomputed from
(profile, catalog, statuses) on every request and never mutated in place.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from types import MappingProxyType
from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict, Field, model_validator

from space_compliance_engine.errors import ValidationError


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class Framework(StrEnum):
    """Regulatory frameworks the engine can assess."""

    EU_SPACE_ACT = "eu_space_act"
    NIS2 = "nis2"
    UK_SPACE_ACT = "uk_space_act"
    US_REGULATORY = "us_regulatory"


class OperatorType(StrEnum):
    """EU Space Act operator categories."""

    SCO = "SCO"  # spacecraft operator
    LO = "LO"  # launch operator
    LSO = "LSO"  # launch site operator
    ISOS = "ISOS"  # in-space operations and services provider
    CAP = "CAP"  # collision avoidance provider
    PDP = "PDP"  # primary data provider
    TCO = "TCO"  # third-country operator


class ActivityType(StrEnum):
    """Activities an operator carries out, used by national regimes."""

    SPACECRAFT_OPERATION = "spacecraft_operation"
    LAUNCH = "launch"
    REENTRY = "reentry"
    LAUNCH_SITE = "launch_site"
    RANGE_CONTROL = "range_control"
    SUBORBITAL = "suborbital"
    HUMAN_SPACEFLIGHT = "human_spaceflight"
    IN_ORBIT_SERVICES = "in_orbit_services"
    COLLISION_AVOIDANCE_SERVICES = "collision_avoidance_services"
    SATELLITE_COMMUNICATIONS = "satellite_communications"
    REMOTE_SENSING = "remote_sensing"
    PRIMARY_DATA_PROVISION = "primary_data_provision"


class Jurisdiction(StrEnum):
    """Country codes relevant to space licensing."""

    AT = "AT"
    BE = "BE"
    BG = "BG"
    HR = "HR"
    CY = "CY"
    CZ = "CZ"
    DK = "DK"
    EE = "EE"
    FI = "FI"
    FR = "FR"
    DE = "DE"
    GR = "GR"
    HU = "HU"
    IE = "IE"
    IT = "IT"
    LV = "LV"
    LT = "LT"
    LU = "LU"
    MT = "MT"
    NL = "NL"
    PL = "PL"
    PT = "PT"
    RO = "RO"
    SK = "SK"
    SI = "SI"
    ES = "ES"
    SE = "SE"
    UK = "UK"
    NO = "NO"
    CH = "CH"
    US = "US"
    OTHER = "OTHER"


EU_MEMBER_STATES: frozenset[Jurisdiction] = frozenset(
    {
        Jurisdiction.AT,
        Jurisdiction.BE,
        Jurisdiction.BG,
        Jurisdiction.HR,
        Jurisdiction.CY,
        Jurisdiction.CZ,
        Jurisdiction.DK,
        Jurisdiction.EE,
        Jurisdiction.FI,
        Jurisdiction.FR,
        Jurisdiction.DE,
        Jurisdiction.GR,
        Jurisdiction.HU,
        Jurisdiction.IE,
        Jurisdiction.IT,
        Jurisdiction.LV,
        Jurisdiction.LT,
        Jurisdiction.LU,
        Jurisdiction.MT,
        Jurisdiction.NL,
        Jurisdiction.PL,
        Jurisdiction.PT,
        Jurisdiction.RO,
        Jurisdiction.SK,
        Jurisdiction.SI,
        Jurisdiction.ES,
        Jurisdiction.SE,
    }
)


class EntitySize(StrEnum):
    """EU SME size classes (Recommendation 2003/361/EC)."""

    MICRO = "micro"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class OrbitRegime(StrEnum):
    """Primary orbit of the operator's assets."""

    LEO = "LEO"
    MEO = "MEO"
    GEO = "GEO"
    HEO = "HEO"
    SSO = "SSO"
    CISLUNAR = "CISLUNAR"
    MULTIPLE = "MULTIPLE"


class InsuranceCoverage(StrEnum):
    """Third-party liability cover currently held, in EUR bands."""

    NONE = "none"
    UNDER_10M = "under_10m"
    FROM_10M_TO_60M = "10m_60m"
    FROM_60M_TO_100M = "60m_100m"
    FROM_100M_TO_500M = "100m_500m"
    OVER_500M = "over_500m"


class ComplianceStatus(StrEnum):
    """Current status of one requirement within an assessment."""

    COMPLIANT = "compliant"
    PARTIAL = "partial"
    NON_COMPLIANT = "non_compliant"
    NOT_APPLICABLE = "not_applicable"
    NOT_STARTED = "not_started"


# Statuses that leave a mandatory requirement open
OPEN_STATUSES: frozenset[ComplianceStatus] = frozenset(
    {ComplianceStatus.PARTIAL, ComplianceStatus.NON_COMPLIANT, ComplianceStatus.NOT_STARTED}
)


class Severity(StrEnum):
    """Severity of a requirement breach."""

    CRITICAL = "critical"
    MAJOR = "major"
    MINOR = "minor"


class RiskLevel(StrEnum):
    """Coarse risk level, ordered low < medium < high < critical."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Ordinal position used for worst-case comparisons."""
        return _RISK_RANK[self]


_RISK_RANK: dict[RiskLevel, int] = {
    RiskLevel.LOW: 0,
    RiskLevel.MEDIUM: 1,
    RiskLevel.HIGH: 2,
    RiskLevel.CRITICAL: 3,
}


class Grade(StrEnum):
    """Letter grade derived from the overall score."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"


class OverallStatus(StrEnum):
    """Coarse compliance status derived from the overall score."""

    COMPLIANT = "compliant"
    MOSTLY_COMPLIANT = "mostly_compliant"
    PARTIAL = "partial"
    NON_COMPLIANT = "non_compliant"
    NOT_ASSESSED = "not_assessed"


# ---------------------------------------------------------------------------
# Operator profile
# ---------------------------------------------------------------------------


class OperatorProfile(BaseModel):
    """Validated, immutable description of an operator for one assessment run.

    Unknown enum values and unknown fields are rejected. Use parse() to get
    the engine's ValidationError instead of pydantic's.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    operator_types: frozenset[OperatorType] = Field(
        min_length=1,
        description="EU Space Act operator categories held by the operator",
    )
    activity_types: frozenset[ActivityType] = Field(
        default_factory=frozenset,
        description="Activities carried out, used by the national regimes",
    )
    jurisdictions: frozenset[Jurisdiction] = Field(
        default_factory=frozenset,
        description="Countries in which the operator is licensed or intends to operate",
    )
    establishment_country: Jurisdiction = Field(description="Country of legal establishment")
    entity_size: EntitySize = Field(description="SME size class")
    orbit_regime: OrbitRegime = Field(description="Primary orbit of the operator's assets")
    satellite_count: int = Field(default=1, ge=0, description="Number of spacecraft operated")
    member_state_count: int = Field(default=1, ge=1, description="EU member states the operator is active in")

    operates_constellation: bool = False
    has_maneuverability: bool = False
    has_propulsion: bool = False
    provides_eu_services: bool = False
    serves_critical_infrastructure: bool = False
    operates_ground_infrastructure: bool = False
    operates_satellite_communications: bool = False
    is_research_institution: bool = False
    is_defense_only: bool = False

    @model_validator(mode="after")
    def _check_consistency(self) -> "OperatorProfile":
        if self.operates_constellation and self.satellite_count < 2:
            raise ValueError("operates_constellation requires satellite_count >= 2")
        if OperatorType.TCO in self.operator_types and self.establishment_country in EU_MEMBER_STATES:
            raise ValueError("TCO operator type requires an establishment outside the EU")
        return self

    @classmethod
    def parse(cls, data: Mapping[str, Any]) -> "OperatorProfile":
        """Validate raw input into a profile.

        Args:
            data: Raw profile fields, e.g. a decoded JSON body.

        Returns:
            The validated OperatorProfile.

        Raises:
            ValidationError: If any field is missing, unknown or invalid.
        """
        try:
            return cls.model_validate(dict(data))
        except pydantic.ValidationError as exc:
            raise ValidationError(f"Invalid operator profile: {_describe_errors(exc, 'profile')}") from exc

    @property
    def is_eu_established(self) -> bool:
        """Whether the operator is established in an EU member state."""
        return self.establishment_country in EU_MEMBER_STATES

    def applicability_codes(self) -> frozenset[str]:
        """Return the codes matched against requirement applicability predicates.

        The set holds operator-type codes, activity codes, jurisdiction codes
        (including the establishment country) and capability codes derived
        from the boolean flags. A non-EU operator serving the Union is
        treated as a third-country operator (TCO).

        Returns:
            Frozen set of code strings.
        """
        codes: set[str] = {str(code) for code in self.operator_types}
        codes.update(str(code) for code in self.activity_types)
        codes.update(str(code) for code in self.jurisdictions)
        codes.add(str(self.establishment_country))
        if not self.is_eu_established and self.provides_eu_services:
            codes.add(str(OperatorType.TCO))
        for flag, code in _CAPABILITY_CODES.items():
            if getattr(self, flag):
                codes.add(code)
        return frozenset(codes)


_CAPABILITY_CODES: dict[str, str] = {
    "operates_constellation": "constellation",
    "has_maneuverability": "maneuverable",
    "has_propulsion": "propulsion",
    "serves_critical_infrastructure": "critical_infrastructure",
    "operates_ground_infrastructure": "ground_infrastructure",
    "operates_satellite_communications": "satcom",
}


def _describe_errors(exc: pydantic.ValidationError, root: str) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc']) or root}: {error['msg']}" for error in exc.errors()
    )


class LicensingPreferences(BaseModel):
    """What an operator wants from a national licensing regime.

    Drives the national space-law comparison in the unified summary. The
    comparison only runs for the jurisdictions listed here, in this order.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    interested_jurisdictions: tuple[Jurisdiction, ...] = Field(
        default=(),
        description="Jurisdictions to compare for national licensing",
    )
    prefers_fast_processing: bool = False
    requires_english_process: bool = False
    is_startup: bool = False
    insurance_coverage: InsuranceCoverage | None = None

    @classmethod
    def parse(cls, data: Mapping[str, Any]) -> "LicensingPreferences":
        """Validate raw input into licensing preferences.

        Raises:
            ValidationError: If any field is unknown or invalid.
        """
        try:
            return cls.model_validate(dict(data))
        except pydantic.ValidationError as exc:
            raise ValidationError(
                f"Invalid licensing preferences: {_describe_errors(exc, 'preferences')}"
            ) from exc


# ---------------------------------------------------------------------------
# Catalog records
# ---------------------------------------------------------------------------

# Applicability wildcard: a record declaring it applies to every profile
WILDCARD = "ALL"


@dataclass(frozen=True)
class RequirementRecord:
    """A single discrete regulatory obligation.

    Attributes:
        id: Catalog-unique requirement identifier.
        framework: Owning framework.
        article_ref: Article or section reference (e.g., "Art. 6", "47 CFR 25.114").
        title: Short title.
        text: Full obligation text.
        category: Scoring category or authority the record is weighted under.
        sub_category: Raw sub-type label, normalized for display.
        mandatory: Whether the obligation is binding.
        severity: Impact of a breach.
        applies_to: Applicability codes; contains WILDCARD for universal records.
        excludes: Codes that remove the record even when applies_to matches.
        group_path: Labels of the enclosing catalog groups, outermost first.
        position: Zero-based declaration index within the framework.
    """

    id: str
    framework: Framework
    article_ref: str
    title: str
    text: str
    category: str
    sub_category: str
    mandatory: bool
    severity: Severity
    applies_to: frozenset[str]
    excludes: frozenset[str] = frozenset()
    group_path: tuple[str, ...] = ()
    position: int = 0

    @property
    def is_universal(self) -> bool:
        """Whether the record declares the wildcard."""
        return WILDCARD in self.applies_to

    def matches(self, codes: frozenset[str]) -> bool:
        """Return True if the record applies to a profile with the given codes."""
        if self.excludes & codes:
            return False
        return self.is_universal or bool(self.applies_to & codes)


@dataclass(frozen=True)
class RequirementGroup:
    """A labelled catalog node holding nested groups and leaf records in declaration order."""

    label: str
    children: tuple["RequirementGroup | RequirementRecord", ...] = ()


@dataclass(frozen=True)
class ApplicableRequirement:
    """A requirement that applies to a profile, annotated for display.

    Attributes:
        record: The underlying catalog record.
        display_category: Normalized canonical category.
        sequence_number: 1-based position among the applicable records.
    """

    record: RequirementRecord
    display_category: str
    sequence_number: int

    @property
    def id(self) -> str:
        return self.record.id


@dataclass(frozen=True)
class RequirementStatus:
    """Current status of one requirement within one assessment.

    Attributes:
        assessment_id: Assessment the status belongs to.
        requirement_id: Catalog requirement id.
        status: Current compliance status.
        evidence_notes: Free-text evidence notes.
        updated_at: When the status was last changed.
    """

    assessment_id: str
    requirement_id: str
    status: ComplianceStatus
    evidence_notes: str = ""
    updated_at: datetime | None = None


# ---------------------------------------------------------------------------
# Derived results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CategoryScore:
    """Score contribution of one category or authority."""

    score: float
    weight: float
    weighted_score: float
    applicable_count: int
    compliant_count: int


@dataclass(frozen=True)
class ScoringResult:
    """Aggregated compliance score for one framework.

    Attributes:
        overall: Overall score in [0, 100].
        grade: Letter grade derived from overall.
        status: Coarse status derived from overall.
        breakdown: Per-category scores keyed by category name.
        mandatory_score: Score over mandatory requirements only.
        risk_level: Risk derived from the mandatory subset.
    """

    overall: float
    grade: Grade
    status: OverallStatus
    breakdown: Mapping[str, CategoryScore]
    mandatory_score: float
    risk_level: RiskLevel

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall": self.overall,
            "grade": str(self.grade),
            "status": str(self.status),
            "mandatory_score": self.mandatory_score,
            "risk_level": str(self.risk_level),
            "breakdown": {
                category: {
                    "score": entry.score,
                    "weight": entry.weight,
                    "weighted_score": entry.weighted_score,
                    "applicable_count": entry.applicable_count,
                    "compliant_count": entry.compliant_count,
                }
                for category, entry in self.breakdown.items()
            },
        }


@dataclass(frozen=True)
class GapRecord:
    """A mandatory requirement that is not yet satisfied.

    Attributes:
        requirement_id: Catalog requirement id.
        article_ref: Article reference of the requirement.
        title: Requirement title.
        category: Scoring category or authority.
        severity: Requirement severity.
        status: Current status driving the gap.
        priority: Priority label: critical | high | medium | low.
        priority_rank: Numeric rank; higher sorts first.
        description: One-line description used for action lists.
        recommendation: Remediation text from the remediation table.
        estimated_effort: Effort label: low | medium | high.
        effort_weeks: Estimated remediation duration in weeks.
    """

    requirement_id: str
    article_ref: str
    title: str
    category: str
    severity: Severity
    status: ComplianceStatus
    priority: str
    priority_rank: int
    description: str
    recommendation: str
    estimated_effort: str
    effort_weeks: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "requirement_id": self.requirement_id,
            "article_ref": self.article_ref,
            "title": self.title,
            "category": self.category,
            "severity": str(self.severity),
            "status": str(self.status),
            "priority": self.priority,
            "priority_rank": self.priority_rank,
            "description": self.description,
            "recommendation": self.recommendation,
            "estimated_effort": self.estimated_effort,
            "effort_weeks": self.effort_weeks,
        }


@dataclass(frozen=True)
class ClassificationResult:
    """Regime or tier label for one framework with its justification."""

    framework: str
    label: str
    reason: str
    article_ref: str = ""

    @property
    def in_scope(self) -> bool:
        return self.label != OUT_OF_SCOPE

    def to_dict(self) -> dict[str, Any]:
        return {
            "framework": self.framework,
            "label": self.label,
            "reason": self.reason,
            "article_ref": self.article_ref,
        }


OUT_OF_SCOPE = "out_of_scope"


@dataclass(frozen=True)
class OverlapPair:
    """One crosswalk link whose two endpoints are both applicable."""

    source_id: str
    target_id: str
    relationship: str
    description: str = ""


@dataclass(frozen=True)
class OverlapSummary:
    """Overlap between two frameworks' applicable requirements."""

    source_framework: str
    target_framework: str
    pairs: tuple[OverlapPair, ...] = ()
    potential_savings_weeks: float = 0.0

    @property
    def count(self) -> int:
        return len(self.pairs)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_framework": self.source_framework,
            "target_framework": self.target_framework,
            "count": self.count,
            "potential_savings_weeks": self.potential_savings_weeks,
            "pairs": [
                {
                    "source_id": pair.source_id,
                    "target_id": pair.target_id,
                    "relationship": pair.relationship,
                    "description": pair.description,
                }
                for pair in self.pairs
            ],
        }


def freeze_mapping(data: Mapping[str, Any]) -> Mapping[str, Any]:
    """Return a read-only view over a copy of data."""
    return MappingProxyType(dict(data))
