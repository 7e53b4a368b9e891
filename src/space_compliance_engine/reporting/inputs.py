"""Validated inputs for the regulator-facing notification reports.

The framework and unified reports are built from engine results. Incident,
annual compliance and significant-change reports are built from operator
records supplied by external collaborators; these models validate that
input before it reaches the assembler.
"""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class _Input(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class ImpactLevel(StrEnum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ChangeType(StrEnum):
    """Kinds of significant change to an authorized operation."""

    OWNERSHIP_TRANSFER = "ownership_transfer"
    MISSION_MODIFICATION = "mission_modification"
    TECHNICAL_CHANGE = "technical_change"
    OPERATIONAL_CHANGE = "operational_change"
    ORBITAL_CHANGE = "orbital_change"
    END_OF_LIFE_UPDATE = "end_of_life_update"
    INSURANCE_CHANGE = "insurance_change"
    CONTACT_CHANGE = "contact_change"
    OTHER = "other"


class AffectedAsset(_Input):
    name: str = Field(min_length=1)
    cospar_id: str | None = None
    norad_id: str | None = None


class ContactDetails(_Input):
    """Designated regulatory contact."""

    name: str | None = None
    role: str | None = None
    email: str | None = None
    phone: str | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.name or self.email)


# ---------------------------------------------------------------------------
# Incident report
# ---------------------------------------------------------------------------


class IncidentReportData(_Input):
    """Incident notification to a national competent authority."""

    incident_number: str = Field(min_length=1)
    organization: str = Field(min_length=1)
    title: str
    category: str
    category_description: str = ""
    severity: str
    status: str
    article_ref: str = ""

    detected_at: datetime
    detected_by: str
    detection_method: str
    contained_at: datetime | None = None
    resolved_at: datetime | None = None

    description: str
    root_cause: str | None = None
    impact_assessment: str | None = None

    affected_assets: tuple[AffectedAsset, ...] = ()

    immediate_actions: tuple[str, ...] = ()
    containment_measures: tuple[str, ...] = ()
    resolution_steps: tuple[str, ...] = ()
    lessons_learned: str | None = None

    requires_authority_notification: bool = False
    notification_deadline_hours: int = Field(default=24, ge=1)
    reported_to_authority: bool = False
    authority_report_date: datetime | None = None
    authority_reference: str | None = None

    contact: ContactDetails = Field(default_factory=ContactDetails)


# ---------------------------------------------------------------------------
# Annual compliance report
# ---------------------------------------------------------------------------


class OperatorDetails(_Input):
    legal_name: str
    primary_authority: str
    registration_number: str | None = None
    address: str | None = None
    authorization_number: str | None = None
    authorization_date: datetime | None = None


class FleetOverview(_Input):
    total_spacecraft: int = Field(ge=0)
    active_spacecraft: int = Field(ge=0)
    decommissioned: int = Field(default=0, ge=0)
    orbital_regime: str
    mission_types: tuple[str, ...] = ()


class AreaCompliance(_Input):
    """Compliance flag for one regulatory area, e.g. debris mitigation."""

    area: str
    compliant: bool
    notes: str = ""


class IncidentCounts(_Input):
    critical: int = Field(default=0, ge=0)
    high: int = Field(default=0, ge=0)
    medium: int = Field(default=0, ge=0)
    low: int = Field(default=0, ge=0)
    resolved: int = Field(default=0, ge=0)
    authority_notifications: int = Field(default=0, ge=0)

    @property
    def total(self) -> int:
        return self.critical + self.high + self.medium + self.low


class AnnualComplianceData(_Input):
    """Annual compliance report to the primary national competent authority."""

    report_year: str = Field(min_length=4)
    organization: str = Field(min_length=1)
    operator_type: str
    operator: OperatorDetails
    fleet: FleetOverview
    overall_score: float = Field(ge=0, le=100)
    areas: tuple[AreaCompliance, ...] = ()
    incidents: IncidentCounts = Field(default_factory=IncidentCounts)
    planned_activities: tuple[str, ...] = ()
    contact: ContactDetails = Field(default_factory=ContactDetails)


# ---------------------------------------------------------------------------
# Significant change report
# ---------------------------------------------------------------------------


class StateField(_Input):
    field: str
    value: str


class ImpactAssessment(_Input):
    safety: ImpactLevel = ImpactLevel.NONE
    debris: ImpactLevel = ImpactLevel.NONE
    third_party: ImpactLevel = ImpactLevel.NONE
    regulatory: ImpactLevel = ImpactLevel.NONE


class SignificantChangeData(_Input):
    """Notification of a significant change to an authorized operation."""

    notification_number: str = Field(min_length=1)
    organization: str = Field(min_length=1)
    authorization_number: str
    authorization_date: datetime | None = None
    primary_authority: str

    change_type: ChangeType
    change_title: str
    change_description: str
    justification: str
    effective_date: datetime

    current_state: tuple[StateField, ...] = ()
    proposed_state: tuple[StateField, ...] = ()

    impact: ImpactAssessment = Field(default_factory=ImpactAssessment)
    impact_description: str | None = None
    mitigation_measures: tuple[str, ...] = ()

    affected_spacecraft: tuple[AffectedAsset, ...] = ()
