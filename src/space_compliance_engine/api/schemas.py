"""Pydantic request and response schemas for the compliance engine API.

Requests carry the operator profile as a raw object; it is validated by
OperatorProfile.parse so that profile errors surface as the engine's
ValidationError (HTTP 422) with a single readable message.

Resources:
- Framework: catalog metadata
- Scoping: questionnaire definitions and verdicts
- Assessment: per-framework and unified assessments
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from space_compliance_engine.core.models import ComplianceStatus, RequirementStatus

AnswerValueField = str | bool | int


# ---------------------------------------------------------------------------
# Framework schemas
# ---------------------------------------------------------------------------


class FrameworkResponse(BaseModel):
    """Catalog metadata for one framework."""

    code: str = Field(description="Framework code")
    name: str = Field(description="Short framework name")
    full_name: str = Field(description="Full legal title")
    issuing_body: str = Field(description="Legislator or authority issuing the framework")
    version: str = Field(description="Catalog document version")
    requirement_count: int = Field(description="Leaf requirements in the catalog")
    mandatory_count: int = Field(description="Mandatory leaf requirements")
    categories: list[str] = Field(description="Scoring categories or authorities, in weight-table order")
    has_questionnaire: bool = Field(description="Whether a scoping questionnaire exists")


class FrameworkListResponse(BaseModel):
    frameworks: list[FrameworkResponse]


# ---------------------------------------------------------------------------
# Scoping schemas
# ---------------------------------------------------------------------------


class ScopingAnswersRequest(BaseModel):
    """Current questionnaire answers keyed by question id."""

    answers: dict[str, AnswerValueField] = Field(
        default_factory=dict,
        description="Answers keyed by question id. Re-send the full set on every change.",
    )


class QuestionnaireResponse(BaseModel):
    """All questions of a framework questionnaire in declaration order."""

    framework: str
    questions: list[dict[str, Any]] = Field(description="Question definitions with options and conditions")


class ScopingVerdictResponse(BaseModel):
    """Scoping verdict plus navigation hints for the questionnaire UI."""

    framework: str
    outcome: str = Field(description="in_scope | out_of_scope | incomplete")
    in_scope: bool
    reason: str | None = None
    detail: str | None = None
    triggered_by: str | None = None
    pending_question_id: str | None = None
    evaluated_question_ids: list[str] = Field(default_factory=list)
    classification_inputs: dict[str, AnswerValueField] = Field(default_factory=dict)
    visible_question_ids: list[str] = Field(default_factory=list)
    total_questions: int = Field(description="Questions shown for the current answers")
    next_question: dict[str, Any] | None = Field(default=None, description="Next question to ask, if any")


# ---------------------------------------------------------------------------
# Assessment schemas
# ---------------------------------------------------------------------------


class StatusInput(BaseModel):
    """Current status of one requirement."""

    requirement_id: str = Field(min_length=1)
    status: ComplianceStatus
    assessment_id: str | None = Field(
        default=None,
        description="Owning assessment; defaults to the request's assessment_id",
    )
    evidence_notes: str = ""
    updated_at: datetime | None = None

    def to_status(self, assessment_id: str) -> RequirementStatus:
        return RequirementStatus(
            assessment_id=self.assessment_id if self.assessment_id is not None else assessment_id,
            requirement_id=self.requirement_id,
            status=self.status,
            evidence_notes=self.evidence_notes,
            updated_at=self.updated_at,
        )


class AssessmentRequest(BaseModel):
    """Request body for a single-framework assessment."""

    profile: dict[str, Any] = Field(description="Operator profile fields")
    assessment_id: str = Field(default="", description="Assessment the statuses belong to")
    statuses: list[StatusInput] = Field(default_factory=list)
    scoping_answers: dict[str, AnswerValueField] | None = Field(
        default=None,
        description="Questionnaire answers; an out-of-scope verdict skips scoring",
    )

    def requirement_statuses(self) -> list[RequirementStatus]:
        return [status.to_status(self.assessment_id) for status in self.statuses]


class UnifiedAssessmentRequest(BaseModel):
    """Request body for assessing every framework at once."""

    profile: dict[str, Any] = Field(description="Operator profile fields")
    assessment_id: str = ""
    statuses: list[StatusInput] = Field(default_factory=list)
    scoping_answers: dict[str, dict[str, AnswerValueField]] = Field(
        default_factory=dict,
        description="Questionnaire answers keyed by framework code",
    )
    frameworks: list[str] | None = Field(default=None, description="Frameworks to assess; defaults to all")
    licensing_preferences: dict[str, Any] = Field(
        default_factory=dict,
        description="National licensing preferences; interested_jurisdictions drives the comparison",
    )

    def requirement_statuses(self) -> list[RequirementStatus]:
        return [status.to_status(self.assessment_id) for status in self.statuses]


class ClassificationResponse(BaseModel):
    framework: str
    label: str
    reason: str
    article_ref: str = ""


class CategoryScoreResponse(BaseModel):
    score: float
    weight: float
    weighted_score: float
    applicable_count: int
    compliant_count: int


class ScoringResponse(BaseModel):
    overall: float = Field(description="Overall score 0-100")
    grade: str
    status: str
    mandatory_score: float
    risk_level: str = Field(description="low | medium | high | critical")
    breakdown: dict[str, CategoryScoreResponse]


class GapResponse(BaseModel):
    requirement_id: str
    article_ref: str
    title: str
    category: str
    severity: str
    status: str
    priority: str = Field(description="critical | high | medium | low")
    priority_rank: int
    description: str
    recommendation: str
    estimated_effort: str
    effort_weeks: float


class ApplicableRequirementResponse(BaseModel):
    sequence_number: int
    requirement_id: str
    article_ref: str
    title: str
    category: str
    display_category: str
    mandatory: bool
    status: str


class FrameworkAssessmentResponse(BaseModel):
    """Result of assessing one framework."""

    framework: str
    framework_name: str
    catalog_version: str
    in_scope: bool
    classification: ClassificationResponse
    constellation_tier: ClassificationResponse
    scoping: dict[str, Any] | None = None
    applicable_count: int
    applicable: list[ApplicableRequirementResponse]
    status_counts: dict[str, int]
    scoring: ScoringResponse | None = None
    gaps: list[GapResponse]


class JurisdictionScoreResponse(BaseModel):
    code: str
    name: str
    score: int = Field(description="Fit score 0-100")
    pros: list[str]
    cons: list[str]


class NationalComparisonResponse(BaseModel):
    """Ranked national licensing regimes, best first."""

    analyzed_count: int
    recommended_jurisdiction: str | None = None
    recommended_jurisdiction_name: str | None = None
    recommendation_reason: str
    scores: list[JurisdictionScoreResponse]


class UnifiedSummaryResponse(BaseModel):
    total_requirements: int
    unified_risk: str
    immediate_actions: list[str]
    frameworks_in_scope: list[str]
    framework_risks: dict[str, str | None]
    estimated_months: int
    overlap: list[dict[str, Any]]
    potential_savings_weeks: float
    national_comparison: NationalComparisonResponse | None = None


class UnifiedAssessmentResponse(BaseModel):
    assessments: list[FrameworkAssessmentResponse]
    summary: UnifiedSummaryResponse


# ---------------------------------------------------------------------------
# Report schemas
# ---------------------------------------------------------------------------


class FrameworkReportRequest(AssessmentRequest):
    """Request body for a framework assessment report."""

    framework: str = Field(description="Framework code")
    subject: str = Field(min_length=1, description="Organisation the report is about")


class UnifiedReportRequest(UnifiedAssessmentRequest):
    """Request body for a unified compliance profile report."""

    subject: str = Field(min_length=1, description="Organisation the report is about")
