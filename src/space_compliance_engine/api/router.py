"""API router for the space compliance engine.

All endpoints are registered here and included in main.py under the /api/v1
prefix. Routes are thin: validation and computation live in the engine
packages, and engine errors are translated to HTTP by the exception
handlers registered in main.py.

Endpoints:
- GET   /frameworks                            - Catalog metadata
- GET   /scoping/{framework}/questions         - Questionnaire definition
- POST  /scoping/{framework}/evaluate          - Scoping verdict for the current answers
- POST  /assessments/unified                   - Assess every framework plus a unified summary
- POST  /assessments/{framework}               - Assess one framework
- POST  /reports/framework-assessment          - Framework assessment report
- POST  /reports/unified-profile               - Unified compliance profile report
- POST  /reports/incident                      - Incident notification report
- POST  /reports/annual-compliance             - Annual compliance report
- POST  /reports/significant-change            - Significant change notification report
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from space_compliance_engine.api.schemas import (
    AssessmentRequest,
    FrameworkAssessmentResponse,
    FrameworkListResponse,
    FrameworkReportRequest,
    FrameworkResponse,
    QuestionnaireResponse,
    ScopingAnswersRequest,
    ScopingVerdictResponse,
    UnifiedAssessmentRequest,
    UnifiedAssessmentResponse,
    UnifiedReportRequest,
    UnifiedSummaryResponse,
)
from space_compliance_engine.assessment.engine import AssessmentEngine
from space_compliance_engine.core.models import LicensingPreferences, OperatorProfile
from space_compliance_engine.observability import get_logger
from space_compliance_engine.reporting.aggregator import aggregate
from space_compliance_engine.reporting.assembler import (
    build_annual_compliance_report,
    build_framework_report,
    build_incident_report,
    build_significant_change_report,
    build_unified_report,
)
from space_compliance_engine.reporting.blocks import Report
from space_compliance_engine.reporting.inputs import (
    AnnualComplianceData,
    IncidentReportData,
    SignificantChangeData,
)
from space_compliance_engine.reporting.rendering import RenderFailure, render_report
from space_compliance_engine.scoping.evaluator import next_question, visible_questions
from space_compliance_engine.scoping.questions import get_questionnaire, has_questionnaire
from space_compliance_engine.settings import Settings

logger = get_logger(__name__)

router = APIRouter(tags=["compliance"])


# ---------------------------------------------------------------------------
# Dependency factories: shared objects stored on app.state by the lifespan
# ---------------------------------------------------------------------------


def get_engine(request: Request) -> AssessmentEngine:
    """Return the process-wide AssessmentEngine.

    Args:
        request: Incoming request, used to reach app.state.

    Returns:
        The engine created at startup.
    """
    return request.app.state.engine


def get_service_settings(request: Request) -> Settings:
    """Return the settings the application was started with."""
    return request.app.state.settings


async def _render(report: Report, settings: Settings) -> Response:
    outcome = await render_report(report, settings=settings)
    if not outcome.ok:
        status_code = 504 if outcome.failure == RenderFailure.TIMEOUT else 500
        return JSONResponse(
            status_code=status_code,
            content={"error": "RenderFailure", "failure": str(outcome.failure), "detail": outcome.detail},
        )
    return Response(content=outcome.content, media_type=outcome.media_type)


# ---------------------------------------------------------------------------
# Framework endpoints
# ---------------------------------------------------------------------------


@router.get("/frameworks", response_model=FrameworkListResponse)
async def list_frameworks(
    engine: Annotated[AssessmentEngine, Depends(get_engine)],
) -> FrameworkListResponse:
    """List the loaded frameworks with their catalog metadata.

    Args:
        engine: Injected AssessmentEngine.

    Returns:
        Framework metadata in canonical framework order.
    """
    return FrameworkListResponse(
        frameworks=[
            FrameworkResponse(**catalog.to_metadata(), has_questionnaire=has_questionnaire(catalog.code))
            for catalog in engine.catalog
        ]
    )


# ---------------------------------------------------------------------------
# Scoping endpoints
# ---------------------------------------------------------------------------


@router.get("/scoping/{framework}/questions", response_model=QuestionnaireResponse)
async def get_scoping_questions(framework: str) -> QuestionnaireResponse:
    """Return every question of a framework questionnaire.

    Args:
        framework: Framework code.

    Returns:
        Questions in declaration order, with their visibility conditions.
    """
    questionnaire = get_questionnaire(framework)
    return QuestionnaireResponse(
        framework=str(questionnaire.framework),
        questions=[question.to_dict() for question in questionnaire.questions],
    )


@router.post("/scoping/{framework}/evaluate", response_model=ScopingVerdictResponse)
async def evaluate_scoping_answers(
    framework: str,
    request: ScopingAnswersRequest,
    engine: Annotated[AssessmentEngine, Depends(get_engine)],
) -> ScopingVerdictResponse:
    """Evaluate the current questionnaire answers.

    The verdict is recomputed from the full answer set on every call.

    Args:
        framework: Framework code.
        request: Current answers.
        engine: Injected AssessmentEngine.

    Returns:
        The verdict plus the visible questions and the next question to ask.
    """
    logger.info("POST /scoping/evaluate", framework=framework, answer_count=len(request.answers))
    verdict = engine.evaluate_scoping(framework, request.answers)
    questionnaire = get_questionnaire(framework)
    visible = visible_questions(questionnaire, request.answers)
    pending = next_question(questionnaire, request.answers)
    return ScopingVerdictResponse(
        **verdict.to_dict(),
        visible_question_ids=[question.id for question in visible],
        total_questions=len(visible),
        next_question=pending.to_dict() if pending is not None else None,
    )


# ---------------------------------------------------------------------------
# Assessment endpoints
# ---------------------------------------------------------------------------


@router.post("/assessments/unified", response_model=UnifiedAssessmentResponse)
async def assess_unified(
    request: UnifiedAssessmentRequest,
    engine: Annotated[AssessmentEngine, Depends(get_engine)],
    settings: Annotated[Settings, Depends(get_service_settings)],
) -> UnifiedAssessmentResponse:
    """Assess every requested framework and merge the results.

    Args:
        request: Profile, statuses, per-framework scoping answers and
            licensing preferences.
        engine: Injected AssessmentEngine.
        settings: Injected service settings.

    Returns:
        One assessment per framework plus the worst-case unified summary.
    """
    profile = OperatorProfile.parse(request.profile)
    preferences = LicensingPreferences.parse(request.licensing_preferences)
    logger.info("POST /assessments/unified", assessment_id=request.assessment_id)
    assessments = engine.assess_all(
        profile,
        request.requirement_statuses(),
        request.assessment_id,
        request.scoping_answers,
        request.frameworks,
    )
    comparison = engine.compare_jurisdictions(preferences)
    summary = aggregate(assessments, engine.catalog.crosswalk, settings, comparison)
    return UnifiedAssessmentResponse(
        assessments=[FrameworkAssessmentResponse.model_validate(item.to_dict()) for item in assessments],
        summary=UnifiedSummaryResponse.model_validate(summary.to_dict()),
    )


@router.post("/assessments/{framework}", response_model=FrameworkAssessmentResponse)
async def assess_framework(
    framework: str,
    request: AssessmentRequest,
    engine: Annotated[AssessmentEngine, Depends(get_engine)],
) -> FrameworkAssessmentResponse:
    """Assess one framework for a profile.

    Args:
        framework: Framework code.
        request: Profile, statuses and optional scoping answers.
        engine: Injected AssessmentEngine.

    Returns:
        Classification, score, risk and prioritized gaps. scoring is null
        when the profile is out of scope.
    """
    profile = OperatorProfile.parse(request.profile)
    logger.info("POST /assessments", framework=framework, assessment_id=request.assessment_id)
    assessment = engine.assess(
        framework,
        profile,
        request.requirement_statuses(),
        request.assessment_id,
        request.scoping_answers,
    )
    return FrameworkAssessmentResponse.model_validate(assessment.to_dict())


# ---------------------------------------------------------------------------
# Report endpoints
# ---------------------------------------------------------------------------


@router.post("/reports/framework-assessment")
async def create_framework_report(
    request: FrameworkReportRequest,
    engine: Annotated[AssessmentEngine, Depends(get_engine)],
    settings: Annotated[Settings, Depends(get_service_settings)],
) -> Response:
    """Assess one framework and return the assembled report as JSON."""
    profile = OperatorProfile.parse(request.profile)
    assessment = engine.assess(
        request.framework,
        profile,
        request.requirement_statuses(),
        request.assessment_id,
        request.scoping_answers,
    )
    report = build_framework_report(assessment, request.subject, settings=settings)
    return await _render(report, settings)


@router.post("/reports/unified-profile")
async def create_unified_report(
    request: UnifiedReportRequest,
    engine: Annotated[AssessmentEngine, Depends(get_engine)],
    settings: Annotated[Settings, Depends(get_service_settings)],
) -> Response:
    """Assess every framework and return the unified profile report as JSON."""
    profile = OperatorProfile.parse(request.profile)
    preferences = LicensingPreferences.parse(request.licensing_preferences)
    assessments = engine.assess_all(
        profile,
        request.requirement_statuses(),
        request.assessment_id,
        request.scoping_answers,
        request.frameworks,
    )
    comparison = engine.compare_jurisdictions(preferences)
    summary = aggregate(assessments, engine.catalog.crosswalk, settings, comparison)
    report = build_unified_report(profile, assessments, summary, request.subject)
    return await _render(report, settings)


@router.post("/reports/incident")
async def create_incident_report(
    request: IncidentReportData,
    settings: Annotated[Settings, Depends(get_service_settings)],
) -> Response:
    """Return an incident notification report as JSON."""
    return await _render(build_incident_report(request), settings)


@router.post("/reports/annual-compliance")
async def create_annual_compliance_report(
    request: AnnualComplianceData,
    settings: Annotated[Settings, Depends(get_service_settings)],
) -> Response:
    """Return an annual compliance report as JSON."""
    return await _render(build_annual_compliance_report(request), settings)


@router.post("/reports/significant-change")
async def create_significant_change_report(
    request: SignificantChangeData,
    settings: Annotated[Settings, Depends(get_service_settings)],
) -> Response:
    """Return a significant change notification report as JSON."""
    return await _render(build_significant_change_report(request), settings)
