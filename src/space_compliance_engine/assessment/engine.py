"""Assessment engine: orchestrates one framework assessment end to end.

The engine processes an assessment request by:
1. Evaluating the scoping questionnaire, when answers are supplied
2. Resolving the applicable requirements from the catalog
3. Classifying the profile under the framework's rule set
4. Resolving the current status of every applicable requirement
5. Scoring categories and computing the risk level
6. Producing the prioritized gap list

Every step is a pure function of (profile, catalog, statuses). An
out-of-scope verdict at step 1 or 3 ends the run without a ScoringResult.
The engine holds only the immutable catalog and settings, so one instance
can serve any number of concurrent requests.
"""

import time
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from space_compliance_engine.assessment.applicability import resolve_for_profile
from space_compliance_engine.assessment.classification import classify, classify_constellation
from space_compliance_engine.assessment.gaps import GapPolicy, analyze_gaps
from space_compliance_engine.assessment.jurisdictions import JurisdictionComparison, compare_jurisdictions
from space_compliance_engine.assessment.scoring import score_requirements
from space_compliance_engine.catalog.inventory import RequirementCatalog, load_catalog
from space_compliance_engine.core.models import (
    OUT_OF_SCOPE,
    ApplicableRequirement,
    ClassificationResult,
    ComplianceStatus,
    Framework,
    GapRecord,
    LicensingPreferences,
    OperatorProfile,
    RequirementStatus,
    RiskLevel,
    ScoringResult,
    freeze_mapping,
)
from space_compliance_engine.errors import NotFoundError, ValidationError
from space_compliance_engine.observability import get_logger
from space_compliance_engine.scoping.evaluator import ScopingOutcome, ScopingVerdict, evaluate_scoping
from space_compliance_engine.scoping.questions import AnswerValue, get_questionnaire, has_questionnaire
from space_compliance_engine.settings import Settings, get_settings

logger = get_logger(__name__)


@dataclass(frozen=True)
class FrameworkAssessment:
    """Result of assessing one profile under one framework.

    Attributes:
        framework: Framework code.
        framework_name: Human-readable framework name.
        catalog_version: Version of the catalog document used.
        classification: Regime or tier label with its justification.
        constellation_tier: Constellation size tier of the profile.
        scoping: Scoping verdict when answers were supplied.
        applicable: Applicable requirements in declaration order.
        statuses: Resolved status per applicable requirement.
        scoring: Score and risk; None when out of scope.
        gaps: Prioritized gap list; empty when out of scope.
    """

    framework: str
    framework_name: str
    catalog_version: str
    classification: ClassificationResult
    constellation_tier: ClassificationResult
    scoping: ScopingVerdict | None = None
    applicable: tuple[ApplicableRequirement, ...] = ()
    statuses: Mapping[str, ComplianceStatus] = field(default_factory=dict)
    scoring: ScoringResult | None = None
    gaps: tuple[GapRecord, ...] = ()

    @property
    def in_scope(self) -> bool:
        return self.scoring is not None

    @property
    def risk_level(self) -> RiskLevel | None:
        return self.scoring.risk_level if self.scoring is not None else None

    @property
    def applicable_ids(self) -> list[str]:
        return [item.id for item in self.applicable]

    def status_counts(self) -> dict[str, int]:
        """Count resolved statuses across the applicable requirements."""
        counts = {str(status): 0 for status in ComplianceStatus}
        for status in self.statuses.values():
            counts[str(status)] += 1
        return counts

    def to_dict(self) -> dict[str, Any]:
        return {
            "framework": self.framework,
            "framework_name": self.framework_name,
            "catalog_version": self.catalog_version,
            "in_scope": self.in_scope,
            "classification": self.classification.to_dict(),
            "constellation_tier": self.constellation_tier.to_dict(),
            "scoping": self.scoping.to_dict() if self.scoping is not None else None,
            "applicable_count": len(self.applicable),
            "applicable": [
                {
                    "sequence_number": item.sequence_number,
                    "requirement_id": item.id,
                    "article_ref": item.record.article_ref,
                    "title": item.record.title,
                    "category": item.record.category,
                    "display_category": item.display_category,
                    "mandatory": item.record.mandatory,
                    "status": str(self.statuses.get(item.id, ComplianceStatus.NOT_STARTED)),
                }
                for item in self.applicable
            ],
            "status_counts": self.status_counts(),
            "scoring": self.scoring.to_dict() if self.scoring is not None else None,
            "gaps": [gap.to_dict() for gap in self.gaps],
        }


def resolve_statuses(
    assessment_id: str,
    applicable: Sequence[ApplicableRequirement],
    statuses: Iterable[RequirementStatus],
    catalog: RequirementCatalog,
) -> dict[str, ComplianceStatus]:
    """Resolve exactly one current status per applicable requirement.

    Args:
        assessment_id: Assessment the statuses must belong to.
        applicable: Applicable requirements of the framework being assessed.
        statuses: Status records from the storage layer, any framework.
        catalog: Catalog used to reject unknown requirement ids.

    Returns:
        Status per applicable requirement id; requirements without a record
        default to not_started. When several records exist for one
        requirement the most recently updated wins; records without a
        timestamp are treated as oldest and later input wins ties.

    Raises:
        ValidationError: If a record belongs to a different assessment.
        NotFoundError: If a record references a requirement absent from the catalog.
    """
    applicable_ids = {item.id for item in applicable}
    latest: dict[str, RequirementStatus] = {}
    for status in statuses:
        if status.assessment_id != assessment_id:
            raise ValidationError(
                f"Status for '{status.requirement_id}' belongs to assessment "
                f"'{status.assessment_id}', not '{assessment_id}'"
            )
        if status.requirement_id not in catalog:
            raise NotFoundError("Requirement", status.requirement_id)
        if status.requirement_id not in applicable_ids:
            continue
        current = latest.get(status.requirement_id)
        if current is None:
            latest[status.requirement_id] = status
            continue
        logger.warning(
            "Duplicate status records for requirement, keeping the most recent",
            assessment_id=assessment_id,
            requirement_id=status.requirement_id,
        )
        if current.updated_at is None or (
            status.updated_at is not None and status.updated_at >= current.updated_at
        ):
            latest[status.requirement_id] = status

    return {
        item.id: latest[item.id].status if item.id in latest else ComplianceStatus.NOT_STARTED
        for item in applicable
    }


class AssessmentEngine:
    """Framework assessment orchestrator.

    Args:
        catalog: Immutable requirement catalog, loaded once at startup.
        settings: Service settings; defaults to the process settings.
    """

    def __init__(self, catalog: RequirementCatalog, settings: Settings | None = None) -> None:
        self._catalog = catalog
        self._settings = settings or get_settings()
        self._gap_policy = GapPolicy.from_settings(self._settings.partial_ranks_with_non_compliant)

    @property
    def catalog(self) -> RequirementCatalog:
        return self._catalog

    @property
    def settings(self) -> Settings:
        return self._settings

    def evaluate_scoping(self, framework: str, answers: Mapping[str, AnswerValue]) -> ScopingVerdict:
        """Evaluate a framework's scoping questionnaire.

        Raises:
            NotFoundError: If the framework has no questionnaire.
        """
        return evaluate_scoping(get_questionnaire(framework), answers)

    def compare_jurisdictions(self, preferences: LicensingPreferences) -> JurisdictionComparison:
        """Rank the national licensing regimes the operator is interested in.

        Raises:
            ValidationError: If a selected jurisdiction has no licensing entry.
        """
        return compare_jurisdictions(preferences, self._catalog.jurisdictions)

    def assess(
        self,
        framework: str,
        profile: OperatorProfile,
        statuses: Iterable[RequirementStatus] = (),
        assessment_id: str = "",
        scoping_answers: Mapping[str, AnswerValue] | None = None,
    ) -> FrameworkAssessment:
        """Assess a profile under one framework.

        Args:
            framework: Framework code.
            profile: Validated operator profile.
            statuses: Current status records for the assessment.
            assessment_id: Assessment the statuses belong to.
            scoping_answers: Questionnaire answers; when given for a framework
                with a questionnaire, an out-of-scope verdict ends the run.

        Returns:
            FrameworkAssessment. scoring is None when out of scope.

        Raises:
            NotFoundError: If the framework is unknown.
            ValidationError: If scoping answers are incomplete or invalid, or
                a status belongs to another assessment.
            ComputationError: If the catalog cannot be scored.
        """
        start_time = time.monotonic()
        catalog = self._catalog.framework(framework)
        code = str(catalog.code)
        constellation_tier = classify_constellation(profile)

        logger.info(
            "Starting framework assessment",
            framework=code,
            assessment_id=assessment_id,
            operator_types=sorted(str(t) for t in profile.operator_types),
        )

        verdict: ScopingVerdict | None = None
        if scoping_answers is not None and has_questionnaire(code):
            verdict = evaluate_scoping(get_questionnaire(code), scoping_answers)
            if verdict.outcome == ScopingOutcome.INCOMPLETE:
                raise ValidationError(
                    f"Scoping for {code} is incomplete: question '{verdict.pending_question_id}' is unanswered"
                )
            if verdict.outcome == ScopingOutcome.OUT_OF_SCOPE:
                logger.info("Framework out of scope after scoping", framework=code, reason=verdict.reason)
                return FrameworkAssessment(
                    framework=code,
                    framework_name=catalog.name,
                    catalog_version=catalog.version,
                    classification=ClassificationResult(
                        framework=code,
                        label=OUT_OF_SCOPE,
                        reason=verdict.reason or "",
                        article_ref="",
                    ),
                    constellation_tier=constellation_tier,
                    scoping=verdict,
                )

        classification = classify(code, profile)
        if not classification.in_scope:
            logger.info("Framework out of scope after classification", framework=code, reason=classification.reason)
            return FrameworkAssessment(
                framework=code,
                framework_name=catalog.name,
                catalog_version=catalog.version,
                classification=classification,
                constellation_tier=constellation_tier,
                scoping=verdict,
            )

        applicable = resolve_for_profile(catalog.root, profile)
        resolved = resolve_statuses(assessment_id, applicable, statuses, self._catalog)
        scoring = score_requirements(applicable, resolved, catalog.weights)
        gaps = analyze_gaps(applicable, resolved, self._catalog.remediation, self._gap_policy)

        duration_ms = round((time.monotonic() - start_time) * 1000, 2)
        logger.info(
            "Framework assessment complete",
            framework=code,
            assessment_id=assessment_id,
            classification=classification.label,
            applicable_count=len(applicable),
            overall_score=scoring.overall,
            risk_level=str(scoring.risk_level),
            gap_count=len(gaps),
            duration_ms=duration_ms,
        )
        return FrameworkAssessment(
            framework=code,
            framework_name=catalog.name,
            catalog_version=catalog.version,
            classification=classification,
            constellation_tier=constellation_tier,
            scoping=verdict,
            applicable=tuple(applicable),
            statuses=freeze_mapping(resolved),
            scoring=scoring,
            gaps=tuple(gaps),
        )

    def assess_all(
        self,
        profile: OperatorProfile,
        statuses: Iterable[RequirementStatus] = (),
        assessment_id: str = "",
        scoping_answers: Mapping[str, Mapping[str, AnswerValue]] | None = None,
        frameworks: Iterable[str] | None = None,
    ) -> list[FrameworkAssessment]:
        """Assess a profile under several frameworks independently.

        Args:
            profile: Validated operator profile.
            statuses: Status records spanning any of the frameworks.
            assessment_id: Assessment the statuses belong to.
            scoping_answers: Questionnaire answers keyed by framework code.
            frameworks: Frameworks to assess; defaults to every loaded framework.

        Returns:
            One FrameworkAssessment per framework, in canonical framework order.

        Raises:
            NotFoundError: If a requested framework is unknown.
        """
        status_list = list(statuses)
        answers_by_framework = scoping_answers or {}
        requested = list(frameworks) if frameworks is not None else self._catalog.frameworks()
        for code in requested:
            self._catalog.framework(code)
        ordered = [code for code in Framework if code in requested]
        return [
            self.assess(
                code,
                profile,
                status_list,
                assessment_id,
                answers_by_framework.get(code),
            )
            for code in ordered
        ]


def create_default_engine(settings: Settings | None = None) -> AssessmentEngine:
    """Create an AssessmentEngine over the configured catalog.

    Args:
        settings: Service settings; defaults to the process settings.

    Returns:
        AssessmentEngine with the catalog loaded from settings.catalog_dir,
        or the bundled catalog when unset.
    """
    settings = settings or get_settings()
    catalog = load_catalog(settings.catalog_dir, settings.weight_tolerance)
    return AssessmentEngine(catalog, settings)
