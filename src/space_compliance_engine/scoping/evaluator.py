"""Scoping decision-tree evaluator.

Evaluates a questionnaire against the full current answer set:
1. Walk the questions strictly in declaration order
2. Skip questions whose visibility condition does not hold against the
   answers of questions already shown in this pass
3. Stop at the first answer matching its question's out-of-scope trigger
4. Stop at the first visible question without an answer (incomplete)
5. Otherwise return an in-scope verdict with the classification inputs

The verdict is recomputed from scratch on every call, so revising an earlier
answer never leaves stale state behind. Questions after a terminating answer
are never evaluated; their answers are not even validated.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from space_compliance_engine.errors import ValidationError
from space_compliance_engine.observability import get_logger
from space_compliance_engine.scoping.questions import AnswerValue, Question, Questionnaire

logger = get_logger(__name__)


class ScopingOutcome(StrEnum):
    """Terminal state of one scoping evaluation."""

    IN_SCOPE = "in_scope"
    OUT_OF_SCOPE = "out_of_scope"
    INCOMPLETE = "incomplete"


@dataclass(frozen=True)
class ScopingVerdict:
    """Result of evaluating a questionnaire.

    Attributes:
        framework: Framework the questionnaire belongs to.
        outcome: In scope, out of scope or incomplete.
        reason: Out-of-scope message, or None.
        detail: Out-of-scope explanation, or None.
        triggered_by: Id of the question whose answer ended scoping.
        pending_question_id: First unanswered visible question when incomplete.
        evaluated_question_ids: Questions evaluated, in order.
        classification_inputs: Answers to the evaluated questions when in scope.
    """

    framework: str
    outcome: ScopingOutcome
    reason: str | None = None
    detail: str | None = None
    triggered_by: str | None = None
    pending_question_id: str | None = None
    evaluated_question_ids: tuple[str, ...] = ()
    classification_inputs: Mapping[str, AnswerValue] = field(default_factory=dict)

    @property
    def in_scope(self) -> bool:
        return self.outcome == ScopingOutcome.IN_SCOPE

    def to_dict(self) -> dict[str, Any]:
        return {
            "framework": self.framework,
            "outcome": str(self.outcome),
            "in_scope": self.in_scope,
            "reason": self.reason,
            "detail": self.detail,
            "triggered_by": self.triggered_by,
            "pending_question_id": self.pending_question_id,
            "evaluated_question_ids": list(self.evaluated_question_ids),
            "classification_inputs": dict(self.classification_inputs),
        }


def _check_answer_keys(questionnaire: Questionnaire, answers: Mapping[str, Any]) -> None:
    unknown = sorted(set(answers) - questionnaire.question_ids)
    if unknown:
        raise ValidationError(
            f"Unknown question id(s) for {questionnaire.framework}: {', '.join(unknown)}"
        )


def evaluate_scoping(
    questionnaire: Questionnaire,
    answers: Mapping[str, AnswerValue],
) -> ScopingVerdict:
    """Evaluate a questionnaire against the current answers.

    Args:
        questionnaire: Ordered questions for one framework.
        answers: Current answers keyed by question id.

    Returns:
        ScopingVerdict. Out of scope at step k means no question after k was evaluated.

    Raises:
        ValidationError: If an answer key is unknown or an evaluated answer is
            not one of its question's options.
    """
    _check_answer_keys(questionnaire, answers)
    current = dict(answers)
    framework = str(questionnaire.framework)
    evaluated: list[str] = []
    # Answers of questions already evaluated in this pass; hidden answers never count.
    shown: dict[str, AnswerValue] = {}

    for question in questionnaire.questions:
        if not question.is_visible(shown):
            continue
        evaluated.append(question.id)

        if question.id not in current:
            return ScopingVerdict(
                framework=framework,
                outcome=ScopingOutcome.INCOMPLETE,
                pending_question_id=question.id,
                evaluated_question_ids=tuple(evaluated),
            )

        value = current[question.id]
        if not question.accepts(value):
            raise ValidationError(f"Answer {value!r} is not an option of question '{question.id}'")
        shown[question.id] = value

        if question.triggers_out_of_scope(value):
            logger.info(
                "Scoping ended out of scope",
                framework=framework,
                question_id=question.id,
                step=len(evaluated),
            )
            return ScopingVerdict(
                framework=framework,
                outcome=ScopingOutcome.OUT_OF_SCOPE,
                reason=question.out_of_scope.message,
                detail=question.out_of_scope.detail,
                triggered_by=question.id,
                evaluated_question_ids=tuple(evaluated),
            )

    return ScopingVerdict(
        framework=framework,
        outcome=ScopingOutcome.IN_SCOPE,
        evaluated_question_ids=tuple(evaluated),
        classification_inputs={question_id: current[question_id] for question_id in evaluated},
    )


def visible_questions(
    questionnaire: Questionnaire,
    answers: Mapping[str, AnswerValue],
) -> list[Question]:
    """Return the questions shown for the current answers, in order.

    A question's visibility only depends on answers to questions that are
    themselves shown, so a stale answer below a hidden question is ignored.
    """
    shown: dict[str, AnswerValue] = {}
    visible: list[Question] = []
    for question in questionnaire.questions:
        if not question.is_visible(shown):
            continue
        visible.append(question)
        if question.id in answers:
            shown[question.id] = answers[question.id]
    return visible


def total_questions(questionnaire: Questionnaire, answers: Mapping[str, AnswerValue]) -> int:
    """Return how many questions are shown for the current answers."""
    return len(visible_questions(questionnaire, answers))


def next_question(
    questionnaire: Questionnaire,
    answers: Mapping[str, AnswerValue],
) -> Question | None:
    """Return the next question to ask, or None once scoping has a terminal verdict."""
    verdict = evaluate_scoping(questionnaire, answers)
    if verdict.outcome != ScopingOutcome.INCOMPLETE:
        return None
    return questionnaire.question(verdict.pending_question_id)
