"""Scoping decision trees.

Public API:
- get_questionnaire: ordered questions for a framework
- evaluate_scoping: strict, early-exit evaluation of the current answers
- profile_from_eu_scoping / apply_nis2_scoping: intake into an OperatorProfile
"""

from space_compliance_engine.scoping.evaluator import (
    ScopingOutcome,
    ScopingVerdict,
    evaluate_scoping,
    next_question,
    total_questions,
    visible_questions,
)
from space_compliance_engine.scoping.intake import apply_nis2_scoping, profile_from_eu_scoping
from space_compliance_engine.scoping.questions import (
    Question,
    Questionnaire,
    get_questionnaire,
    has_questionnaire,
)

__all__ = [
    "Question",
    "Questionnaire",
    "ScopingOutcome",
    "ScopingVerdict",
    "apply_nis2_scoping",
    "evaluate_scoping",
    "get_questionnaire",
    "has_questionnaire",
    "next_question",
    "profile_from_eu_scoping",
    "total_questions",
    "visible_questions",
]
