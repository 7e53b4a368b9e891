"""Scoping questionnaires for the frameworks that have an applicability test.

A questionnaire is an ordered tuple of questions. A question may be
conditional (shown only when an earlier answer has a given value) and may
carry an out-of-scope trigger: the answer value that ends the assessment,
with the message and detail shown to the operator.

Only the EU Space Act and NIS2 have scoping questionnaires; the national
regimes are scoped by classification rules alone.
"""

from dataclasses import dataclass
from typing import Any

from space_compliance_engine.core.models import Framework
from space_compliance_engine.errors import NotFoundError

AnswerValue = str | bool | int


def same_value(left: Any, right: Any) -> bool:
    """Compare answer values strictly, so True never equals 1."""
    return type(left) is type(right) and left == right


@dataclass(frozen=True)
class QuestionOption:
    """One selectable answer."""

    value: AnswerValue
    label: str
    description: str = ""


@dataclass(frozen=True)
class ShowWhen:
    """Visibility condition: show the question only when question_id was answered with value."""

    question_id: str
    value: AnswerValue


@dataclass(frozen=True)
class OutOfScopeTrigger:
    """Answer value that ends scoping with an out-of-scope verdict."""

    value: AnswerValue
    message: str
    detail: str = ""


@dataclass(frozen=True)
class Question:
    """A single scoping question.

    Attributes:
        id: Stable question identifier used as the answer key.
        title: Question text.
        options: Allowed answers in display order.
        subtitle: Optional clarification.
        show_when: Visibility condition; None means always shown.
        out_of_scope: Out-of-scope trigger; None means the question never ends scoping.
    """

    id: str
    title: str
    options: tuple[QuestionOption, ...]
    subtitle: str = ""
    show_when: ShowWhen | None = None
    out_of_scope: OutOfScopeTrigger | None = None

    def is_visible(self, answers: dict[str, AnswerValue]) -> bool:
        """Whether the question is shown for the given answers."""
        if self.show_when is None:
            return True
        if self.show_when.question_id not in answers:
            return False
        return same_value(answers[self.show_when.question_id], self.show_when.value)

    def accepts(self, value: Any) -> bool:
        """Whether value is one of the question's option values."""
        return any(same_value(option.value, value) for option in self.options)

    def triggers_out_of_scope(self, value: Any) -> bool:
        """Whether value matches the question's out-of-scope trigger."""
        return self.out_of_scope is not None and same_value(self.out_of_scope.value, value)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "subtitle": self.subtitle,
            "options": [
                {"value": option.value, "label": option.label, "description": option.description}
                for option in self.options
            ],
            "conditional": self.show_when is not None,
            "show_when": (
                {"question_id": self.show_when.question_id, "value": self.show_when.value}
                if self.show_when is not None
                else None
            ),
            "can_end_scoping": self.out_of_scope is not None,
        }


@dataclass(frozen=True)
class Questionnaire:
    """Ordered scoping questions for one framework."""

    framework: Framework
    questions: tuple[Question, ...]

    def question(self, question_id: str) -> Question:
        for question in self.questions:
            if question.id == question_id:
                return question
        raise NotFoundError("Question", question_id)

    @property
    def question_ids(self) -> frozenset[str]:
        return frozenset(question.id for question in self.questions)


def _yes_no(yes_label: str = "Yes", no_label: str = "No") -> tuple[QuestionOption, ...]:
    return (QuestionOption(True, yes_label), QuestionOption(False, no_label))


# ---------------------------------------------------------------------------
# EU Space Act
# ---------------------------------------------------------------------------

EU_SPACE_ACT_QUESTIONS: tuple[Question, ...] = (
    Question(
        id="activity_type",
        title="What is your primary space activity?",
        subtitle="Select the category that best describes your main operations",
        options=(
            QuestionOption("spacecraft", "Spacecraft operation", "Operating satellites or other spacecraft in orbit"),
            QuestionOption("launch", "Launch", "Launching space objects or operating a launch site"),
            QuestionOption("isos", "In-space services", "Servicing, refuelling, debris removal or assembly in orbit"),
            QuestionOption("collision_avoidance", "Collision avoidance", "Providing conjunction assessment services"),
            QuestionOption("data_provider", "Primary data provision", "Distributing primary space-based data"),
        ),
    ),
    Question(
        id="launch_role",
        title="Do you operate the launch vehicle or the launch site?",
        show_when=ShowWhen("activity_type", "launch"),
        options=(
            QuestionOption("launch_vehicle", "Launch vehicle", "You operate the rocket that carries payloads to space"),
            QuestionOption("launch_site", "Launch site", "You operate the spaceport or launch facility"),
        ),
    ),
    Question(
        id="is_defense_only",
        title="Are your space assets used exclusively for defense or national security?",
        subtitle="Dual-use assets (military and commercial) are still covered by the regulation",
        options=_yes_no("Yes, exclusively defense", "No, not exclusively defense"),
        out_of_scope=OutOfScopeTrigger(
            value=True,
            message="Your assets are excluded under Art. 2(3)(a)",
            detail=(
                "Space objects used exclusively for defense or national security purposes are excluded "
                "from the EU Space Act. Dual-use assets serving both military and commercial purposes may "
                "still be covered."
            ),
        ),
    ),
    Question(
        id="has_post_launch_assets",
        title="Will any of your space assets be launched after January 1, 2030?",
        subtitle="The EU Space Act applies to assets launched from this date onwards",
        options=_yes_no("Yes, launching after 2030", "No, all launched before 2030"),
        out_of_scope=OutOfScopeTrigger(
            value=False,
            message="Pre-existing assets are grandfathered under Art. 2(3)(d)",
            detail=(
                "Space objects launched before January 1, 2030 are excluded from the EU Space Act. "
                "Any new launches after this date will be fully in scope."
            ),
        ),
    ),
    Question(
        id="establishment",
        title="Where is your organization established?",
        subtitle="This determines your regulatory pathway under the EU Space Act",
        options=(
            QuestionOption("eu", "EU member state"),
            QuestionOption("third_country_eu_services", "Outside the EU, serving the EU market"),
            QuestionOption("third_country_no_eu", "Outside the EU, no EU market activity"),
        ),
        out_of_scope=OutOfScopeTrigger(
            value="third_country_no_eu",
            message="Out of scope for non-EU operators without EU market activity",
            detail=(
                "The EU Space Act applies to third-country operators only if they provide space services "
                "or space-based data within the EU single market."
            ),
        ),
    ),
    Question(
        id="entity_size",
        title="What best describes your organization?",
        subtitle="Small enterprises and research institutions may qualify for the light regime",
        options=(
            QuestionOption("micro", "Micro enterprise", "Fewer than 10 employees"),
            QuestionOption("small", "Small enterprise", "Fewer than 50 employees"),
            QuestionOption("research", "Research or educational institution"),
            QuestionOption("medium", "Medium enterprise", "Fewer than 250 employees"),
            QuestionOption("large", "Large enterprise", "250 employees or more"),
        ),
    ),
    Question(
        id="operates_constellation",
        title="Do you operate or plan to operate a satellite constellation?",
        subtitle="Constellations have additional requirements based on size",
        options=_yes_no(),
    ),
    Question(
        id="constellation_size",
        title="How many satellites are in your constellation?",
        show_when=ShowWhen("operates_constellation", True),
        options=(
            QuestionOption(5, "2 to 9 satellites"),
            QuestionOption(50, "10 to 99 satellites"),
            QuestionOption(500, "100 to 999 satellites"),
            QuestionOption(1000, "1,000 satellites or more"),
        ),
    ),
    Question(
        id="primary_orbit",
        title="What is the primary orbit for your mission?",
        subtitle="Some requirements vary by orbital regime",
        options=(
            QuestionOption("LEO", "Low Earth orbit"),
            QuestionOption("MEO", "Medium Earth orbit"),
            QuestionOption("GEO", "Geostationary orbit"),
            QuestionOption("beyond", "Beyond Earth orbit"),
        ),
    ),
    Question(
        id="offers_eu_services",
        title="Do you provide space-based services or data within the EU market?",
        options=_yes_no(),
    ),
)


# ---------------------------------------------------------------------------
# NIS2
# ---------------------------------------------------------------------------

NIS2_QUESTIONS: tuple[Question, ...] = (
    Question(
        id="sector",
        title="Which sector best describes your primary activity?",
        options=(
            QuestionOption("space", "Space"),
            QuestionOption("digital_infrastructure", "Digital infrastructure"),
            QuestionOption("transport", "Transport"),
            QuestionOption("other", "Other"),
        ),
    ),
    Question(
        id="space_sub_sector",
        title="What is your primary space activity?",
        show_when=ShowWhen("sector", "space"),
        options=(
            QuestionOption("ground_infrastructure", "Ground infrastructure"),
            QuestionOption("satellite_communications", "Satellite communications"),
            QuestionOption("spacecraft_manufacturing", "Spacecraft manufacturing"),
            QuestionOption("earth_observation", "Earth observation"),
        ),
    ),
    Question(
        id="is_eu_established",
        title="Is your organization established in the EU?",
        options=_yes_no(),
        out_of_scope=OutOfScopeTrigger(
            value=False,
            message="NIS2 primarily applies to EU-established entities",
            detail=(
                "Entities outside the EU fall under NIS2 only through a representative when they offer "
                "services in the Union."
            ),
        ),
    ),
    Question(
        id="entity_size",
        title="What best describes your organization's size?",
        options=(
            QuestionOption("micro", "Micro enterprise"),
            QuestionOption("small", "Small enterprise"),
            QuestionOption("medium", "Medium enterprise"),
            QuestionOption("large", "Large enterprise"),
        ),
    ),
    Question(
        id="member_state_count",
        title="In how many EU member states does your organization operate?",
        options=(
            QuestionOption(1, "One"),
            QuestionOption(3, "Two to five"),
            QuestionOption(8, "More than five"),
        ),
    ),
    Question(
        id="operates_ground_infra",
        title="Do you operate ground-based space infrastructure?",
        options=_yes_no(),
    ),
    Question(
        id="has_iso27001",
        title="Does your organization hold ISO 27001 certification?",
        options=_yes_no(),
    ),
    Question(
        id="has_existing_csirt",
        title="Do you have an established incident response team (CSIRT)?",
        options=_yes_no(),
    ),
)


_QUESTIONNAIRES: dict[Framework, Questionnaire] = {
    Framework.EU_SPACE_ACT: Questionnaire(Framework.EU_SPACE_ACT, EU_SPACE_ACT_QUESTIONS),
    Framework.NIS2: Questionnaire(Framework.NIS2, NIS2_QUESTIONS),
}


def get_questionnaire(framework: str) -> Questionnaire:
    """Return the scoping questionnaire for a framework.

    Args:
        framework: Framework code.

    Returns:
        The Questionnaire.

    Raises:
        NotFoundError: If the framework has no scoping questionnaire.
    """
    questionnaire = _QUESTIONNAIRES.get(framework)
    if questionnaire is None:
        raise NotFoundError("Scoping questionnaire", str(framework))
    return questionnaire


def has_questionnaire(framework: str) -> bool:
    """Whether a framework is scoped through a questionnaire."""
    return framework in _QUESTIONNAIRES
