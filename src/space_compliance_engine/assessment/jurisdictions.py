"""National licensing comparison.

Scores each jurisdiction the operator is interested in against its
licensing preferences and recommends the best fit. Every jurisdiction
starts at BASE_SCORE and the rules below are applied in order:
1. Processing time, only when fast processing is preferred
2. Language of the process, only when English is required
3. NewSpace friendliness, only for start-ups
4. Minimum insurance against the cover already held
5. Licensing complexity
6. Alignment with the EU Space Act

Scores are clamped to [0, 100]. The ranking is stable: equal scores keep
the order in which the jurisdictions were requested.
"""

from dataclasses import dataclass
from typing import Any

from space_compliance_engine.catalog.jurisdictions import JurisdictionRecord, JurisdictionTable
from space_compliance_engine.core.models import InsuranceCoverage, Jurisdiction, LicensingPreferences
from space_compliance_engine.errors import ValidationError
from space_compliance_engine.observability import get_logger

logger = get_logger(__name__)

BASE_SCORE = 50
MAX_PROS = 3
MAX_CONS = 2

# Cover bands that satisfy a EUR 60M minimum
ADEQUATE_COVERAGE: frozenset[InsuranceCoverage] = frozenset(
    {
        InsuranceCoverage.FROM_60M_TO_100M,
        InsuranceCoverage.FROM_100M_TO_500M,
        InsuranceCoverage.OVER_500M,
    }
)

NO_SELECTION_REASON = "No jurisdictions selected for comparison"


@dataclass(frozen=True)
class JurisdictionScore:
    """Fit of one national regime for an operator.

    Attributes:
        code: Country code.
        name: Country name.
        score: Fit score in [0, 100].
        pros: Up to three advantages, in rule order.
        cons: Up to two drawbacks, in rule order.
    """

    code: Jurisdiction
    name: str
    score: int
    pros: tuple[str, ...] = ()
    cons: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": str(self.code),
            "name": self.name,
            "score": self.score,
            "pros": list(self.pros),
            "cons": list(self.cons),
        }


@dataclass(frozen=True)
class JurisdictionComparison:
    """Ranked national licensing comparison.

    Attributes:
        scores: Scored jurisdictions, best first.
    """

    scores: tuple[JurisdictionScore, ...] = ()

    @property
    def analyzed_count(self) -> int:
        return len(self.scores)

    @property
    def recommended(self) -> JurisdictionScore | None:
        return self.scores[0] if self.scores else None

    @property
    def recommendation_reason(self) -> str:
        best = self.recommended
        if best is None:
            return NO_SELECTION_REASON
        return f"{best.name} scores highest ({best.score}/100) based on your requirements"

    def to_dict(self) -> dict[str, Any]:
        best = self.recommended
        return {
            "analyzed_count": self.analyzed_count,
            "recommended_jurisdiction": str(best.code) if best is not None else None,
            "recommended_jurisdiction_name": best.name if best is not None else None,
            "recommendation_reason": self.recommendation_reason,
            "scores": [score.to_dict() for score in self.scores],
        }


def score_jurisdiction(record: JurisdictionRecord, preferences: LicensingPreferences) -> JurisdictionScore:
    """Score one national regime against the operator's licensing preferences."""
    score = BASE_SCORE
    pros: list[str] = []
    cons: list[str] = []

    if preferences.prefers_fast_processing:
        if record.processing_months <= 3:
            score += 15
            pros.append("Fast processing (≤3 months)")
        elif record.processing_months <= 5:
            score += 8
        else:
            score -= 5
            cons.append(f"Longer processing time ({record.processing_months} months)")

    if preferences.requires_english_process:
        if record.english_process:
            score += 12
            pros.append("English-language process available")
        else:
            score -= 10
            cons.append("Local language required")

    if preferences.is_startup and record.new_space_friendly:
        score += 10
        pros.append("NewSpace-friendly regime")

    if record.insurance_min_meur <= 30:
        score += 8
        pros.append(f"Lower insurance minimum (€{record.insurance_min_meur}M)")
    elif record.insurance_min_meur >= 60 and preferences.insurance_coverage not in ADEQUATE_COVERAGE:
        score -= 5
        cons.append(f"High insurance requirement (€{record.insurance_min_meur}M)")

    if record.complexity <= 2:
        score += 10
        pros.append("Streamlined licensing process")
    elif record.complexity >= 4:
        score -= 5
        cons.append("Complex regulatory requirements")

    if record.eu_alignment >= 90:
        score += 5
        pros.append("High EU Space Act alignment")

    return JurisdictionScore(
        code=record.code,
        name=record.name,
        score=max(0, min(100, score)),
        pros=tuple(pros[:MAX_PROS]),
        cons=tuple(cons[:MAX_CONS]),
    )


def compare_jurisdictions(
    preferences: LicensingPreferences,
    table: JurisdictionTable,
) -> JurisdictionComparison:
    """Rank the jurisdictions an operator is interested in.

    Args:
        preferences: Licensing preferences listing the jurisdictions to compare.
        table: Static national licensing table.

    Returns:
        JurisdictionComparison, best first. Empty when no jurisdiction was selected.

    Raises:
        ValidationError: If a selected jurisdiction has no licensing entry.
    """
    requested = list(dict.fromkeys(preferences.interested_jurisdictions))
    missing = [str(code) for code in requested if code not in table]
    if missing:
        raise ValidationError(f"No national licensing data for jurisdiction(s): {', '.join(missing)}")

    scores = [score_jurisdiction(table.get(code), preferences) for code in requested]
    scores.sort(key=lambda item: -item.score)
    comparison = JurisdictionComparison(scores=tuple(scores))
    if comparison.recommended is not None:
        logger.info(
            "Jurisdictions compared",
            analyzed_count=comparison.analyzed_count,
            recommended=str(comparison.recommended.code),
            score=comparison.recommended.score,
        )
    return comparison
