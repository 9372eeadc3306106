"""
Questionnaire Scoring - Standardized outcome instrument scoring.

Each scorer takes raw item responses and returns a QuestionnaireScore with
the raw total, a 0-100 normalized score (or the clamped scale value for
NPRS/GROC) and a textual interpretation. Out-of-range item responses are
dropped before scoring.
"""
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from clinical_engine.exceptions import UnknownQuestionnaireError
from clinical_engine.schemas.enums import CONDITION_QUESTIONNAIRE_MAP, QuestionnaireKey


@dataclass
class QuestionnaireScore:
    total_score: float
    normalized_score: float
    interpretation: str


NO_RESPONSES = "No responses"


def _valid(responses: Sequence, low: float, high: float) -> list[float]:
    valid: list[float] = []
    for value in responses:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        if low <= value <= high:
            valid.append(float(value))
    return valid


def _round(value: float) -> float:
    return round(value, 1)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def calculate_odi_score(responses: Sequence[int]) -> QuestionnaireScore:
    """Oswestry Disability Index: items 0-5, percentage disability (lower is better)."""
    items = _valid(responses, 0, 5)
    if not items:
        return QuestionnaireScore(0.0, 0.0, NO_RESPONSES)

    total = sum(items)
    normalized = _round(total / (len(items) * 5) * 100)

    if normalized <= 20:
        interpretation = "Minimal disability"
    elif normalized <= 40:
        interpretation = "Moderate disability"
    elif normalized <= 60:
        interpretation = "Severe disability"
    elif normalized <= 80:
        interpretation = "Crippled"
    else:
        interpretation = "Bed-bound or exaggerating"

    return QuestionnaireScore(total, normalized, interpretation)


def calculate_koos_score(responses: Sequence[int]) -> QuestionnaireScore:
    """KOOS: items 0-4 (0 = none), transformed so 100 is no symptoms (higher is better)."""
    items = _valid(responses, 0, 4)
    if not items:
        return QuestionnaireScore(0.0, 100.0, NO_RESPONSES)

    total = sum(items)
    normalized = _round(100 - total / (len(items) * 4) * 100)

    if normalized >= 90:
        interpretation = "Normal function"
    elif normalized >= 75:
        interpretation = "Near normal function"
    elif normalized >= 50:
        interpretation = "Moderate impairment"
    elif normalized >= 25:
        interpretation = "Severe impairment"
    else:
        interpretation = "Extreme impairment"

    return QuestionnaireScore(total, normalized, interpretation)


def calculate_quickdash_score(responses: Sequence[int]) -> QuestionnaireScore:
    """QuickDASH: items 1-5, ((mean - 1) * 25) disability score (lower is better)."""
    items = _valid(responses, 1, 5)
    if not items:
        return QuestionnaireScore(0.0, 0.0, NO_RESPONSES)

    total = sum(items)
    normalized = _round((total / len(items) - 1) * 25)

    if normalized <= 20:
        interpretation = "Minimal disability"
    elif normalized <= 40:
        interpretation = "Mild disability"
    elif normalized <= 60:
        interpretation = "Moderate disability"
    elif normalized <= 80:
        interpretation = "Severe disability"
    else:
        interpretation = "Extreme disability"

    return QuestionnaireScore(total, normalized, interpretation)


def calculate_nprs_score(responses: Sequence[float]) -> QuestionnaireScore:
    """Numeric pain rating scale, single item clamped to 0-10."""
    items = [v for v in responses if isinstance(v, (int, float)) and not isinstance(v, bool)]
    # A missing rating is scored as 0
    score = _round(_clamp(float(items[0]) if items else 0.0, 0, 10))

    if score == 0:
        interpretation = "No pain"
    elif score <= 3:
        interpretation = "Mild pain"
    elif score <= 6:
        interpretation = "Moderate pain"
    elif score <= 9:
        interpretation = "Severe pain"
    else:
        interpretation = "Worst possible pain"

    return QuestionnaireScore(score, score, interpretation)


def interpret_groc(score: float) -> str:
    """Global rating of change bucket for a -7..+7 score."""
    if score <= -5:
        return "Very much worse"
    if score <= -3:
        return "Much worse"
    if score <= -1:
        return "Somewhat worse"
    if score == 0:
        return "No change"
    if score <= 2:
        return "Somewhat better"
    if score <= 4:
        return "Much better"
    return "Very much better"


def calculate_groc_score(responses: Sequence[float]) -> QuestionnaireScore:
    """Global rating of change, single item clamped to -7..+7."""
    items = [v for v in responses if isinstance(v, (int, float)) and not isinstance(v, bool)]
    score = _round(_clamp(float(items[0]) if items else 0.0, -7, 7))
    return QuestionnaireScore(score, score, interpret_groc(score))


SCORERS: dict[str, Callable[[Sequence], QuestionnaireScore]] = {
    QuestionnaireKey.ODI.value: calculate_odi_score,
    QuestionnaireKey.KOOS.value: calculate_koos_score,
    QuestionnaireKey.QUICKDASH.value: calculate_quickdash_score,
    QuestionnaireKey.NPRS.value: calculate_nprs_score,
    QuestionnaireKey.GROC.value: calculate_groc_score,
}


def calculate_score(questionnaire_key: str, responses: Sequence) -> QuestionnaireScore:
    """Score responses with the rule registered for the questionnaire key."""
    scorer = SCORERS.get((questionnaire_key or "").lower())
    if scorer is None:
        raise UnknownQuestionnaireError(questionnaire_key)
    return scorer(responses)


def map_pain_location_to_condition(pain_location: Optional[str]) -> str:
    """
    Condition tag for a free-text pain location.

    "Lower back" -> "back", "Right knee" -> "knee", "Hip flexor" -> "hip"
    """
    location = (pain_location or "").strip().lower()
    if any(word in location for word in ("back", "lumbar", "spine")):
        return "back"
    if any(word in location for word in ("knee", "patella")):
        return "knee"
    if any(word in location for word in ("shoulder", "rotator")):
        return "shoulder"
    parts = location.split()
    return parts[0] if parts else "general"


def questionnaire_key_for_condition(condition_tag: str) -> QuestionnaireKey:
    """Function questionnaire for a condition; the pain scale when none applies."""
    return CONDITION_QUESTIONNAIRE_MAP.get((condition_tag or "").lower(), QuestionnaireKey.NPRS)
