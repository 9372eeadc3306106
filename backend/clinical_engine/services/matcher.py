"""
Exercise Matcher - Deterministic, explainable ranking of the exercise catalog.

Weighted additive scoring (total <= 100 per exercise):
- Body part match          +40
- Pain type match          +20
- Difficulty appropriate   +20 (gentle under high pain) / +15
- Pain level safety        +20 (max_pain_level >= pain level)
- Symptom keyword bonus    +5 each, capped at +10 and at the remaining headroom

The scorer never drops an exercise. Hard safety exclusion and top-N
truncation belong to the caller (see recommender.py).
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from clinical_engine.schemas.enums import BODY_PART_ALIASES, Difficulty
from clinical_engine.services.catalog import Exercise
from clinical_engine.services.scoring_config import MatcherConfig, get_scoring_config

logger = logging.getLogger(__name__)

PAIN_TYPE_SEPARATORS = re.compile(r"[,/]")


def _coerce_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _coerce_pain_level(value: Any) -> int:
    try:
        level = int(value)
    except (TypeError, ValueError):
        return 0
    return max(0, min(10, level))


@dataclass
class SymptomQuery:
    """One matching request. Malformed fields are coerced to neutral values."""
    body_part: str = ""
    pain_level: int = 0
    pain_type: str = ""
    pain_duration: str = ""
    symptoms: list[str] = field(default_factory=list)

    def __post_init__(self):
        self.body_part = _coerce_text(self.body_part)
        self.pain_level = _coerce_pain_level(self.pain_level)
        self.pain_type = _coerce_text(self.pain_type)
        self.pain_duration = _coerce_text(self.pain_duration)
        raw_symptoms = self.symptoms if isinstance(self.symptoms, (list, tuple)) else []
        self.symptoms = [s.strip() for s in raw_symptoms if isinstance(s, str) and s.strip()]

    @property
    def pain_type_tokens(self) -> list[str]:
        tokens = [t.strip() for t in PAIN_TYPE_SEPARATORS.split(self.pain_type.lower())]
        return [t for t in tokens if t]


@dataclass
class ScoreBreakdown:
    """Per-component contributions; they always sum to the total score."""
    body_part: int = 0
    pain_type: int = 0
    difficulty: int = 0
    safety: int = 0
    symptoms: int = 0
    # Chronic duration is detected but intentionally has no weight
    chronic: bool = False

    @property
    def total(self) -> int:
        return self.body_part + self.pain_type + self.difficulty + self.safety + self.symptoms

    def to_dict(self) -> dict:
        return {
            "body_part": self.body_part,
            "pain_type": self.pain_type,
            "difficulty": self.difficulty,
            "safety": self.safety,
            "symptoms": self.symptoms,
            "chronic": self.chronic,
            "total": self.total,
        }


@dataclass
class MatchResult:
    exercise: Exercise
    score: int
    match_reasons: list[str]
    breakdown: ScoreBreakdown


def _overlaps(a: str, b: str) -> bool:
    """Bidirectional, case-insensitive substring containment."""
    a, b = a.lower(), b.lower()
    return a in b or b in a


def resolve_body_part_keys(body_part: str) -> list[str]:
    """
    Map free text to canonical body part keys via the alias table.

    "Lumbar spine" -> ["lower back"]. Falls back to the raw text itself.
    """
    normalized = _coerce_text(body_part).lower()
    if not normalized:
        return []

    keys = [
        key for key, aliases in BODY_PART_ALIASES.items()
        if any(alias in normalized for alias in aliases)
    ]
    return keys or [normalized]


def matches_body_part(exercise: Exercise, body_part: str) -> bool:
    keys = resolve_body_part_keys(body_part)
    return any(_overlaps(tag, key) for tag in exercise.body_parts for key in keys)


def matches_pain_type(exercise: Exercise, tokens: list[str]) -> bool:
    return any(_overlaps(tag, token) for tag in exercise.pain_types for token in tokens)


def matched_symptoms(exercise: Exercise, symptoms: list[str]) -> list[str]:
    """Distinct query symptoms that overlap any of the exercise's condition tags."""
    matched: list[str] = []
    seen: set[str] = set()
    for symptom in symptoms:
        key = symptom.strip().lower()
        if not key or key in seen:
            continue
        if any(_overlaps(condition, symptom) for condition in exercise.conditions):
            seen.add(key)
            matched.append(symptom)
    return matched


def is_chronic(pain_duration: str, config: Optional[MatcherConfig] = None) -> bool:
    if config is None:
        config = get_scoring_config().matcher
    return config.chronic_duration_keyword in _coerce_text(pain_duration).lower()


def score_exercise(
    exercise: Exercise,
    query: SymptomQuery,
    config: Optional[MatcherConfig] = None,
) -> MatchResult:
    """Score a single exercise against a symptom query."""
    if config is None:
        config = get_scoring_config().matcher

    breakdown = ScoreBreakdown()
    reasons: list[str] = []

    # Body part
    if query.body_part and matches_body_part(exercise, query.body_part):
        breakdown.body_part = config.body_part_points
        reasons.append(f"Targets {query.body_part}")

    # Pain type
    if matches_pain_type(exercise, query.pain_type_tokens):
        breakdown.pain_type = config.pain_type_points
        reasons.append(f"Addresses {query.pain_type} pain")

    # Difficulty appropriateness
    breakdown.chronic = is_chronic(query.pain_duration, config)
    high_pain = query.pain_level >= config.high_pain_threshold
    if high_pain and exercise.difficulty == Difficulty.BEGINNER:
        breakdown.difficulty = config.gentle_points
        reasons.append("Gentle enough for high pain level")
    elif not high_pain and exercise.difficulty != Difficulty.ADVANCED:
        breakdown.difficulty = config.appropriate_points
        reasons.append("Appropriate difficulty level")

    # Pain level safety
    if exercise.max_pain_level >= query.pain_level:
        breakdown.safety = config.safety_points
        reasons.append("Safe for your current pain level")

    # Symptom keywords
    symptom_matches = matched_symptoms(exercise, query.symptoms)
    if symptom_matches:
        headroom = max(0, config.max_score - breakdown.total)
        breakdown.symptoms = min(
            len(symptom_matches) * config.symptom_points, config.symptom_points_cap, headroom
        )
        reasons.append(f"Addresses: {', '.join(symptom_matches)}")

    return MatchResult(
        exercise=exercise,
        score=breakdown.total,
        match_reasons=reasons,
        breakdown=breakdown,
    )


def rank_exercises(
    exercises: Iterable[Exercise],
    query: SymptomQuery,
    config: Optional[MatcherConfig] = None,
) -> list[MatchResult]:
    """
    Score every exercise and sort by descending score.

    The sort is stable, so ties keep catalog order, and the output is a
    permutation of the input.
    """
    results = [score_exercise(exercise, query, config) for exercise in exercises]
    ranked = sorted(results, key=lambda r: r.score, reverse=True)

    logger.debug(
        "Exercises ranked",
        extra={
            "body_part": query.body_part,
            "pain_level": query.pain_level,
            "candidate_count": len(ranked),
            "top_score": ranked[0].score if ranked else None,
        },
    )
    return ranked


def get_exercises_by_body_part(exercises: Iterable[Exercise], body_part: str) -> list[Exercise]:
    """Exercises tagged with the (alias-resolved) body part."""
    if not _coerce_text(body_part):
        return []
    return [e for e in exercises if matches_body_part(e, body_part)]


def get_exercises_by_pain_level(exercises: Iterable[Exercise], pain_level: int) -> list[Exercise]:
    """Hard safety gate: keep exercises whose max_pain_level admits the pain level."""
    level = _coerce_pain_level(pain_level)
    return [e for e in exercises if e.max_pain_level >= level]


def get_exercises_by_pain_type(exercises: Iterable[Exercise], pain_type: str) -> list[Exercise]:
    tokens = SymptomQuery(pain_type=pain_type).pain_type_tokens
    return [e for e in exercises if matches_pain_type(e, tokens)]


def exclude_contraindicated(exercises: Iterable[Exercise], conditions: Iterable[str]) -> list[Exercise]:
    """Drop exercises with a contraindication overlapping a reported condition."""
    reported = [c.strip() for c in conditions if isinstance(c, str) and c.strip()]
    if not reported:
        return list(exercises)
    return [
        e for e in exercises
        if not any(_overlaps(ci, cond) for ci in e.contraindications for cond in reported)
    ]
