"""
Recommendation Engine - Turns a symptom report into an exercise plan.

Pipeline:
1. Triage (critical assessments receive no exercises)
2. Candidate selection by body part (fallback: all beginner exercises)
3. Hard safety gate (pain level + contraindications)
4. Ranking by the matcher
5. Top-N selection with dosage and safety notes attached
"""
import logging
from dataclasses import dataclass, field
from typing import Optional

from clinical_engine.schemas.enums import Difficulty, RiskLevel
from clinical_engine.services.catalog import Exercise, ExerciseCatalog, ExerciseDosage, get_exercise_catalog
from clinical_engine.services.matcher import (
    MatchResult,
    SymptomQuery,
    exclude_contraindicated,
    get_exercises_by_body_part,
    get_exercises_by_pain_level,
    rank_exercises,
)
from clinical_engine.services.safety_rules import (
    TriageResult,
    assess_risk_level,
    generate_next_steps,
    generate_safety_notes,
)
from clinical_engine.services.scoring_config import ScoringConfig, get_scoring_config

logger = logging.getLogger(__name__)


@dataclass
class ExerciseRecommendation:
    exercise: Exercise
    dosage: ExerciseDosage
    relevance_score: int
    reasoning: str
    safety_notes: list[str] = field(default_factory=list)
    red_flag_warnings: list[str] = field(default_factory=list)
    progression_tips: list[str] = field(default_factory=list)


@dataclass
class AssessmentPlan:
    triage: TriageResult
    recommendations: list[ExerciseRecommendation]
    next_steps: list[str]

    @property
    def risk_level(self) -> RiskLevel:
        return self.triage.risk_level


class RecommendationEngine:
    """Generates exercise recommendations for a symptom report."""

    def __init__(
        self,
        catalog: Optional[ExerciseCatalog] = None,
        config: Optional[ScoringConfig] = None,
    ):
        self.catalog = catalog if catalog is not None else get_exercise_catalog()
        self.config = config or get_scoring_config()

    def generate_plan(
        self,
        query: SymptomQuery,
        red_flags: Optional[list[str]] = None,
        medical_conditions: Optional[list[str]] = None,
        telehealth_available: bool = False,
    ) -> AssessmentPlan:
        """Triage the report and, when safe, recommend exercises."""
        triage = assess_risk_level(query, red_flags or [], self.config.matcher)

        recommendations: list[ExerciseRecommendation] = []
        if triage.allows_exercise:
            recommendations = self.recommend_exercises(query, medical_conditions or [])

        logger.info(
            "Assessment processed",
            extra={
                "risk_level": triage.risk_level.value,
                "recommendation_count": len(recommendations),
            },
        )

        return AssessmentPlan(
            triage=triage,
            recommendations=recommendations,
            next_steps=generate_next_steps(triage.risk_level, telehealth_available),
        )

    def recommend_exercises(
        self,
        query: SymptomQuery,
        medical_conditions: Optional[list[str]] = None,
    ) -> list[ExerciseRecommendation]:
        candidates = self._safe_candidates(query, medical_conditions or [])
        ranked = rank_exercises(candidates, query, self.config.matcher)
        selected = self._select_top(ranked)

        return [self._build_recommendation(query, result) for result in selected]

    def _safe_candidates(self, query: SymptomQuery, medical_conditions: list[str]) -> list[Exercise]:
        candidates = get_exercises_by_body_part(self.catalog, query.body_part)

        if not candidates:
            logger.info(
                "No exercises for body part, using general recommendations",
                extra={"body_part": query.body_part},
            )
            candidates = [e for e in self.catalog if e.difficulty == Difficulty.BEGINNER]

        candidates = get_exercises_by_pain_level(candidates, query.pain_level)
        return exclude_contraindicated(candidates, medical_conditions)

    def _select_top(self, ranked: list[MatchResult]) -> list[MatchResult]:
        """Keep strong matches; guarantee a minimum count when available."""
        rules = self.config.recommendations
        strong = [r for r in ranked if r.score >= rules.min_score][: rules.max_results]
        if len(strong) >= rules.min_results:
            return strong
        return ranked[: rules.min_results]

    def _build_recommendation(self, query: SymptomQuery, result: MatchResult) -> ExerciseRecommendation:
        exercise = result.exercise
        return ExerciseRecommendation(
            exercise=exercise,
            dosage=exercise.dosage,
            relevance_score=result.score,
            reasoning=". ".join(result.match_reasons),
            safety_notes=generate_safety_notes(query, exercise, self.config.matcher),
            red_flag_warnings=list(exercise.red_flag_warnings),
            progression_tips=list(exercise.progression_tips),
        )
