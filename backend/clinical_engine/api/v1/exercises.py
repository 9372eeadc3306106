from dataclasses import asdict

from fastapi import APIRouter, Query

from clinical_engine.api.deps import Catalog, Recommender
from clinical_engine.schemas.exercise import (
    AssessmentPlanResponse,
    CatalogResponse,
    DosageResponse,
    ExerciseResponse,
    MatchListResponse,
    MatchResultResponse,
    RecommendationRequest,
    RecommendationResponse,
    ScoreBreakdownResponse,
    SymptomQueryRequest,
)
from clinical_engine.services.catalog import Exercise
from clinical_engine.services.matcher import (
    SymptomQuery,
    get_exercises_by_body_part,
    get_exercises_by_pain_level,
    rank_exercises,
)

router = APIRouter()


def _exercise_response(exercise: Exercise) -> ExerciseResponse:
    return ExerciseResponse(**asdict(exercise))


def _symptom_query(request: SymptomQueryRequest) -> SymptomQuery:
    return SymptomQuery(
        body_part=request.body_part,
        pain_level=request.pain_level,
        pain_type=request.pain_type,
        pain_duration=request.pain_duration,
        symptoms=request.symptoms,
    )


@router.get("/catalog", response_model=CatalogResponse)
async def list_catalog(
    catalog: Catalog,
    body_part: str | None = Query(None, description="Filter by body part (aliases allowed)"),
) -> CatalogResponse:
    """List the exercise catalog in catalog order."""
    exercises = list(catalog)
    if body_part:
        exercises = get_exercises_by_body_part(exercises, body_part)

    return CatalogResponse(
        exercises=[_exercise_response(e) for e in exercises],
        total=len(exercises),
    )


@router.post("/match", response_model=MatchListResponse)
async def match_exercises(
    request: SymptomQueryRequest,
    catalog: Catalog,
    limit: int | None = Query(None, ge=1, le=100),
    safe_only: bool = Query(False, description="Drop exercises above their max pain level"),
) -> MatchListResponse:
    """Rank the catalog against a symptom report, with per-component scores."""
    query = _symptom_query(request)

    exercises = list(catalog)
    if safe_only:
        exercises = get_exercises_by_pain_level(exercises, query.pain_level)

    ranked = rank_exercises(exercises, query)
    if limit is not None:
        ranked = ranked[:limit]

    return MatchListResponse(
        results=[
            MatchResultResponse(
                exercise=_exercise_response(r.exercise),
                score=r.score,
                match_reasons=r.match_reasons,
                breakdown=ScoreBreakdownResponse(**r.breakdown.to_dict()),
            )
            for r in ranked
        ],
        total=len(ranked),
    )


@router.post("/recommendations", response_model=AssessmentPlanResponse)
async def recommend_exercises(
    request: RecommendationRequest,
    engine: Recommender,
) -> AssessmentPlanResponse:
    """Triage a symptom report and recommend a safe exercise plan."""
    plan = engine.generate_plan(
        _symptom_query(request),
        red_flags=request.red_flags,
        medical_conditions=request.medical_conditions,
        telehealth_available=request.telehealth_available,
    )

    return AssessmentPlanResponse(
        risk_level=plan.risk_level,
        triage_reason=plan.triage.reason,
        red_flags=plan.triage.red_flags,
        recommendations=[
            RecommendationResponse(
                exercise=_exercise_response(rec.exercise),
                dosage=DosageResponse(**asdict(rec.dosage)),
                relevance_score=rec.relevance_score,
                reasoning=rec.reasoning,
                safety_notes=rec.safety_notes,
                red_flag_warnings=rec.red_flag_warnings,
                progression_tips=rec.progression_tips,
            )
            for rec in plan.recommendations
        ],
        next_steps=plan.next_steps,
    )
