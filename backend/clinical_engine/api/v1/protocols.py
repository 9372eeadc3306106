from dataclasses import asdict

from fastapi import APIRouter, Path

from clinical_engine.api.deps import CurrentUser, Resolver
from clinical_engine.schemas.protocol import (
    CurrentPlanResponse,
    PhaseExercisesResponse,
    PhaseInfoResponse,
    ProtocolExerciseResponse,
)

router = APIRouter()


@router.get("/current", response_model=CurrentPlanResponse)
async def get_current_protocol(
    current_user: CurrentUser,
    resolver: Resolver,
) -> CurrentPlanResponse:
    """
    Current protocol phase and exercises for the user.

    A user without a protocol assessment gets has_assignment=false, not an error.
    """
    plan = await resolver.get_current_plan(current_user.id)

    return CurrentPlanResponse(
        has_assignment=plan.has_assignment,
        phase_info=PhaseInfoResponse(**asdict(plan.phase_info)) if plan.phase_info else None,
        routine_id=plan.routine_id,
        routine_name=plan.routine_name,
        source=plan.source.value,
        exercises=[ProtocolExerciseResponse(**asdict(e)) for e in plan.exercises],
    )


@router.get("/{protocol_key}/phases/{phase_number}/exercises", response_model=PhaseExercisesResponse)
async def get_phase_exercises(
    protocol_key: str,
    resolver: Resolver,
    phase_number: int = Path(..., ge=1),
) -> PhaseExercisesResponse:
    """Exercise set for a protocol phase; empty when nothing resolves."""
    exercise_set = await resolver.get_phase_exercises(protocol_key, phase_number)

    return PhaseExercisesResponse(
        protocol_key=protocol_key,
        phase_number=phase_number,
        routine_id=exercise_set.routine_id,
        routine_name=exercise_set.routine_name,
        source=exercise_set.source.value,
        exercises=[ProtocolExerciseResponse(**asdict(e)) for e in exercise_set.exercises],
    )
