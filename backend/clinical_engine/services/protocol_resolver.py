"""
Protocol/Phase Resolver - Maps a user's latest assessment to a protocol phase
and its exercise set.

Absent data always degrades to a smaller valid result:
- no qualifying assessment or unknown protocol -> no assignment (None)
- missing phase metadata -> synthesized "Phase {n}" descriptor
- no routine mapping -> body part fallback -> empty exercise set

Exercise set priority:
1. phase_routines keyed by (protocol_key, phase_number)
2. phase_routines keyed by the phase's internal id
3. active exercises tagged with the body region encoded in the protocol key

Phase advancement happens elsewhere; is_valid_phase_transition() states the
rule it must follow.
"""
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

from clinical_engine.models import ExerciseVideo, PhaseRoutine, RoutineExercise
from clinical_engine.services.protocol_repository import ProtocolRepository
from clinical_engine.services.scoring_config import ResolverConfig, get_scoring_config

logger = logging.getLogger(__name__)


class ExerciseSource(str, Enum):
    PROTOCOL_PHASE = "protocol_phase"
    PHASE_ID = "phase_id"
    BODY_PART_FALLBACK = "body_part_fallback"
    NONE = "none"


@dataclass
class PhaseInfo:
    protocol_key: str
    protocol_name: str
    phase_number: int
    phase_name: str
    phase_description: Optional[str] = None
    week_start: int = 0
    week_end: Optional[int] = None
    goals: list[str] = field(default_factory=list)
    precautions: list[str] = field(default_factory=list)
    progress_criteria: list[str] = field(default_factory=list)
    # False when the phase row is missing and the descriptor was synthesized
    phase_defined: bool = True
    assessment_id: Optional[int] = None
    assessment_date: Optional[datetime] = None
    pain_location: Optional[str] = None


@dataclass
class ProtocolExercise:
    id: int
    title: str
    description: Optional[str]
    body_parts: list[str]
    difficulty: str
    youtube_video_id: Optional[str]
    thumbnail_url: Optional[str]
    recommended_sets: Optional[int]
    recommended_reps: Optional[int]
    recommended_hold_seconds: Optional[int]
    display_order: int


@dataclass
class PhaseExerciseSet:
    exercises: list[ProtocolExercise] = field(default_factory=list)
    routine_id: Optional[int] = None
    routine_name: Optional[str] = None
    source: ExerciseSource = ExerciseSource.NONE


@dataclass
class ResolvedPlan:
    phase_info: Optional[PhaseInfo]
    exercises: list[ProtocolExercise] = field(default_factory=list)
    routine_id: Optional[int] = None
    routine_name: Optional[str] = None
    source: ExerciseSource = ExerciseSource.NONE

    @property
    def has_assignment(self) -> bool:
        return self.phase_info is not None


def extract_body_region(protocol_key: str, config: Optional[ResolverConfig] = None) -> Optional[str]:
    """
    Body region encoded at the start of a protocol key.

    "knee_acl_reconstruction" -> "knee", "foot_ankle_fusion" -> "foot ankle"
    """
    if config is None:
        config = get_scoring_config().resolver

    pattern = re.compile(rf"^({'|'.join(map(re.escape, config.fallback_regions))})", re.IGNORECASE)
    match = pattern.match(protocol_key or "")
    if not match:
        return None
    return match.group(1).replace("_", " ").lower()


def is_valid_phase_transition(defined_phases: Iterable[int], current: int, proposed: int) -> bool:
    """
    Phase numbers never decrease and never skip past an undefined phase.

    Staying in the current phase is always allowed. Used by the code that
    advances a user's phase, together with
    `ProtocolRepository.get_phase_numbers`.
    """
    if proposed < current:
        return False
    if proposed == current:
        return True
    defined = set(defined_phases)
    return all(n in defined for n in range(current + 1, proposed + 1))


def _from_routine_exercise(row: RoutineExercise) -> ProtocolExercise:
    ex = row.exercise
    return ProtocolExercise(
        id=ex.id,
        title=ex.title,
        description=ex.description,
        body_parts=list(ex.body_parts or []),
        difficulty=ex.difficulty or "Beginner",
        youtube_video_id=ex.youtube_video_id,
        thumbnail_url=ex.thumbnail_url,
        recommended_sets=row.sets_override or ex.recommended_sets,
        recommended_reps=row.reps_override or ex.recommended_reps,
        recommended_hold_seconds=row.hold_seconds_override or ex.recommended_hold_seconds,
        display_order=row.display_order,
    )


def _from_exercise_video(ex: ExerciseVideo) -> ProtocolExercise:
    return ProtocolExercise(
        id=ex.id,
        title=ex.title,
        description=ex.description,
        body_parts=list(ex.body_parts or []),
        difficulty=ex.difficulty or "Beginner",
        youtube_video_id=ex.youtube_video_id,
        thumbnail_url=ex.thumbnail_url,
        recommended_sets=ex.recommended_sets,
        recommended_reps=ex.recommended_reps,
        recommended_hold_seconds=ex.recommended_hold_seconds,
        display_order=ex.display_order or 0,
    )


class ProtocolResolver:
    """Resolves the current protocol phase and exercises for a user."""

    def __init__(self, repository: ProtocolRepository, config: Optional[ResolverConfig] = None):
        self.repository = repository
        self.config = config or get_scoring_config().resolver

    async def get_assignment(self, user_id: int) -> Optional[PhaseInfo]:
        """Protocol phase from the user's most recent protocol assessment."""
        assessment = await self.repository.get_latest_protocol_assessment(user_id)
        if assessment is None:
            logger.info("No protocol assignment found", extra={"user_id": user_id})
            return None

        protocol_key = assessment.protocol_key_selected
        protocol = await self.repository.get_protocol(protocol_key)
        if protocol is None:
            logger.info(
                "Assigned protocol not found",
                extra={"user_id": user_id, "protocol_key": protocol_key},
            )
            return None

        phase_number = assessment.phase_number_selected or self.config.default_phase_number
        phase = await self.repository.get_phase(protocol.id, phase_number)
        precautions = await self.repository.get_precautions(protocol_key, phase_number)
        shared_precautions = [b for p in precautions for b in (p.bullets or [])]

        info = PhaseInfo(
            protocol_key=protocol_key,
            protocol_name=protocol.name,
            phase_number=phase_number,
            phase_name=f"Phase {phase_number}",
            precautions=shared_precautions,
            phase_defined=False,
            assessment_id=assessment.id,
            assessment_date=assessment.created_at,
            pain_location=assessment.pain_location,
        )

        if phase is None:
            logger.warning(
                "Phase metadata missing, using synthesized descriptor",
                extra={"protocol_key": protocol_key, "phase_number": phase_number},
            )
            return info

        info.phase_name = phase.name or info.phase_name
        info.phase_description = phase.description
        info.week_start = phase.week_start or 0
        info.week_end = phase.week_end
        info.goals = list(phase.goals or [])
        info.precautions = list(phase.precautions or []) + shared_precautions
        info.progress_criteria = list(phase.progress_criteria or [])
        info.phase_defined = True
        return info

    async def get_phase_exercises(self, protocol_key: str, phase_number: int) -> PhaseExerciseSet:
        """Exercise set for a protocol phase, following the priority chain."""
        mapping = await self.repository.get_routine_by_protocol_phase(protocol_key, phase_number)
        if mapping is not None:
            return await self._routine_exercises(mapping, ExerciseSource.PROTOCOL_PHASE)

        protocol = await self.repository.get_protocol(protocol_key)
        if protocol is not None:
            phase = await self.repository.get_phase(protocol.id, phase_number)
            if phase is not None:
                mapping = await self.repository.get_routine_by_phase_id(phase.id)
                if mapping is not None:
                    return await self._routine_exercises(mapping, ExerciseSource.PHASE_ID)

        return await self._body_part_fallback(protocol_key)

    async def get_current_plan(self, user_id: int) -> ResolvedPlan:
        """Assignment plus exercises; an empty plan when nothing is assigned."""
        phase_info = await self.get_assignment(user_id)
        if phase_info is None:
            return ResolvedPlan(phase_info=None)

        exercise_set = await self.get_phase_exercises(phase_info.protocol_key, phase_info.phase_number)

        logger.info(
            "Protocol plan resolved",
            extra={
                "user_id": user_id,
                "protocol_key": phase_info.protocol_key,
                "phase_number": phase_info.phase_number,
                "source": exercise_set.source.value,
                "exercise_count": len(exercise_set.exercises),
            },
        )

        return ResolvedPlan(
            phase_info=phase_info,
            exercises=exercise_set.exercises,
            routine_id=exercise_set.routine_id,
            routine_name=exercise_set.routine_name,
            source=exercise_set.source,
        )

    async def _routine_exercises(self, mapping: PhaseRoutine, source: ExerciseSource) -> PhaseExerciseSet:
        rows = await self.repository.get_routine_exercises(mapping.routine_id)
        exercises = [_from_routine_exercise(row) for row in rows if row.exercise is not None]
        return PhaseExerciseSet(
            exercises=exercises,
            routine_id=mapping.routine_id,
            routine_name=mapping.routine.name if mapping.routine else None,
            source=source,
        )

    async def _body_part_fallback(self, protocol_key: str) -> PhaseExerciseSet:
        body_part = extract_body_region(protocol_key, self.config)
        if body_part is None:
            logger.info("No routine or body region for protocol", extra={"protocol_key": protocol_key})
            return PhaseExerciseSet()

        rows = await self.repository.search_active_exercises(body_part, self.config.fallback_limit)
        if not rows:
            return PhaseExerciseSet()

        logger.info(
            "No mapped routine, using body part fallback",
            extra={"protocol_key": protocol_key, "body_part": body_part},
        )
        return PhaseExerciseSet(
            exercises=[_from_exercise_video(row) for row in rows],
            routine_id=None,
            routine_name=f"{body_part.capitalize()} Exercises",
            source=ExerciseSource.BODY_PART_FALLBACK,
        )
