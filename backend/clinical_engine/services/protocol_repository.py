"""
Protocol Repository - Read-only storage access for protocol resolution.

Every method returns None or an empty list when rows are absent. Database
errors are not caught here; they propagate to the caller.
"""
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clinical_engine.models import (
    Assessment,
    ExerciseVideo,
    PhaseRoutine,
    Protocol,
    ProtocolPhase,
    ProtocolPrecaution,
    RoutineExercise,
)


class ProtocolRepository:
    """Reads assessments, protocols, phases and routine mappings."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_latest_protocol_assessment(self, user_id: int) -> Optional[Assessment]:
        """Most recent assessment of the user that selected a protocol."""
        result = await self.db.execute(
            select(Assessment)
            .where(
                Assessment.user_id == user_id,
                Assessment.protocol_key_selected.is_not(None),
            )
            .order_by(Assessment.created_at.desc(), Assessment.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_protocol(self, protocol_key: str) -> Optional[Protocol]:
        result = await self.db.execute(
            select(Protocol).where(Protocol.protocol_key == protocol_key)
        )
        return result.scalar_one_or_none()

    async def get_phase(self, protocol_id: int, phase_number: int) -> Optional[ProtocolPhase]:
        result = await self.db.execute(
            select(ProtocolPhase).where(
                ProtocolPhase.protocol_id == protocol_id,
                ProtocolPhase.phase_number == phase_number,
            )
        )
        return result.scalar_one_or_none()

    async def get_phase_numbers(self, protocol_id: int) -> list[int]:
        """
        Defined phase numbers, ascending.

        Read by the phase-advancement code that records progress, which checks
        proposed moves with `is_valid_phase_transition`. The resolver itself
        never changes a user's phase.
        """
        result = await self.db.execute(
            select(ProtocolPhase.phase_number)
            .where(ProtocolPhase.protocol_id == protocol_id)
            .order_by(ProtocolPhase.phase_number)
        )
        return list(result.scalars().all())

    async def get_precautions(self, protocol_key: str, phase_number: int) -> list[ProtocolPrecaution]:
        """Active precautions for the phase plus those covering every phase."""
        result = await self.db.execute(
            select(ProtocolPrecaution)
            .where(
                ProtocolPrecaution.protocol_key == protocol_key,
                ProtocolPrecaution.is_active.is_(True),
                (ProtocolPrecaution.phase_number == phase_number)
                | ProtocolPrecaution.phase_number.is_(None),
            )
            .order_by(ProtocolPrecaution.display_order, ProtocolPrecaution.id)
        )
        return list(result.scalars().all())

    async def get_routine_by_protocol_phase(
        self, protocol_key: str, phase_number: int
    ) -> Optional[PhaseRoutine]:
        result = await self.db.execute(
            select(PhaseRoutine)
            .where(
                PhaseRoutine.protocol_key == protocol_key,
                PhaseRoutine.phase_number == phase_number,
            )
            .order_by(PhaseRoutine.id)
            .limit(1)
        )
        return result.scalars().first()

    async def get_routine_by_phase_id(self, protocol_phase_id: int) -> Optional[PhaseRoutine]:
        result = await self.db.execute(
            select(PhaseRoutine)
            .where(PhaseRoutine.protocol_phase_id == protocol_phase_id)
            .order_by(PhaseRoutine.id)
            .limit(1)
        )
        return result.scalars().first()

    async def get_routine_exercises(self, routine_id: int) -> list[RoutineExercise]:
        result = await self.db.execute(
            select(RoutineExercise)
            .where(RoutineExercise.routine_id == routine_id)
            .order_by(RoutineExercise.display_order, RoutineExercise.id)
        )
        return list(result.unique().scalars().all())

    async def search_active_exercises(self, body_part: str, limit: int) -> list[ExerciseVideo]:
        """Active exercises tagged with the body part, in display order."""
        result = await self.db.execute(
            select(ExerciseVideo)
            .where(ExerciseVideo.is_active.is_(True))
            .order_by(ExerciseVideo.display_order, ExerciseVideo.id)
        )
        # Tag lists are JSON, so the membership test runs here for portability
        wanted = body_part.lower()
        tagged = [
            ex for ex in result.scalars().all()
            if any(str(tag).lower() == wanted for tag in (ex.body_parts or []))
        ]
        return tagged[:limit]
