from datetime import datetime

from pydantic import BaseModel


class PhaseInfoResponse(BaseModel):
    protocol_key: str
    protocol_name: str
    phase_number: int
    phase_name: str
    phase_description: str | None = None
    week_start: int = 0
    week_end: int | None = None
    goals: list[str] = []
    precautions: list[str] = []
    progress_criteria: list[str] = []
    phase_defined: bool = True
    assessment_id: int | None = None
    assessment_date: datetime | None = None
    pain_location: str | None = None

    class Config:
        from_attributes = True


class ProtocolExerciseResponse(BaseModel):
    id: int
    title: str
    description: str | None = None
    body_parts: list[str] = []
    difficulty: str
    youtube_video_id: str | None = None
    thumbnail_url: str | None = None
    recommended_sets: int | None = None
    recommended_reps: int | None = None
    recommended_hold_seconds: int | None = None
    display_order: int = 0

    class Config:
        from_attributes = True


class PhaseExercisesResponse(BaseModel):
    protocol_key: str
    phase_number: int
    routine_id: int | None = None
    routine_name: str | None = None
    source: str
    exercises: list[ProtocolExerciseResponse]


class CurrentPlanResponse(BaseModel):
    has_assignment: bool
    phase_info: PhaseInfoResponse | None = None
    routine_id: int | None = None
    routine_name: str | None = None
    source: str
    exercises: list[ProtocolExerciseResponse] = []
