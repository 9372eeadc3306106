from pydantic import BaseModel, Field

from clinical_engine.schemas.enums import Difficulty, ExerciseCategory, RiskLevel


class SymptomQueryRequest(BaseModel):
    body_part: str = ""
    pain_level: int = Field(0, ge=0, le=10)
    pain_type: str = Field("", description="Comma or slash separated descriptors, e.g. 'Sharp/Burning'")
    pain_duration: str = Field("", description="e.g. 'Less than 1 week', '1-3 months'")
    symptoms: list[str] = Field(default_factory=list)


class RecommendationRequest(SymptomQueryRequest):
    red_flags: list[str] = Field(default_factory=list)
    medical_conditions: list[str] = Field(default_factory=list)
    telehealth_available: bool = False


class DosageResponse(BaseModel):
    sets: int
    frequency: str
    reps: int | None = None
    duration: str | None = None
    hold_time: str | None = None
    rest_between_sets: str | None = None


class ExerciseResponse(BaseModel):
    id: str
    name: str
    description: str
    body_parts: list[str]
    pain_types: list[str]
    conditions: list[str]
    difficulty: Difficulty
    category: ExerciseCategory
    dosage: DosageResponse
    max_pain_level: int
    contraindications: list[str] = []
    red_flag_warnings: list[str] = []
    progression_tips: list[str] = []
    regression_tips: list[str] = []
    video_url: str | None = None


class CatalogResponse(BaseModel):
    exercises: list[ExerciseResponse]
    total: int


class ScoreBreakdownResponse(BaseModel):
    body_part: int
    pain_type: int
    difficulty: int
    safety: int
    symptoms: int
    chronic: bool
    total: int


class MatchResultResponse(BaseModel):
    exercise: ExerciseResponse
    score: int = Field(..., ge=0, le=100)
    match_reasons: list[str]
    breakdown: ScoreBreakdownResponse


class MatchListResponse(BaseModel):
    results: list[MatchResultResponse]
    total: int


class RecommendationResponse(BaseModel):
    exercise: ExerciseResponse
    dosage: DosageResponse
    relevance_score: int
    reasoning: str
    safety_notes: list[str]
    red_flag_warnings: list[str]
    progression_tips: list[str]


class AssessmentPlanResponse(BaseModel):
    risk_level: RiskLevel
    triage_reason: str
    red_flags: list[str]
    recommendations: list[RecommendationResponse]
    next_steps: list[str]
