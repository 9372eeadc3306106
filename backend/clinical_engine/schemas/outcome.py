from datetime import datetime

from pydantic import BaseModel, Field

from clinical_engine.schemas.enums import ContextType, Improvement


class OutcomeAssessmentCreate(BaseModel):
    questionnaire_key: str = Field(..., description="odi, koos, quickdash, nprs or groc")
    condition_tag: str | None = Field(None, description="e.g. back, knee, shoulder")
    pain_location: str | None = Field(None, description="Used to derive condition_tag when it is omitted")
    context_type: ContextType = ContextType.FOLLOWUP
    related_assessment_id: int | None = None
    responses: list[float] = Field(default_factory=list)


class OutcomeAssessmentResponse(BaseModel):
    id: int
    user_id: int
    questionnaire_key: str
    context_type: ContextType
    condition_tag: str
    related_assessment_id: int | None = None
    total_score: float | None = None
    normalized_score: float | None = None
    interpretation: str | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class ScoreSnapshotResponse(BaseModel):
    questionnaire_key: str
    score: float
    created_at: datetime

    class Config:
        from_attributes = True


class OutcomeSnapshotResponse(BaseModel):
    function: ScoreSnapshotResponse | None = None
    pain: ScoreSnapshotResponse | None = None

    class Config:
        from_attributes = True


class OutcomeChangeResponse(BaseModel):
    function_change: float | None = None
    pain_change: float | None = None
    function_improvement: Improvement | None = None
    pain_improvement: Improvement | None = None
    is_meaningful: bool = False

    class Config:
        from_attributes = True


class GrocResponse(BaseModel):
    score: float
    interpretation: str
    created_at: datetime

    class Config:
        from_attributes = True


class OutcomeSummaryResponse(BaseModel):
    condition_tag: str
    baseline: OutcomeSnapshotResponse
    latest: OutcomeSnapshotResponse
    change: OutcomeChangeResponse | None = None
    final_groc: GrocResponse | None = None
    assessment_count: int = 0
    needs_follow_up: bool = False

    class Config:
        from_attributes = True


class OutcomeSummaryListResponse(BaseModel):
    summaries: list[OutcomeSummaryResponse]
    total: int


class FollowUpResponse(BaseModel):
    condition_tag: str
    needs_follow_up: bool
    recommended_questionnaire: str


class OverdueConditionResponse(BaseModel):
    user_id: int | None = None
    condition_tag: str
    last_assessment_at: datetime
    days_since: int

    class Config:
        from_attributes = True
