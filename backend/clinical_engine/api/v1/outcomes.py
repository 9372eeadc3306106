from dataclasses import asdict

from fastapi import APIRouter, HTTPException, status

from clinical_engine.api.deps import CurrentUser, DbSession, Outcomes
from clinical_engine.exceptions import UnknownQuestionnaireError
from clinical_engine.models import OutcomeAssessment
from clinical_engine.schemas.outcome import (
    FollowUpResponse,
    OutcomeAssessmentCreate,
    OutcomeAssessmentResponse,
    OutcomeSummaryListResponse,
    OutcomeSummaryResponse,
    OverdueConditionResponse,
)
from clinical_engine.services.outcome_tracker import OutcomeSummary
from clinical_engine.services.questionnaire_scoring import (
    map_pain_location_to_condition,
    questionnaire_key_for_condition,
)

router = APIRouter()


def _summary_response(summary: OutcomeSummary, needs_follow_up: bool) -> OutcomeSummaryResponse:
    return OutcomeSummaryResponse(**asdict(summary), needs_follow_up=needs_follow_up)


@router.post("", response_model=OutcomeAssessmentResponse, status_code=status.HTTP_201_CREATED)
async def create_outcome_assessment(
    assessment_in: OutcomeAssessmentCreate,
    current_user: CurrentUser,
    db: DbSession,
    outcomes: Outcomes,
) -> OutcomeAssessment:
    """Score questionnaire responses and append them to the user's history."""
    condition_tag = assessment_in.condition_tag or map_pain_location_to_condition(assessment_in.pain_location)

    try:
        row = await outcomes.record_assessment(
            user_id=current_user.id,
            questionnaire_key=assessment_in.questionnaire_key,
            condition_tag=condition_tag,
            responses=assessment_in.responses,
            context_type=assessment_in.context_type,
            related_assessment_id=assessment_in.related_assessment_id,
        )
    except UnknownQuestionnaireError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    await db.commit()
    await db.refresh(row)
    return row


@router.get("/summaries", response_model=OutcomeSummaryListResponse)
async def list_outcome_summaries(
    current_user: CurrentUser,
    outcomes: Outcomes,
) -> OutcomeSummaryListResponse:
    """One summary per condition the user has tracked."""
    summaries = await outcomes.get_all_summaries(current_user.id)

    responses = [
        _summary_response(s, await outcomes.needs_follow_up(current_user.id, s.condition_tag))
        for s in summaries
    ]
    return OutcomeSummaryListResponse(summaries=responses, total=len(responses))


@router.get("/summary/{condition_tag}", response_model=OutcomeSummaryResponse)
async def get_outcome_summary(
    condition_tag: str,
    current_user: CurrentUser,
    outcomes: Outcomes,
) -> OutcomeSummaryResponse:
    """Baseline vs latest comparison for one condition."""
    condition_tag = condition_tag.lower()
    summary = await outcomes.get_summary(current_user.id, condition_tag)
    needs_follow_up = await outcomes.needs_follow_up(current_user.id, condition_tag)
    return _summary_response(summary, needs_follow_up)


@router.get("/follow-up/{condition_tag}", response_model=FollowUpResponse)
async def get_follow_up_status(
    condition_tag: str,
    current_user: CurrentUser,
    outcomes: Outcomes,
) -> FollowUpResponse:
    """Whether the condition is due for another questionnaire."""
    return FollowUpResponse(
        condition_tag=condition_tag.lower(),
        needs_follow_up=await outcomes.needs_follow_up(current_user.id, condition_tag),
        recommended_questionnaire=questionnaire_key_for_condition(condition_tag).value,
    )


@router.get("/overdue", response_model=list[OverdueConditionResponse])
async def list_overdue_conditions(
    outcomes: Outcomes,
) -> list[OverdueConditionResponse]:
    """Clinic dashboard: conditions awaiting follow-up, most overdue first."""
    overdue = await outcomes.get_overdue_conditions()
    return [OverdueConditionResponse(**asdict(o)) for o in overdue]
