"""Tests for the Outcome Tracker."""
from datetime import datetime, timedelta

import pytest

from clinical_engine.exceptions import UnknownQuestionnaireError
from clinical_engine.models import OutcomeAssessment, Questionnaire, User
from clinical_engine.schemas.enums import ContextType, Improvement, Polarity
from clinical_engine.services.outcome_tracker import (
    INSTRUMENTS,
    OutcomeRecord,
    OutcomeService,
    OutcomeThresholds,
    build_outcome_summary,
    classify_change,
    find_overdue_conditions,
    is_follow_up_due,
)

NOW = datetime(2026, 3, 1, 12, 0, 0)


def record(key: str, score: float, days_ago: int, condition: str = "back", user_id: int = 1) -> OutcomeRecord:
    return OutcomeRecord(
        questionnaire_key=key,
        score=score,
        created_at=NOW - timedelta(days=days_ago),
        condition_tag=condition,
        user_id=user_id,
    )


class TestInstrumentTable:
    def test_every_questionnaire_has_a_polarity(self):
        assert INSTRUMENTS["odi"].polarity == Polarity.LOWER_IS_BETTER
        assert INSTRUMENTS["quickdash"].polarity == Polarity.LOWER_IS_BETTER
        assert INSTRUMENTS["koos"].polarity == Polarity.HIGHER_IS_BETTER
        assert INSTRUMENTS["nprs"].polarity == Polarity.LOWER_IS_BETTER

    def test_classify_change(self):
        assert classify_change(-5, Polarity.LOWER_IS_BETTER) == Improvement.IMPROVED
        assert classify_change(5, Polarity.LOWER_IS_BETTER) == Improvement.WORSENED
        assert classify_change(5, Polarity.HIGHER_IS_BETTER) == Improvement.IMPROVED
        assert classify_change(0, Polarity.HIGHER_IS_BETTER) == Improvement.SAME


class TestBuildOutcomeSummary:
    """Tests for baseline/latest comparison."""

    def test_odi_decrease_is_improvement(self):
        summary = build_outcome_summary("back", [record("odi", 40, 30), record("odi", 28, 1)])

        assert summary.baseline.function.score == 40
        assert summary.latest.function.score == 28
        assert summary.change.function_change == -12
        assert summary.change.function_improvement == Improvement.IMPROVED
        assert summary.change.is_meaningful is True

    @pytest.mark.parametrize("key", ["odi", "quickdash"])
    def test_lower_is_better_increase_is_worsening(self, key):
        summary = build_outcome_summary("x", [record(key, 30, 30), record(key, 40, 1)])
        assert summary.change.function_improvement == Improvement.WORSENED
        assert summary.change.is_meaningful is False

    def test_koos_increase_is_improvement(self):
        summary = build_outcome_summary("knee", [record("koos", 60, 30), record("koos", 70, 1)])
        assert summary.change.function_change == 10
        assert summary.change.function_improvement == Improvement.IMPROVED
        assert summary.change.is_meaningful is True

    def test_koos_decrease_is_worsening(self):
        summary = build_outcome_summary("knee", [record("koos", 60, 30), record("koos", 55, 1)])
        assert summary.change.function_improvement == Improvement.WORSENED

    def test_single_assessment_has_no_change(self):
        summary = build_outcome_summary("back", [record("odi", 40, 3)])

        assert summary.latest == summary.baseline
        assert summary.change is None
        assert summary.assessment_count == 1

    def test_no_rows_gives_empty_summary(self):
        summary = build_outcome_summary("back", [])
        assert summary.has_data is False
        assert summary.baseline.function is None
        assert summary.change is None
        assert summary.final_groc is None

    def test_function_only_leaves_pain_null(self):
        summary = build_outcome_summary("back", [record("odi", 40, 30), record("odi", 30, 1)])
        assert summary.change.function_change == -10
        assert summary.change.pain_change is None
        assert summary.change.pain_improvement is None

    def test_pain_only_leaves_function_null(self):
        summary = build_outcome_summary("hip", [record("nprs", 7, 30), record("nprs", 4, 1)])
        assert summary.change.function_change is None
        assert summary.change.pain_change == -3
        assert summary.change.pain_improvement == Improvement.IMPROVED
        assert summary.change.is_meaningful is True

    def test_sides_are_independent(self):
        rows = [record("odi", 40, 30), record("nprs", 6, 30), record("nprs", 5, 1)]
        summary = build_outcome_summary("back", rows)
        assert summary.change.function_change is None
        assert summary.change.pain_change == -1
        assert summary.change.is_meaningful is False

    def test_improvement_below_mcid_is_not_meaningful(self):
        summary = build_outcome_summary("back", [record("odi", 40, 30), record("odi", 35, 1)])
        assert summary.change.function_improvement == Improvement.IMPROVED
        assert summary.change.is_meaningful is False

    def test_thresholds_are_injected(self):
        thresholds = OutcomeThresholds(mcid={"odi": 4.0})
        summary = build_outcome_summary("back", [record("odi", 40, 30), record("odi", 35, 1)], thresholds)
        assert summary.change.is_meaningful is True

    def test_function_rows_limited_to_baseline_instrument(self):
        rows = [record("odi", 40, 30), record("koos", 90, 10), record("odi", 38, 1)]
        summary = build_outcome_summary("back", rows)
        assert summary.latest.function.questionnaire_key == "odi"
        assert summary.change.function_change == -2

    def test_rows_are_ordered_by_time(self):
        summary = build_outcome_summary("back", [record("odi", 28, 1), record("odi", 40, 30)])
        assert summary.baseline.function.score == 40

    def test_unknown_and_unscored_rows_ignored(self):
        rows = [record("sf36", 50, 20), record("odi", None, 10), record("odi", 40, 5)]
        summary = build_outcome_summary("back", rows)
        assert summary.assessment_count == 1
        assert summary.change is None

    def test_groc_populates_final(self):
        rows = [record("odi", 40, 60), record("odi", 20, 2), record("groc", 5, 1)]
        summary = build_outcome_summary("back", rows)
        assert summary.final_groc.score == 5
        assert summary.final_groc.interpretation == "Very much better"

    def test_groc_absent_leaves_final_empty(self):
        summary = build_outcome_summary("back", [record("odi", 40, 60)])
        assert summary.final_groc is None


class TestFollowUpDue:
    """Tests for follow-up scheduling."""

    def test_due_after_20_days(self):
        assert is_follow_up_due([record("odi", 40, 20)], NOW) is True

    def test_not_due_after_5_days(self):
        assert is_follow_up_due([record("odi", 40, 5)], NOW) is False

    def test_not_due_when_groc_recorded(self):
        rows = [record("odi", 40, 60), record("groc", 4, 30)]
        assert is_follow_up_due(rows, NOW) is False

    def test_due_when_no_rows(self):
        assert is_follow_up_due([], NOW) is True

    def test_window_is_configurable(self):
        assert is_follow_up_due([record("odi", 40, 20)], NOW, follow_up_days=30) is False

    def test_overdue_conditions_sorted_most_overdue_first(self):
        rows = [
            record("odi", 40, 20, condition="back", user_id=1),
            record("koos", 60, 40, condition="knee", user_id=1),
            record("nprs", 5, 3, condition="hip", user_id=2),
            record("quickdash", 30, 50, condition="shoulder", user_id=2),
            record("groc", 3, 50, condition="shoulder", user_id=2),
        ]
        overdue = find_overdue_conditions(rows, NOW)

        assert [(o.user_id, o.condition_tag) for o in overdue] == [(1, "knee"), (1, "back")]
        assert overdue[0].days_since == 40


@pytest.mark.asyncio
class TestOutcomeService:
    """Tests for the storage-backed outcome service."""

    async def _add(self, db_session, user: User, key: str, score: float, days_ago: int, condition: str = "back"):
        db_session.add(
            OutcomeAssessment(
                user_id=user.id,
                questionnaire_key=key,
                condition_tag=condition,
                context_type="baseline",
                normalized_score=score,
                created_at=datetime.utcnow() - timedelta(days=days_ago),
            )
        )
        await db_session.commit()

    async def test_record_assessment_scores_and_stores(self, db_session, test_user: User):
        service = OutcomeService(db_session)
        row = await service.record_assessment(
            user_id=test_user.id,
            questionnaire_key="ODI",
            condition_tag="Back",
            responses=[2] * 10,
            context_type=ContextType.BASELINE,
        )
        await db_session.commit()

        assert row.id is not None
        assert row.questionnaire_key == "odi"
        assert row.condition_tag == "back"
        assert row.normalized_score == 40.0
        assert row.interpretation == "Moderate disability"

    async def test_record_unknown_questionnaire_raises(self, db_session, test_user: User):
        with pytest.raises(UnknownQuestionnaireError):
            await OutcomeService(db_session).record_assessment(test_user.id, "sf36", "back", [1])

    async def test_summary_from_stored_rows(self, db_session, test_user: User):
        await self._add(db_session, test_user, "odi", 40, 30)
        await self._add(db_session, test_user, "odi", 28, 1)

        summary = await OutcomeService(db_session).get_summary(test_user.id, "back")
        assert summary.change.function_change == -12
        assert summary.change.is_meaningful is True

    async def test_questionnaire_mcid_overrides_config(self, db_session, test_user: User):
        db_session.add(Questionnaire(key="odi", display_name="Oswestry Disability Index", mcid=15.0))
        await self._add(db_session, test_user, "odi", 40, 30)
        await self._add(db_session, test_user, "odi", 28, 1)

        summary = await OutcomeService(db_session).get_summary(test_user.id, "back")
        assert summary.change.is_meaningful is False

    async def test_all_summaries_one_per_condition(self, db_session, test_user: User):
        await self._add(db_session, test_user, "odi", 40, 30, condition="back")
        await self._add(db_session, test_user, "koos", 60, 30, condition="knee")

        summaries = await OutcomeService(db_session).get_all_summaries(test_user.id)
        assert [s.condition_tag for s in summaries] == ["back", "knee"]

    async def test_needs_follow_up(self, db_session, test_user: User):
        service = OutcomeService(db_session)
        assert await service.needs_follow_up(test_user.id, "back") is True

        await self._add(db_session, test_user, "odi", 40, 3)
        assert await service.needs_follow_up(test_user.id, "back") is False

        await self._add(db_session, test_user, "koos", 60, 20, condition="knee")
        assert await service.needs_follow_up(test_user.id, "knee") is True

    async def test_overdue_conditions(self, db_session, test_user: User):
        await self._add(db_session, test_user, "odi", 40, 20, condition="back")
        await self._add(db_session, test_user, "koos", 60, 2, condition="knee")

        overdue = await OutcomeService(db_session).get_overdue_conditions()
        assert [o.condition_tag for o in overdue] == ["back"]
