"""
Outcome Tracker - Summarizes a user's outcome questionnaire history.

A condition's rows form an append-only time series. The summary compares the
earliest (baseline) and most recent (latest) score per instrument role:
- function: odi, koos, quickdash
- pain:     nprs
- global:   groc (terminal rating, reported as-is)

Improvement direction comes from the INSTRUMENTS polarity table; ODI and
QuickDASH improve downward, KOOS upward, pain always downward.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clinical_engine.exceptions import UnknownQuestionnaireError
from clinical_engine.models import OutcomeAssessment, Questionnaire
from clinical_engine.schemas.enums import (
    ContextType,
    Improvement,
    InstrumentRole,
    Polarity,
    QuestionnaireKey,
)
from clinical_engine.services.questionnaire_scoring import calculate_score, interpret_groc
from clinical_engine.services.scoring_config import OutcomeConfig, get_scoring_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstrumentSpec:
    role: InstrumentRole
    polarity: Polarity
    min_score: float
    max_score: float


INSTRUMENTS: dict[str, InstrumentSpec] = {
    QuestionnaireKey.ODI.value: InstrumentSpec(InstrumentRole.FUNCTION, Polarity.LOWER_IS_BETTER, 0, 100),
    QuestionnaireKey.KOOS.value: InstrumentSpec(InstrumentRole.FUNCTION, Polarity.HIGHER_IS_BETTER, 0, 100),
    QuestionnaireKey.QUICKDASH.value: InstrumentSpec(InstrumentRole.FUNCTION, Polarity.LOWER_IS_BETTER, 0, 100),
    QuestionnaireKey.NPRS.value: InstrumentSpec(InstrumentRole.PAIN, Polarity.LOWER_IS_BETTER, 0, 10),
    QuestionnaireKey.GROC.value: InstrumentSpec(InstrumentRole.GLOBAL, Polarity.HIGHER_IS_BETTER, -7, 7),
}


def get_instrument(questionnaire_key: str) -> InstrumentSpec:
    spec = INSTRUMENTS.get((questionnaire_key or "").lower())
    if spec is None:
        raise UnknownQuestionnaireError(questionnaire_key)
    return spec


@dataclass
class OutcomeRecord:
    """One scored outcome row, detached from storage."""
    questionnaire_key: str
    score: Optional[float]
    created_at: datetime
    condition_tag: str = ""
    user_id: Optional[int] = None
    id: Optional[int] = None

    @classmethod
    def from_model(cls, row: OutcomeAssessment) -> "OutcomeRecord":
        score = row.normalized_score if row.normalized_score is not None else row.total_score
        return cls(
            questionnaire_key=(row.questionnaire_key or "").lower(),
            score=score,
            created_at=row.created_at,
            condition_tag=row.condition_tag,
            user_id=row.user_id,
            id=row.id,
        )


@dataclass
class OutcomeThresholds:
    """Minimal clinically important differences per questionnaire key."""
    mcid: dict[str, float] = field(default_factory=dict)
    default_function_mcid: float = 10.0

    @classmethod
    def from_config(
        cls,
        config: Optional[OutcomeConfig] = None,
        overrides: Optional[dict[str, float]] = None,
    ) -> "OutcomeThresholds":
        if config is None:
            config = get_scoring_config().outcomes
        mcid = {**config.mcid, **(overrides or {})}
        return cls(mcid=mcid, default_function_mcid=config.default_function_mcid)

    def for_key(self, questionnaire_key: str) -> Optional[float]:
        value = self.mcid.get(questionnaire_key)
        if value is None and INSTRUMENTS[questionnaire_key].role == InstrumentRole.FUNCTION:
            return self.default_function_mcid
        return value


@dataclass
class ScoreSnapshot:
    questionnaire_key: str
    score: float
    created_at: datetime


@dataclass
class OutcomeSnapshot:
    function: Optional[ScoreSnapshot] = None
    pain: Optional[ScoreSnapshot] = None


@dataclass
class OutcomeChange:
    function_change: Optional[float] = None
    pain_change: Optional[float] = None
    function_improvement: Optional[Improvement] = None
    pain_improvement: Optional[Improvement] = None
    is_meaningful: bool = False


@dataclass
class GrocResult:
    score: float
    interpretation: str
    created_at: datetime


@dataclass
class OutcomeSummary:
    condition_tag: str
    baseline: OutcomeSnapshot
    latest: OutcomeSnapshot
    change: Optional[OutcomeChange] = None
    final_groc: Optional[GrocResult] = None
    assessment_count: int = 0

    @property
    def has_data(self) -> bool:
        return self.assessment_count > 0


def classify_change(change: float, polarity: Polarity) -> Improvement:
    """Direction of a signed (latest - baseline) change for an instrument polarity."""
    if change == 0:
        return Improvement.SAME
    improved = change < 0 if polarity == Polarity.LOWER_IS_BETTER else change > 0
    return Improvement.IMPROVED if improved else Improvement.WORSENED


def _ordered(rows: Iterable[OutcomeRecord]) -> list[OutcomeRecord]:
    return sorted(rows, key=lambda r: (r.created_at, r.id or 0))


def _snapshot(row: Optional[OutcomeRecord]) -> Optional[ScoreSnapshot]:
    if row is None:
        return None
    return ScoreSnapshot(row.questionnaire_key, row.score, row.created_at)


def _compare(
    baseline: Optional[OutcomeRecord],
    latest: Optional[OutcomeRecord],
    thresholds: OutcomeThresholds,
) -> tuple[Optional[float], Optional[Improvement], bool]:
    """Signed change, direction and meaningfulness for one role."""
    if baseline is None or latest is None or latest is baseline:
        return None, None, False

    change = round(latest.score - baseline.score, 1)
    direction = classify_change(change, INSTRUMENTS[baseline.questionnaire_key].polarity)
    mcid = thresholds.for_key(baseline.questionnaire_key)
    meaningful = direction == Improvement.IMPROVED and mcid is not None and abs(change) >= mcid
    return change, direction, meaningful


def build_outcome_summary(
    condition_tag: str,
    rows: Sequence[OutcomeRecord],
    thresholds: Optional[OutcomeThresholds] = None,
) -> OutcomeSummary:
    """
    Summarize one condition's outcome rows.

    Rows with unknown questionnaire keys or no score are ignored. Function
    change is only computed between rows of the baseline's instrument. A
    side whose latest row is its baseline row has no change; the change
    block is omitted when neither side changed.
    """
    if thresholds is None:
        thresholds = OutcomeThresholds.from_config()

    usable = _ordered(
        r for r in rows
        if r.questionnaire_key in INSTRUMENTS and r.score is not None
    )

    by_role: dict[InstrumentRole, list[OutcomeRecord]] = {role: [] for role in InstrumentRole}
    for row in usable:
        by_role[INSTRUMENTS[row.questionnaire_key].role].append(row)

    function_rows = by_role[InstrumentRole.FUNCTION]
    if function_rows:
        instrument = function_rows[0].questionnaire_key
        function_rows = [r for r in function_rows if r.questionnaire_key == instrument]
    pain_rows = by_role[InstrumentRole.PAIN]
    groc_rows = by_role[InstrumentRole.GLOBAL]

    baseline_function = function_rows[0] if function_rows else None
    latest_function = function_rows[-1] if function_rows else None
    baseline_pain = pain_rows[0] if pain_rows else None
    latest_pain = pain_rows[-1] if pain_rows else None

    function_change, function_improvement, function_meaningful = _compare(
        baseline_function, latest_function, thresholds
    )
    pain_change, pain_improvement, pain_meaningful = _compare(baseline_pain, latest_pain, thresholds)

    change = None
    if function_change is not None or pain_change is not None:
        change = OutcomeChange(
            function_change=function_change,
            pain_change=pain_change,
            function_improvement=function_improvement,
            pain_improvement=pain_improvement,
            is_meaningful=function_meaningful or pain_meaningful,
        )

    final_groc = None
    if groc_rows:
        last = groc_rows[-1]
        final_groc = GrocResult(score=last.score, interpretation=interpret_groc(last.score), created_at=last.created_at)

    return OutcomeSummary(
        condition_tag=condition_tag,
        baseline=OutcomeSnapshot(function=_snapshot(baseline_function), pain=_snapshot(baseline_pain)),
        latest=OutcomeSnapshot(function=_snapshot(latest_function), pain=_snapshot(latest_pain)),
        change=change,
        final_groc=final_groc,
        assessment_count=len(usable),
    )


def is_follow_up_due(
    rows: Sequence[OutcomeRecord],
    now: Optional[datetime] = None,
    follow_up_days: Optional[int] = None,
) -> bool:
    """
    Whether a condition needs another questionnaire.

    Due when there are no rows yet (a baseline is missing), or when the
    latest row is older than the follow-up window and no GROC row exists.
    """
    if follow_up_days is None:
        follow_up_days = get_scoring_config().outcomes.follow_up_days
    now = now or datetime.utcnow()

    if not rows:
        return True
    if any(r.questionnaire_key == QuestionnaireKey.GROC.value for r in rows):
        return False

    latest = _ordered(rows)[-1]
    return now - latest.created_at > timedelta(days=follow_up_days)


@dataclass
class OverdueCondition:
    user_id: Optional[int]
    condition_tag: str
    last_assessment_at: datetime
    days_since: int


def find_overdue_conditions(
    rows: Sequence[OutcomeRecord],
    now: Optional[datetime] = None,
    follow_up_days: Optional[int] = None,
) -> list[OverdueCondition]:
    """Conditions (per user) whose follow-up is due, most overdue first."""
    now = now or datetime.utcnow()

    groups: dict[tuple[Optional[int], str], list[OutcomeRecord]] = {}
    for row in rows:
        groups.setdefault((row.user_id, row.condition_tag), []).append(row)

    overdue: list[OverdueCondition] = []
    for (user_id, condition_tag), group in groups.items():
        if not is_follow_up_due(group, now, follow_up_days):
            continue
        latest = _ordered(group)[-1]
        overdue.append(
            OverdueCondition(
                user_id=user_id,
                condition_tag=condition_tag,
                last_assessment_at=latest.created_at,
                days_since=(now - latest.created_at).days,
            )
        )

    return sorted(overdue, key=lambda o: o.last_assessment_at)


class OutcomeService:
    """Reads and appends outcome rows, delegating to the pure summary functions."""

    def __init__(self, db: AsyncSession, config: Optional[OutcomeConfig] = None):
        self.db = db
        self.config = config or get_scoring_config().outcomes

    async def _rows(self, user_id: int, condition_tag: Optional[str] = None) -> list[OutcomeRecord]:
        query = select(OutcomeAssessment).where(OutcomeAssessment.user_id == user_id)
        if condition_tag is not None:
            query = query.where(OutcomeAssessment.condition_tag == condition_tag.lower())
        result = await self.db.execute(
            query.order_by(OutcomeAssessment.created_at, OutcomeAssessment.id)
        )
        return [OutcomeRecord.from_model(row) for row in result.scalars().all()]

    async def get_thresholds(self) -> OutcomeThresholds:
        """Configured MCIDs, overridden by questionnaire rows that define one."""
        result = await self.db.execute(
            select(Questionnaire.key, Questionnaire.mcid).where(Questionnaire.mcid.is_not(None))
        )
        overrides = {key.lower(): float(mcid) for key, mcid in result.all()}
        return OutcomeThresholds.from_config(self.config, overrides)

    async def get_summary(self, user_id: int, condition_tag: str) -> OutcomeSummary:
        rows = await self._rows(user_id, condition_tag)
        return build_outcome_summary(condition_tag, rows, await self.get_thresholds())

    async def get_all_summaries(self, user_id: int) -> list[OutcomeSummary]:
        """One summary per condition the user has outcome rows for."""
        rows = await self._rows(user_id)
        thresholds = await self.get_thresholds()

        by_condition: dict[str, list[OutcomeRecord]] = {}
        for row in rows:
            by_condition.setdefault(row.condition_tag, []).append(row)

        return [
            build_outcome_summary(tag, tag_rows, thresholds)
            for tag, tag_rows in sorted(by_condition.items())
        ]

    async def needs_follow_up(self, user_id: int, condition_tag: str, now: Optional[datetime] = None) -> bool:
        rows = await self._rows(user_id, condition_tag)
        return is_follow_up_due(rows, now, self.config.follow_up_days)

    async def get_overdue_conditions(self, now: Optional[datetime] = None) -> list[OverdueCondition]:
        """Clinic-wide list of conditions awaiting a follow-up questionnaire."""
        result = await self.db.execute(
            select(OutcomeAssessment).order_by(OutcomeAssessment.created_at, OutcomeAssessment.id)
        )
        rows = [OutcomeRecord.from_model(row) for row in result.scalars().all()]
        return find_overdue_conditions(rows, now, self.config.follow_up_days)

    async def record_assessment(
        self,
        user_id: int,
        questionnaire_key: str,
        condition_tag: str,
        responses: Sequence[float],
        context_type: ContextType = ContextType.FOLLOWUP,
        related_assessment_id: Optional[int] = None,
    ) -> OutcomeAssessment:
        """Score the responses and append a new outcome row."""
        key = (questionnaire_key or "").lower()
        get_instrument(key)
        score = calculate_score(key, responses)

        row = OutcomeAssessment(
            user_id=user_id,
            questionnaire_key=key,
            context_type=context_type.value,
            condition_tag=condition_tag.lower(),
            related_assessment_id=related_assessment_id,
            total_score=score.total_score,
            normalized_score=score.normalized_score,
            interpretation=score.interpretation,
            created_at=datetime.utcnow(),
        )
        self.db.add(row)
        await self.db.flush()

        logger.info(
            "Outcome assessment recorded",
            extra={
                "user_id": user_id,
                "questionnaire_key": key,
                "condition_tag": row.condition_tag,
                "normalized_score": score.normalized_score,
            },
        )
        return row
