"""Weekly AI report orchestration: one report per user per Sunday-aligned week."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple
from uuid import UUID
from zoneinfo import ZoneInfo

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.schemas.weekly_report import DailyMetric, WeeklyMetrics
from app.core.config import get_settings
from app.core.errors import AccountNotFoundError, InvalidRequestError, ModelOutputError, PersistenceError
from app.db.models.daily_stats import DailyStats
from app.db.models.habit import Habit
from app.db.models.user import User
from app.db.models.weekly_report import WeeklyReport
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services.artifact_validator import ArtifactKind, validate_artifact
from app.services.insight_prompts import build_weekly_report_prompt
from app.services.llm_client import LLMClient, get_llm_client

logger = logging.getLogger(__name__)

END_OF_DAY = time(23, 59, 59, 999000)


@dataclass
class WeeklyReportResult:
    report: WeeklyReport
    created: bool


def fallback_report_payload() -> Dict[str, Any]:
    """Fixed report content used when the model reply cannot be parsed."""
    return {
        "summary": "Weekly productivity report generated.",
        "strengths": ["Tracked weekly activities"],
        "improvements": ["Review daily patterns"],
        "suggestions": ["Maintain consistency"],
    }


def resolve_week_bounds(
    week_start: datetime | None = None,
    week_end: datetime | None = None,
    *,
    now: datetime | None = None,
    week_offset: int = 0,
    timezone_name: str | None = None,
) -> Tuple[datetime, datetime]:
    """
    Return (week_start, week_end) for a reporting period.

    Supplied bounds are used as given (naive values are read in the report
    timezone). Without a start, the week begins on the most recent Sunday at
    00:00:00.000, shifted back `week_offset` weeks; without an end, it closes
    six days after the start at 23:59:59.999.
    """
    if week_offset < 0:
        raise InvalidRequestError("weekOffset must be non-negative")
    zone = ZoneInfo(timezone_name or get_settings().report_timezone)

    if week_start is None:
        current = _localize(now, zone) if now else datetime.now(zone)
        days_since_sunday = (current.weekday() + 1) % 7
        sunday = current.date() - timedelta(days=days_since_sunday + 7 * week_offset)
        week_start = datetime.combine(sunday, time.min, tzinfo=zone)
    else:
        week_start = _localize(week_start, zone)

    if week_end is None:
        week_end = datetime.combine(week_start.date() + timedelta(days=6), END_OF_DAY, tzinfo=week_start.tzinfo)
    else:
        week_end = _localize(week_end, zone)

    if week_end < week_start:
        raise InvalidRequestError("weekEnd must not be before weekStart")
    return week_start, week_end


def aggregate_weekly_metrics(
    week_start: datetime,
    week_end: datetime,
    days: Sequence[DailyMetric],
) -> WeeklyMetrics:
    """Sum the per-day records; the average score is 0 for an empty week."""
    scores = [day.productivity_score for day in days]
    return WeeklyMetrics(
        week_start=week_start,
        week_end=week_end,
        tasks_completed=sum(day.tasks_completed for day in days),
        habits_completed=sum(day.habits_completed for day in days),
        total_focus_minutes=sum(day.focus_minutes for day in days),
        avg_productivity_score=(sum(scores) / len(scores)) if scores else 0.0,
        daily_breakdown=list(days),
    )


def generate_weekly_report(
    db: Session,
    user_id: UUID,
    *,
    week_start: datetime | None = None,
    week_end: datetime | None = None,
    week_offset: int = 0,
    llm: LLMClient | None = None,
    now: datetime | None = None,
    request_id: str | None = None,
) -> WeeklyReportResult:
    """
    Return the user's report for the requested week, generating it if needed.

    An existing report for the week is returned untouched (created=False). A
    model reply that is not JSON is replaced by the fallback content; backend
    failures propagate.
    """
    start, end = resolve_week_bounds(week_start, week_end, now=now, week_offset=week_offset)
    metadata = {"week_start": start.date().isoformat(), "week_end": end.date().isoformat()}

    with trace("weekly_report.generate", metadata=metadata, user_id=str(user_id), request_id=request_id) as report_trace:
        user = _require_user(db, user_id)

        existing = find_existing_report(db, user_id, start, end)
        if existing:
            logger.info("Weekly report %s already exists for user %s (%s)", existing.id, user_id, metadata["week_start"])
            return WeeklyReportResult(report=existing, created=False)

        metrics = aggregate_weekly_metrics(start, end, load_daily_metrics(db, user_id, start, end))
        prompt = build_weekly_report_prompt(
            metrics,
            user_name=user.name,
            active_habits=_count_active_habits(db, user_id),
        )

        client = llm or get_llm_client()
        try:
            candidate = client.complete_json(prompt, ArtifactKind.WEEKLY_REPORT, request_id=request_id)
        except ModelOutputError as exc:
            logger.warning("Weekly report reply unparseable for user %s; using fallback: %s", user_id, exc.message)
            log_metric("weekly_report.fallback.used", 1, metadata={"user_id": str(user_id)})
            candidate = fallback_report_payload()

        payload = validate_artifact(ArtifactKind.WEEKLY_REPORT, candidate)
        report = WeeklyReport(
            user_id=user_id,
            week_start=start,
            week_end=end,
            summary=payload.summary,
            strengths=payload.strengths,
            improvements=payload.improvements,
            suggestions=payload.suggestions,
            productivity_score=metrics.avg_productivity_score,
            total_focus_hours=metrics.total_focus_minutes / 60,
            habits_completed=metrics.habits_completed,
            tasks_completed=metrics.tasks_completed,
        )
        result = _persist_report(db, report, start, end)
        if report_trace:
            report_trace.update(metadata={"report_id": str(result.report.id), "created": result.created})

    return result


def load_latest_weekly_report(db: Session, user_id: UUID) -> Optional[WeeklyReport]:
    """Return the most recently created report for a user, if any."""
    _require_user(db, user_id)
    with _persistence_guard("load latest weekly report"):
        return (
            db.query(WeeklyReport)
            .filter(WeeklyReport.user_id == user_id)
            .order_by(WeeklyReport.created_at.desc())
            .first()
        )


def find_existing_report(db: Session, user_id: UUID, week_start: datetime, week_end: datetime) -> Optional[WeeklyReport]:
    with _persistence_guard("look up existing weekly report"):
        return (
            db.query(WeeklyReport)
            .filter(
                WeeklyReport.user_id == user_id,
                WeeklyReport.week_start >= week_start,
                WeeklyReport.week_start <= week_end,
            )
            .order_by(WeeklyReport.created_at.asc())
            .first()
        )


def load_daily_metrics(db: Session, user_id: UUID, week_start: datetime, week_end: datetime) -> List[DailyMetric]:
    with _persistence_guard("load daily stats"):
        rows = (
            db.query(DailyStats)
            .filter(
                DailyStats.user_id == user_id,
                DailyStats.date >= week_start.date(),
                DailyStats.date <= week_end.date(),
            )
            .order_by(DailyStats.date.asc())
            .all()
        )
    return [
        DailyMetric(
            date=row.date,
            tasks_completed=row.tasks_completed or 0,
            habits_completed=row.habits_completed or 0,
            focus_minutes=row.focus_minutes or 0,
            productivity_score=row.productivity_score or 0.0,
        )
        for row in rows
    ]


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _persist_report(db: Session, report: WeeklyReport, week_start: datetime, week_end: datetime) -> WeeklyReportResult:
    db.add(report)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent request created this week's report first.
        db.rollback()
        winner = find_existing_report(db, report.user_id, week_start, week_end)
        if winner is None:
            raise PersistenceError("Failed to save weekly report")
        logger.info("Weekly report race lost for user %s; returning %s", report.user_id, winner.id)
        return WeeklyReportResult(report=winner, created=False)
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError("Failed to save weekly report") from exc

    db.refresh(report)
    logger.info("Weekly report %s created for user %s", report.id, report.user_id)
    return WeeklyReportResult(report=report, created=True)


def _require_user(db: Session, user_id: UUID) -> User:
    with _persistence_guard("load user"):
        user = db.get(User, user_id)
    if not user:
        raise AccountNotFoundError("User not found")
    return user


def _count_active_habits(db: Session, user_id: UUID) -> int:
    with _persistence_guard("count habits"):
        return db.query(func.count(Habit.id)).filter(Habit.user_id == user_id).scalar() or 0


def _localize(value: datetime, zone: ZoneInfo) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=zone)
    return value.astimezone(zone)


@contextmanager
def _persistence_guard(action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        raise PersistenceError(f"Failed to {action}") from exc
