"""On-demand AI artifacts: weekly summary, goal plan, habit optimization."""
from __future__ import annotations

import logging
from typing import Any, Optional

from app.api.schemas.insights import GoalPlanArtifact, HabitOptimizationArtifact, WeeklySummaryArtifact
from app.core.errors import InvalidRequestError, ValidationError
from app.observability.metrics import timed_metric
from app.observability.tracing import trace
from app.services.artifact_validator import ArtifactKind, validate_artifact
from app.services.insight_prompts import (
    build_goal_plan_prompt,
    build_habit_optimization_prompt,
    build_weekly_summary_prompt,
)
from app.services.llm_client import LLMClient, get_llm_client

logger = logging.getLogger(__name__)


def generate_weekly_summary(
    tasks_completed: Any,
    focus_minutes: Any,
    top_habit: Optional[str] = None,
    top_streak_days: Any = 0,
    *,
    llm: LLMClient | None = None,
    request_id: str | None = None,
) -> WeeklySummaryArtifact:
    """Summarize a week of activity; the artifact echoes the supplied counts."""
    tasks_completed = _require_count("tasksCompleted", tasks_completed)
    focus_minutes = _require_count("focusMinutes", focus_minutes)
    top_streak_days = _require_count("topStreakDays", 0 if top_streak_days is None else top_streak_days)
    top_habit = top_habit.strip() if isinstance(top_habit, str) and top_habit.strip() else None

    prompt = build_weekly_summary_prompt(tasks_completed, focus_minutes, top_habit, top_streak_days)
    metadata = {"tasks_completed": tasks_completed, "focus_minutes": focus_minutes}
    with timed_metric("insights.summary", metadata), trace("insights.summary", metadata=metadata, request_id=request_id):
        artifact = _generate(ArtifactKind.WEEKLY_SUMMARY, prompt, llm, request_id)
        _require_echo(ArtifactKind.WEEKLY_SUMMARY, "tasksCompleted", artifact.tasks_completed, tasks_completed)
        _require_echo(ArtifactKind.WEEKLY_SUMMARY, "focusMinutes", artifact.focus_minutes, focus_minutes)
    return artifact


def generate_goal_plan(
    goal: Any,
    context: Optional[str] = None,
    *,
    llm: LLMClient | None = None,
    request_id: str | None = None,
) -> GoalPlanArtifact:
    """Break a goal into 2-8 actionable steps."""
    if not isinstance(goal, str) or not goal.strip():
        raise InvalidRequestError("Goal is required")

    prompt = build_goal_plan_prompt(goal.strip(), context)
    with timed_metric("insights.plan"), trace("insights.plan", metadata={"goal_length": len(goal)}, request_id=request_id):
        return _generate(ArtifactKind.GOAL_PLAN, prompt, llm, request_id)


def optimize_habit(
    habit_name: Any,
    current_streak: Any,
    context: Optional[str] = None,
    *,
    llm: LLMClient | None = None,
    request_id: str | None = None,
) -> HabitOptimizationArtifact:
    if not isinstance(habit_name, str) or not habit_name.strip():
        raise InvalidRequestError("Habit name and streak are required")
    if current_streak is None:
        raise InvalidRequestError("Habit name and streak are required")
    current_streak = _require_count("currentStreak", current_streak)

    prompt = build_habit_optimization_prompt(habit_name.strip(), current_streak, context)
    metadata = {"current_streak": current_streak}
    with timed_metric("insights.optimize", metadata), trace("insights.optimize", metadata=metadata, request_id=request_id):
        artifact = _generate(ArtifactKind.HABIT_OPTIMIZATION, prompt, llm, request_id)
        _require_echo(ArtifactKind.HABIT_OPTIMIZATION, "currentStreak", artifact.current_streak, current_streak)
    return artifact


def _generate(kind: ArtifactKind, prompt: str, llm: LLMClient | None, request_id: str | None):
    client = llm or get_llm_client()
    candidate = client.complete_json(prompt, kind, request_id=request_id)
    artifact = validate_artifact(kind, candidate)
    logger.info("Generated %s artifact", kind.value)
    return artifact


def _require_count(field: str, value: Any) -> int:
    if value is None:
        raise InvalidRequestError(f"{field} is required")
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidRequestError(f"{field} must be an integer")
    if value < 0:
        raise InvalidRequestError(f"{field} must be non-negative")
    return value


def _require_echo(kind: ArtifactKind, field: str, actual: int, expected: int) -> None:
    if actual != expected:
        raise ValidationError(
            f"{kind.value} output changed {field} from {expected} to {actual}",
            violations=[{"field": field, "message": f"expected {expected}, got {actual}"}],
        )
