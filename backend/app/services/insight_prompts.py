"""Deterministic prompt rendering for each AI artifact kind."""
from __future__ import annotations

import json
import math
from typing import Iterable, List, Optional

from app.api.schemas.weekly_report import DailyMetric, WeeklyMetrics
from app.services.artifact_validator import ArtifactKind, artifact_fields

DEFAULT_USER_NAME = "Productivity Tracker User"
STREAK_CONTINUATION_DAYS = 7


def output_directive(kind: ArtifactKind) -> str:
    fields = ", ".join(artifact_fields(kind))
    return (
        "Output format: return ONLY a JSON object with exactly these fields: "
        f"{fields}. Do not wrap it in markdown code fences and do not add commentary."
    )


def build_weekly_summary_prompt(
    tasks_completed: int,
    focus_minutes: int,
    top_habit: Optional[str],
    top_streak_days: int,
) -> str:
    template = {
        "summary": "2-3 sentence overview of the week",
        "tasksCompleted": tasks_completed,
        "focusMinutes": focus_minutes,
        "topStreak": "habit name or 'No habits tracked'",
        "recommendation": "One specific actionable recommendation for next week",
    }
    return (
        "Generate a weekly productivity summary based on this data:\n"
        f"- Tasks completed: {tasks_completed}\n"
        f"- Focus time: {focus_minutes} minutes\n"
        f"- Top habit streak: {top_habit or 'None'} ({top_streak_days} days)\n\n"
        "Return JSON with schema:\n"
        f"{json.dumps(template, indent=2)}\n\n"
        f"{output_directive(ArtifactKind.WEEKLY_SUMMARY)}"
    )


def build_goal_plan_prompt(goal: str, context: Optional[str] = None) -> str:
    template = {
        "goal": goal,
        "steps": ["step 1", "step 2", "step 3", "step 4"],
        "timeline": "Realistic timeline estimate",
        "focus": "Primary focus area or metric to track",
    }
    return (
        f'Create an actionable plan for this goal: "{goal}"\n'
        f"{_context_line(context)}"
        "\nReturn JSON with schema:\n"
        f"{json.dumps(template, indent=2, ensure_ascii=False)}\n\n"
        "Provide 4-6 specific, actionable steps.\n"
        f"{output_directive(ArtifactKind.GOAL_PLAN)}"
    )


def build_habit_optimization_prompt(habit_name: str, current_streak: int, context: Optional[str] = None) -> str:
    phase = "continuation" if current_streak > STREAK_CONTINUATION_DAYS else "building"
    template = {
        "habit": habit_name,
        "currentStreak": current_streak,
        "suggestion": "Specific suggestion to improve the habit",
        "motivation": f"Motivational insight for streak {phase}",
        "nextStep": "Next concrete action to take today",
    }
    return (
        f'Optimize this habit: "{habit_name}" with {current_streak} day streak.\n'
        f"{_context_line(context)}"
        "\nReturn JSON with schema:\n"
        f"{json.dumps(template, indent=2, ensure_ascii=False)}\n\n"
        f"{output_directive(ArtifactKind.HABIT_OPTIMIZATION)}"
    )


def build_weekly_report_prompt(
    metrics: WeeklyMetrics,
    *,
    user_name: Optional[str],
    active_habits: int,
) -> str:
    template = {
        "summary": "A brief 2-3 sentence overall summary of the week's productivity",
        "strengths": ["strength1", "strength2", "strength3"],
        "improvements": ["area_to_improve_1", "area_to_improve_2", "area_to_improve_3"],
        "suggestions": ["actionable_suggestion_1", "actionable_suggestion_2", "actionable_suggestion_3"],
    }
    return (
        "Based on the following weekly productivity data, generate a professional "
        "AI-powered productivity report.\n\n"
        f"User: {user_name or DEFAULT_USER_NAME}\n"
        f"Week: {metrics.week_start.date().isoformat()} to {metrics.week_end.date().isoformat()}\n\n"
        "Weekly Statistics:\n"
        f"- Tasks Completed: {metrics.tasks_completed}\n"
        f"- Habits Completed: {metrics.habits_completed}\n"
        f"- Total Focus Hours: {metrics.total_focus_minutes / 60:.1f}\n"
        f"- Average Productivity Score: {round_half_up(metrics.avg_productivity_score)}/100\n"
        f"- Number of Active Habits: {active_habits}\n\n"
        "Daily Breakdown:\n"
        f"{render_daily_breakdown(metrics.daily_breakdown)}\n\n"
        "Please provide a structured AI analysis in the following JSON format (ONLY JSON, no markdown):\n"
        f"{json.dumps(template, indent=2)}\n\n"
        f"{output_directive(ArtifactKind.WEEKLY_REPORT)}"
    )


def render_daily_breakdown(days: Iterable[DailyMetric]) -> str:
    lines: List[str] = [
        f"{day.date.isoformat()}: {day.tasks_completed} tasks, {day.habits_completed} habits, "
        f"{day.focus_minutes}min focus, {format_number(day.productivity_score)}/100 score"
        for day in days
    ]
    return "\n".join(lines)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_number(value: float | int) -> str:
    """Render integral values without a trailing '.0'."""
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return str(number)


def _context_line(context: Optional[str]) -> str:
    if context and context.strip():
        return f"Context: {context.strip()}\n"
    return ""
