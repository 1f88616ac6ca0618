"""Tests for the on-demand insight generators."""
from __future__ import annotations

import json

import pytest

from app.core.errors import BackendError, InvalidRequestError, ModelOutputError, ValidationError
from app.services.insight_generator import generate_goal_plan, generate_weekly_summary, optimize_habit
from app.services.llm_client import LLMClient


class _StubBackend:
    def __init__(self, reply):
        self.reply = reply
        self.calls = []

    def generate(self, model_id, prompt_text):
        self.calls.append((model_id, prompt_text))
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply


def _client(reply):
    if isinstance(reply, dict):
        reply = json.dumps(reply)
    backend = _StubBackend(reply)
    return LLMClient(backend, default_model="stub-model"), backend


def _summary_reply(tasks, minutes):
    return {
        "summary": "A focused, steady week.",
        "tasksCompleted": tasks,
        "focusMinutes": minutes,
        "topStreak": "Reading",
        "recommendation": "Protect your mornings.",
    }


@pytest.mark.parametrize(("tasks", "minutes"), [(0, 0), (3, 45), (41, 1260)])
def test_weekly_summary_echoes_inputs(tasks, minutes) -> None:
    llm, backend = _client(_summary_reply(tasks, minutes))

    artifact = generate_weekly_summary(tasks, minutes, "Reading", 9, llm=llm)

    assert artifact.tasks_completed == tasks
    assert artifact.focus_minutes == minutes
    assert f"- Tasks completed: {tasks}" in backend.calls[0][1]


def test_weekly_summary_rejects_changed_counts() -> None:
    llm, _ = _client(_summary_reply(5, 100))

    with pytest.raises(ValidationError) as excinfo:
        generate_weekly_summary(4, 100, None, 0, llm=llm)

    assert excinfo.value.violations[0]["field"] == "tasksCompleted"


@pytest.mark.parametrize(
    ("tasks", "minutes"),
    [(None, 10), (10, None), (-1, 10), (10, -5), ("10", 10), (True, 10), (1.5, 10)],
)
def test_weekly_summary_requires_counts_before_calling_model(tasks, minutes) -> None:
    llm, backend = _client(_summary_reply(1, 1))

    with pytest.raises(InvalidRequestError):
        generate_weekly_summary(tasks, minutes, None, 0, llm=llm)

    assert backend.calls == []


def test_goal_plan_returns_bounded_steps() -> None:
    reply = {
        "goal": "Run a half marathon",
        "steps": ["Buy shoes", "Run 3x per week", "Long run on Sundays", "Taper in week 11"],
        "timeline": "12 weeks",
        "focus": "Weekly long-run distance",
    }
    llm, backend = _client(reply)

    plan = generate_goal_plan("Run a half marathon", "Beginner runner", llm=llm)

    assert 2 <= len(plan.steps) <= 8
    assert "Context: Beginner runner" in backend.calls[0][1]


def test_goal_plan_with_nine_steps_fails_validation() -> None:
    reply = {
        "goal": "Learn piano",
        "steps": [f"Step {i}" for i in range(9)],
        "timeline": "6 months",
        "focus": "Practice minutes",
    }
    llm, _ = _client(reply)

    with pytest.raises(ValidationError):
        generate_goal_plan("Learn piano", llm=llm)


@pytest.mark.parametrize("goal", [None, "", "   "])
def test_goal_plan_requires_goal(goal) -> None:
    llm, backend = _client({})

    with pytest.raises(InvalidRequestError):
        generate_goal_plan(goal, llm=llm)

    assert backend.calls == []


def test_goal_plan_surfaces_unparseable_reply() -> None:
    llm, _ = _client("Sure! Here is your plan: step one...")

    with pytest.raises(ModelOutputError):
        generate_goal_plan("Learn piano", llm=llm)


def test_optimize_habit_returns_artifact_from_fenced_reply() -> None:
    reply = json.dumps(
        {
            "habit": "Meditate",
            "currentStreak": 10,
            "suggestion": "Pair it with your first coffee.",
            "motivation": "Ten days in, the habit is forming.",
            "nextStep": "Sit for five minutes after lunch.",
        }
    )
    llm, _ = _client(f"```json\n{reply}\n```")

    artifact = optimize_habit("Meditate", 10, llm=llm)

    assert artifact.habit == "Meditate"
    assert artifact.next_step == "Sit for five minutes after lunch."


def test_optimize_habit_negative_streak_fails_before_model_call() -> None:
    llm, backend = _client({})

    with pytest.raises(InvalidRequestError):
        optimize_habit("Meditate", -1, llm=llm)

    assert backend.calls == []


@pytest.mark.parametrize(("habit", "streak"), [(None, 3), ("", 3), ("Read", None)])
def test_optimize_habit_requires_name_and_streak(habit, streak) -> None:
    llm, backend = _client({})

    with pytest.raises(InvalidRequestError):
        optimize_habit(habit, streak, llm=llm)

    assert backend.calls == []


def test_backend_failures_propagate() -> None:
    llm, _ = _client(BackendError("model unavailable"))

    with pytest.raises(BackendError):
        optimize_habit("Read", 2, llm=llm)
