"""On-demand AI insight endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from app.api.schemas.insights import (
    GoalPlanRequest,
    GoalPlanResponse,
    HabitOptimizationResponse,
    OptimizeHabitRequest,
    SummarizeRequest,
    WeeklySummaryResponse,
)
from app.services.insight_generator import generate_goal_plan, generate_weekly_summary, optimize_habit
from app.services.llm_client import LLMClient, get_llm_client

router = APIRouter()


@router.post("/ai/summarize", response_model=WeeklySummaryResponse, tags=["ai"])
def summarize_week(
    request: Request,
    payload: SummarizeRequest,
    llm: LLMClient = Depends(get_llm_client),
) -> WeeklySummaryResponse:
    """Generate a weekly summary from caller-supplied totals."""
    request_id = getattr(request.state, "request_id", None)
    artifact = generate_weekly_summary(
        payload.tasks_completed,
        payload.focus_minutes,
        payload.top_habit,
        payload.top_streak_days,
        llm=llm,
        request_id=request_id,
    )
    return WeeklySummaryResponse(data=artifact, request_id=request_id or "")


@router.post("/ai/plan", response_model=GoalPlanResponse, tags=["ai"])
def plan_goal(
    request: Request,
    payload: GoalPlanRequest,
    llm: LLMClient = Depends(get_llm_client),
) -> GoalPlanResponse:
    request_id = getattr(request.state, "request_id", None)
    artifact = generate_goal_plan(payload.goal, payload.context, llm=llm, request_id=request_id)
    return GoalPlanResponse(data=artifact, request_id=request_id or "")


@router.post("/ai/optimize", response_model=HabitOptimizationResponse, tags=["ai"])
def optimize(
    request: Request,
    payload: OptimizeHabitRequest,
    llm: LLMClient = Depends(get_llm_client),
) -> HabitOptimizationResponse:
    request_id = getattr(request.state, "request_id", None)
    artifact = optimize_habit(
        payload.habit_name,
        payload.current_streak,
        payload.context,
        llm=llm,
        request_id=request_id,
    )
    return HabitOptimizationResponse(data=artifact, request_id=request_id or "")
