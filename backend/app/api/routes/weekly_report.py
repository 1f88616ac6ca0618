"""Weekly AI report endpoints."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from app.api.schemas.weekly_report import WeeklyReportPayload, WeeklyReportRequest, WeeklyReportResponse
from app.db.deps import get_db
from app.db.models.weekly_report import WeeklyReport
from app.observability.metrics import log_metric, timed_metric
from app.services.llm_client import LLMClient, get_llm_client
from app.services.weekly_report_service import generate_weekly_report, load_latest_weekly_report

router = APIRouter()


@router.post("/ai/weekly-report", response_model=WeeklyReportResponse, tags=["ai"])
def create_weekly_report(
    request: Request,
    response: Response,
    payload: WeeklyReportRequest,
    db: Session = Depends(get_db),
    llm: LLMClient = Depends(get_llm_client),
) -> WeeklyReportResponse:
    """Generate this week's report, or return the one that already exists (200 vs 201)."""
    request_id = getattr(request.state, "request_id", None)
    with timed_metric("weekly_report.run", {"user_id": str(payload.user_id)}):
        result = generate_weekly_report(
            db,
            payload.user_id,
            week_start=payload.week_start,
            week_end=payload.week_end,
            week_offset=payload.week_offset,
            llm=llm,
            request_id=request_id,
        )

    log_metric(
        "weekly_report.run.report_created",
        1 if result.created else 0,
        metadata={"user_id": str(payload.user_id)},
    )
    response.status_code = status.HTTP_201_CREATED if result.created else status.HTTP_200_OK
    return WeeklyReportResponse(
        data=_payload_from_report(result.report),
        message="Weekly report generated successfully" if result.created else "Report already exists for this week",
        created=result.created,
        request_id=request_id or "",
    )


@router.get("/ai/weekly-report", response_model=WeeklyReportResponse, tags=["ai"])
def latest_weekly_report(
    request: Request,
    user_id: UUID = Query(..., description="User ID"),
    db: Session = Depends(get_db),
) -> WeeklyReportResponse:
    request_id = getattr(request.state, "request_id", None)
    with timed_metric("weekly_report.latest", {"user_id": str(user_id)}):
        report = load_latest_weekly_report(db, user_id)

    if report is None:
        return WeeklyReportResponse(data=None, message="No reports generated yet", request_id=request_id or "")
    return WeeklyReportResponse(data=_payload_from_report(report), request_id=request_id or "")


def _payload_from_report(report: WeeklyReport) -> WeeklyReportPayload:
    return WeeklyReportPayload(
        id=report.id,
        user_id=report.user_id,
        week_start=report.week_start,
        week_end=report.week_end,
        summary=report.summary or "",
        strengths=list(report.strengths or []),
        improvements=list(report.improvements or []),
        suggestions=list(report.suggestions or []),
        productivity_score=report.productivity_score or 0.0,
        total_focus_hours=report.total_focus_hours or 0.0,
        habits_completed=report.habits_completed or 0,
        tasks_completed=report.tasks_completed or 0,
        created_at=report.created_at,
    )
