"""Output-contract enforcement for AI artifacts."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Type

from pydantic import BaseModel, ValidationError as PydanticValidationError

from app.api.schemas.insights import (
    GoalPlanArtifact,
    HabitOptimizationArtifact,
    WeeklyReportAIPayload,
    WeeklySummaryArtifact,
)
from app.core.errors import ValidationError


class ArtifactKind(str, Enum):
    WEEKLY_SUMMARY = "weekly_summary"
    GOAL_PLAN = "goal_plan"
    HABIT_OPTIMIZATION = "habit_optimization"
    WEEKLY_REPORT = "weekly_report"


ARTIFACT_MODELS: Dict[ArtifactKind, Type[BaseModel]] = {
    ArtifactKind.WEEKLY_SUMMARY: WeeklySummaryArtifact,
    ArtifactKind.GOAL_PLAN: GoalPlanArtifact,
    ArtifactKind.HABIT_OPTIMIZATION: HabitOptimizationArtifact,
    ArtifactKind.WEEKLY_REPORT: WeeklyReportAIPayload,
}


def artifact_fields(kind: ArtifactKind) -> List[str]:
    """Return the wire (camelCase) field names the model must produce."""
    model = ARTIFACT_MODELS[kind]
    return [field.alias or name for name, field in model.model_fields.items()]


def validate_artifact(kind: ArtifactKind, candidate: Any) -> BaseModel:
    """
    Validate a parsed model reply against the artifact contract for `kind`.

    Weekly report payloads are repaired rather than rejected: a non-object reply
    becomes an empty payload and non-sequence list fields become []. Every other
    kind raises ValidationError with field-level violations.
    """
    model = ARTIFACT_MODELS[kind]

    if kind is ArtifactKind.WEEKLY_REPORT:
        return model.model_validate(candidate if isinstance(candidate, dict) else {})

    if not isinstance(candidate, dict):
        raise ValidationError(
            f"{kind.value} output must be a JSON object",
            violations=[{"field": "$", "message": f"expected object, got {type(candidate).__name__}"}],
        )

    try:
        return model.model_validate(candidate)
    except PydanticValidationError as exc:
        violations = _violations_from(exc)
        summary = "; ".join(f"{item['field']}: {item['message']}" for item in violations[:5])
        raise ValidationError(f"{kind.value} output failed validation ({summary})", violations=violations) from exc


def is_valid_artifact(kind: ArtifactKind, candidate: Any) -> bool:
    try:
        validate_artifact(kind, candidate)
    except ValidationError:
        return False
    return True


def _violations_from(exc: PydanticValidationError) -> List[Dict[str, str]]:
    violations: List[Dict[str, str]] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "$"
        violations.append({"field": location, "message": error.get("msg", "invalid value")})
    return violations
