"""Regression tests for application route registration."""
import pytest
from fastapi.routing import APIRoute

from app.main import app


@pytest.mark.parametrize(
    ("path", "method"),
    [
        ("/ai/summarize", "POST"),
        ("/ai/plan", "POST"),
        ("/ai/optimize", "POST"),
        ("/ai/weekly-report", "POST"),
        ("/ai/weekly-report", "GET"),
    ],
)
def test_ai_route_registered_once(path, method) -> None:
    """Ensure each AI endpoint is not mounted multiple times."""
    matches = [
        route
        for route in app.routes
        if isinstance(route, APIRoute) and route.path == path and method in route.methods
    ]
    assert len(matches) == 1
