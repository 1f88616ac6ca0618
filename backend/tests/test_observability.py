"""Tests ensuring observability wiring is safe by default."""
from __future__ import annotations

import importlib

from app.observability import client as client_module
from app.observability import tracing


def test_app_import_succeeds_when_opik_is_disabled(monkeypatch) -> None:
    monkeypatch.setenv("OPIK_ENABLED", "false")
    monkeypatch.delenv("OPIK_API_KEY", raising=False)

    import app.core.config as core_config
    import app.main as main_module

    importlib.reload(core_config)
    importlib.reload(client_module)
    reloaded_app = importlib.reload(main_module)

    paths = {route.path for route in reloaded_app.app.routes}
    assert {"/ai/summarize", "/ai/weekly-report", "/health"}.issubset(paths)


def test_trace_is_noop_without_client(monkeypatch) -> None:
    monkeypatch.setattr(tracing, "get_opik_client", lambda: None)

    with tracing.trace("llm.goal_plan", metadata={"model": None}) as active:
        assert active is None


def test_enabled_without_api_key_skips_init(monkeypatch) -> None:
    settings = client_module.get_settings()
    monkeypatch.setattr(settings, "opik_enabled", True)
    monkeypatch.setattr(settings, "opik_api_key", None)
    client_module.reset_opik_client()
    try:
        assert client_module.init_opik() is None
    finally:
        client_module.reset_opik_client()
