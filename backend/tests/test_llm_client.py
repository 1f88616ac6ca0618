"""Tests for model invocation and reply cleanup."""
from __future__ import annotations

from types import SimpleNamespace

import httpx
import openai
import pytest

from app.core.errors import BackendError, ModelOutputError
from app.services import llm_client as llm_module
from app.services.artifact_validator import ArtifactKind
from app.services.llm_client import (
    STRICT_JSON_SUFFIX,
    LLMClient,
    OpenAIBackend,
    clean_model_output,
    get_llm_client,
    reset_llm_client,
)


class _StubBackend:
    def __init__(self, reply):
        self.reply = reply
        self.calls = []

    def generate(self, model_id, prompt_text):
        self.calls.append((model_id, prompt_text))
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ('```json\n{"a":1}\n```', '{"a":1}'),
        ('{"a":1}', '{"a":1}'),
        ('```\n{"a":1}\n```', '{"a":1}'),
        ('  \n```json\n{"a":1}\n```\n  ', '{"a":1}'),
        ('```json{"a":1}```', '{"a":1}'),
        ('```json\n{"a":1}', '{"a":1}'),
        ("```json", ""),
        ("", ""),
        ('   {"a":1}   ', '{"a":1}'),
        ('```json\n{"code": "```x```"}\n```', '{"code": "```x```"}'),
        ('```python\nprint(1)\n```', "python\nprint(1)"),
    ],
)
def test_clean_model_output_strips_only_outer_fence(raw, expected) -> None:
    assert clean_model_output(raw) == expected


def test_clean_model_output_is_idempotent() -> None:
    once = clean_model_output('```json\n{"a":1}\n```')
    assert clean_model_output(once) == once


def test_clean_model_output_leaves_inner_backticks_unrepaired() -> None:
    text = 'Here you go:\n```json\n{"a":1}\n```'
    assert clean_model_output(text) == text


def test_generate_appends_strict_json_suffix_and_default_model() -> None:
    backend = _StubBackend('{"ok": true}')
    client = LLMClient(backend, default_model="model-default")

    client.generate("Describe the week.")

    model_id, prompt_text = backend.calls[0]
    assert model_id == "model-default"
    assert prompt_text.startswith("Describe the week.")
    assert prompt_text.endswith(STRICT_JSON_SUFFIX)
    assert "Return ONLY valid JSON object" in prompt_text


def test_complete_json_uses_explicit_model_and_parses_fenced_reply() -> None:
    backend = _StubBackend('```json\n{"summary": "ok"}\n```')
    client = LLMClient(backend, default_model="model-default")

    parsed = client.complete_json("prompt", ArtifactKind.WEEKLY_REPORT, model="model-override")

    assert parsed == {"summary": "ok"}
    assert backend.calls[0][0] == "model-override"


def test_complete_json_raises_model_output_error_for_non_json() -> None:
    client = LLMClient(_StubBackend("not json"), default_model="m")

    with pytest.raises(ModelOutputError) as excinfo:
        client.complete_json("prompt", ArtifactKind.GOAL_PLAN)

    assert excinfo.value.raw_text == "not json"
    assert excinfo.value.status_code == 502


def test_complete_json_does_not_swallow_backend_errors() -> None:
    client = LLMClient(_StubBackend(BackendError("quota exceeded")), default_model="m")

    with pytest.raises(BackendError):
        client.complete_json("prompt", ArtifactKind.GOAL_PLAN)


def test_openai_backend_without_key_raises_backend_error() -> None:
    backend = OpenAIBackend(api_key=None)

    with pytest.raises(BackendError):
        backend.generate("gpt-4o-mini", "hello")


def test_openai_backend_disables_sdk_retries() -> None:
    backend = OpenAIBackend(api_key="test-key", timeout=5.0)

    assert backend._client.max_retries == 0


def test_openai_backend_sends_single_user_message() -> None:
    captured = {}

    def create(**kwargs):
        captured.update(kwargs)
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content='{"a": 1}'))])

    backend = OpenAIBackend(api_key="test-key", temperature=0.2)
    backend._client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))

    assert backend.generate("model-x", "prompt text") == '{"a": 1}'
    assert captured["model"] == "model-x"
    assert captured["temperature"] == 0.2
    assert captured["messages"] == [{"role": "user", "content": "prompt text"}]


def test_openai_backend_wraps_connection_failures() -> None:
    def create(**kwargs):
        raise openai.APIConnectionError(request=httpx.Request("POST", "https://llm.invalid/v1/chat/completions"))

    backend = OpenAIBackend(api_key="test-key")
    backend._client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))

    with pytest.raises(BackendError):
        backend.generate("model-x", "prompt")


def test_get_llm_client_is_created_once(monkeypatch) -> None:
    reset_llm_client()
    created = []
    original = llm_module.OpenAIBackend

    def counting_backend(**kwargs):
        created.append(kwargs)
        return original(**kwargs)

    monkeypatch.setattr(llm_module, "OpenAIBackend", counting_backend)
    try:
        first = get_llm_client()
        second = get_llm_client()
    finally:
        reset_llm_client()

    assert first is second
    assert len(created) == 1


@pytest.mark.parametrize("reply", ["NaN", '{"score": Infinity}', '[-Infinity]'])
def test_complete_json_rejects_non_standard_constants(reply) -> None:
    client = LLMClient(_StubBackend(reply), default_model="m")

    with pytest.raises(ModelOutputError) as excinfo:
        client.complete_json("prompt", ArtifactKind.WEEKLY_REPORT)

    assert "non-standard constant" in excinfo.value.message
