"""Generative-model invocation: backend adapter, JSON-only enforcement, reply cleanup."""
from __future__ import annotations

import json
import logging
import re
from threading import Lock
from typing import Any, Optional, Protocol

import openai

from app.core.config import get_settings
from app.core.errors import BackendError, ModelOutputError
from app.observability.tracing import annotate_llm_io, trace
from app.services.artifact_validator import ArtifactKind

logger = logging.getLogger(__name__)

STRICT_JSON_SUFFIX = """

CRITICAL REQUIREMENTS:
- Return ONLY valid JSON object
- Do NOT include markdown formatting
- Do NOT include code blocks
- Do NOT include explanation or commentary
- Do NOT include extra text before or after JSON
- Ensure JSON is valid and parseable"""

_JSON_FENCE_OPEN = re.compile(r"\A```json\n?")
_BARE_FENCE_OPEN = re.compile(r"\A```\n?")
_FENCE_CLOSE = re.compile(r"\n?```\Z")


def clean_model_output(text: str) -> str:
    """
    Strip a single markdown code fence wrapping a model reply.

    Only a leading ```json or ``` fence and a trailing ``` fence are removed;
    backticks elsewhere in the text are left alone.
    """
    cleaned = text.strip()
    if cleaned.startswith("```json"):
        cleaned = _FENCE_CLOSE.sub("", _JSON_FENCE_OPEN.sub("", cleaned, count=1), count=1)
    elif cleaned.startswith("```"):
        cleaned = _FENCE_CLOSE.sub("", _BARE_FENCE_OPEN.sub("", cleaned, count=1), count=1)
    return cleaned


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not JSON.
    raise ValueError(f"non-standard constant {name}")


class GenerativeBackend(Protocol):
    def generate(self, model_id: str, prompt_text: str) -> str:
        ...


class OpenAIBackend:
    """Chat-completions backend; any OpenAI-compatible endpoint works via base_url."""

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str | None = None,
        timeout: float = 30.0,
        temperature: float = 0.6,
    ) -> None:
        self.temperature = temperature
        self._client = (
            openai.OpenAI(api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0)
            if api_key
            else None
        )

    def generate(self, model_id: str, prompt_text: str) -> str:
        if self._client is None:
            raise BackendError("LLM_API_KEY is not configured; cannot reach the model backend")
        try:
            completion = self._client.chat.completions.create(
                model=model_id,
                temperature=self.temperature,
                messages=[{"role": "user", "content": prompt_text}],
            )
        except openai.OpenAIError as exc:
            raise BackendError(f"Model backend call failed: {exc}") from exc
        return completion.choices[0].message.content or ""


class LLMClient:
    """Process-wide handle used by every insight operation."""

    def __init__(self, backend: GenerativeBackend, default_model: str) -> None:
        self.backend = backend
        self.default_model = default_model

    def generate(self, prompt: str, *, model: str | None = None) -> str:
        """Send prompt plus the strict-JSON suffix and return the raw reply text."""
        return self.backend.generate(model or self.default_model, f"{prompt}{STRICT_JSON_SUFFIX}")

    def complete_json(
        self,
        prompt: str,
        kind: ArtifactKind,
        *,
        model: str | None = None,
        request_id: str | None = None,
    ) -> Any:
        """Generate, clean, and parse a reply. Raises ModelOutputError on unparseable text."""
        model_id = model or self.default_model
        with trace(
            f"llm.{kind.value}",
            metadata={"artifact_kind": kind.value, "model": model_id},
            request_id=request_id,
        ) as llm_trace:
            raw = self.generate(prompt, model=model_id)
            annotate_llm_io(llm_trace, prompt, raw)

        cleaned = clean_model_output(raw)
        try:
            return json.loads(cleaned, parse_constant=_reject_constant)
        except ValueError as exc:
            logger.warning("Unparseable %s reply from %s: %s", kind.value, model_id, raw[:200])
            reason = exc.msg if isinstance(exc, json.JSONDecodeError) else str(exc)
            raise ModelOutputError(
                f"AI generation failed: {kind.value} reply was not valid JSON ({reason})",
                raw_text=raw,
            ) from exc


_client: Optional[LLMClient] = None
_client_lock = Lock()


def get_llm_client() -> LLMClient:
    """Return the shared LLMClient, creating it on first use."""
    global _client

    if _client is not None:
        return _client

    with _client_lock:
        if _client is None:
            settings = get_settings()
            backend = OpenAIBackend(
                api_key=settings.llm_api_key,
                base_url=settings.llm_base_url,
                timeout=settings.llm_timeout_seconds,
                temperature=settings.llm_temperature,
            )
            _client = LLMClient(backend, default_model=settings.llm_model)
            if not settings.llm_api_key:
                logger.warning("LLM_API_KEY missing; insight generation will fail until configured.")
            else:
                logger.info("LLM client initialized (model=%s).", settings.llm_model)
    return _client


def reset_llm_client() -> None:
    global _client

    with _client_lock:
        _client = None
