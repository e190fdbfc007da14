"""Text-generation backend used by the scope generator.

The orchestrator only depends on the ``GenerationBackend`` protocol: send
instructions plus a payload with an output budget, get back text and a
completion reason. ``AnthropicBackend`` is the production implementation;
tests substitute scripted stubs.
"""

import logging
import os
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Protocol

import anthropic

from scopegen.config import settings
from scopegen.generation.errors import BackendError, ConfigurationError

logger = logging.getLogger(__name__)

SCOPE_MODEL_MAP = {
    "haiku": "claude-3-5-haiku-20241022",
    "sonnet": "claude-sonnet-4-20250514",
    "opus": "claude-opus-4-20250514",
}


class CompletionReason(StrEnum):
    """Why the backend stopped producing text."""

    COMPLETE = "complete"
    LENGTH_TRUNCATED = "length_truncated"
    OTHER = "other"


@dataclass
class Completion:
    """Backend reply: text (possibly empty) and the reason generation stopped."""

    text: str
    reason: CompletionReason
    raw_reason: str | None = None


class GenerationBackend(Protocol):
    def is_available(self) -> bool:
        """Return False when the backend cannot be called at all (e.g. no credentials)."""
        ...

    async def complete(self, instructions: str, payload: str, max_tokens: int) -> Completion:
        ...


_STOP_REASONS = {
    "end_turn": CompletionReason.COMPLETE,
    "stop_sequence": CompletionReason.COMPLETE,
    "max_tokens": CompletionReason.LENGTH_TRUNCATED,
}


def _extract_text(response: Any) -> str:
    if not response or not hasattr(response, "content"):
        return ""
    parts: list[str] = []
    for block in response.content:
        if isinstance(block, dict):
            if block.get("type") == "text":
                parts.append(block.get("text") or "")
            continue
        if getattr(block, "type", None) == "text":
            parts.append(getattr(block, "text", "") or "")
    return "".join(parts).strip()


class AnthropicBackend:
    """Generation backend backed by the Anthropic Messages API."""

    def __init__(self, model: str | None = None, api_key: str | None = None) -> None:
        self.model = model or settings.scope_model
        self.api_key = api_key or settings.anthropic_api_key
        self._client: anthropic.AsyncAnthropic | None = None

    def is_available(self) -> bool:
        if not self.model:
            return False
        return bool(self.api_key or os.getenv("ANTHROPIC_API_KEY"))

    def _get_client(self) -> anthropic.AsyncAnthropic:
        if not self._client:
            if self.api_key:
                self._client = anthropic.AsyncAnthropic(api_key=self.api_key)
            else:
                self._client = anthropic.AsyncAnthropic()
        return self._client

    async def complete(self, instructions: str, payload: str, max_tokens: int) -> Completion:
        model_id = SCOPE_MODEL_MAP.get(self.model, self.model)
        try:
            response = await self._get_client().messages.create(
                model=model_id,
                max_tokens=max_tokens,
                system=instructions,
                messages=[{"role": "user", "content": payload}],
            )
        except (
            anthropic.AuthenticationError,
            anthropic.PermissionDeniedError,
            anthropic.APIConnectionError,
        ) as exc:
            raise ConfigurationError(f"Generation backend unavailable: {exc}") from exc
        except anthropic.APIError as exc:
            raise BackendError(f"Generation backend request failed: {exc}") from exc

        raw_reason = getattr(response, "stop_reason", None)
        reason = _STOP_REASONS.get(raw_reason, CompletionReason.OTHER)
        text = _extract_text(response)
        logger.debug(
            "Backend replied: model=%s stop_reason=%s chars=%d", model_id, raw_reason, len(text)
        )
        return Completion(text=text, reason=reason, raw_reason=raw_reason)
