"""Scope generation orchestrator.

Drives one intake through build -> backend call -> parse -> normalize ->
validate, with a single escalation to a second, more concise attempt.

Retry policy (at most two backend calls per invocation):

- empty or length-truncated reply on attempt 1: retry with the concise
  instructions and a larger output budget
- reply that is not JSON on attempt 1: retry the same way
- reply that fails schema validation on attempt 1: retry the same way
- any of the above on attempt 2: fail with the matching typed error; schema
  failures report the attempt-2 violations

Configuration and backend API errors are never retried.
"""

import json
import logging
import re
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from scopegen.config import settings
from scopegen.generation.backend import AnthropicBackend, CompletionReason, GenerationBackend
from scopegen.generation.errors import (
    ConfigurationError,
    EmptyResponseError,
    MalformedOutputError,
    SchemaValidationError,
)
from scopegen.generation.normalizer import normalize_model_output
from scopegen.generation.prompts import MAX_ATTEMPTS, build_instructions, build_payload
from scopegen.generation.template import OUTPUT_TEMPLATE
from scopegen.models.intake import Intake
from scopegen.models.scope import ScopeDocument, validate_scope_document

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*\n(.*?)\n?```$", re.DOTALL | re.IGNORECASE)


class GenerationState(StrEnum):
    BUILDING = "building"
    AWAITING_BACKEND = "awaiting_backend"
    PARSING = "parsing"
    VALIDATING = "validating"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class RetryReason(StrEnum):
    NONE = "none"
    TRUNCATED = "truncated"
    INVALID_JSON = "invalid_json"
    SCHEMA_INVALID = "schema_invalid"


@dataclass
class GenerationRun:
    """Per-invocation state. Never shared between calls."""

    project_name: str
    state: GenerationState = GenerationState.BUILDING
    attempt: int = 1
    retry_reason: RetryReason = RetryReason.NONE
    backend_calls: int = 0

    def transition(self, state: GenerationState) -> None:
        logger.debug(
            "Scope generation [%s] attempt %d: %s -> %s",
            self.project_name,
            self.attempt,
            self.state,
            state,
        )
        self.state = state

    @property
    def can_retry(self) -> bool:
        return self.attempt < MAX_ATTEMPTS

    def retry(self, reason: RetryReason) -> None:
        logger.warning(
            "Scope generation [%s] retrying after attempt %d: %s",
            self.project_name,
            self.attempt,
            reason,
        )
        self.transition(GenerationState.RETRYING)
        self.retry_reason = reason
        self.attempt += 1
        self.transition(GenerationState.BUILDING)

    def fail(self, error: Exception) -> Exception:
        self.transition(GenerationState.FAILED)
        return error


def parse_backend_json(text: str) -> Any:
    """Parse backend text as JSON, unwrapping a single surrounding code fence.

    Raises:
        ValueError: if the text is not valid JSON.
        RecursionError: if the JSON nests deeper than the decoder allows.
    """
    stripped = text.strip()
    fence_match = _CODE_FENCE.match(stripped)
    if fence_match:
        stripped = fence_match.group(1).strip()
    return json.loads(stripped)


class ScopeGenerator:
    """Turns a validated intake into a schema-valid scope document."""

    def __init__(
        self,
        backend: GenerationBackend,
        template: dict[str, Any] | None = None,
        max_tokens: int | None = None,
        retry_max_tokens: int | None = None,
    ) -> None:
        self.backend = backend
        self.template = template if template is not None else OUTPUT_TEMPLATE
        self.max_tokens = max_tokens or settings.scope_max_tokens
        self.retry_max_tokens = retry_max_tokens or settings.scope_retry_max_tokens

    def _budget(self, attempt: int) -> int:
        return self.max_tokens if attempt == 1 else self.retry_max_tokens

    async def generate(self, intake: Intake) -> ScopeDocument:
        """Generate a scope document for ``intake``.

        Raises:
            ConfigurationError: backend is not configured or unreachable.
            BackendError: backend API call failed.
            EmptyResponseError: no usable text after the retry.
            MalformedOutputError: text was not JSON after the retry.
            SchemaValidationError: output violated the schema after the retry.
        """
        if not self.backend.is_available():
            raise ConfigurationError("Generation backend is not configured (missing API key)")

        run = GenerationRun(project_name=intake.project_name)
        payload = build_payload(intake, self.template)

        while True:
            instructions = build_instructions(run.attempt)

            run.transition(GenerationState.AWAITING_BACKEND)
            run.backend_calls += 1
            completion = await self.backend.complete(
                instructions, payload, self._budget(run.attempt)
            )

            text = completion.text.strip()
            if not text or completion.reason == CompletionReason.LENGTH_TRUNCATED:
                if run.can_retry:
                    run.retry(RetryReason.TRUNCATED)
                    continue
                raise run.fail(
                    EmptyResponseError(
                        "Generation backend returned no usable text "
                        f"(finish_reason={completion.raw_reason or completion.reason})"
                    )
                )

            run.transition(GenerationState.PARSING)
            try:
                parsed = parse_backend_json(text)
            except (ValueError, RecursionError) as exc:
                if run.can_retry:
                    run.retry(RetryReason.INVALID_JSON)
                    continue
                raise run.fail(
                    MalformedOutputError("Generation backend did not return valid JSON")
                ) from exc

            run.transition(GenerationState.VALIDATING)
            result = validate_scope_document(normalize_model_output(parsed))
            if result.is_valid:
                run.transition(GenerationState.SUCCEEDED)
                logger.info(
                    "Scope generation [%s] succeeded after %d backend call(s)",
                    run.project_name,
                    run.backend_calls,
                )
                return result.document

            if run.can_retry:
                run.retry(RetryReason.SCHEMA_INVALID)
                continue
            raise run.fail(SchemaValidationError(result.issues))


async def generate_scope_from_intake(
    intake: Intake, backend: GenerationBackend | None = None
) -> ScopeDocument:
    """Convenience entry point using the Anthropic backend by default."""
    generator = ScopeGenerator(backend or AnthropicBackend())
    return await generator.generate(intake)
