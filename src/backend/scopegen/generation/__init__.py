"""Scope generation pipeline: prompts, backend, normalization and retries."""

from scopegen.generation.backend import (
    AnthropicBackend,
    Completion,
    CompletionReason,
    GenerationBackend,
)
from scopegen.generation.errors import (
    BackendError,
    ConfigurationError,
    EmptyResponseError,
    MalformedOutputError,
    SchemaValidationError,
    ScopeGenerationError,
)
from scopegen.generation.normalizer import normalize_model_output
from scopegen.generation.orchestrator import (
    GenerationState,
    RetryReason,
    ScopeGenerator,
    generate_scope_from_intake,
)
from scopegen.generation.prompts import build_instructions, build_payload, clamp_intake
from scopegen.generation.template import OUTPUT_TEMPLATE

__all__ = [
    "AnthropicBackend",
    "BackendError",
    "Completion",
    "CompletionReason",
    "ConfigurationError",
    "EmptyResponseError",
    "GenerationBackend",
    "GenerationState",
    "MalformedOutputError",
    "OUTPUT_TEMPLATE",
    "RetryReason",
    "SchemaValidationError",
    "ScopeGenerationError",
    "ScopeGenerator",
    "build_instructions",
    "build_payload",
    "clamp_intake",
    "generate_scope_from_intake",
    "normalize_model_output",
]
