"""Shared FastAPI dependencies and error mapping."""

import logging
from dataclasses import asdict

from fastapi import HTTPException, Request, status

from scopegen.config import settings
from scopegen.generation.backend import AnthropicBackend
from scopegen.generation.errors import (
    ConfigurationError,
    SchemaValidationError,
    ScopeGenerationError,
)
from scopegen.generation.orchestrator import ScopeGenerator
from scopegen.models.intake import IntakeValidationError

logger = logging.getLogger(__name__)


async def get_current_user_id(request: Request) -> str:
    """Resolve the caller's opaque user ID from the configured auth header."""
    user_id = (request.headers.get(settings.auth_header) or "").strip()
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user_id


def get_scope_generator() -> ScopeGenerator:
    """Scope generator backed by Anthropic. Overridden in tests."""
    return ScopeGenerator(AnthropicBackend())


def intake_validation_http_error(exc: IntakeValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={
            "error": "Invalid intake",
            "issues": [asdict(issue) for issue in exc.issues],
        },
    )


def generation_http_error(exc: ScopeGenerationError) -> HTTPException:
    """Map a generation failure to a user-visible error."""
    logger.error("Scope generation failed: %s: %s", type(exc).__name__, exc)

    if isinstance(exc, ConfigurationError):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": "Generation unavailable", "detail": str(exc)},
        )

    detail: dict = {"error": "Generation failed", "detail": str(exc)}
    if isinstance(exc, SchemaValidationError):
        detail["issues"] = [asdict(issue) for issue in exc.issues]
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)
