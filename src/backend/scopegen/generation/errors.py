"""Errors raised by scope generation.

Every error is terminal for a single ``generate_scope_from_intake`` call.
The HTTP layer maps each one to a status code.
"""

from scopegen.models.common import ValidationIssue


class ScopeGenerationError(Exception):
    """Base class for scope generation failures."""


class ConfigurationError(ScopeGenerationError):
    """Generation backend is unconfigured, unreachable or rejects our credentials."""


class BackendError(ScopeGenerationError):
    """Generation backend failed for any other reason (rate limit, 5xx)."""


class EmptyResponseError(ScopeGenerationError):
    """Backend returned no usable text, even after the length retry."""


class MalformedOutputError(ScopeGenerationError):
    """Backend text could not be parsed as JSON."""


class SchemaValidationError(ScopeGenerationError):
    """Normalized backend output still violates the scope document schema."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        preview = "; ".join(f"{i.path}: {i.rule}" for i in issues[:5])
        more = f" (+{len(issues) - 5} more)" if len(issues) > 5 else ""
        super().__init__(f"Scope document failed validation: {preview}{more}")
