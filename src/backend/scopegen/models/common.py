"""Shared pieces for the intake and scope document schemas."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase keys.

    Attributes stay snake_case in Python; the wire format (stored JSON, API
    bodies, prompt payloads) uses the camelCase aliases.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        """Dump to a JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


@dataclass
class ValidationIssue:
    """A single violated constraint."""

    path: str
    rule: str
    message: str


def format_loc(loc: tuple[int | str, ...]) -> str:
    """Render a pydantic error location as ``milestones[0].dueWeek``."""
    if not loc:
        return "<root>"
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        elif path:
            path += f".{part}"
        else:
            path = str(part)
    return path


def issues_from_error(exc: ValidationError) -> list[ValidationIssue]:
    """Flatten every error in a pydantic ValidationError."""
    return [
        ValidationIssue(
            path=format_loc(tuple(error["loc"])),
            rule=error["type"],
            message=error["msg"],
        )
        for error in exc.errors()
    ]
