"""Prompt construction for scope generation.

Two pieces go to the backend on every attempt:

- the instructions (system prompt), which differ between the first attempt
  and the concise retry
- the payload (user message), which embeds the output template and the
  clamped intake as two labelled JSON blocks
"""

import json
import logging
from typing import Any

from scopegen.models.intake import Intake
from scopegen.security import InputSanitizer

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 2

# Keep the first N entries of each unbounded list so the prompt cannot explode.
LIST_LIMITS: dict[str, int] = {
    "user_types": 8,
    "roles": 10,
    "features": 15,
    "reference_links": 6,
    "risk_flags": 10,
}

FREE_TEXT_FIELDS = ("description", "must_haves", "nice_to_haves")

_FIRST_ATTEMPT_INSTRUCTIONS = """
You generate a Scope of Work as STRICT JSON.

CRITICAL:
- Output ONE JSON object only.
- You MUST use EXACTLY the same keys and nesting as the JSON TEMPLATE.
- Do NOT rename keys.
- Do NOT omit keys.
- All arrays must be non-empty.
- milestones must be objects with name, description, dueWeek, deliverables.
- timeline must be an array of objects with phase, durationWeeks, whatHappens.
- risks items must be objects with risk, impact (Low|Medium|High), mitigation.
- Keep it concise.

Return ONLY JSON (no markdown, no code fences).
""".strip()

_RETRY_INSTRUCTIONS = """
You generate a Scope of Work as STRICT JSON.

THIS IS A RETRY:
- Be even more concise.
- Keep strings short.
- Keep list lengths small but non-empty.

CRITICAL:
- Output ONE JSON object only.
- Use EXACTLY the JSON TEMPLATE structure and keys.
- Do NOT rename or omit keys. All arrays must be non-empty.
Return ONLY JSON.
""".strip()


def build_instructions(attempt: int) -> str:
    """Return the system instructions for the given attempt (1 or 2)."""
    if attempt == 1:
        return _FIRST_ATTEMPT_INSTRUCTIONS
    if attempt == MAX_ATTEMPTS:
        return _RETRY_INSTRUCTIONS
    raise ValueError(f"attempt must be 1 or {MAX_ATTEMPTS}, got {attempt}")


def clamp_intake(intake: Intake) -> Intake:
    """Truncate list fields to their limits and trim free text.

    Truncation keeps the first N elements in their original order.
    """
    updates: dict[str, Any] = {
        name: list(getattr(intake, name))[:limit] for name, limit in LIST_LIMITS.items()
    }

    for name in FREE_TEXT_FIELDS:
        text = getattr(intake, name)
        if InputSanitizer.detect_injection_attempt(text):
            logger.warning(
                "Possible prompt injection in intake field %s (project=%s)",
                name,
                intake.project_name,
            )
        updates[name] = InputSanitizer.sanitize_text(text)

    return intake.model_copy(update=updates)


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def build_payload(intake: Intake, template: dict[str, Any]) -> str:
    """Build the user message: the template to copy and the intake to draw from."""
    safe_intake = clamp_intake(intake)
    intake_json = safe_intake.model_dump(mode="json", by_alias=True, exclude_none=True)
    return (
        "Fill out this JSON TEMPLATE using the INTAKE. "
        "Copy the template structure and replace values.\n\n"
        f"JSON TEMPLATE:\n{_dump(template)}\n\n"
        f"INTAKE:\n{_dump(intake_json)}"
    )
