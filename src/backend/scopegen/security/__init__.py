"""Security utilities for Scopegen.

Free text from the intake is copied verbatim into the generation prompt, so
it is trimmed and screened here first.
"""

import re


class InputSanitizer:
    """Sanitize intake text before it is embedded into a prompt."""

    MAX_FREE_TEXT_LENGTH = 4000

    # Patterns that might indicate prompt injection attempts
    INJECTION_PATTERNS = [
        r"ignore\s+(previous|above|all)\s+(instructions?|prompts?)",
        r"disregard\s+(previous|above|all)\s+(instructions?|prompts?)",
        r"forget\s+(previous|above|all)\s+(instructions?|prompts?)",
        r"new\s+instructions?:",
        r"system\s*:",
        r"\[system\]",
        r"<\|im_start\|>",
        r"<\|endoftext\|>",
    ]

    @classmethod
    def sanitize_text(cls, text: str | None, max_length: int | None = None) -> str | None:
        """Trim a free-text field.

        Returns None for missing or blank input so optional fields stay
        optional in the prompt payload.
        """
        if text is None:
            return None

        text = text[: max_length or cls.MAX_FREE_TEXT_LENGTH].strip()

        # Drop anything that is not valid UTF-8 (lone surrogates from pasted text)
        text = text.encode("utf-8", errors="ignore").decode("utf-8")

        return text or None

    @classmethod
    def detect_injection_attempt(cls, text: str | None) -> bool:
        """Check if text contains potential prompt injection patterns."""
        if not text:
            return False
        for pattern in cls.INJECTION_PATTERNS:
            if re.search(pattern, text, re.IGNORECASE):
                return True
        return False
