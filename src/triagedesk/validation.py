"""Summary: Input validation for customer messages.

Importance: Blocks malformed input before any classifier call is made.
Alternatives: Validate only on the client and trust the backend input.
"""

from __future__ import annotations

import re

from triagedesk.models import ValidationResult

MIN_LENGTH = 10
MAX_LENGTH = 5000
SPECIAL_CHARACTER_MIN_LENGTH = 20
ALPHANUMERIC_RATIO_FLOOR = 0.5

TOO_SHORT = f"Message must be at least {MIN_LENGTH} characters for reliable triage."
TOO_LONG = f"Message exceeds {MAX_LENGTH} character limit."
SPAM_LIKE = "Message looks like spam or promotional content."
MOSTLY_SPECIAL = "Message contains mostly special characters."

SPAM_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bclick here\b", re.IGNORECASE),
    re.compile(r"\blimited[- ]time offer\b", re.IGNORECASE),
    re.compile(r"\bact now\b", re.IGNORECASE),
    re.compile(r"\bbuy now\b", re.IGNORECASE),
    re.compile(r"\bfree (money|gift|prize)\b", re.IGNORECASE),
    re.compile(r"\bcongratulations,? you('ve| have) won\b", re.IGNORECASE),
    re.compile(r"\b(earn|make) \$?\d+[k]? (a|per) (day|week|month)\b", re.IGNORECASE),
    re.compile(r"\b(100%|totally|absolutely) free\b", re.IGNORECASE),
    re.compile(r"\bcasino\b|\bcrypto giveaway\b", re.IGNORECASE),
)

# Five or more back-to-back copies of the same 1-5 character chunk.
REPEATED_CHUNK = re.compile(r"((?=\S).{1,5}?)\1{4,}", re.DOTALL)


class MessageValidationError(ValueError):
    """Summary: Raised when a message fails validation and cannot be analyzed.

    Importance: Carries every validation error so callers can show them together.
    Alternatives: Return error lists from every service method.
    """

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = list(errors)


def validate_message(text: str) -> ValidationResult:
    """Summary: Check length bounds and spam or character-mix heuristics.

    Importance: Errors stop analysis; warnings let the caller ask for confirmation.
    Alternatives: Reject warnings outright as errors.
    """

    trimmed = (text or "").strip()
    errors: list[str] = []
    warnings: list[str] = []

    if len(trimmed) < MIN_LENGTH:
        errors.append(TOO_SHORT)
    if len(trimmed) > MAX_LENGTH:
        errors.append(TOO_LONG)

    if looks_like_spam(trimmed):
        warnings.append(SPAM_LIKE)
    if len(trimmed) > SPECIAL_CHARACTER_MIN_LENGTH:
        alphanumeric = sum(1 for char in trimmed if char.isalnum())
        if alphanumeric / len(trimmed) < ALPHANUMERIC_RATIO_FLOOR:
            warnings.append(MOSTLY_SPECIAL)

    return ValidationResult(errors=errors, warnings=warnings)


def looks_like_spam(text: str) -> bool:
    """Return True for promotional phrasing or long runs of a repeated chunk."""

    if any(pattern.search(text) for pattern in SPAM_PATTERNS):
        return True
    return REPEATED_CHUNK.search(text) is not None
