"""Summary: PII, profanity, and language detectors.

Importance: Surfaces sensitive or abusive content and non-English text before triage.
Alternatives: Use a managed DLP service or a language identification model.
"""

from __future__ import annotations

import re

from triagedesk.models import LanguageCandidate, LanguageResult

EMAIL_FINDING = "Email address detected"
PHONE_FINDING = "Phone number detected"
CARD_FINDING = "Possible credit card number detected"
SSN_FINDING = "Possible SSN detected"
IP_FINDING = "IP address detected"
PROFANITY_FINDING = "Potentially inappropriate language detected"

EMAIL_PATTERN = re.compile(r"[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}", re.IGNORECASE)
PHONE_PATTERN = re.compile(r"\+?\d[\d\s().-]{7,}\d")
CARD_PATTERN = re.compile(r"\b(?:\d[ -]*?){13,19}\b")
SSN_PATTERN = re.compile(r"\b\d{3}[- ]?\d{2}[- ]?\d{4}\b")
IPV4_PATTERN = re.compile(
    r"\b(?:(?:25[0-5]|2[0-4]\d|1\d\d|[1-9]?\d)\.){3}(?:25[0-5]|2[0-4]\d|1\d\d|[1-9]?\d)\b"
)

# Evaluation order; every family is tested regardless of earlier hits.
PII_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    (EMAIL_FINDING, EMAIL_PATTERN),
    (PHONE_FINDING, PHONE_PATTERN),
    (CARD_FINDING, CARD_PATTERN),
    (SSN_FINDING, SSN_PATTERN),
    (IP_FINDING, IPV4_PATTERN),
)

# Longer and more specific shapes are redacted first so a phone match cannot split them.
REDACTIONS: tuple[tuple[re.Pattern[str], str], ...] = (
    (EMAIL_PATTERN, "[EMAIL REDACTED]"),
    (CARD_PATTERN, "[CARD REDACTED]"),
    (SSN_PATTERN, "[SSN REDACTED]"),
    (IPV4_PATTERN, "[IP REDACTED]"),
    (PHONE_PATTERN, "[PHONE REDACTED]"),
)

PROFANITY_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b(damn|hell|crap|wtf|bs|sucks?)\b", re.IGNORECASE),
    re.compile(r"\bf[u*@#]+c?k(s|ed|er|ing)?\b", re.IGNORECASE),
    re.compile(r"\bsh[i1!*]+t(s|ty)?\b", re.IGNORECASE),
    re.compile(r"\bb[i1!*]tch(es|y)?\b", re.IGNORECASE),
    re.compile(r"\ba[s$*]{2}(hole)?\b", re.IGNORECASE),
    re.compile(r"\b(idiots?|stupid|morons?|dumb|incompetent|clowns?)\b", re.IGNORECASE),
)

WORD_LIST_THRESHOLD = 2
SCRIPT_THRESHOLD = 3
ASCII_RATIO_FLOOR = 0.7
ENGLISH = "english"
UNKNOWN_NON_ENGLISH = "unknown-non-english"

WORD_LISTS: dict[str, tuple[str, ...]] = {
    "spanish": (
        "hola", "gracias", "por favor", "ayuda", "necesito", "cuenta", "problema",
        "tengo", "pero", "usted", "está", "cómo", "qué", "el", "los", "las", "para",
        "con", "mi", "por",
    ),
    "french": (
        "bonjour", "merci", "s'il", "vous", "plaît", "besoin", "aide", "compte",
        "je", "j'ai", "est", "les", "mon", "avec", "pour", "pas",
    ),
    "german": (
        "hallo", "danke", "bitte", "hilfe", "ich", "brauche", "konto", "nicht",
        "und", "ist", "mein", "mit", "das", "habe", "funktioniert",
    ),
    "portuguese": (
        "olá", "obrigado", "obrigada", "preciso", "ajuda", "minha", "você", "não",
        "conta", "está", "muito", "estou",
    ),
    "italian": (
        "ciao", "grazie", "per favore", "aiuto", "ho bisogno", "buongiorno", "sono",
        "della", "questo", "funziona", "mio",
    ),
    "dutch": (
        "hoi", "bedankt", "alstublieft", "graag", "ik", "niet", "mijn", "het",
        "een", "werkt", "hulp", "nodig",
    ),
}

SCRIPT_BLOCKS: dict[str, re.Pattern[str]] = {
    "chinese": re.compile(r"[\u4e00-\u9fff]"),
    "japanese": re.compile(r"[\u3040-\u30ff]"),
    "korean": re.compile(r"[\uac00-\ud7af\u1100-\u11ff]"),
    "russian": re.compile(r"[\u0400-\u04ff]"),
}

LANGUAGE_NAMES: dict[str, str] = {
    ENGLISH: "English",
    "spanish": "Spanish",
    "french": "French",
    "german": "German",
    "portuguese": "Portuguese",
    "italian": "Italian",
    "dutch": "Dutch",
    "chinese": "Chinese",
    "japanese": "Japanese",
    "korean": "Korean",
    "russian": "Russian",
    UNKNOWN_NON_ENGLISH: "Unknown (non-English)",
}

_WORD_PATTERNS: dict[str, tuple[re.Pattern[str], ...]] = {
    language: tuple(re.compile(rf"(?<!\w){re.escape(word)}(?!\w)") for word in words)
    for language, words in WORD_LISTS.items()
}


def detect_pii(text: str) -> list[str]:
    """Summary: Scan text for personal data and return one label per family found.

    Importance: Messages with PII are flagged for review before anyone acts on them.
    Alternatives: Validate checksums (Luhn, SSN ranges) to cut false positives.
    """

    return [label for label, pattern in PII_PATTERNS if pattern.search(text or "")]


def redact_pii(text: str) -> str:
    """Summary: Replace PII matches with redaction markers.

    Importance: Lets a message be shared or logged without the sensitive values.
    Alternatives: Hash matches so duplicates can still be correlated.
    """

    redacted = text or ""
    for pattern, marker in REDACTIONS:
        redacted = pattern.sub(marker, redacted)
    return redacted


def detect_profanity(text: str) -> list[str]:
    """Summary: Flag inappropriate language with a single deduplicated label.

    Importance: Warns agents before they open an abusive message.
    Alternatives: Track each matched term and its severity.
    """

    if any(pattern.search(text or "") for pattern in PROFANITY_PATTERNS):
        return [PROFANITY_FINDING]
    return []


def detect_language(text: str) -> LanguageResult:
    """Summary: Guess the message language from function words and script blocks.

    Importance: Routes messages that need translation and keeps English the default.
    Alternatives: Use a statistical n-gram language identifier.
    """

    text = text or ""
    lowered = text.lower()
    candidates: list[LanguageCandidate] = []

    for language, patterns in _WORD_PATTERNS.items():
        count = sum(len(pattern.findall(lowered)) for pattern in patterns)
        if count >= WORD_LIST_THRESHOLD:
            candidates.append(_candidate(language, count, WORD_LIST_THRESHOLD))

    for language, pattern in SCRIPT_BLOCKS.items():
        count = len(pattern.findall(text))
        if count >= SCRIPT_THRESHOLD:
            candidates.append(_candidate(language, count, SCRIPT_THRESHOLD))

    # Stable sort keeps declaration order for ties.
    candidates.sort(key=lambda item: item.confidence, reverse=True)
    ascii_ratio = _ascii_ratio(text)

    if candidates:
        primary = candidates[0].language
    elif ascii_ratio < ASCII_RATIO_FLOOR:
        primary = UNKNOWN_NON_ENGLISH
    else:
        primary = ENGLISH

    is_non_english = primary != ENGLISH
    return LanguageResult(
        primary_language=primary,
        is_non_english=is_non_english,
        detected_languages=candidates,
        ascii_ratio=ascii_ratio,
        needs_translation=is_non_english,
    )


def language_display_name(code: str) -> str:
    """Return a human-readable language name, or the code itself when unknown."""

    return LANGUAGE_NAMES.get(code, code)


def _candidate(language: str, count: int, threshold: int) -> LanguageCandidate:
    confidence = min(count / (2 * threshold), 1.0)
    return LanguageCandidate(language=language, confidence=confidence, match_count=count)


def _ascii_ratio(text: str) -> float:
    if not text:
        return 1.0
    return sum(1 for char in text if ord(char) < 128) / len(text)
