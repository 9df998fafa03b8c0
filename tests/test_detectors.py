"""Summary: Tests for PII, profanity, and language detectors.

Importance: Ensures sensitive content and non-English text are surfaced reliably.
Alternatives: Review detector output manually on sample tickets.
"""

from __future__ import annotations

from triagedesk.detectors import (
    CARD_FINDING,
    EMAIL_FINDING,
    IP_FINDING,
    PHONE_FINDING,
    PROFANITY_FINDING,
    SSN_FINDING,
    detect_language,
    detect_pii,
    detect_profanity,
    language_display_name,
    redact_pii,
)


def test_detects_email_address() -> None:
    """Summary: An email address yields the email finding.

    Importance: PII in a message forces human review.
    Alternatives: Only detect payment data.
    """

    assert detect_pii("Please contact me at test@example.com") == [EMAIL_FINDING]


def test_detects_phone_card_and_ssn() -> None:
    assert PHONE_FINDING in detect_pii("Call me at +1 (555) 123-4567 tomorrow")
    assert CARD_FINDING in detect_pii("My card 4111 1111 1111 1111 was charged")
    assert SSN_FINDING in detect_pii("My SSN is 123-45-6789")
    assert IP_FINDING in detect_pii("Server at 192.168.1.20 is unreachable")


def test_clean_text_has_no_pii() -> None:
    assert detect_pii("The dashboard will not load after the update") == []
    assert detect_pii("") == []


def test_pii_findings_are_stable_and_compose() -> None:
    """Summary: Detection is repeatable and concatenation unions findings.

    Importance: Stateless matching must not depend on earlier calls.
    Alternatives: Test each pattern only in isolation.
    """

    first = "Email me at test@example.com"
    second = "Server at 192.168.1.20 is unreachable"
    assert detect_pii(first) == detect_pii(first)
    combined = set(detect_pii(f"{first} and {second}"))
    assert combined == set(detect_pii(first)) | set(detect_pii(second))


def test_redact_pii_masks_values() -> None:
    redacted = redact_pii("Contact test@example.com or card 4111 1111 1111 1111")
    assert "[EMAIL REDACTED]" in redacted
    assert "[CARD REDACTED]" in redacted
    assert "test@example.com" not in redacted
    assert "4111" not in redacted


def test_profanity_is_flagged_once() -> None:
    """Summary: Inappropriate language yields a single deduplicated label.

    Importance: Agents get one warning regardless of how many words match.
    Alternatives: Report each matched word.
    """

    assert detect_profanity("This damn app is crap, you idiots") == [PROFANITY_FINDING]


def test_profanity_respects_word_boundaries() -> None:
    assert detect_profanity("Hello there, what a classic setup") == []


def test_detects_spanish_from_function_words() -> None:
    result = detect_language("Hola, necesito ayuda con mi cuenta por favor")
    assert result.primary_language == "spanish"
    assert result.is_non_english
    assert result.needs_translation
    assert result.detected_languages[0].language == "spanish"


def test_detects_script_blocks() -> None:
    result = detect_language("我的账户无法登录")
    assert result.primary_language == "chinese"
    assert result.ascii_ratio == 0.0


def test_script_candidate_confidence_scales_with_matches() -> None:
    result = detect_language("登录难 please help me")
    assert result.primary_language == "chinese"
    candidate = result.detected_languages[0]
    assert candidate.match_count == 3
    assert candidate.confidence == 0.5


def test_unlisted_script_is_unknown_non_english() -> None:
    """Summary: Mostly non-ASCII text with no known language reads as unknown.

    Importance: Greek or Arabic tickets still get flagged for translation.
    Alternatives: Default every unmatched message to English.
    """

    result = detect_language("Καλημέρα, ο λογαριασμός μου δεν λειτουργεί")
    assert result.primary_language == "unknown-non-english"
    assert result.detected_languages == []
    assert result.ascii_ratio < 0.7
    assert result.is_non_english
    assert result.needs_translation


def test_english_is_the_default() -> None:
    """Summary: Plain English text is reported as English.

    Importance: Most traffic should not be flagged for translation.
    Alternatives: Report "unknown" when no language list matches.
    """

    result = detect_language("Hello, I need help with my account please")
    assert result.primary_language == "english"
    assert not result.needs_translation
    assert result.detected_languages == []
    assert detect_language("").ascii_ratio == 1.0


def test_language_display_names() -> None:
    assert language_display_name("spanish") == "Spanish"
    assert language_display_name("unknown-non-english") == "Unknown (non-English)"
    assert language_display_name("klingon") == "klingon"
