"""Summary: Tests for the rule-based category classifier.

Importance: Validates the deterministic fallback used whenever the model is unavailable.
Alternatives: Use only AI-driven classification without rules.
"""

from __future__ import annotations

import pytest

from triagedesk.classifier import MOCK_MODEL, RuleBasedClassifier


@pytest.mark.parametrize(
    ("message", "category", "confidence"),
    [
        ("Our production database is unreachable", "Outage", 0.7),
        ("I forgot my password", "Account Access", 0.65),
        ("Where is my refund?", "Billing Issue", 0.6),
        ("Could you add dark mode?", "Feature Request", 0.55),
        ("I really appreciate the support team", "Feedback/Praise", 0.6),
        ("The export button is not working", "Technical Problem", 0.6),
    ],
)
def test_rule_based_classifier_matches_rules(message: str, category: str, confidence: float) -> None:
    """Summary: Each keyword rule yields its category and confidence.

    Importance: Confirms deterministic classification for basic workflows.
    Alternatives: Skip classification until a model is configured.
    """

    result = RuleBasedClassifier().classify(message)
    assert result.primary_category == category
    assert result.categories == [category]
    assert result.confidence == confidence
    assert result.model == MOCK_MODEL


def test_rule_order_decides_overlaps() -> None:
    result = RuleBasedClassifier().classify("Payment page shows an error after login")
    assert result.primary_category == "Account Access"


def test_no_signal_defaults_to_general_inquiry() -> None:
    """Summary: Messages without keywords become General Inquiry.

    Importance: The fallback never returns Unknown or raises.
    Alternatives: Return Unknown for unmatched messages.
    """

    result = RuleBasedClassifier().classify("What are your opening hours?")
    assert result.primary_category == "General Inquiry"
    assert result.confidence == 0.45
    assert result.reasoning == "Defaulted to general inquiry due to limited signals."
    assert RuleBasedClassifier().classify("").primary_category == "General Inquiry"
