"""Summary: Tests for the category resolver.

Importance: Ensures recommendations, routing, and escalation follow settings and rules.
Alternatives: Check resolver output only through the API.
"""

from __future__ import annotations

from triagedesk.recommendations import (
    NO_RECOMMENDATION,
    get_recommended_action,
    get_routing_destination,
    should_escalate,
)
from triagedesk.settings import DEFAULT_TEMPLATES, TriageSettings


def test_high_urgency_uses_high_template() -> None:
    """Summary: High urgency returns the category's escalation wording.

    Importance: Urgent tickets get a different next step than routine ones.
    Alternatives: Use one recommendation regardless of urgency.
    """

    assert get_recommended_action(["Outage"], "High") == DEFAULT_TEMPLATES["Outage"].high
    assert get_recommended_action("Outage", "Medium") == DEFAULT_TEMPLATES["Outage"].default


def test_high_urgency_without_high_template_uses_default() -> None:
    expected = DEFAULT_TEMPLATES["Feature Request"].default
    assert get_recommended_action(["Feature Request"], "High") == expected


def test_first_category_wins() -> None:
    action = get_recommended_action(["Billing Issue", "Outage"], "Low")
    assert action == DEFAULT_TEMPLATES["Billing Issue"].default


def test_empty_or_unknown_categories_resolve_to_unknown() -> None:
    assert get_recommended_action([], "High") == "Route for manual review."
    assert get_recommended_action(None, "Low") == "Route for manual review."
    assert get_routing_destination(["Not a category"]) == "Support"


def test_custom_settings_are_honored() -> None:
    """Summary: Overrides in settings change the resolver output.

    Importance: Teams tune recommendations without code changes.
    Alternatives: Hardcode recommendations.
    """

    settings = TriageSettings().with_template("Billing Issue", "Check Stripe", high="Call billing lead")
    settings = settings.with_routing("Billing Issue", "Finance")
    assert get_recommended_action(["Billing Issue"], "High", settings) == "Call billing lead"
    assert get_recommended_action(["Billing Issue"], "Low", settings) == "Check Stripe"
    assert get_routing_destination(["Billing Issue"], settings) == "Finance"


def test_fallbacks_when_settings_are_empty() -> None:
    settings = TriageSettings(templates={}, routing={})
    assert get_recommended_action(["Outage"], "High", settings) == NO_RECOMMENDATION
    assert get_routing_destination(["Outage"], settings) == "Support"


def test_default_routing() -> None:
    assert get_routing_destination("Outage") == "On-call Engineering"
    assert get_routing_destination(["Account Access"]) == "Security Support"
    assert get_routing_destination("Feedback/Praise") == "Customer Success"


def test_should_escalate_rules() -> None:
    """Summary: Escalation triggers on urgency, category, or critical phrases.

    Importance: Each rule independently escalates.
    Alternatives: Escalate on urgency only.
    """

    assert should_escalate("General Inquiry", "High", "hello")
    assert should_escalate("Outage", "Low", "hello")
    assert should_escalate("Account Access", "Low", "hello")
    assert should_escalate("General Inquiry", "Low", "I am locked out of my workspace")
    assert should_escalate("Technical Problem", "Medium", "The PRODUCTION build fails")
    assert not should_escalate("Feature Request", "Low", "Could you add dark mode?")
