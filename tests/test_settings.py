"""Summary: Tests for recommendation and routing settings.

Importance: Ensures overrides merge over defaults and malformed input is ignored.
Alternatives: Trust persisted settings verbatim.
"""

from __future__ import annotations

import pytest

from triagedesk.categories import CATEGORIES
from triagedesk.settings import (
    DEFAULT_ROUTING,
    DEFAULT_TEMPLATES,
    CategoryTemplate,
    TriageSettings,
)


def test_defaults_cover_every_category() -> None:
    settings = TriageSettings()
    for category in CATEGORIES:
        assert settings.template_for(category) is not None
        assert settings.routing_for(category)


def test_from_dict_merges_overrides() -> None:
    """Summary: Overrides replace only the categories they name.

    Importance: Partial settings never drop the remaining defaults.
    Alternatives: Require a complete settings document.
    """

    settings = TriageSettings.from_dict(
        {
            "templates": {
                "Outage": {"default": "Page the SRE", "high": "Declare an incident"},
                "Feature Request": "Log it in the roadmap tool",
                "Not a category": {"default": "ignored"},
                "Billing Issue": {"high": "missing default"},
            },
            "routing": {"Outage": "SRE", "General Inquiry": "", "Made up": "Nobody"},
        }
    )
    assert settings.templates["Outage"] == CategoryTemplate("Page the SRE", "Declare an incident")
    assert settings.templates["Feature Request"] == CategoryTemplate("Log it in the roadmap tool")
    assert settings.templates["Billing Issue"] == DEFAULT_TEMPLATES["Billing Issue"]
    assert "Not a category" not in settings.templates
    assert settings.routing["Outage"] == "SRE"
    assert settings.routing["General Inquiry"] == DEFAULT_ROUTING["General Inquiry"]
    assert "Made up" not in settings.routing


@pytest.mark.parametrize("payload", [None, [], "nonsense", {"templates": 3, "routing": None}])
def test_from_dict_ignores_malformed_payloads(payload: object) -> None:
    assert TriageSettings.from_dict(payload) == TriageSettings()


def test_round_trip_keeps_overrides() -> None:
    settings = TriageSettings().with_template("Outage", "Check status page", high="Page on-call")
    assert TriageSettings.from_dict(settings.to_dict()) == settings


def test_with_template_rejects_unknown_category() -> None:
    with pytest.raises(ValueError):
        TriageSettings().with_template("Gardening", "Water the plants")


def test_with_routing_normalizes_category_case() -> None:
    settings = TriageSettings().with_routing("billing issue", "Finance")
    assert settings.routing["Billing Issue"] == "Finance"
