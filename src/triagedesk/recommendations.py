"""Summary: Category resolver for recommended actions, routing, and escalation.

Importance: Turns a classification into what an agent should do next and who owns it.
Alternatives: Ask the language model to suggest actions directly.
"""

from __future__ import annotations

from typing import Iterable

from triagedesk.categories import select_category
from triagedesk.models import HIGH
from triagedesk.settings import TriageSettings

NO_RECOMMENDATION = "No recommendation available."
FALLBACK_TEAM = "Support"
ESCALATION_CATEGORIES: tuple[str, ...] = ("Outage", "Account Access")

# Kept separate from the urgency scorer's critical patterns.
CRITICAL_INDICATORS: tuple[str, ...] = (
    "outage",
    "down",
    "breach",
    "security",
    "cannot access",
    "can't access",
    "locked out",
    "payment failed",
    "database",
    "production",
)


def get_recommended_action(
    category: str | Iterable[str] | None,
    urgency: str,
    settings: TriageSettings | None = None,
) -> str:
    """Summary: Resolve the recommended next step for a category and urgency.

    Importance: High urgency swaps in the category's escalation wording when configured.
    Alternatives: Concatenate recommendations for every category in the list.
    """

    settings = settings or TriageSettings()
    template = settings.template_for(select_category(category))
    if template is None:
        return NO_RECOMMENDATION
    if urgency == HIGH and template.high:
        return template.high
    return template.default or NO_RECOMMENDATION


def get_routing_destination(
    category: str | Iterable[str] | None,
    settings: TriageSettings | None = None,
) -> str:
    """Return the owning team for a category, falling back to Unknown then Support."""

    settings = settings or TriageSettings()
    return settings.routing_for(select_category(category)) or FALLBACK_TEAM


def should_escalate(category: str | Iterable[str] | None, urgency: str, text: str) -> bool:
    """Summary: Decide whether a message bypasses standard handling.

    Importance: High urgency, outage or access categories, and critical phrases escalate.
    Alternatives: Escalate on urgency alone.
    """

    if urgency == HIGH:
        return True
    if select_category(category) in ESCALATION_CATEGORIES:
        return True
    lowered = (text or "").lower()
    return any(indicator in lowered for indicator in CRITICAL_INDICATORS)
