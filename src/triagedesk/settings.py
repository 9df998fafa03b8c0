"""Summary: Recommendation and routing settings per category.

Importance: Lets teams tune the suggested next step and owning team for each category.
Alternatives: Hardcode recommendations in the resolver.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from triagedesk.categories import UNKNOWN, is_known_label, normalize_category


@dataclass(frozen=True)
class CategoryTemplate:
    """Summary: Recommended action text for one category.

    Importance: ``high`` overrides ``default`` when a message is High urgency.
    Alternatives: Keep one recommendation per category and urgency level.
    """

    default: str
    high: str | None = None

    def to_dict(self) -> dict[str, str]:
        payload = {"default": self.default}
        if self.high:
            payload["high"] = self.high
        return payload

    @staticmethod
    def from_value(value: Any) -> "CategoryTemplate | None":
        """Accept either the object form or a bare recommendation string."""

        if isinstance(value, str) and value.strip():
            return CategoryTemplate(default=value)
        if isinstance(value, dict) and isinstance(value.get("default"), str):
            high = value.get("high")
            return CategoryTemplate(
                default=value["default"],
                high=high if isinstance(high, str) and high.strip() else None,
            )
        return None


DEFAULT_TEMPLATES: dict[str, CategoryTemplate] = {
    "Billing Issue": CategoryTemplate(
        default="Verify billing status and guide the user to update payment details or view invoices.",
        high="Acknowledge impact, confirm billing status, and escalate to billing support immediately.",
    ),
    "Technical Problem": CategoryTemplate(
        default="Collect repro steps, check status page, and suggest basic troubleshooting.",
        high="Acknowledge impact and escalate to on-call engineering with repro details.",
    ),
    "Outage": CategoryTemplate(
        default="Confirm outage, share status page, and set expectations for updates.",
        high="Escalate to on-call immediately and broadcast incident status.",
    ),
    "Account Access": CategoryTemplate(
        default="Verify identity and guide through password reset or SSO troubleshooting.",
        high="Escalate to security support for urgent access restoration.",
    ),
    "Feature Request": CategoryTemplate(
        default="Thank the user, capture the request, and share product roadmap expectations.",
    ),
    "General Inquiry": CategoryTemplate(
        default="Provide the most relevant FAQ or documentation link.",
    ),
    "Feedback/Praise": CategoryTemplate(
        default="Thank the user and optionally ask for a testimonial or review.",
    ),
    UNKNOWN: CategoryTemplate(default="Route for manual review."),
}

DEFAULT_ROUTING: dict[str, str] = {
    "Billing Issue": "Billing",
    "Technical Problem": "Support",
    "Outage": "On-call Engineering",
    "Account Access": "Security Support",
    "Feature Request": "Product",
    "General Inquiry": "Support",
    "Feedback/Praise": "Customer Success",
    UNKNOWN: "Support",
}


@dataclass(frozen=True)
class TriageSettings:
    """Summary: Complete template and routing tables.

    Importance: Always holds an entry for every category, overrides merged over defaults.
    Alternatives: Store only the overrides and merge on each lookup.
    """

    templates: dict[str, CategoryTemplate] = field(
        default_factory=lambda: dict(DEFAULT_TEMPLATES)
    )
    routing: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_ROUTING))

    def template_for(self, category: str) -> CategoryTemplate | None:
        """Return the template for a category, falling back to the Unknown entry."""

        return self.templates.get(category) or self.templates.get(UNKNOWN)

    def routing_for(self, category: str) -> str | None:
        """Return the routing team for a category, falling back to the Unknown entry."""

        return self.routing.get(category) or self.routing.get(UNKNOWN)

    def with_template(self, category: str, default: str, high: str | None = None) -> "TriageSettings":
        """Summary: Return a copy with one category's recommendation replaced.

        Importance: Edits stay in memory until explicitly saved.
        Alternatives: Mutate the tables in place and autosave.
        """

        name = _require_category(category)
        templates = dict(self.templates)
        templates[name] = CategoryTemplate(default=default, high=high or None)
        return replace(self, templates=templates)

    def with_routing(self, category: str, team: str) -> "TriageSettings":
        """Return a copy with one category's routing team replaced."""

        name = _require_category(category)
        routing = dict(self.routing)
        routing[name] = team
        return replace(self, routing=routing)

    def to_dict(self) -> dict[str, Any]:
        return {
            "templates": {name: template.to_dict() for name, template in self.templates.items()},
            "routing": dict(self.routing),
        }

    @staticmethod
    def from_dict(payload: Any) -> "TriageSettings":
        """Summary: Merge persisted overrides over the built-in defaults.

        Importance: Unknown keys and malformed entries are ignored, never partially invalid.
        Alternatives: Reject the whole payload when any entry is malformed.
        """

        templates = dict(DEFAULT_TEMPLATES)
        routing = dict(DEFAULT_ROUTING)
        if isinstance(payload, dict):
            raw_templates = payload.get("templates")
            if isinstance(raw_templates, dict):
                for name, value in raw_templates.items():
                    template = CategoryTemplate.from_value(value)
                    if name in templates and template is not None:
                        templates[name] = template
            raw_routing = payload.get("routing")
            if isinstance(raw_routing, dict):
                for name, team in raw_routing.items():
                    if name in routing and isinstance(team, str) and team.strip():
                        routing[name] = team
        return TriageSettings(templates=templates, routing=routing)


def _require_category(category: str) -> str:
    if not is_known_label(category):
        raise ValueError(f"Unknown category: {category}")
    return normalize_category(category)
