"""Summary: Local rule-based category classifier.

Importance: Provides deterministic categorization when no model is configured or a call fails.
Alternatives: Use a supervised ML classifier trained on labeled tickets.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from triagedesk.models import Classification

MOCK_MODEL = "mock"


class ClassificationProvider(ABC):
    """Summary: Interface shared by every category classifier.

    Importance: Lets the remote model and the local rules be swapped freely.
    Alternatives: Branch on provider names inside the analysis pipeline.
    """

    @abstractmethod
    def classify(self, message: str) -> Classification:
        """Summary: Classify one customer message.

        Importance: Implementations raise on transport or parse failure.
        Alternatives: Return None and let callers decide.
        """


@dataclass(frozen=True)
class KeywordRule:
    """Summary: One category rule, matched by lower-cased substring.

    Importance: Rules are tried in order and the first match wins.
    Alternatives: Score every rule and pick the highest total.
    """

    category: str
    keywords: tuple[str, ...]
    confidence: float
    reasoning: str

    def matches(self, text: str) -> bool:
        return any(keyword in text for keyword in self.keywords)


RULES: tuple[KeywordRule, ...] = (
    KeywordRule(
        category="Outage",
        keywords=("outage", "server down", "production", "database"),
        confidence=0.7,
        reasoning="Message indicates downtime or outage impacting availability.",
    ),
    KeywordRule(
        category="Account Access",
        keywords=("password", "login", "locked out"),
        confidence=0.65,
        reasoning="Message mentions login or access issues.",
    ),
    KeywordRule(
        category="Billing Issue",
        keywords=("billing", "payment", "invoice", "refund"),
        confidence=0.6,
        reasoning="Billing or payment keywords detected.",
    ),
    KeywordRule(
        category="Feature Request",
        keywords=("feature", "could you add", "would like to see"),
        confidence=0.55,
        reasoning="Feature request language detected.",
    ),
    KeywordRule(
        category="Feedback/Praise",
        keywords=("thank", "appreciate"),
        confidence=0.6,
        reasoning="Positive feedback detected.",
    ),
    KeywordRule(
        category="Technical Problem",
        keywords=("error", "bug", "not working"),
        confidence=0.6,
        reasoning="Technical issue keywords detected.",
    ),
)

DEFAULT_RULE = KeywordRule(
    category="General Inquiry",
    keywords=(),
    confidence=0.45,
    reasoning="Defaulted to general inquiry due to limited signals.",
)


@dataclass(frozen=True)
class RuleBasedClassifier(ClassificationProvider):
    """Summary: Keyword-based classifier sharing the remote classifier's interface.

    Importance: The single fallback used wherever a model result is unavailable.
    Alternatives: Keep separate fallbacks per call site.
    """

    rules: tuple[KeywordRule, ...] = RULES
    default: KeywordRule = DEFAULT_RULE

    def classify(self, message: str) -> Classification:
        """Summary: Classify a message using the first matching keyword rule.

        Importance: Never raises, so it can back every other classifier.
        Alternatives: Return Unknown when no rule matches.
        """

        text = (message or "").lower()
        rule = next((rule for rule in self.rules if rule.matches(text)), self.default)
        return Classification(
            primary_category=rule.category,
            categories=[rule.category],
            confidence=rule.confidence,
            reasoning=rule.reasoning,
            model=MOCK_MODEL,
        )
