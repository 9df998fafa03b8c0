"""Summary: Closed category vocabulary and normalization.

Importance: Defines "Unknown" handling once for the resolver, aggregator, and records.
Alternatives: Let every consumer check membership and fall back on its own.
"""

from __future__ import annotations

from typing import Iterable

UNKNOWN = "Unknown"

CATEGORIES: tuple[str, ...] = (
    "Billing Issue",
    "Technical Problem",
    "Outage",
    "Account Access",
    "Feature Request",
    "General Inquiry",
    "Feedback/Praise",
    UNKNOWN,
)

MAX_CATEGORIES = 3

_BY_KEY = {category.lower(): category for category in CATEGORIES}


def normalize_category(label: object) -> str:
    """Summary: Map a raw label onto the closed vocabulary.

    Importance: Guarantees every stored or resolved category is one of the eight labels.
    Alternatives: Reject unknown labels with an error instead of mapping them.
    """

    if not isinstance(label, str):
        return UNKNOWN
    return _BY_KEY.get(" ".join(label.split()).lower(), UNKNOWN)


def normalize_categories(labels: object, primary: object = None) -> list[str]:
    """Summary: Normalize a classifier category list to 1-3 vocabulary entries.

    Importance: Keeps the primary category first and drops labels outside the vocabulary.
    Alternatives: Trust classifier output verbatim.
    """

    if isinstance(labels, str):
        labels = [labels]
    if not isinstance(labels, Iterable):
        labels = []
    normalized: list[str] = []
    for label in labels:
        category = normalize_category(label)
        if category == UNKNOWN and not is_known_label(label):
            continue
        if category not in normalized:
            normalized.append(category)
    head = normalize_category(primary) if primary is not None else None
    if head is None or (head == UNKNOWN and normalized):
        head = normalized[0] if normalized else UNKNOWN
    if head in normalized:
        normalized.remove(head)
    normalized.insert(0, head)
    return normalized[:MAX_CATEGORIES]


def is_known_label(label: object) -> bool:
    """Return True when the label names a vocabulary entry, Unknown included."""

    return isinstance(label, str) and " ".join(label.split()).lower() in _BY_KEY


def select_category(category: str | Iterable[str] | None) -> str:
    """Summary: Pick the category a resolver should act on.

    Importance: A list resolves to its first entry and an empty input to Unknown.
    Alternatives: Merge recommendations for every category in the list.
    """

    if category is None:
        return UNKNOWN
    if isinstance(category, str):
        return normalize_category(category)
    for label in category:
        return normalize_category(label)
    return UNKNOWN
