"""Summary: Lexicon-based sentiment extraction.

Importance: Gives agents a quick read of customer mood alongside the category.
Alternatives: Use a sentiment model such as VADER or a fine-tuned classifier.
"""

from __future__ import annotations

from triagedesk.models import SentimentResult

POSITIVE_WORDS: tuple[str, ...] = (
    "thank", "thanks", "appreciate", "love", "great", "excellent", "awesome",
    "amazing", "wonderful", "happy", "helpful", "fantastic", "perfect", "pleased",
)

NEGATIVE_WORDS: tuple[str, ...] = (
    "frustrated", "frustrating", "disappointed", "angry", "terrible", "awful",
    "horrible", "worst", "hate", "annoyed", "unacceptable", "ridiculous", "upset",
    "useless", "poor",
)

URGENT_WORDS: tuple[str, ...] = (
    "urgent", "asap", "immediately", "emergency", "critical", "right now",
    "as soon as possible",
)


def extract_sentiment(text: str) -> SentimentResult:
    """Summary: Count lexicon hits and resolve them to one sentiment label.

    Importance: Urgency words override the positive/negative verdict so that angry
        urgent messages read as "frustrated" and calm urgent ones as "urgent".
    Alternatives: Weight each word instead of counting raw substring hits.
    """

    lowered = (text or "").lower()
    positive = _count(lowered, POSITIVE_WORDS)
    negative = _count(lowered, NEGATIVE_WORDS)
    urgent = _count(lowered, URGENT_WORDS)

    if positive > negative and positive > 0:
        sentiment = "positive"
    elif negative > positive and negative > 0:
        sentiment = "negative"
    else:
        sentiment = "neutral"
    if urgent > 0:
        sentiment = "frustrated" if negative > 0 else "urgent"

    return SentimentResult(
        sentiment=sentiment,
        positive_count=positive,
        negative_count=negative,
        urgent_count=urgent,
    )


def _count(text: str, words: tuple[str, ...]) -> int:
    return sum(text.count(word) for word in words)
