"""Summary: Rule-based urgency scoring.

Importance: Prioritizes messages without waiting on the classifier.
Alternatives: Ask the language model for a priority alongside the category.

Signals are regexes with integer weights, added in a fixed order and then adjusted by
modifiers. All patterns are compiled once and matched with ``search``, so no state is
carried between calls.
"""

from __future__ import annotations

import math
import re

from triagedesk.models import HIGH, LOW, MEDIUM, KeywordMatch, UrgencyResult

CRITICAL = "critical"
URGENT = "urgent"
POSITIVE = "positive"
LOW_PRIORITY = "low_priority"
MODIFIER = "modifier"


def _rules(*entries: tuple[str, str, int]) -> tuple[tuple[str, re.Pattern[str], int], ...]:
    return tuple(
        (keyword, re.compile(pattern, re.IGNORECASE), weight)
        for keyword, pattern, weight in entries
    )


CRITICAL_PATTERNS = _rules(
    ("outage", r"\boutages?\b", 60),
    ("server down", r"\bservers? (is |are )?(down|offline)\b", 60),
    ("production down", r"\b(production|prod) (is |environment is )?down\b", 70),
    ("database failure", r"\bdatabase (failure|failed|is down|crash(ed)?|corrupt(ed)?)\b", 55),
    ("connection lost", r"\b(connection (lost|dropped)|lost (the )?connection)\b", 45),
    ("access denied", r"\baccess denied\b", 40),
    ("security breach", r"\b(security )?breach(ed)?\b", 70),
    ("data leak", r"\bdata (leak|leaked|exposed|loss)\b", 65),
)

URGENT_PATTERNS = _rules(
    ("down", r"\bdown\b", 30),
    ("crash", r"\bcrash(es|ed|ing)?\b", 30),
    ("timeout", r"\b(time ?outs?|timed out)\b", 20),
    ("error", r"\berrors?\b", 20),
    ("bug", r"\bbugs?\b", 15),
    ("not working", r"\b(not working|doesn'?t work|isn'?t working|stopped working)\b", 25),
    ("broken", r"\bbroken\b", 20),
    ("failed", r"\bfail(s|ed|ing|ure)?\b", 20),
    ("payment failed", r"\bpayments? (has |have |was |were )?(failed|declined)\b", 35),
    ("double charge", r"\b(double[- ]charged?|charged (me )?twice)\b", 35),
    ("refund", r"\brefunds?\b", 15),
    ("urgent", r"\burgent(ly)?\b", 30),
    ("asap", r"\basap\b", 25),
    ("immediately", r"\bimmediately\b", 25),
    ("critical", r"\bcritical\b", 30),
    ("emergency", r"\bemergency\b", 40),
)

POSITIVE_PATTERNS = _rules(
    ("thanks", r"\bthank(s| you)?\b", -15),
    ("appreciate", r"\bappreciated?\b", -15),
    ("love", r"\blove\b", -15),
    ("great", r"\bgreat\b", -15),
    ("excellent", r"\bexcellent\b", -15),
    ("awesome", r"\bawesome\b", -15),
    ("wonderful", r"\bwonderful\b", -15),
    ("happy", r"\bhappy\b", -15),
)

LOW_PRIORITY_PATTERNS = _rules(
    ("feature request", r"\bfeature requests?\b", -20),
    ("would like to see", r"\bwould (like|love) to see\b", -20),
    ("could you add", r"\b(could|can) you (please )?add\b", -20),
    ("no rush", r"\bno rush\b", -20),
    ("when you get a chance", r"\bwhen(ever)? you (get|have) (a )?(chance|time)\b", -20),
    ("suggestion", r"\bsuggestions?\b", -20),
    ("enhancement", r"\benhancements?\b", -20),
    ("nice to have", r"\bnice to have\b", -20),
)

NEGATION_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"\bno problem\b",
        r"\ball good\b",
        r"\bnot (an? )?(urgent|emergency|critical|issue|problem|bug|error)\b",
        r"\b(no|without any) (errors?|issues?|bugs?|crash(es)?|downtime)\b",
        r"\b(never|didn'?t|did not) (crash(ed)?|fail(ed)?)\b",
    )
)

QUESTION_DEDUCTION = -10
SHOUTING_BONUS = 15
SHOUTING_MIN_LENGTH = 20
EXCLAMATION_STEPS: tuple[int, ...] = (3, 5)
EXCLAMATION_BONUS = 10
NEGATION_DEDUCTION = -20
MIXED_SIGNAL_FACTOR = 0.7

# (minimum score, inclusive?) -> level and SLA, checked top to bottom.
THRESHOLDS: tuple[tuple[int, bool, str, str], ...] = (
    (60, True, HIGH, "15 minutes"),
    (40, True, HIGH, "30 minutes"),
    (20, True, MEDIUM, "2 hours"),
    (0, False, MEDIUM, "4 hours"),
    (-20, False, LOW, "24 hours"),
)
FLOOR_LEVEL = (LOW, "48 hours")


def score_urgency(text: str) -> UrgencyResult:
    """Summary: Score a message and map the score to a level and SLA.

    Importance: The single scoring path behind every urgency decision.
    Alternatives: Keep separate level-only and detailed scorers.
    """

    text = text or ""
    matches: list[KeywordMatch] = []

    critical = _apply(text, CRITICAL_PATTERNS, CRITICAL, matches)
    urgent = _apply(text, URGENT_PATTERNS, URGENT, matches)
    positive = _apply(text, POSITIVE_PATTERNS, POSITIVE, matches)
    _apply(text, LOW_PRIORITY_PATTERNS, LOW_PRIORITY, matches)
    score = sum(match.weight for match in matches)

    if "?" in text and not critical and not urgent:
        score += QUESTION_DEDUCTION
        matches.append(KeywordMatch("question", QUESTION_DEDUCTION, MODIFIER))

    stripped = text.strip()
    if (
        len(stripped) > SHOUTING_MIN_LENGTH
        and stripped == stripped.upper()
        and any(char.isalpha() for char in stripped)
    ):
        score += SHOUTING_BONUS
        matches.append(KeywordMatch("all caps", SHOUTING_BONUS, MODIFIER))

    exclamations = text.count("!")
    for step in EXCLAMATION_STEPS:
        if exclamations >= step:
            score += EXCLAMATION_BONUS
            matches.append(KeywordMatch(f"{step}+ exclamation marks", EXCLAMATION_BONUS, MODIFIER))

    if urgent and any(pattern.search(text) for pattern in NEGATION_PATTERNS):
        score += NEGATION_DEDUCTION
        matches.append(KeywordMatch("negation", NEGATION_DEDUCTION, MODIFIER))

    if positive and urgent and not critical:
        dampened = math.floor(score * MIXED_SIGNAL_FACTOR)
        matches.append(KeywordMatch("mixed signals", dampened - score, MODIFIER))
        score = dampened

    level, expected = level_for_score(score)
    return UrgencyResult(
        level=level,
        score=score,
        expected_response_time=expected,
        matched_keywords=matches,
    )


def calculate_urgency(text: str) -> str:
    """Summary: Return only the urgency level for a message.

    Importance: Convenience for callers that do not need the score or SLA.
    Alternatives: Always return the detailed result.
    """

    return score_urgency(text).level


def level_for_score(score: int) -> tuple[str, str]:
    """Summary: Map a score onto its urgency level and expected response time.

    Importance: The one threshold table shared by every urgency consumer.
    Alternatives: Store the thresholds in settings so teams can tune them.
    """

    for bound, inclusive, level, expected in THRESHOLDS:
        if score > bound or (inclusive and score == bound):
            return level, expected
    return FLOOR_LEVEL


def _apply(
    text: str,
    rules: tuple[tuple[str, re.Pattern[str], int], ...],
    kind: str,
    matches: list[KeywordMatch],
) -> int:
    hits = 0
    for keyword, pattern, weight in rules:
        if pattern.search(text):
            matches.append(KeywordMatch(keyword, weight, kind))
            hits += 1
    return hits
