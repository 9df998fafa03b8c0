"""Summary: Dashboard aggregation over the analysis history.

Importance: Summarizes volume, urgency, and review load for support leads.
Alternatives: Maintain running counters updated on every analysis.
"""

from __future__ import annotations

import math
from collections import Counter
from datetime import date, datetime, timedelta, timezone
from typing import Iterable

from triagedesk.models import (
    HIGH,
    URGENCY_LEVELS,
    AnalysisRecord,
    DashboardData,
    DashboardStats,
    TrendPoint,
)

RECENT_HIGH_LIMIT = 5
TREND_DAYS = 7
_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def compute_dashboard(
    history: Iterable[AnalysisRecord], now: datetime | None = None
) -> DashboardData:
    """Summary: Recompute every dashboard statistic from the full history.

    Importance: Pure and safe on an empty history; calendar days use local time.
    Alternatives: Cache aggregates and update them incrementally.
    """

    records = list(history)
    today = _local(now or datetime.now(timezone.utc)).date()
    total = len(records)

    days = [_record_day(record) for record in records]
    known_days = {day for day in days if day is not None}

    stats = DashboardStats(
        total=total,
        today=sum(1 for day in days if day == today),
        high_urgency_percent=_percent(sum(1 for r in records if r.urgency == HIGH), total),
        avg_per_day=round_half_up(total / max(len(known_days), 1)),
        needs_review_percent=_percent(sum(1 for r in records if r.needs_review), total),
        escalation_rate=_percent(sum(1 for r in records if r.escalate), total),
        avg_confidence=_percent(sum(r.confidence for r in records), total),
        pii_detected_count=sum(1 for r in records if r.pii_findings),
    )

    category_counts = Counter(record.category for record in records)
    urgency_data = {level: 0 for level in URGENCY_LEVELS} if records else {}
    for record in records:
        urgency_data[record.urgency] = urgency_data.get(record.urgency, 0) + 1

    high = [record for record in records if record.urgency == HIGH]
    high.sort(key=lambda record: _parse_timestamp(record.timestamp) or _EPOCH, reverse=True)

    return DashboardData(
        stats=stats,
        category_data=sorted(category_counts.items(), key=lambda item: item[1], reverse=True),
        urgency_data=urgency_data,
        sentiment_data=dict(Counter(record.sentiment for record in records)),
        recent_high_urgency=high[:RECENT_HIGH_LIMIT],
        weekly_trend=_weekly_trend(records, days, today),
    )


def round_half_up(value: float) -> int:
    """Round halves upward, so 2.5 becomes 3 rather than Python's banker's 2."""

    return int(math.floor(value + 0.5))


def _percent(count: float, total: int) -> int:
    if total == 0:
        return 0
    return round_half_up(100 * count / total)


def _weekly_trend(
    records: list[AnalysisRecord], days: list[date | None], today: date
) -> list[TrendPoint]:
    trend: list[TrendPoint] = []
    for offset in range(TREND_DAYS - 1, -1, -1):
        day = today - timedelta(days=offset)
        matching = [record for record, record_day in zip(records, days) if record_day == day]
        trend.append(
            TrendPoint(
                date=day.isoformat(),
                label=day.strftime("%a"),
                count=len(matching),
                high_count=sum(1 for record in matching if record.urgency == HIGH),
            )
        )
    return trend


def _record_day(record: AnalysisRecord) -> date | None:
    parsed = _parse_timestamp(record.timestamp)
    return _local(parsed).date() if parsed else None


def _parse_timestamp(value: str) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return _local(parsed)


def _local(moment: datetime) -> datetime:
    # Naive values are taken as local time.
    return moment.astimezone()
