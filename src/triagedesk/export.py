"""Summary: CSV and JSON export of the analysis history.

Importance: Lets teams move triage results into spreadsheets or other tools.
Alternatives: Expose only the raw stored JSON.
"""

from __future__ import annotations

import json
from typing import Any, Iterable

from triagedesk.models import AnalysisRecord

CSV_COLUMNS: tuple[str, ...] = (
    "timestamp",
    "message",
    "categories",
    "urgency",
    "recommendedAction",
    "routingDestination",
    "escalate",
    "needsReview",
    "confidence",
    "model",
    "latencyMs",
    "cached",
    "piiFindings",
    "reasoning",
)


def history_to_csv(records: Iterable[AnalysisRecord]) -> str:
    """Summary: Render records as CSV with a header row.

    Importance: Strings are always quoted and list fields are joined with "; ".
    Alternatives: Use csv.writer with minimal quoting.
    """

    lines = [",".join(CSV_COLUMNS)]
    for record in records:
        payload = record.to_dict()
        lines.append(",".join(_cell(payload.get(column)) for column in CSV_COLUMNS))
    return "\n".join(lines)


def history_to_json(records: Iterable[AnalysisRecord]) -> str:
    return json.dumps([record.to_dict() for record in records], indent=2)


def _cell(value: Any) -> str:
    if isinstance(value, list):
        value = "; ".join(str(item) for item in value)
    if isinstance(value, str):
        return '"' + value.replace('"', '""') + '"'
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)
