"""Summary: Tests for history export.

Importance: Ensures exported files open cleanly in spreadsheets and tools.
Alternatives: Verify exports by opening them manually.
"""

from __future__ import annotations

import json
from dataclasses import replace
from datetime import datetime, timezone

from triagedesk.classifier import RuleBasedClassifier
from triagedesk.detectors import EMAIL_FINDING
from triagedesk.export import CSV_COLUMNS, history_to_csv, history_to_json
from triagedesk.models import AnalysisRecord
from triagedesk.services import compose_record
from triagedesk.settings import TriageSettings

NOW = datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)


def _record() -> AnalysisRecord:
    message = 'The "Export" page shows an error, email me at ana@example.com'
    record = compose_record(message, RuleBasedClassifier().classify(message), TriageSettings(), now=NOW)
    return replace(
        record,
        categories=["Technical Problem", "Outage"],
        latency_ms=None,
        cached=False,
        escalate=True,
        reasoning="Line one",
        pii_findings=[EMAIL_FINDING],
    )


def test_csv_header_and_quoting() -> None:
    """Summary: Strings are quoted, quotes doubled, and lists joined.

    Importance: Messages with commas or quotes must not break columns.
    Alternatives: Strip punctuation from exported text.
    """

    lines = history_to_csv([_record()]).split("\n")
    assert lines[0] == ",".join(CSV_COLUMNS)
    assert lines[0].startswith("timestamp,message,categories,urgency")
    row = lines[1]
    assert row.startswith('"2026-03-02T09:30:00+00:00",')
    assert '"The ""Export"" page shows an error, email me at ana@example.com"' in row
    assert '"Technical Problem; Outage"' in row
    assert ',true,' in row
    assert ',"mock",,false,"Email address detected","Line one"' in row


def test_csv_of_empty_history_is_header_only() -> None:
    assert history_to_csv([]) == ",".join(CSV_COLUMNS)


def test_json_export_is_indented_records() -> None:
    record = _record()
    exported = history_to_json([record])
    assert exported.startswith("[\n  {")
    assert json.loads(exported) == [record.to_dict()]
