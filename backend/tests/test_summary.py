"""
Unit tests for the summarizer and the shared report data helpers.

No database or HTTP here — these are pure functions.
"""

import math
from datetime import datetime
from types import SimpleNamespace

import pytest

from app.services.report_data import (
    GuestRSVP,
    RenderedReport,
    ReportSummary,
    format_generated_at,
    known_guest_count,
)
from app.services.summary import summarize


def _row(attending=True, guests_count=1, **overrides):
    data = {"full_name": "Invitado", "phone": None, "notes": None}
    data.update(overrides)
    return GuestRSVP(attending=attending, guests_count=guests_count, **data)


# --- summarize ---

def test_summarize_empty():
    """No rows means all-zero counts."""
    assert summarize([]) == ReportSummary(total=0, confirmed=0, pending=0, guests=0)


def test_summarize_ignores_non_numeric_guest_count():
    """A non-numeric count adds 0 guests but the row is still counted."""
    rows = [_row(attending=True, guests_count=2), _row(attending=False, guests_count="x")]

    summary = summarize(rows)

    assert summary.as_dict() == {"total": 2, "confirmed": 1, "pending": 1, "guests": 2}


@pytest.mark.parametrize("bad_value", [
    float("nan"), float("inf"), float("-inf"), -3, None, "4", True,
])
def test_summarize_unknown_counts_contribute_zero(bad_value):
    rows = [_row(guests_count=5), _row(guests_count=bad_value)]

    summary = summarize(rows)

    assert summary.total == 2
    assert summary.guests == 5
    assert not math.isnan(summary.guests)


@pytest.mark.parametrize("rows", [
    [],
    [_row(attending=False)],
    [_row(attending=True), _row(attending=True)],
    [_row(attending=i % 3 == 0, guests_count=i) for i in range(17)],
])
def test_summarize_properties(rows):
    """confirmed + pending == total and guests is never negative."""
    summary = summarize(rows)

    assert summary.confirmed + summary.pending == summary.total
    assert summary.total == len(rows)
    assert summary.guests >= 0


def test_summarize_accepts_generators():
    summary = summarize(_row(guests_count=1) for _ in range(4))
    assert summary.total == 4
    assert summary.guests == 4


def test_summarize_is_repeatable():
    """Same rows, same answer — nothing is cached between calls."""
    rows = [_row(attending=True, guests_count=2), _row(attending=False, guests_count=1)]
    assert summarize(rows) == summarize(rows)
    assert summarize(rows[:1]).total == 1


# --- known_guest_count ---

@pytest.mark.parametrize("value, expected", [
    (0, 0),
    (4, 4),
    (2.0, 2),
    (2.5, 2.5),
    (-1, None),
    (float("nan"), None),
    (float("inf"), None),
    ("3", None),
    (None, None),
    (True, None),
])
def test_known_guest_count(value, expected):
    assert known_guest_count(value) == expected


# --- GuestRSVP.from_record ---

def test_from_record_mapping_with_missing_fields():
    row = GuestRSVP.from_record({"full_name": "Ana", "guests_count": 2})

    assert row.full_name == "Ana"
    assert row.guests_count == 2
    assert row.phone is None
    assert row.notes is None
    assert row.attending is False


def test_from_record_object():
    record = SimpleNamespace(full_name=None, guests_count=1, phone="555",
                             notes="Llega tarde", attending=True)

    row = GuestRSVP.from_record(record)

    assert row.full_name == ""
    assert row.phone == "555"
    assert row.notes == "Llega tarde"
    assert row.attending is True


def test_guest_row_is_immutable():
    row = _row()
    with pytest.raises(AttributeError):
        row.full_name = "Otro"


# --- Formatting / RenderedReport ---

def test_format_generated_at():
    assert format_generated_at(datetime(2026, 10, 17, 14, 5)) == "17 oct 2026, 14:05"
    assert format_generated_at(datetime(2026, 1, 3, 9, 0)) == "03 ene 2026, 09:00"


def test_rendered_report_content_disposition():
    report = RenderedReport(content=b"x", media_type="application/pdf", filename="invitados-boda.pdf")
    assert report.content_disposition == 'attachment; filename="invitados-boda.pdf"'
