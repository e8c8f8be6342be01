"""
Guest-list summarizer shared by the Excel and PDF reports.
"""

from typing import Iterable

from app.services.report_data import GuestRSVP, ReportSummary, known_guest_count


def summarize(rows: Iterable[GuestRSVP]) -> ReportSummary:
    """Count registered, confirmed and pending RSVPs and declared guests.

    Pure function of the rows. A row with an unusable guests_count still
    counts as registered/confirmed/pending; it just adds 0 guests.
    """
    total = 0
    confirmed = 0
    guests = 0

    for row in rows:
        total += 1
        if row.attending:
            confirmed += 1
        guests += known_guest_count(row.guests_count) or 0

    return ReportSummary(
        total=total,
        confirmed=confirmed,
        pending=total - confirmed,
        guests=guests,
    )
