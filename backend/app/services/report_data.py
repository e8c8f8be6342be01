"""
Shared data shapes for the guest-list reports.

Both renderers (Excel and PDF) consume the same row type and the same
summary, so they live here instead of in either renderer:

- GuestRSVP: one immutable guest row, built from an ORM record or a dict
- ReportSummary: the four headline counts shown at the top of each report
- RenderedReport: finished bytes + the headers the HTTP layer needs
- ReportRenderError: the one exception a renderer raises when it fails

Display strings are in Spanish because the guest list is for a Mexican
wedding; code and identifiers stay in English.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from numbers import Real
from typing import Any, Mapping, Optional, Union

REPORT_TITLE = "Lista de Invitados - Boda Rosaura & José"
EVENT_NAME = "Boda Rosaura & José"

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
PDF_MEDIA_TYPE = "application/pdf"
EXCEL_FILENAME = "invitados-boda.xlsx"
PDF_FILENAME = "invitados-boda.pdf"

COLUMN_HEADERS = ("Nombre completo", "# de invitados", "Teléfono", "Nota", "Confirmado")

SUMMARY_LABELS = (
    ("total", "Invitados registrados"),
    ("confirmed", "Confirmados"),
    ("pending", "Pendientes"),
    ("guests", "Total invitados declarados"),
)

YES = "Sí"
NO = "No"

# es-MX short month names, as Intl.DateTimeFormat prints them
_MONTHS_ES = (
    "ene", "feb", "mar", "abr", "may", "jun",
    "jul", "ago", "sept", "oct", "nov", "dic",
)


class ReportRenderError(Exception):
    """A report could not be produced (serialization, browser, export)."""


@dataclass(frozen=True)
class GuestRSVP:
    """One guest row as the reports see it. Never mutated by a renderer."""

    full_name: str
    guests_count: Any
    phone: Optional[str]
    notes: Optional[str]
    attending: bool

    @classmethod
    def from_record(cls, record: Union[Mapping[str, Any], Any]) -> "GuestRSVP":
        """Build a row from an RSVP model instance or a plain mapping.

        Missing optional fields are tolerated; guests_count is passed
        through untouched so the renderers decide how to show bad values.
        """
        if isinstance(record, Mapping):
            get = record.get
        else:
            def get(key, default=None):
                return getattr(record, key, default)

        return cls(
            full_name=get("full_name") or "",
            guests_count=get("guests_count"),
            phone=get("phone"),
            notes=get("notes"),
            attending=bool(get("attending", False)),
        )

    @property
    def known_guest_count(self) -> Optional[Union[int, float]]:
        return known_guest_count(self.guests_count)


@dataclass(frozen=True)
class ReportSummary:
    """Headline counts. confirmed + pending always equals total."""

    total: int = 0
    confirmed: int = 0
    pending: int = 0
    guests: Union[int, float] = 0

    def as_dict(self) -> dict:
        return {
            "total": self.total,
            "confirmed": self.confirmed,
            "pending": self.pending,
            "guests": self.guests,
        }


@dataclass(frozen=True)
class RenderedReport:
    """Finished report bytes plus what the HTTP response needs."""

    content: bytes
    media_type: str
    filename: str

    @property
    def content_disposition(self) -> str:
        return f'attachment; filename="{self.filename}"'


def known_guest_count(value: Any) -> Optional[Union[int, float]]:
    """Return value if it is a finite, non-negative number, else None.

    Strings (even "3"), booleans, None, NaN, infinities and negatives are
    all "unknown".
    """
    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    if not math.isfinite(value) or value < 0:
        return None
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def format_generated_at(moment: datetime) -> str:
    """Human-readable es-MX timestamp, e.g. '17 oct 2026, 14:05'."""
    month = _MONTHS_ES[moment.month - 1]
    return f"{moment.day:02d} {month} {moment.year}, {moment.hour:02d}:{moment.minute:02d}"
