"""
Guest-list export service.

Glue between the database and the two renderers:
- list_guest_rows() loads RSVPs newest first as GuestRSVP rows
- build_excel_report() / build_pdf_report() render them and attach the
  media type and download filename the router needs
"""

import asyncio
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models import RSVP
from app.services.excel_report import render_spreadsheet
from app.services.pdf_report import render_pdf
from app.services.report_data import (
    EXCEL_FILENAME,
    PDF_FILENAME,
    PDF_MEDIA_TYPE,
    XLSX_MEDIA_TYPE,
    GuestRSVP,
    RenderedReport,
    ReportRenderError,
)


async def list_guest_rows(db: AsyncSession) -> list[GuestRSVP]:
    """All RSVPs, most recent first (ties broken by id)."""
    result = await db.execute(
        select(RSVP).order_by(RSVP.created_at.desc(), RSVP.id.desc())
    )
    return [GuestRSVP.from_record(rsvp) for rsvp in result.scalars().all()]


def build_excel_report(
    rows: Sequence[GuestRSVP],
    generated_at: Optional[datetime] = None,
) -> RenderedReport:
    return RenderedReport(
        content=render_spreadsheet(rows, generated_at),
        media_type=XLSX_MEDIA_TYPE,
        filename=EXCEL_FILENAME,
    )


async def build_pdf_report(
    rows: Sequence[GuestRSVP],
    generated_at: Optional[datetime] = None,
    engine=None,
) -> RenderedReport:
    """Render the PDF report, bounded by PDF_RENDER_TIMEOUT_SECONDS.

    The timeout cancels the render task; browser_session's cleanup still
    runs during cancellation.
    """
    try:
        content = await asyncio.wait_for(
            render_pdf(rows, generated_at, engine=engine),
            timeout=settings.PDF_RENDER_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError as e:
        raise ReportRenderError(
            f"PDF rendering timed out after {settings.PDF_RENDER_TIMEOUT_SECONDS}s"
        ) from e

    return RenderedReport(
        content=content,
        media_type=PDF_MEDIA_TYPE,
        filename=PDF_FILENAME,
    )
