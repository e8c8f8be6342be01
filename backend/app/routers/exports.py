"""
Guest-list download endpoints (admin only).

1. GET /api/rsvps/excel: styled .xlsx workbook
2. GET /api/rsvps/pdf: printable A4 PDF

Reports are generated on demand from the current RSVPs (newest first)
and never stored. Responses are marked private/no-store because they
contain guests' phone numbers.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.services.auth import require_admin
from app.services.exports import build_excel_report, build_pdf_report, list_guest_rows
from app.services.report_data import GuestRSVP, RenderedReport, ReportRenderError

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/rsvps",
    tags=["exports"],
    dependencies=[Depends(require_admin)],
)


@router.get("/excel")
async def download_excel(db: AsyncSession = Depends(get_db)):
    """Download the guest list as an Excel workbook."""
    rows = await _load_rows(db)
    try:
        report = build_excel_report(rows)
    except ReportRenderError as e:
        logger.error("Excel export failed: %s", e, extra={"rows": len(rows)})
        raise HTTPException(status_code=500, detail="No se pudo generar el Excel.")
    return _download(report)


@router.get("/pdf")
async def download_pdf(db: AsyncSession = Depends(get_db)):
    """Download the guest list as a PDF."""
    rows = await _load_rows(db)
    try:
        report = await build_pdf_report(rows)
    except ReportRenderError as e:
        logger.error("PDF export failed: %s", e, extra={"rows": len(rows)})
        raise HTTPException(status_code=500, detail="No se pudo generar el PDF.")
    return _download(report)


# --- Helpers ---

async def _load_rows(db: AsyncSession) -> list[GuestRSVP]:
    try:
        return await list_guest_rows(db)
    except SQLAlchemyError as e:
        logger.error("Guest list fetch failed: %s", e, exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="No se pudo obtener la lista de invitados.",
        )


def _download(report: RenderedReport) -> Response:
    return Response(
        content=report.content,
        media_type=report.media_type,
        headers={
            "Content-Disposition": report.content_disposition,
            "Cache-Control": "private, no-store",
        },
    )
