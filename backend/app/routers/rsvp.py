"""
Public RSVP endpoint.

POST /api/rsvp: a guest confirms (or declines) attendance.

The body can be JSON or form data; see services/rsvp_intake.py for the
parsing and validation rules. Errors are returned as {"error": "..."}
because the wedding site's form shows that message directly.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models import RSVP
from app.schemas.rsvp import ErrorResponse, RSVPCreatedResponse
from app.services.rsvp_intake import RSVPInputError, build_submission, parse_body

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["rsvp"])


@router.post(
    "/rsvp",
    response_model=RSVPCreatedResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def submit_rsvp(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Store one RSVP.

    Returns 400 with a guest-facing message for bad input, 500 if the
    database insert fails.
    """
    try:
        payload = await parse_body(request)
        submission = build_submission(payload)
    except RSVPInputError as e:
        return _error(str(e), 400)

    rsvp = RSVP(**submission.model_dump())
    db.add(rsvp)
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("RSVP insert failed: %s", e, exc_info=True)
        return _error("No pudimos guardar tu confirmación. Intenta de nuevo.", 500)

    logger.info("RSVP stored", extra={"rows": 1})
    return RSVPCreatedResponse()


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())
