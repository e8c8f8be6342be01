"""
RSVP form intake: turns whatever the public form posted into a
validated RSVPSubmission.

The form is submitted both by fetch() with JSON and by a plain HTML form
post, so the body is parsed according to its Content-Type. A request with
no (or an unknown) Content-Type is tried as JSON, since some clients send
JSON without setting the header.

Every problem with the guest's input is raised as RSVPInputError with a
Spanish message that is shown to the guest as-is.
"""

import json
import math
import re
from typing import Any, Mapping

from fastapi import Request

from app.schemas.rsvp import RSVPSubmission

MAX_GUESTS = 10
NAME_KEYS = ("full_name", "fullName", "name")
TRUTHY = {"true", "yes", "on", "1"}

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class RSVPInputError(ValueError):
    """The guest's submission can't be accepted. str(e) is user-facing."""


async def parse_body(request: Request) -> dict[str, Any]:
    content_type = request.headers.get("content-type", "")

    if "application/json" in content_type:
        try:
            payload = await request.json()
        except ValueError as e:
            raise RSVPInputError("Cuerpo JSON inválido.") from e
        return _as_dict(payload)

    if "multipart/form-data" in content_type or "application/x-www-form-urlencoded" in content_type:
        form = await request.form()
        return {key: value for key, value in form.items()}

    raw = (await request.body()).decode("utf-8", errors="replace")
    if not raw.strip():
        return {}
    try:
        return _as_dict(json.loads(raw))
    except ValueError as e:
        raise RSVPInputError(
            f'Unsupported Content-Type "{content_type}". Expected JSON or form-data.'
        ) from e


def build_submission(payload: Mapping[str, Any]) -> RSVPSubmission:
    """Validate a parsed body. Raises RSVPInputError."""
    full_name = pick_string(payload, NAME_KEYS)
    if not full_name:
        raise RSVPInputError("El nombre es obligatorio.")

    guests_count = parse_int(payload.get("guests_count"))
    if guests_count is None or not 0 <= guests_count <= MAX_GUESTS:
        raise RSVPInputError(
            f"La cantidad de invitados debe ser un número entre 0 y {MAX_GUESTS}."
        )

    return RSVPSubmission(
        full_name=full_name[:200],
        attending=parse_attending(payload.get("attending")),
        guests_count=guests_count,
        phone=_clean(payload.get("phone")),
        notes=_clean(payload.get("notes")),
    )


def parse_attending(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if not isinstance(value, str):
        return False
    return value.strip().lower() in TRUTHY


def parse_int(value: Any):
    """Leading-integer parse: 3 -> 3, "4 personas" -> 4, "x" -> None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


def pick_string(payload: Mapping[str, Any], keys) -> str:
    """First non-blank value among keys, stripped."""
    for key in keys:
        value = payload.get(key)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return ""


def _clean(value: Any):
    if value is None:
        return None
    return str(value).strip() or None


def _as_dict(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise RSVPInputError("Cuerpo JSON inválido.")
    return payload
