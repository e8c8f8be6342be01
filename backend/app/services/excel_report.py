"""
Excel guest-list report: builds a styled .xlsx workbook in memory.

The sheet has a fixed layout (0-based row indexes, as used by style_for):

    0   Title (merged A:E)
    1   "Generado: ..." timestamp (merged A:E)
    2   spacer
    3   RESUMEN
    4-7 summary label/value pairs
    8   spacer
    9   column headers
    10+ one row per guest, in the order received

Filling the cells and styling them are separate steps. The writer only
puts values in cells; style_for() decides how any (row, column, value)
looks and returns a StyleSpec, which is then converted to openpyxl
Font/Fill/Alignment/Border objects. Changing the look never touches the
layout code and vice versa.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from io import BytesIO
from typing import Any, Optional, Sequence

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from app.services.report_data import (
    COLUMN_HEADERS,
    NO,
    REPORT_TITLE,
    SUMMARY_LABELS,
    YES,
    GuestRSVP,
    ReportRenderError,
    format_generated_at,
)
from app.services.summary import summarize

logger = logging.getLogger(__name__)

SHEET_TITLE = "Invitados"

# --- Layout (0-based rows) ---
TITLE_ROW = 0
GENERATED_ROW = 1
SUMMARY_HEADER_ROW = 3
SUMMARY_FIRST_ROW = 4
HEADER_ROW = 9
DATA_START_ROW = 10
COLUMN_COUNT = len(COLUMN_HEADERS)
ATTENDING_COLUMN = COLUMN_COUNT - 1
GUESTS_COLUMN = 1
# Guest-typed columns: name, phone, notes
TEXT_COLUMNS = (0, 2, 3)

COLUMN_WIDTHS = (35, 16, 18, 45, 14)
ROW_HEIGHTS = {
    TITLE_ROW: 28,
    GENERATED_ROW: 18,
    2: 8,
    SUMMARY_HEADER_ROW: 22,
    4: 20,
    5: 20,
    6: 20,
    7: 20,
    8: 8,
    HEADER_ROW: 24,
}

# --- Palette ---
BRAND = "00674F"
BRAND_DARK = "006F54"
BRAND_SOFT = "E8F4F0"
VALUE_BG = "F0FDF9"
CREAM = "FDFAF7"
BAND_EVEN = "FFFFFF"
BAND_ODD = "FBF7F2"
TEXT = "1F1A17"
MUTED = "5D514B"
GRID = "E6DCD5"
YES_COLOR = "0F7B5C"
NO_COLOR = "B3532F"
WHITE = "FFFFFF"


@dataclass(frozen=True)
class StyleSpec:
    """How one cell looks, independent of openpyxl.

    border is one of: None, "box" (thin box), "summary_header" (medium
    bottom rule) or "column_header" (medium top/bottom, thin sides).
    """

    bold: bool = False
    italic: bool = False
    size: Optional[float] = None
    color: str = TEXT
    fill: Optional[str] = None
    horizontal: Optional[str] = None
    vertical: Optional[str] = None
    border: Optional[str] = None


TITLE_STYLE = StyleSpec(bold=True, size=16, color=BRAND, fill=BRAND_SOFT,
                        horizontal="center", vertical="center")
GENERATED_STYLE = StyleSpec(italic=True, size=10, color=MUTED, fill=CREAM,
                            horizontal="center", vertical="center")
SUMMARY_HEADER_STYLE = StyleSpec(bold=True, size=12, color=BRAND, fill=BRAND_SOFT,
                                 border="summary_header")
SUMMARY_LABEL_STYLE = StyleSpec(bold=True, size=11, color=TEXT, fill=WHITE,
                                horizontal="left", vertical="center", border="box")
SUMMARY_VALUE_STYLE = StyleSpec(bold=True, size=14, color=BRAND, fill=VALUE_BG,
                                horizontal="center", vertical="center", border="box")
COLUMN_HEADER_STYLE = StyleSpec(bold=True, size=11, color=WHITE, fill=BRAND,
                                horizontal="center", vertical="center",
                                border="column_header")


def style_for(row_index: int, column_index: int, value: Any) -> Optional[StyleSpec]:
    """Return the StyleSpec for a cell, or None to leave it unstyled.

    Data-row banding follows the position inside the data block, not the
    absolute row. The attending column is coloured by its value and keeps
    the band's fill.
    """
    if row_index == TITLE_ROW:
        return TITLE_STYLE if column_index == 0 else None
    if row_index == GENERATED_ROW:
        return GENERATED_STYLE if column_index == 0 else None
    if row_index == SUMMARY_HEADER_ROW:
        return SUMMARY_HEADER_STYLE if column_index == 0 else None
    if SUMMARY_FIRST_ROW <= row_index < SUMMARY_FIRST_ROW + len(SUMMARY_LABELS):
        if column_index == 0:
            return SUMMARY_LABEL_STYLE
        if column_index == 1:
            return SUMMARY_VALUE_STYLE
        return None
    if row_index == HEADER_ROW:
        return COLUMN_HEADER_STYLE if column_index < COLUMN_COUNT else None
    if row_index < DATA_START_ROW or column_index >= COLUMN_COUNT:
        return None

    band = BAND_EVEN if (row_index - DATA_START_ROW) % 2 == 0 else BAND_ODD
    centered = column_index in (GUESTS_COLUMN, ATTENDING_COLUMN)

    if column_index == ATTENDING_COLUMN:
        return StyleSpec(
            bold=True,
            color=YES_COLOR if value == YES else NO_COLOR,
            fill=band,
            horizontal="center",
            vertical="center",
            border="box",
        )

    return StyleSpec(
        color=TEXT,
        fill=band,
        horizontal="center" if centered else "left",
        vertical="center",
        border="box",
    )


# ------------------------------------------------------------------
# PUBLIC API
# ------------------------------------------------------------------

def render_spreadsheet(
    rows: Sequence[GuestRSVP],
    generated_at: Optional[datetime] = None,
) -> bytes:
    """Build the guest-list workbook and return the .xlsx bytes.

    An empty rows list still produces the title, an all-zero summary and
    the header row. Raises ReportRenderError if the workbook can't be
    built or serialized.
    """
    generated_at = generated_at or datetime.now()

    try:
        grid = _build_grid(rows, generated_at)

        wb = Workbook()
        ws = wb.active
        ws.title = SHEET_TITLE

        _write_grid(ws, grid)
        _apply_styles(ws, grid)
        _set_dimensions(ws)

        buffer = BytesIO()
        wb.save(buffer)
    except Exception as e:
        logger.error("Excel generation failed: %s", e, exc_info=True)
        raise ReportRenderError(f"Could not build guest-list workbook: {e}") from e

    return buffer.getvalue()


# ------------------------------------------------------------------
# LAYOUT
# ------------------------------------------------------------------

def _build_grid(rows: Sequence[GuestRSVP], generated_at: datetime) -> list[list[Any]]:
    """Lay out every row of the sheet as plain values (0-based)."""
    summary = summarize(rows).as_dict()

    grid: list[list[Any]] = [
        [REPORT_TITLE],
        [f"Generado: {format_generated_at(generated_at)}"],
        [],
        ["RESUMEN"],
    ]
    grid.extend([label, summary[key]] for key, label in SUMMARY_LABELS)
    grid.append([])
    grid.append(list(COLUMN_HEADERS))
    grid.extend(_data_row(row) for row in rows)
    return grid


def _data_row(row: GuestRSVP) -> list[Any]:
    return [
        _sheet_text(row.full_name),
        row.known_guest_count,
        _sheet_text(row.phone),
        _sheet_text(row.notes),
        YES if row.attending else NO,
    ]


def _sheet_text(value: Optional[str]) -> str:
    """Guest text with the control characters XML can't store removed."""
    return ILLEGAL_CHARACTERS_RE.sub("", value or "")


def _write_grid(ws, grid: list[list[Any]]) -> None:
    for r, values in enumerate(grid):
        for c, value in enumerate(values):
            cell = ws.cell(row=r + 1, column=c + 1, value=value)
            if r >= DATA_START_ROW and c in TEXT_COLUMNS:
                # Never a formula, even when the text starts with "="
                cell.data_type = "s"

    last_column = get_column_letter(COLUMN_COUNT)
    for r in (TITLE_ROW, GENERATED_ROW):
        ws.merge_cells(f"A{r + 1}:{last_column}{r + 1}")


def _apply_styles(ws, grid: list[list[Any]]) -> None:
    # Header and data rows are styled across all columns, even where a
    # value is missing, so the table keeps its banding and borders.
    for r in range(len(grid)):
        width = COLUMN_COUNT if r >= HEADER_ROW else len(grid[r])
        for c in range(width):
            value = grid[r][c] if c < len(grid[r]) else None
            spec = style_for(r, c, value)
            if spec is None:
                continue
            cell = ws.cell(row=r + 1, column=c + 1)
            font, fill, alignment, border = _openpyxl_style(spec)
            cell.font = font
            if fill is not None:
                cell.fill = fill
            if alignment is not None:
                cell.alignment = alignment
            if border is not None:
                cell.border = border


def _set_dimensions(ws) -> None:
    for i, width in enumerate(COLUMN_WIDTHS, start=1):
        ws.column_dimensions[get_column_letter(i)].width = width
    for r, height in ROW_HEIGHTS.items():
        ws.row_dimensions[r + 1].height = height


# ------------------------------------------------------------------
# StyleSpec -> openpyxl
# ------------------------------------------------------------------

@lru_cache(maxsize=None)
def _openpyxl_style(spec: StyleSpec):
    """Convert a StyleSpec to (Font, Fill, Alignment, Border)."""
    font = Font(bold=spec.bold, italic=spec.italic, size=spec.size, color=spec.color)
    fill = (
        PatternFill(fill_type="solid", start_color=spec.fill, end_color=spec.fill)
        if spec.fill else None
    )
    alignment = (
        Alignment(horizontal=spec.horizontal, vertical=spec.vertical)
        if spec.horizontal or spec.vertical else None
    )
    return font, fill, alignment, _border(spec.border)


def _border(kind: Optional[str]) -> Optional[Border]:
    if kind is None:
        return None
    if kind == "box":
        side = Side(style="thin", color=GRID)
        return Border(top=side, bottom=side, left=side, right=side)
    if kind == "summary_header":
        return Border(bottom=Side(style="medium", color=BRAND))
    if kind == "column_header":
        rule = Side(style="medium", color=BRAND)
        edge = Side(style="thin", color=BRAND_DARK)
        return Border(top=rule, bottom=rule, left=edge, right=edge)
    raise ValueError(f"Unknown border kind: {kind}")
