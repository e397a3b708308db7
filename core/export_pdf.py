"""Landscape A4 table export of the filtered result.

Layout is computed in millimetres measured from the top of the page and only
converted to reportlab's bottom-up points when drawing. Row heights come from
the wrapped cell text so nothing is clipped, and a new page (with the header
band repeated) starts whenever the next row would cross the bottom margin.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from io import BytesIO
from typing import List, Optional, Sequence, Tuple

from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from core.aggregate import Summary, summarize
from core.config import Settings, get_settings
from core.dates import format_display_date, format_print_date
from core.errors import NothingToExportError
from core.fonts import register_pdf_font
from core.records import Record


MEDIA_TYPE = "application/pdf"

# (header, width in mm)
TABLE_COLUMNS: Tuple[Tuple[str, float], ...] = (
    ("ตั้งแต่วันที่", 28),
    ("ถึงวันที่", 28),
    ("ชื่อ", 45),
    ("ประเภทกิจกรรม", 45),
    ("ชื่อกิจกรรม", 55),
    ("สิ่งที่ได้รับ", 55),
    ("ชั่วโมงอบรม", 25),
)

CELL_PADDING = 2.0
HEADER_BAND = 10.0
FIRST_TABLE_TOP = 70.0
NEXT_TABLE_TOP = 20.0
BOTTOM_MARGIN = 20.0
FOOTER_OFFSET = 10.0
BODY_FONT_SIZE = 9
HEADER_FONT_SIZE = 10
LINE_HEIGHT_FACTOR = 1.15

HEADER_FILL = (255, 200, 200)
EVEN_ROW_FILL = (245, 245, 245)
ODD_ROW_FILL = (255, 255, 255)

PAGE_WIDTH_MM, PAGE_HEIGHT_MM = (v / mm for v in landscape(A4))


@dataclass(frozen=True)
class RowPlacement:
    index: int
    page: int
    top: float
    height: float


def line_height_mm(font_size: float) -> float:
    return font_size * LINE_HEIGHT_FACTOR / mm


def table_cells(rec: Record, tz_name: str = "Asia/Bangkok") -> List[str]:
    return [
        format_display_date(rec.start_date, tz_name),
        format_display_date(rec.end_date, tz_name),
        rec.name or "-",
        rec.activity_type or "-",
        rec.activity_name or "-",
        rec.outcome or "-",
        rec.training_hours or "-",
    ]


def wrap_cells(cells: Sequence[str], font_name: str, font_size: float = BODY_FONT_SIZE) -> List[List[str]]:
    wrapped: List[List[str]] = []
    for text, (_, width) in zip(cells, TABLE_COLUMNS):
        max_width = (width - CELL_PADDING * 2) * mm
        wrapped.append(simpleSplit(str(text), font_name, font_size, max_width) or [""])
    return wrapped


def row_height(wrapped: Sequence[Sequence[str]], font_size: float = BODY_FONT_SIZE) -> float:
    tallest = max((len(lines) for lines in wrapped), default=1)
    return tallest * line_height_mm(font_size) + CELL_PADDING * 2


def paginate(
    heights: Sequence[float],
    *,
    page_height: float = PAGE_HEIGHT_MM,
    first_top: float = FIRST_TABLE_TOP,
    next_top: float = NEXT_TABLE_TOP,
    header_height: float = HEADER_BAND,
    bottom_margin: float = BOTTOM_MARGIN,
) -> List[List[RowPlacement]]:
    """Assign each row a page and a top offset.

    A row that does not fit starts a new page below a repeated header band.
    A row taller than a whole page is placed anyway rather than looping.
    """
    pages: List[List[RowPlacement]] = [[]]
    y = first_top + header_height
    for index, height in enumerate(heights):
        if pages[-1] and y + height > page_height - bottom_margin:
            pages.append([])
            y = next_top + header_height
        pages[-1].append(RowPlacement(index=index, page=len(pages) - 1, top=y, height=height))
        y += height
    return pages


class _TableCanvas:
    def __init__(self, buffer: BytesIO, font_name: str, settings: Settings):
        self.c = canvas.Canvas(buffer, pagesize=landscape(A4))
        self.font = font_name
        self.settings = settings
        self.table_width = sum(w for _, w in TABLE_COLUMNS)
        self.start_x = (PAGE_WIDTH_MM - self.table_width) / 2

    def _y(self, top_mm: float) -> float:
        return (PAGE_HEIGHT_MM - top_mm) * mm

    def _fill(self, rgb: Tuple[int, int, int]) -> None:
        self.c.setFillColorRGB(*(v / 255 for v in rgb))

    def text(self, x_mm: float, top_mm: float, text: str, size: float, *, centered: bool = False) -> None:
        self.c.setFillColorRGB(0, 0, 0)
        self.c.setFont(self.font, size)
        if centered:
            self.c.drawCentredString(x_mm * mm, self._y(top_mm), text)
        else:
            self.c.drawString(x_mm * mm, self._y(top_mm), text)

    def title_block(self, summary: Summary, today: Optional[date]) -> None:
        center = PAGE_WIDTH_MM / 2
        self.text(center, 20, self.settings.report_title, 18, centered=True)
        self.text(center, 30, self.settings.organization_name, 14, centered=True)
        self.text(10, 40, f"วันที่พิมพ์: {format_print_date(today)}", 10)
        self.text(10, 50, f"จำนวนรายการทั้งหมด: {summary.count} รายการ", 12)
        self.text(10, 60, f"จำนวนชั่วโมงอบรมรวม: {summary.total_hours_display} ชั่วโมง", 12)

    def header_band(self, top_mm: float) -> None:
        self._fill(HEADER_FILL)
        self.c.rect(self.start_x * mm, self._y(top_mm + HEADER_BAND), self.table_width * mm, HEADER_BAND * mm, stroke=0, fill=1)
        x = self.start_x
        for name, width in TABLE_COLUMNS:
            self.text(x + CELL_PADDING, top_mm + 7, name, HEADER_FONT_SIZE)
            x += width

    def row(self, placement: RowPlacement, wrapped: Sequence[Sequence[str]]) -> None:
        self._fill(EVEN_ROW_FILL if placement.index % 2 == 0 else ODD_ROW_FILL)
        self.c.rect(
            self.start_x * mm,
            self._y(placement.top + placement.height),
            self.table_width * mm,
            placement.height * mm,
            stroke=0,
            fill=1,
        )
        lh = line_height_mm(BODY_FONT_SIZE)
        x = self.start_x
        for lines, (_, width) in zip(wrapped, TABLE_COLUMNS):
            for n, line in enumerate(lines):
                self.text(x + CELL_PADDING, placement.top + CELL_PADDING + lh * (n + 1), line, BODY_FONT_SIZE)
            x += width

    def footer(self) -> None:
        self.text(PAGE_WIDTH_MM / 2, PAGE_HEIGHT_MM - FOOTER_OFFSET, self.settings.footer_credit, 10, centered=True)

    def new_page(self) -> None:
        self.footer()
        self.c.showPage()

    def finish(self) -> None:
        self.footer()
        self.c.save()


def build_table_pdf(
    records: Sequence[Record],
    summary: Optional[Summary] = None,
    settings: Optional[Settings] = None,
    today: Optional[date] = None,
) -> bytes:
    if not records:
        raise NothingToExportError()
    settings = settings or get_settings()
    summary = summary or summarize(records)
    font_name = register_pdf_font(settings.font_path)

    wrapped_rows = [wrap_cells(table_cells(rec, settings.display_tz), font_name) for rec in records]
    pages = paginate([row_height(w) for w in wrapped_rows])

    buffer = BytesIO()
    doc = _TableCanvas(buffer, font_name, settings)
    doc.title_block(summary, today)
    for page_no, placements in enumerate(pages):
        if page_no > 0:
            doc.new_page()
        doc.header_band(FIRST_TABLE_TOP if page_no == 0 else NEXT_TABLE_TOP)
        for placement in placements:
            doc.row(placement, wrapped_rows[placement.index])
    doc.finish()
    return buffer.getvalue()


def table_pdf_filename(basename: str) -> str:
    return f"{basename}.pdf"
