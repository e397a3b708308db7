"""Single-record detail export.

The detail panel is drawn to a Pillow image first, the same way the on-screen
panel is laid out (two-column field grid, then an attachment grid), and the
raster is then placed on a portrait A4 page. Thumbnails are fetched before
drawing; each fetch has its own timeout and a failed one leaves a blank tile.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from io import BytesIO
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw, UnidentifiedImageError
from reportlab.lib.pagesizes import A4, portrait
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from core.attachments import describe_attachments
from core.config import Settings, get_settings
from core.data import fetch_image
from core.errors import ExportRenderError, NothingToExportError
from core.fonts import load_image_font, register_pdf_font
from core.records import Record, detail_fields


logger = logging.getLogger(__name__)

MEDIA_TYPE = "application/pdf"

TOP_MARGIN = 25.4
SIDE_MARGIN = 10.0
FOOTER_SPACE = 20.0
FOOTER_OFFSET = 15.0

PANEL_WIDTH = 1400
PADDING = 40
GAP = 40
LABEL_SIZE = 28
VALUE_SIZE = 26
HEADING_SIZE = 32
TILE_COLUMNS = 4
TILE_GAP = 24
THUMB_HEIGHT = 240
CAPTION_HEIGHT = 48

RED = (185, 28, 28)
TEXT = (17, 24, 39)
MUTED = (107, 114, 128)
BORDER = (229, 231, 235)
TILE_BG = (254, 242, 242)
ICON_BG = (229, 231, 235)
WHITE = (255, 255, 255)

ImageFetcher = Callable[[str, float], Optional[bytes]]


@dataclass(frozen=True)
class Placement:
    x: float
    y: float
    width: float
    height: float


def place_image(
    img_width: float,
    img_height: float,
    *,
    page_width: float = 210.0,
    page_height: float = 297.0,
    top_margin: float = TOP_MARGIN,
    side_margin: float = SIDE_MARGIN,
    footer_space: float = FOOTER_SPACE,
) -> Placement:
    """Fit an image below the top margin and above the footer band (mm, top-down)."""
    ratio = img_width / img_height
    avail_w = page_width - side_margin * 2
    avail_h = page_height - top_margin - footer_space
    width = avail_w
    height = width / ratio
    if height > avail_h:
        height = avail_h
        width = height * ratio
    return Placement(x=(page_width - width) / 2, y=top_margin, width=width, height=height)


def _default_fetch(url: str, timeout: float) -> Optional[bytes]:
    return fetch_image(url, timeout=timeout)


def load_thumbnails(
    attachments: Sequence[Dict[str, object]],
    *,
    timeout: float,
    fetch: Optional[ImageFetcher] = None,
) -> Dict[int, Optional[Image.Image]]:
    """Wait for every thumbnail; failures and timeouts map to ``None``."""
    fetch = fetch or _default_fetch
    images: Dict[int, Optional[Image.Image]] = {}
    for att in attachments:
        url = att.get("thumbnail_url")
        index = int(att["index"])
        if not url:
            continue
        data = fetch(str(url), timeout)
        if data is None:
            images[index] = None
            continue
        try:
            img = Image.open(BytesIO(data))
            img.load()
            images[index] = img.convert("RGB")
        except (UnidentifiedImageError, OSError) as exc:
            logger.warning("Failed to decode thumbnail %s: %s", url, exc)
            images[index] = None
    return images


def wrap_text(text: str, font, max_width: float) -> List[str]:
    lines: List[str] = []
    for paragraph in str(text).splitlines() or [""]:
        line = ""
        for token in re.findall(r"\S+\s*|\s+", paragraph):
            if font.getlength((line + token).rstrip()) <= max_width:
                line += token
                continue
            if line.strip():
                lines.append(line.rstrip())
            line = ""
            for ch in token:
                if line and font.getlength((line + ch).rstrip()) > max_width:
                    lines.append(line.rstrip())
                    line = ch.lstrip()
                else:
                    line += ch
        lines.append(line.rstrip())
    return lines


def _centered_text(draw: ImageDraw.ImageDraw, cx: float, cy: float, text: str, font, fill) -> None:
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    draw.text((cx - (right - left) / 2 - left, cy - (bottom - top) / 2 - top), text, font=font, fill=fill)


class DetailPanel:
    def __init__(self, record: Record, settings: Settings, images: Dict[int, Optional[Image.Image]]):
        self.record = record
        self.settings = settings
        self.images = images
        self.attachments = describe_attachments(record, settings.thumbnail_host)
        self.label_font = load_image_font(LABEL_SIZE, settings.font_path)
        self.value_font = load_image_font(VALUE_SIZE, settings.font_path)
        self.heading_font = load_image_font(HEADING_SIZE, settings.font_path)
        self.col_width = (PANEL_WIDTH - PADDING * 2 - GAP) / 2
        self.tile_width = (PANEL_WIDTH - PADDING * 2 - TILE_GAP * (TILE_COLUMNS - 1)) / TILE_COLUMNS

    def _field_blocks(self) -> List[Tuple[str, List[str], int]]:
        blocks = []
        for label, value in detail_fields(self.record, self.settings.display_tz):
            lines = wrap_text(value, self.value_font, self.col_width)
            height = int(LABEL_SIZE * 1.4 + len(lines) * VALUE_SIZE * 1.4 + 20)
            blocks.append((label, lines, height))
        return blocks

    def _grid_rows(self, blocks):
        return [blocks[i:i + 2] for i in range(0, len(blocks), 2)]

    def _attachment_height(self) -> int:
        if not self.attachments:
            return 0
        rows = -(-len(self.attachments) // TILE_COLUMNS)
        return int(GAP + HEADING_SIZE * 1.6 + rows * (THUMB_HEIGHT + CAPTION_HEIGHT + TILE_GAP))

    def render(self) -> Image.Image:
        blocks = self._field_blocks()
        rows = self._grid_rows(blocks)
        fields_height = sum(max(b[2] for b in row) + 16 for row in rows)
        height = int(PADDING * 2 + fields_height + self._attachment_height())

        img = Image.new("RGB", (PANEL_WIDTH, height), WHITE)
        draw = ImageDraw.Draw(img)
        y = PADDING
        for row in rows:
            row_height = max(b[2] for b in row)
            for col, (label, lines, _) in enumerate(row):
                x = PADDING + col * (self.col_width + GAP)
                draw.text((x, y), label, font=self.label_font, fill=RED)
                ty = y + LABEL_SIZE * 1.4
                for line in lines:
                    draw.text((x, ty), line, font=self.value_font, fill=TEXT)
                    ty += VALUE_SIZE * 1.4
                draw.line([(x, y + row_height), (x + self.col_width, y + row_height)], fill=BORDER, width=2)
            y += row_height + 16

        if self.attachments:
            y += GAP
            draw.text((PADDING, y), "เอกสารแนบ", font=self.heading_font, fill=RED)
            y += HEADING_SIZE * 1.6
            self._draw_tiles(img, draw, y)
        return img

    def _draw_tiles(self, img: Image.Image, draw: ImageDraw.ImageDraw, top: float) -> None:
        for n, att in enumerate(self.attachments):
            row, col = divmod(n, TILE_COLUMNS)
            x = int(PADDING + col * (self.tile_width + TILE_GAP))
            y = int(top + row * (THUMB_HEIGHT + CAPTION_HEIGHT + TILE_GAP))
            w = int(self.tile_width)
            draw.rectangle([x, y, x + w, y + THUMB_HEIGHT + CAPTION_HEIGHT], fill=TILE_BG)
            box = (x + 8, y + 8, x + w - 8, y + THUMB_HEIGHT - 8)
            index = int(att["index"])
            if att["thumbnail_url"] is None:
                draw.rectangle(box, fill=ICON_BG)
                _centered_text(draw, (box[0] + box[2]) / 2, (box[1] + box[3]) / 2, "ไฟล์แนบ", self.value_font, MUTED)
            else:
                thumb = self.images.get(index)
                if thumb is None:
                    draw.rectangle(box, fill=WHITE)
                else:
                    fitted = thumb.copy()
                    fitted.thumbnail((box[2] - box[0], box[3] - box[1]))
                    px = box[0] + (box[2] - box[0] - fitted.width) // 2
                    py = box[1] + (box[3] - box[1] - fitted.height) // 2
                    img.paste(fitted, (px, py))
            _centered_text(draw, x + w / 2, y + THUMB_HEIGHT + CAPTION_HEIGHT / 2, str(att["label"]), self.value_font, RED)


def render_detail_image(
    record: Record,
    settings: Optional[Settings] = None,
    *,
    fetch: Optional[ImageFetcher] = None,
) -> Image.Image:
    settings = settings or get_settings()
    attachments = describe_attachments(record, settings.thumbnail_host)
    images = load_thumbnails(attachments, timeout=settings.image_timeout, fetch=fetch)
    return DetailPanel(record, settings, images).render()


def build_detail_pdf(
    record: Optional[Record],
    settings: Optional[Settings] = None,
    *,
    fetch: Optional[ImageFetcher] = None,
) -> bytes:
    if record is None:
        raise NothingToExportError()
    settings = settings or get_settings()
    try:
        panel = render_detail_image(record, settings, fetch=fetch)
        page_w, page_h = (v / mm for v in portrait(A4))
        spot = place_image(panel.width, panel.height, page_width=page_w, page_height=page_h)

        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=portrait(A4))
        c.drawImage(
            ImageReader(panel),
            spot.x * mm,
            (page_h - spot.y - spot.height) * mm,
            width=spot.width * mm,
            height=spot.height * mm,
        )
        c.setFont(register_pdf_font(settings.font_path), 10)
        c.drawCentredString(page_w / 2 * mm, FOOTER_OFFSET * mm, settings.footer_credit)
        c.showPage()
        c.save()
    except Exception as exc:
        logger.exception("Error generating detail PDF")
        raise ExportRenderError(f"เกิดข้อผิดพลาดในการสร้าง PDF: {exc}") from exc
    return buffer.getvalue()


def detail_pdf_filename(record: Record) -> str:
    name = re.sub(r'[\\/:*?"<>|]+', "_", record.name.strip()) or "ข้อมูล"
    return f"รายละเอียด-{name}.pdf"
