from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from PIL import ImageFont
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont, TTFError


logger = logging.getLogger(__name__)

PDF_FONT_NAME = "Sarabun"
FALLBACK_PDF_FONT = "Helvetica"

# Thai-capable fonts commonly found on Linux hosts (fonts-tlwg, Google Sarabun).
FONT_CANDIDATES = (
    "fonts/Sarabun-Regular.ttf",
    "/usr/share/fonts/truetype/sarabun/Sarabun-Regular.ttf",
    "/usr/share/fonts/truetype/tlwg/Garuda.ttf",
    "/usr/share/fonts/truetype/tlwg/Loma.ttf",
    "/usr/share/fonts/truetype/noto/NotoSansThai-Regular.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
)


def resolve_font_path(configured: Optional[str] = None) -> Optional[Path]:
    base = Path(__file__).resolve().parents[1]
    candidates = ([configured] if configured else []) + list(FONT_CANDIDATES)
    for candidate in candidates:
        path = Path(candidate)
        if not path.is_absolute():
            path = base / path
        if path.is_file():
            return path
    return None


@lru_cache(maxsize=8)
def register_pdf_font(configured: Optional[str] = None) -> str:
    """Register a Thai-capable TTF with reportlab; fall back to Helvetica."""
    path = resolve_font_path(configured)
    if path is None:
        logger.warning("No Thai TTF font found; PDF text falls back to %s", FALLBACK_PDF_FONT)
        return FALLBACK_PDF_FONT
    try:
        pdfmetrics.registerFont(TTFont(PDF_FONT_NAME, str(path)))
    except (TTFError, OSError) as exc:
        logger.warning("Could not register font %s: %s", path, exc)
        return FALLBACK_PDF_FONT
    return PDF_FONT_NAME


def load_image_font(size: int, configured: Optional[str] = None):
    path = resolve_font_path(configured)
    if path is not None:
        try:
            return ImageFont.truetype(str(path), size)
        except OSError as exc:
            logger.warning("Could not load font %s: %s", path, exc)
    return ImageFont.load_default(size=size)
