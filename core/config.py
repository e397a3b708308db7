from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import List, Optional


DATA_DIR = Path(__file__).resolve().parents[1]

DEFAULT_DATA_URL = (
    "https://script.google.com/macros/s/"
    "AKfycby3b89RQLEK3Ps2AGaDwnhcMLEY66MaCUVCl7mQnDlugVei7MGQt2Qgm0UHeWU4mhzT/exec"
)

REPORT_TITLE = "ระบบสารสนเทศผลงานครูและนักเรียน"
ORGANIZATION_NAME = "โรงเรียนหางดงรัฐราษฎร์อุปถัมภ์"
FOOTER_CREDIT = f"จัดทำโดย กลุ่มงานวิชาการ {ORGANIZATION_NAME}"
EXPORT_BASENAME = "ข้อมูลผลงานครูและนักเรียน"


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logging.getLogger(__name__).warning("Ignoring non-numeric %s=%r", name, raw)
        return default


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.environ.get(name)
    if not raw:
        return list(default)
    return [part.strip() for part in raw.split(",") if part.strip()]


@dataclass(frozen=True)
class Settings:
    data_url: str = DEFAULT_DATA_URL
    fetch_timeout: float = 30.0
    fetch_retries: int = 2
    image_timeout: float = 15.0
    thumbnail_host: str = "drive.google.com"
    font_path: Optional[str] = None
    display_tz: str = "Asia/Bangkok"
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"])
    report_title: str = REPORT_TITLE
    organization_name: str = ORGANIZATION_NAME
    footer_credit: str = FOOTER_CREDIT
    export_basename: str = EXPORT_BASENAME


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings from ``PORTFOLIO_*`` environment variables."""
    defaults = Settings()
    return Settings(
        data_url=os.environ.get("PORTFOLIO_DATA_URL", defaults.data_url),
        fetch_timeout=_env_float("PORTFOLIO_FETCH_TIMEOUT", defaults.fetch_timeout),
        fetch_retries=int(_env_float("PORTFOLIO_FETCH_RETRIES", defaults.fetch_retries)),
        image_timeout=_env_float("PORTFOLIO_IMAGE_TIMEOUT", defaults.image_timeout),
        thumbnail_host=os.environ.get("PORTFOLIO_THUMBNAIL_HOST", defaults.thumbnail_host),
        font_path=os.environ.get("PORTFOLIO_FONT_PATH") or None,
        display_tz=os.environ.get("PORTFOLIO_DISPLAY_TZ", defaults.display_tz),
        log_level=os.environ.get("PORTFOLIO_LOG_LEVEL", defaults.log_level).upper(),
        cors_origins=_env_list("PORTFOLIO_CORS_ORIGINS", defaults.cors_origins),
    )


def configure_logging(settings: Optional[Settings] = None) -> None:
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
