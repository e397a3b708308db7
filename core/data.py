from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Optional
from urllib.parse import urlparse

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from core.config import DATA_DIR, Settings, get_settings


logger = logging.getLogger(__name__)


def build_session(retries: int = 2, backoff_factor: float = 1.0) -> requests.Session:
    session = requests.Session()
    retry = Retry(
        total=retries,
        backoff_factor=backoff_factor,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["GET", "HEAD"],
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def _is_remote(url: str) -> bool:
    return urlparse(url).scheme in {"http", "https"}


def _read_local(url: str) -> Any:
    path = Path(url[len("file://"):] if url.startswith("file://") else url)
    if not path.is_absolute():
        path = DATA_DIR / path
    with path.open(encoding="utf-8") as fh:
        return json.load(fh)


def _validate_rows(payload: Any, source: str) -> List[List[Any]]:
    if not isinstance(payload, list):
        logger.error("Dataset from %s is not a JSON array (got %s)", source, type(payload).__name__)
        return []
    if not payload:
        logger.error("No data received or empty data from %s", source)
        return []
    return [row if isinstance(row, list) else [] for row in payload]


def fetch_rows(
    url: Optional[str] = None,
    *,
    settings: Optional[Settings] = None,
    session: Optional[requests.Session] = None,
) -> List[List[Any]]:
    """Fetch the raw sheet rows (header included).

    Retrieval never raises: network, HTTP and JSON errors are logged and an
    empty list is returned.
    """
    settings = settings or get_settings()
    url = url or settings.data_url

    if not _is_remote(url):
        try:
            return _validate_rows(_read_local(url), url)
        except (OSError, ValueError) as exc:
            logger.error("Error reading dataset file %s: %s", url, exc)
            return []

    http = session or build_session(settings.fetch_retries)
    try:
        resp = http.get(url, timeout=settings.fetch_timeout)
        resp.raise_for_status()
        payload = resp.json()
    except requests.RequestException as exc:
        logger.error("Error fetching data from %s: %s", url, exc)
        return []
    except ValueError as exc:
        logger.error("Malformed JSON from %s: %s", url, exc)
        return []
    finally:
        if session is None:
            http.close()
    return _validate_rows(payload, url)


def fetch_image(url: str, *, timeout: float, session: Optional[requests.Session] = None) -> Optional[bytes]:
    """Bytes of an image, or ``None`` if it fails or times out."""
    http = session or requests
    try:
        resp = http.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.Timeout:
        logger.warning("Image load timed out for: %s", url)
        return None
    except requests.RequestException as exc:
        logger.warning("Failed to load image %s: %s", url, exc)
        return None
    return resp.content
