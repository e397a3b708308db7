from __future__ import annotations

import re
from typing import Dict, List, Optional, Pattern, Tuple

from core.records import Record


_ID = r"([a-zA-Z0-9_-]+)"

# First match wins.
FILE_ID_PATTERNS: Tuple[Tuple[str, Pattern[str]], ...] = (
    ("path", re.compile(r"/d/" + _ID + r"(?:/view)?")),
    ("query", re.compile(r"id=" + _ID)),
    ("open", re.compile(r"/open\?id=" + _ID)),
    ("download", re.compile(r"uc\?id=" + _ID)),
    ("preview", re.compile(r"/file/d/" + _ID + r"/preview")),
)


def resolve_file_id(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    for _, pattern in FILE_ID_PATTERNS:
        match = pattern.search(url)
        if match and match.group(1):
            return match.group(1)
    return None


def thumbnail_url(file_id: str, host: str = "drive.google.com", width: int = 300) -> str:
    return f"https://{host}/thumbnail?id={file_id}&sz=w{width}"


def describe_attachments(record: Record, host: str = "drive.google.com") -> List[Dict[str, object]]:
    """Present attachments with their thumbnail, or ``None`` for the generic icon."""
    out: List[Dict[str, object]] = []
    for index, url in record.present_attachments:
        url = url.strip()
        file_id = resolve_file_id(url)
        out.append(
            {
                "index": index,
                "label": f"เอกสารแนบ {index}",
                "url": url,
                "file_id": file_id,
                "thumbnail_url": thumbnail_url(file_id, host) if file_id else None,
            }
        )
    return out
