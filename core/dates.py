"""Date parsing for sheet cells and search bounds.

All values are compared as UTC instants:

- ``YYYY-MM-DD`` is UTC midnight of that day;
- ISO datetimes with ``Z`` or an offset are converted to UTC, naive ones are
  taken as UTC;
- US-style sheet strings ``M/D/YYYY`` and ``M/D/YYYY H:MM[:SS]`` are UTC.

Anything else parses to ``None`` (the invalid sentinel).
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

US_FORMATS = ("%m/%d/%Y", "%m/%d/%Y %H:%M:%S", "%m/%d/%Y %H:%M")

THAI_MONTHS_SHORT = (
    "ม.ค.",
    "ก.พ.",
    "มี.ค.",
    "เม.ย.",
    "พ.ค.",
    "มิ.ย.",
    "ก.ค.",
    "ส.ค.",
    "ก.ย.",
    "ต.ค.",
    "พ.ย.",
    "ธ.ค.",
)
BUDDHIST_ERA_OFFSET = 543

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_date(value: object) -> Optional[datetime]:
    """Parse a cell or bound into an aware UTC datetime, or ``None``."""
    if value is None:
        return None
    if isinstance(value, datetime):
        try:
            return _as_utc(value)
        except OverflowError:
            return None
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    s = str(value).strip()
    if not s:
        return None
    if _ISO_DATE.match(s):
        try:
            d = date.fromisoformat(s)
        except ValueError:
            return None
        return datetime(d.year, d.month, d.day, tzinfo=timezone.utc)
    iso = s[:-1] + "+00:00" if s.endswith(("Z", "z")) else s
    try:
        return _as_utc(datetime.fromisoformat(iso))
    except (ValueError, OverflowError):
        pass
    for fmt in US_FORMATS:
        try:
            return _as_utc(datetime.strptime(s, fmt))
        except (ValueError, OverflowError):
            continue
    return None


def sort_key(value: object) -> datetime:
    parsed = parse_date(value)
    return parsed if parsed is not None else EPOCH


def _display_zone(tz_name: str):
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def format_display_date(value: object, tz_name: str = "Asia/Bangkok") -> str:
    """Thai short date with Buddhist year, e.g. ``10 ม.ค. 2567``.

    Empty values render as ``-``; unparsable strings are returned unchanged.
    Date-only values are shown as-is without shifting into ``tz_name``.
    """
    if value is None or str(value).strip() == "":
        return "-"
    parsed = parse_date(value)
    if parsed is None:
        return str(value)
    date_only = bool(_ISO_DATE.match(str(value).strip())) or (
        isinstance(value, date) and not isinstance(value, datetime)
    )
    if not date_only:
        try:
            parsed = parsed.astimezone(_display_zone(tz_name))
        except OverflowError:
            pass  # shown as the UTC date
    return f"{parsed.day} {THAI_MONTHS_SHORT[parsed.month - 1]} {parsed.year + BUDDHIST_ERA_OFFSET}"


def format_print_date(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"{today.day}/{today.month}/{today.year + BUDDHIST_ERA_OFFSET}"
