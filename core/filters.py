from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, List, Optional, Union

from core.dates import parse_date
from core.records import Dataset, Record


logger = logging.getLogger(__name__)

TEXT_CRITERIA = ("activity_type", "name", "department", "level", "activity_format")


@dataclass(frozen=True)
class SearchCriteria:
    activity_type: str = ""
    name: str = ""
    department: str = ""
    level: str = ""
    activity_format: str = ""
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @property
    def is_blank(self) -> bool:
        return not any(getattr(self, k) for k in TEXT_CRITERIA) and self.start_date is None and self.end_date is None


def _as_text(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _as_bound(raw: dict, key: str) -> Optional[datetime]:
    value = raw.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    parsed = parse_date(value)
    if parsed is None:
        logger.warning("Ignoring unparsable %s bound: %r", key, value)
    return parsed


def normalize_criteria(raw: Optional[dict]) -> SearchCriteria:
    raw = raw or {}
    return SearchCriteria(
        activity_type=_as_text(raw.get("activity_type")),
        name=_as_text(raw.get("name")),
        department=_as_text(raw.get("department")),
        level=_as_text(raw.get("level")),
        activity_format=_as_text(raw.get("activity_format")),
        start_date=_as_bound(raw, "start_date"),
        end_date=_as_bound(raw, "end_date"),
    )


def matches(record: Record, criteria: SearchCriteria) -> bool:
    for attr in TEXT_CRITERIA:
        needle = getattr(criteria, attr)
        if needle and needle.casefold() not in getattr(record, attr).casefold():
            return False

    if criteria.start_date is not None:
        start = parse_date(record.start_date)
        if start is None or start < criteria.start_date:
            return False

    if criteria.end_date is not None:
        end = parse_date(record.end_date)
        if end is None or end > criteria.end_date:
            return False

    return True


def filter_records(
    source: Union[Dataset, Iterable[Record], Iterable[Any]],
    criteria: Optional[SearchCriteria] = None,
) -> List[Record]:
    """Records passing every active criterion, in input order.

    ``source`` may be a :class:`Dataset`, records, or raw positional rows;
    rows with fewer than 15 fields never match.
    """
    criteria = criteria or SearchCriteria()
    if isinstance(source, Dataset):
        candidates: Iterable[Optional[Record]] = source.records
    else:
        candidates = (item if isinstance(item, Record) else Record.from_row(item) for item in source)
    return [rec for rec in candidates if rec is not None and matches(rec, criteria)]
