from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from core.dates import format_display_date


MIN_FIELDS = 15
ATTACHMENT_SLOTS = 6
ATTACHMENT_START = 14
HOURS_INDEX = 20

# Sheet column positions.
COL_TIMESTAMP = 0
COL_NAME = 1
COL_STATUS = 2
COL_DEPARTMENT = 3
COL_ACTIVITY_TYPE = 4
COL_ACTIVITY_NAME = 5
COL_OUTCOME = 6
COL_DETAIL = 7
COL_LEVEL = 8
COL_START_DATE = 9
COL_END_DATE = 10
COL_FORMAT = 11
COL_ORGANIZER = 12
COL_LOCATION = 13

FIELD_LABELS = {
    "timestamp": "ประทับเวลา",
    "name": "ชื่อ",
    "status": "สถานะ",
    "department": "สังกัด",
    "activity_type": "ประเภทกิจกรรม",
    "activity_name": "ชื่อกิจกรรม",
    "outcome": "สิ่งที่ได้รับ",
    "detail": "รายละเอียด",
    "level": "ระดับ",
    "start_date": "ตั้งแต่วันที่",
    "end_date": "ถึงวันที่",
    "activity_format": "รูปแบบกิจกรรม",
    "organizer": "หน่วยงานที่จัด",
    "location": "สถานที่",
    "training_hours": "จำนวนชั่วโมงอบรม",
}


def coerce_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass(frozen=True)
class Record:
    timestamp: str
    name: str
    status: str
    department: str
    activity_type: str
    activity_name: str
    outcome: str
    detail: str
    level: str
    start_date: str
    end_date: str
    activity_format: str
    organizer: str
    location: str
    attachments: Tuple[str, ...] = ("",) * ATTACHMENT_SLOTS
    training_hours: str = ""
    cells: Tuple[str, ...] = field(default=(), repr=False, compare=False)

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> Optional["Record"]:
        """Build a record from a positional sheet row; ``None`` if malformed."""
        if not isinstance(row, (list, tuple)) or len(row) < MIN_FIELDS:
            return None
        cells = tuple(coerce_cell(v) for v in row)

        def at(idx: int) -> str:
            return cells[idx] if idx < len(cells) else ""

        attachments = tuple(at(ATTACHMENT_START + i) for i in range(ATTACHMENT_SLOTS))
        return cls(
            timestamp=at(COL_TIMESTAMP),
            name=at(COL_NAME),
            status=at(COL_STATUS),
            department=at(COL_DEPARTMENT),
            activity_type=at(COL_ACTIVITY_TYPE),
            activity_name=at(COL_ACTIVITY_NAME),
            outcome=at(COL_OUTCOME),
            detail=at(COL_DETAIL),
            level=at(COL_LEVEL),
            start_date=at(COL_START_DATE),
            end_date=at(COL_END_DATE),
            activity_format=at(COL_FORMAT),
            organizer=at(COL_ORGANIZER),
            location=at(COL_LOCATION),
            attachments=attachments,
            training_hours=at(HOURS_INDEX),
            cells=cells,
        )

    def field_at(self, index: int) -> str:
        """Positional access; missing positions read as an empty string."""
        return self.cells[index] if index < len(self.cells) else ""

    @property
    def present_attachments(self) -> List[Tuple[int, str]]:
        return [(i + 1, url) for i, url in enumerate(self.attachments) if url.strip()]


@dataclass(frozen=True)
class Dataset:
    """Rows as fetched, header removed. Replaced wholesale on every load."""

    rows: Tuple[Tuple[Any, ...], ...] = ()

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        return not self.rows

    @cached_property
    def records(self) -> Tuple[Record, ...]:
        """Well-formed records, built once on first use."""
        out: List[Record] = []
        for row in self.rows:
            rec = Record.from_row(row)
            if rec is not None:
                out.append(rec)
        return tuple(out)

    @property
    def malformed_count(self) -> int:
        return len(self.rows) - len(self.records)


def load_dataset(raw_rows: Optional[Iterable[Any]]) -> Dataset:
    """Discard the header row and keep the rest untouched."""
    rows = list(raw_rows or [])
    body = rows[1:]
    return Dataset(rows=tuple(tuple(r) if isinstance(r, (list, tuple)) else () for r in body))


def distinct_values(records: Iterable[Record], attr: str) -> List[str]:
    values = {getattr(r, attr).strip() for r in records}
    return sorted(v for v in values if v)


def records_frame(records: Sequence[Record]) -> pd.DataFrame:
    """Records as a DataFrame keyed by field name (attachments expanded)."""
    columns = list(FIELD_LABELS.keys()) + [f"attachment_{i + 1}" for i in range(ATTACHMENT_SLOTS)]
    if not records:
        return pd.DataFrame(columns=columns)
    data: List[Dict[str, Any]] = []
    for rec in records:
        row = {k: getattr(rec, k) for k in FIELD_LABELS}
        for i, url in enumerate(rec.attachments):
            row[f"attachment_{i + 1}"] = url
        data.append(row)
    return pd.DataFrame(data, columns=columns)


def detail_fields(rec: Record, tz_name: str = "Asia/Bangkok") -> List[Tuple[str, str]]:
    """Labelled values for the detail view; the timestamp is left out."""
    values = {
        "start_date": format_display_date(rec.start_date, tz_name),
        "end_date": format_display_date(rec.end_date, tz_name),
        "training_hours": rec.training_hours or "-",
    }
    return [
        (label, values.get(key, getattr(rec, key)) or "-")
        for key, label in FIELD_LABELS.items()
        if key != "timestamp"
    ]
