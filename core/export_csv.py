from __future__ import annotations

from typing import List, Sequence

from core.errors import NothingToExportError
from core.records import ATTACHMENT_SLOTS, Record


BOM = "\ufeff"
MEDIA_TYPE = "text/csv; charset=utf-8"

CSV_HEADERS: List[str] = [
    "ประทับเวลา",
    "ชื่อ",
    "สถานะ",
    "สังกัด",
    "ประเภทกิจกรรม",
    "ชื่อกิจกรรม",
    "สิ่งที่ได้รับ",
    "รายละเอียด",
    "ระดับ",
    "ตั้งแต่วันที่",
    "ถึงวันที่",
    "รูปแบบกิจกรรม",
    "หน่วยงานที่จัด",
    "สถานที่",
    *[f"เอกสารแนบ {i + 1}" for i in range(ATTACHMENT_SLOTS)],
    "จำนวนชั่วโมงอบรม",
]


def quote(value: str) -> str:
    return '"' + (value or "").replace('"', '""') + '"'


def csv_row(rec: Record) -> List[str]:
    """One line's cells; free text is always quoted, dates/hours stay raw."""
    return [
        rec.timestamp,
        quote(rec.name),
        quote(rec.status),
        quote(rec.department),
        quote(rec.activity_type),
        quote(rec.activity_name),
        quote(rec.outcome),
        quote(rec.detail),
        quote(rec.level),
        rec.start_date,
        rec.end_date,
        quote(rec.activity_format),
        quote(rec.organizer),
        quote(rec.location),
        *[quote(url) for url in rec.attachments],
        rec.training_hours,
    ]


def build_csv_text(records: Sequence[Record]) -> str:
    if not records:
        raise NothingToExportError()
    lines = [",".join(CSV_HEADERS)]
    lines.extend(",".join(csv_row(rec)) for rec in records)
    return BOM + "\n".join(lines) + "\n"


def build_csv(records: Sequence[Record]) -> bytes:
    return build_csv_text(records).encode("utf-8")


def csv_filename(basename: str) -> str:
    return f"{basename}.csv"
