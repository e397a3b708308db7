"""
Pytest fixtures for the activity portfolio dashboard.

Rows follow the sheet layout: 21 positional cells, the first row is a header.
"""
import json

import pytest

from core.config import Settings, get_settings


HEADER = [
    "ประทับเวลา", "ชื่อ", "สถานะ", "สังกัด", "ประเภทกิจกรรม", "ชื่อกิจกรรม",
    "สิ่งที่ได้รับ", "รายละเอียด", "ระดับ", "ตั้งแต่วันที่", "ถึงวันที่",
    "รูปแบบกิจกรรม", "หน่วยงานที่จัด", "สถานที่", "เอกสารแนบ 1", "เอกสารแนบ 2",
    "เอกสารแนบ 3", "เอกสารแนบ 4", "เอกสารแนบ 5", "เอกสารแนบ 6", "จำนวนชั่วโมงอบรม",
]


def make_row(
    name="สมชาย ใจดี",
    start="2024-01-10",
    end="2024-01-12",
    hours="6",
    status="ครู",
    department="คณิตศาสตร์",
    activity_type="อบรม",
    activity_name="อบรมการสอน",
    outcome="เกียรติบัตร",
    detail="",
    level="จังหวัด",
    fmt="ออนไลน์",
    attachments=None,
    length=21,
):
    attachments = list(attachments or []) + [""] * 6
    row = [
        "1/15/2024 10:00:00", name, status, department, activity_type, activity_name,
        outcome, detail, level, start, end, fmt, "สพม.", "เชียงใหม่",
        *attachments[:6], hours,
    ]
    return row[:length]


@pytest.fixture()
def settings(tmp_path):
    return Settings(data_url=str(tmp_path / "rows.json"), image_timeout=0.1)


@pytest.fixture()
def sample_rows():
    """Header + two well-formed rows (out of date order) + one malformed row."""
    row_a = make_row(name="A", start="2024-01-10", end="2024-01-11", hours="3")
    row_b = make_row(name="B", start="2023-05-01", end="2023-05-02", hours="2.5")
    row_c = ["x", "C", "", "", ""]
    return [HEADER, row_a, row_b, row_c]


@pytest.fixture()
def rows_file(tmp_path, sample_rows):
    path = tmp_path / "rows.json"
    path.write_text(json.dumps(sample_rows, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture()
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
