from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Optional

import pandas as pd

from core.aggregate import CHART_FIELDS, all_category_counts
from core.attachments import describe_attachments
from core.charts import pie_chart, to_vega_spec
from core.config import Settings, get_settings
from core.dates import format_display_date
from core.filters import SearchCriteria
from core.records import Dataset, Record, detail_fields, distinct_values, records_frame
from core.session import FilteredResult


TABLE_COLUMNS = {
    "start_date": "ตั้งแต่วันที่",
    "end_date": "ถึงวันที่",
    "name": "ชื่อ",
    "activity_type": "ประเภทกิจกรรม",
    "activity_name": "ชื่อกิจกรรม",
    "outcome": "สิ่งที่ได้รับ",
    "training_hours": "จำนวนชั่วโมงอบรม",
}

EMPTY_MESSAGE = "ไม่พบข้อมูลที่ตรงกับเงื่อนไขการค้นหา"


def _criteria_payload(criteria: SearchCriteria) -> Dict[str, Any]:
    out = asdict(criteria)
    for key in ("start_date", "end_date"):
        out[key] = out[key].date().isoformat() if out[key] is not None else None
    return out


def results_table(records: List[Record], tz_name: str = "Asia/Bangkok") -> pd.DataFrame:
    """Display table with formatted dates and ``-`` for blanks, keyed by row index."""
    df = records_frame(records)
    df = df[list(TABLE_COLUMNS)].copy()
    df["start_date"] = df["start_date"].apply(lambda v: format_display_date(v, tz_name))
    df["end_date"] = df["end_date"].apply(lambda v: format_display_date(v, tz_name))
    for col in ("name", "activity_type", "activity_name", "outcome", "training_hours"):
        df[col] = df[col].replace("", "-")
    df.insert(0, "index", range(len(df)))
    return df


def compute_overview(result: FilteredResult, settings: Optional[Settings] = None) -> Dict[str, Any]:
    settings = settings or get_settings()
    records = list(result.records)
    summary = result.summary
    counts = all_category_counts(records)

    charts: Dict[str, Any] = {}
    if records:
        charts = {key: to_vega_spec(pie_chart(counts[key], title)) for key, _, title in CHART_FIELDS}

    return {
        "filters": _criteria_payload(result.criteria),
        "summary": {
            "count": summary.count,
            "total_hours": summary.total_hours,
            "total_hours_display": summary.total_hours_display,
        },
        "category_counts": counts,
        "charts": charts,
        "rows": results_table(records, settings.display_tz).to_dict(orient="records"),
        "message": None if records else EMPTY_MESSAGE,
    }


def compute_detail(record: Record, index: int, settings: Optional[Settings] = None) -> Dict[str, Any]:
    settings = settings or get_settings()
    return {
        "index": index,
        "fields": [{"label": label, "value": value} for label, value in detail_fields(record, settings.display_tz)],
        "attachments": describe_attachments(record, settings.thumbnail_host),
    }


def compute_options(dataset: Dataset) -> Dict[str, List[str]]:
    records = dataset.records
    return {
        "activity_types": distinct_values(records, "activity_type"),
        "departments": distinct_values(records, "department"),
        "levels": distinct_values(records, "level"),
        "formats": distinct_values(records, "activity_format"),
    }
