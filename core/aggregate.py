from __future__ import annotations

import math
import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from core.records import (
    COL_ACTIVITY_TYPE,
    COL_DEPARTMENT,
    COL_FORMAT,
    COL_LEVEL,
    COL_STATUS,
    Record,
)


UNSPECIFIED = "ไม่ระบุ"

# (payload key, column index, chart title)
CHART_FIELDS: Tuple[Tuple[str, int, str], ...] = (
    ("status", COL_STATUS, "สถานะ"),
    ("department", COL_DEPARTMENT, "สังกัด"),
    ("activity_type", COL_ACTIVITY_TYPE, "ประเภทกิจกรรม"),
    ("level", COL_LEVEL, "ระดับ"),
    ("format", COL_FORMAT, "รูปแบบกิจกรรม"),
)

_FLOAT_PREFIX = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_hours(value: object) -> Optional[float]:
    """Leading numeric prefix of ``value`` (``"3 ชม."`` -> 3.0), else ``None``."""
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    match = _FLOAT_PREFIX.match(str(value))
    if not match:
        return None
    return float(match.group(0))


def round_half_up(value: float, ndigits: int = 0) -> float:
    if not math.isfinite(value):
        return value
    q = Decimal(10) ** -ndigits
    d = Decimal(str(value))
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, d.adjusted() + ndigits + 2)
        return float(d.quantize(q, rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class Summary:
    count: int = 0
    total_hours: float = 0.0

    @property
    def total_hours_display(self) -> str:
        return f"{round_half_up(self.total_hours):,.0f}"


def category_counts(records: Iterable[Record], field_index: int) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for rec in records:
        value = rec.field_at(field_index) or UNSPECIFIED
        counts[value] = counts.get(value, 0) + 1
    return counts


def chart_percentages(counts: Dict[str, int]) -> Dict[str, float]:
    total = sum(counts.values())
    if not total:
        return {k: 0.0 for k in counts}
    return {k: round(v / total * 100, 1) for k, v in counts.items()}


def summarize(records: Sequence[Record]) -> Summary:
    total = 0.0
    for rec in records:
        hours = parse_hours(rec.training_hours) if rec.training_hours else None
        if hours is not None:
            total += hours
    return Summary(count=len(records), total_hours=total)


def all_category_counts(records: Sequence[Record]) -> Dict[str, Dict[str, int]]:
    return {key: category_counts(records, idx) for key, idx, _ in CHART_FIELDS}


def counts_as_rows(counts: Dict[str, int]) -> List[Dict[str, object]]:
    pct = chart_percentages(counts)
    return [{"label": k, "count": v, "percent": pct[k]} for k, v in counts.items()]
