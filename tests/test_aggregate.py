"""
Tests for core/aggregate.py and core/charts.py: totals, category counts, pie charts.
"""
import altair as alt
import pytest

from core.aggregate import (
    UNSPECIFIED,
    Summary,
    all_category_counts,
    category_counts,
    chart_percentages,
    counts_as_rows,
    parse_hours,
    round_half_up,
    summarize,
)
from core.charts import pie_chart, to_vega_spec
from core.records import COL_LEVEL, COL_STATUS, Record
from tests.conftest import make_row


def _rec(**kwargs) -> Record:
    return Record.from_row(make_row(**kwargs))


class TestParseHours:
    @pytest.mark.parametrize(
        "raw, expected",
        [("3", 3.0), ("2.5", 2.5), ("3 ชม.", 3.0), (" 12abc", 12.0), (".5", 0.5), ("-1", -1.0), ("1e2", 100.0), (4, 4.0)],
    )
    def test_numeric_prefix(self, raw, expected):
        assert parse_hours(raw) == expected

    @pytest.mark.parametrize("raw", ["", "abc", "ชม. 3", None])
    def test_no_number(self, raw):
        assert parse_hours(raw) is None


class TestRounding:
    def test_half_up(self):
        assert round_half_up(2.5) == 3.0
        assert round_half_up(0.5) == 1.0
        assert round_half_up(1.49) == 1.0

    def test_display_has_grouping(self):
        assert Summary(count=1, total_hours=1234.5).total_hours_display == "1,235"
        assert Summary().total_hours_display == "0"

    def test_huge_totals_still_display(self):
        assert round_half_up(1e30) == 1e30
        summary = summarize([_rec(hours="1e30")])
        assert summary.total_hours_display == f"{1e30:,.0f}"


class TestSummarize:
    def test_sums_only_numeric_hours(self):
        records = [_rec(hours="3"), _rec(hours="2.5"), _rec(hours="x"), _rec(hours="")]
        summary = summarize(records)
        assert summary.count == 4
        assert summary.total_hours == pytest.approx(5.5)

    def test_empty(self):
        assert summarize([]) == Summary(count=0, total_hours=0.0)


class TestCategoryCounts:
    def test_blank_is_unspecified_and_order_is_first_seen(self):
        records = [_rec(status="นักเรียน"), _rec(status=""), _rec(status="ครู"), _rec(status="นักเรียน")]
        counts = category_counts(records, COL_STATUS)
        assert list(counts.items()) == [("นักเรียน", 2), (UNSPECIFIED, 1), ("ครู", 1)]

    def test_all_fields(self):
        counts = all_category_counts([_rec(level="ชาติ"), _rec(fmt="")])
        assert set(counts) == {"status", "department", "activity_type", "level", "format"}
        assert counts["level"] == {"ชาติ": 1, "จังหวัด": 1}
        assert counts["format"] == {"ออนไลน์": 1, UNSPECIFIED: 1}

    def test_short_row_reads_blank(self):
        rec = Record.from_row(make_row(length=15))
        assert category_counts([rec], COL_LEVEL) == {"จังหวัด": 1}
        assert category_counts([rec], 30) == {UNSPECIFIED: 1}

    def test_percentages(self):
        assert chart_percentages({"a": 1, "b": 2}) == {"a": 33.3, "b": 66.7}
        assert chart_percentages({}) == {}

    def test_rows(self):
        assert counts_as_rows({"a": 1, "b": 3}) == [
            {"label": "a", "count": 1, "percent": 25.0},
            {"label": "b", "count": 3, "percent": 75.0},
        ]


class TestPieChart:
    def test_legend_follows_counts(self):
        chart = pie_chart({"ครู": 3, UNSPECIFIED: 1}, "สถานะ")
        assert isinstance(chart, alt.Chart)
        assert chart.data["legend"].tolist() == ["ครู: 3 (75.0%)", f"{UNSPECIFIED}: 1 (25.0%)"]

    def test_spec_is_an_arc_chart(self):
        spec = to_vega_spec(pie_chart({"a": 1}, "ระดับ"))
        assert "arc" in str(spec["mark"])
        assert spec["encoding"]["theta"]["field"] == "count"
