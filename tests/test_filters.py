"""
Tests for core/filters.py and core/sorting.py: criteria matching and ordering.
"""
import logging
from datetime import datetime, timezone

from core.filters import SearchCriteria, filter_records, matches, normalize_criteria
from core.records import Record, load_dataset
from core.sorting import sort_records
from tests.conftest import make_row


UTC = timezone.utc


def _rec(**kwargs) -> Record:
    return Record.from_row(make_row(**kwargs))


class TestNormalizeCriteria:
    def test_text_is_trimmed(self):
        crit = normalize_criteria({"name": "  สมชาย ", "level": None})
        assert crit.name == "สมชาย"
        assert crit.level == ""

    def test_bounds_are_parsed(self):
        crit = normalize_criteria({"start_date": "2024-01-01", "end_date": "2024-12-31"})
        assert crit.start_date == datetime(2024, 1, 1, tzinfo=UTC)
        assert crit.end_date == datetime(2024, 12, 31, tzinfo=UTC)

    def test_unparsable_bound_is_dropped(self, caplog):
        with caplog.at_level(logging.WARNING, logger="core.filters"):
            crit = normalize_criteria({"start_date": "someday"})
        assert crit.start_date is None
        assert "someday" in caplog.text

    def test_empty_input_is_blank(self):
        assert normalize_criteria(None).is_blank
        assert normalize_criteria({"name": "   "}).is_blank
        assert not normalize_criteria({"name": "x"}).is_blank


class TestMatches:
    def test_blank_criteria_match_everything(self):
        assert matches(_rec(), SearchCriteria())

    def test_text_is_case_insensitive_substring(self):
        rec = _rec(name="John Smith", activity_type="Workshop")
        assert matches(rec, SearchCriteria(name="smith"))
        assert matches(rec, SearchCriteria(activity_type="WORK"))
        assert not matches(rec, SearchCriteria(name="jane"))

    def test_all_criteria_must_hold(self):
        rec = _rec(department="ภาษาไทย", level="ชาติ")
        assert not matches(rec, SearchCriteria(department="ภาษา", level="จังหวัด"))

    def test_start_bound_is_inclusive(self):
        rec = _rec(start="2024-01-01")
        assert matches(rec, SearchCriteria(start_date=datetime(2024, 1, 1, tzinfo=UTC)))
        assert not matches(rec, SearchCriteria(start_date=datetime(2024, 1, 2, tzinfo=UTC)))

    def test_end_bound_compares_end_date(self):
        rec = _rec(start="2024-01-01", end="2024-01-05")
        assert matches(rec, SearchCriteria(end_date=datetime(2024, 1, 5, tzinfo=UTC)))
        assert not matches(rec, SearchCriteria(end_date=datetime(2024, 1, 4, tzinfo=UTC)))

    def test_unparsable_record_date_fails_active_bound(self):
        rec = _rec(start="เร็วๆ นี้", end="")
        assert matches(rec, SearchCriteria())
        assert not matches(rec, SearchCriteria(start_date=datetime(2000, 1, 1, tzinfo=UTC)))
        assert not matches(rec, SearchCriteria(end_date=datetime(2100, 1, 1, tzinfo=UTC)))


class TestFilterRecords:
    def test_start_bound_excludes_older_row(self, sample_rows):
        ds = load_dataset(sample_rows)
        crit = normalize_criteria({"start_date": "2024-01-01"})
        assert [r.name for r in filter_records(ds, crit)] == ["A"]

    def test_malformed_rows_never_match(self, sample_rows):
        names = [r.name for r in filter_records(sample_rows[1:])]
        assert names == ["A", "B"]

    def test_accepts_records_and_keeps_order(self):
        records = [_rec(name="x1"), _rec(name="y"), _rec(name="x2")]
        out = filter_records(records, SearchCriteria(name="x"))
        assert [r.name for r in out] == ["x1", "x2"]

    def test_no_criteria_returns_all(self, sample_rows):
        assert len(filter_records(load_dataset(sample_rows))) == 2


class TestSortRecords:
    def test_ascending_by_start_date(self, sample_rows):
        out = sort_records(load_dataset(sample_rows).records)
        assert [r.name for r in out] == ["B", "A"]

    def test_invalid_dates_sort_first(self):
        records = [_rec(name="late", start="2024-05-01"), _rec(name="none", start="")]
        assert [r.name for r in sort_records(records)] == ["none", "late"]

    def test_ties_keep_input_order(self):
        records = [_rec(name=str(i), start="2024-01-10") for i in range(5)]
        assert [r.name for r in sort_records(records)] == ["0", "1", "2", "3", "4"]

    def test_invalid_dates_keep_input_order_ahead_of_valid(self):
        records = [
            _rec(name="valid", start="2023-01-01"),
            _rec(name="blank", start=""),
            _rec(name="thai", start="เร็วๆ นี้"),
            _rec(name="edge", start="0001-01-01T00:00:00+01:00"),
            _rec(name="garbage", start="garbage"),
        ]
        assert [r.name for r in sort_records(records)] == ["blank", "thai", "edge", "garbage", "valid"]

    def test_mixed_formats_compare_as_instants(self):
        records = [_rec(name="us", start="1/11/2024"), _rec(name="iso", start="2024-01-10")]
        assert [r.name for r in sort_records(records)] == ["iso", "us"]
