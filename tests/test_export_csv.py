"""
Tests for core/export_csv.py: header, quoting and the BOM prefix.
"""
import csv
import io

import pytest

from core.errors import NOTHING_TO_EXPORT_MESSAGE, NothingToExportError
from core.export_csv import BOM, CSV_HEADERS, build_csv, build_csv_text, csv_filename, quote
from core.records import Record
from tests.conftest import make_row


def _parse(text: str):
    return list(csv.reader(io.StringIO(text[len(BOM):], newline="")))


class TestBuildCsv:
    def test_bom_header_and_trailing_newline(self):
        text = build_csv_text([Record.from_row(make_row())])
        assert text.startswith(BOM)
        assert text.endswith("\n")
        assert text[len(BOM):].split("\n")[0] == ",".join(CSV_HEADERS)
        assert len(CSV_HEADERS) == 21

    def test_one_line_per_record(self):
        records = [Record.from_row(make_row(name=n)) for n in ("A", "B", "C")]
        rows = _parse(build_csv_text(records))
        assert len(rows) == 4
        assert [r[1] for r in rows[1:]] == ["A", "B", "C"]
        assert all(len(r) == 21 for r in rows)

    def test_quotes_and_commas_survive(self):
        rec = Record.from_row(make_row(name='ครู "ดีเด่น", 2567', detail="a,b"))
        row = _parse(build_csv_text([rec]))[1]
        assert row[1] == 'ครู "ดีเด่น", 2567'
        assert row[7] == "a,b"

    def test_dates_and_hours_are_unquoted(self):
        rec = Record.from_row(make_row(start="2024-01-10", end="2024-01-12", hours="6"))
        line = build_csv_text([rec])[len(BOM):].split("\n")[1]
        assert line.startswith("1/15/2024 10:00:00,")
        assert ",2024-01-10,2024-01-12," in line
        assert line.endswith(",6")

    def test_attachments_are_quoted_even_when_blank(self):
        rec = Record.from_row(make_row(attachments=["u1"]))
        line = build_csv_text([rec])[len(BOM):].split("\n")[1]
        assert '"u1","","","","",""' in line

    def test_empty_raises(self):
        with pytest.raises(NothingToExportError) as exc:
            build_csv([])
        assert str(exc.value) == NOTHING_TO_EXPORT_MESSAGE

    def test_bytes_are_utf8(self):
        data = build_csv([Record.from_row(make_row())])
        assert data.startswith(b"\xef\xbb\xbf")
        assert "ชื่อ".encode("utf-8") in data


def test_quote_doubles_embedded_quotes():
    assert quote('say "hi"') == '"say ""hi"""'
    assert quote("") == '""'


def test_filename():
    assert csv_filename("ข้อมูลผลงานครูและนักเรียน") == "ข้อมูลผลงานครูและนักเรียน.csv"
