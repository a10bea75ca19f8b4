"""Tests for datacollections/ingest/readers.py"""

from datetime import datetime

import pytest

from datacollections.exceptions import IngestError, UnsupportedFileError
from datacollections.ingest.readers import read_csv, read_excel, read_path, read_upload
from tests.fixtures.sample_data import SAMPLE_CSV, make_workbook_bytes


class TestReadCsv:
    """Tests for CSV parsing."""

    def test_rows_keyed_by_header(self):
        rows = read_csv(SAMPLE_CSV.encode("utf-8"))

        assert len(rows) == 3
        assert rows[0]["CategoryShortName"] == "FOOD"
        assert rows[0]["NetAmount"] == "20.5"
        assert rows[1]["SlsExtCostValue"] == ""

    def test_bom_is_stripped(self):
        rows = read_csv(("\ufeff" + SAMPLE_CSV).encode("utf-8"))
        assert "CategoryShortName" in rows[0]

    def test_blank_lines_skipped(self):
        rows = read_csv(b"branch,NetAmount\nB1,1\n\n , \nB2,2\n")
        assert [r["branch"] for r in rows] == ["B1", "B2"]

    def test_empty_file(self):
        assert read_csv(b"") == []

    def test_duplicate_and_blank_headers(self):
        rows = read_csv(b"Qty,Qty,\n1,2,3\n")
        assert rows == [{"Qty": "1", "Qty_1": "2", "col_3": "3"}]

    def test_renamed_header_keeps_real_suffixed_header(self):
        rows = read_csv(b"Qty,Qty_1,Qty\n1,2,3\n")
        assert rows == [{"Qty": "1", "Qty_1": "2", "Qty_2": "3"}]

    def test_later_real_header_not_overwritten(self):
        rows = read_csv(b"Qty,Qty,Qty_1\n1,2,3\n")
        assert list(rows[0].values()) == ["1", "2", "3"]
        assert len(rows[0]) == 3

    def test_invalid_encoding(self):
        with pytest.raises(IngestError):
            read_csv(b"branch\n\xff\xfe\xfa", encoding="utf-8")


class TestReadExcel:
    """Tests for spreadsheet parsing."""

    def test_rows_keyed_by_header(self):
        data = make_workbook_bytes(
            [
                ["FOOD", "North", "Acme", "A-1", "Crackers", 2, 20.5, 12, 1],
                ["DRINK", "South", "Fizz", 700, None, 1, 2.5, 1.2, None],
            ]
        )

        rows = read_excel(data)

        assert len(rows) == 2
        assert rows[0]["NetAmount"] == 20.5
        assert rows[1]["ArticleNo"] == 700

    def test_empty_cells_omitted(self):
        data = make_workbook_bytes([["DRINK", "South", "Fizz", "D-7", None, 1, 2.5, 1.2, None]])

        row = read_excel(data)[0]

        assert "Description" not in row
        assert "SlsExtCostValue" not in row

    def test_empty_rows_skipped(self):
        data = make_workbook_bytes(
            [
                ["FOOD", "North", "Acme", "A-1", "x", 1, 1, 1, 1],
                [None] * 9,
                ["FOOD", "North", "Acme", "A-2", "y", 1, 1, 1, 1],
            ]
        )
        assert [r["ArticleNo"] for r in read_excel(data)] == ["A-1", "A-2"]

    def test_dates_become_iso_text(self):
        data = make_workbook_bytes([[datetime(2025, 1, 15, 8, 30)]], headers=["PostingDate"])
        assert read_excel(data) == [{"PostingDate": "2025-01-15T08:30:00"}]

    def test_missing_sheet(self):
        data = make_workbook_bytes([])
        with pytest.raises(IngestError, match="not found"):
            read_excel(data, sheet_name="Nope")

    def test_corrupt_bytes(self):
        with pytest.raises(IngestError):
            read_excel(b"definitely not a workbook")


class TestReadUpload:
    """Tests for reader dispatch."""

    def test_dispatch_by_extension(self):
        assert len(read_upload("sales.CSV", None, SAMPLE_CSV.encode())) == 3

        data = make_workbook_bytes([["FOOD", "North", "Acme", "A-1", "x", 1, 1, 1, 1]])
        assert len(read_upload("sales.xlsx", None, data)) == 1

    def test_dispatch_by_content_type(self):
        assert len(read_upload(None, "text/csv", SAMPLE_CSV.encode())) == 3

    @pytest.mark.parametrize("filename", ["sales.xls", "sales.pdf", "notes.txt"])
    def test_unsupported_extension(self, filename):
        with pytest.raises(UnsupportedFileError):
            read_upload(filename, "application/octet-stream", b"data")

    def test_read_path(self, tmp_path):
        path = tmp_path / "sales.csv"
        path.write_text(SAMPLE_CSV, encoding="utf-8")
        assert len(read_path(path)) == 3

    def test_read_path_missing(self, tmp_path):
        with pytest.raises(IngestError, match="not found"):
            read_path(tmp_path / "missing.csv")
