"""Tests for rymcheck.rym_csv: RateYourMusic CSV export parsing."""

from __future__ import annotations

import pytest

from rymcheck.errors import InputFormatError
from rymcheck.rym_csv import parse_rym_csv, read_rym_csv

ROW_ABBEY = '1234,,The Beatles,,,Abbey Road,1969,5,o,,CD,'
ROW_BJORK = '"5678","Björk","","","","Homogénic","1997","4","","","",""'


class TestParse:
    def test_maps_columns(self, rym_csv_text):
        (rec,) = parse_rym_csv(rym_csv_text(ROW_ABBEY))
        assert rec.external_id == "1234"
        assert rec.artist == "The Beatles"
        assert rec.title == "Abbey Road"
        assert rec.year == 1969

    def test_first_and_last_name_joined(self, rym_csv_text):
        row = "1,Nick,Cave,,,The Boatman's Call,1997,,,,,"
        (rec,) = parse_rym_csv(rym_csv_text(row))
        assert rec.artist == "Nick Cave"

    def test_quoted_and_unicode(self, rym_csv_text):
        (rec,) = parse_rym_csv(rym_csv_text(ROW_BJORK))
        assert rec.artist == "Björk"
        assert rec.title == "Homogénic"

    def test_keeps_row_order(self, rym_csv_text):
        recs = parse_rym_csv(rym_csv_text(ROW_ABBEY, ROW_BJORK))
        assert [r.external_id for r in recs] == ["1234", "5678"]

    def test_cells_trimmed(self, rym_csv_text):
        (rec,) = parse_rym_csv(rym_csv_text("  9 , Kate , Bush ,,, Hounds of Love , 1985 ,,,,,"))
        assert rec.external_id == "9"
        assert rec.artist == "Kate Bush"
        assert rec.title == "Hounds of Love"
        assert rec.year == 1985

    @pytest.mark.parametrize("year", ["", "unknown", "1969-09-26"])
    def test_unparsable_year_is_zero(self, rym_csv_text, year):
        (rec,) = parse_rym_csv(rym_csv_text(f"1,,X,,,Y,{year},,,,,"))
        assert rec.year == 0

    def test_short_row_within_minimum_is_accepted(self, rym_csv_text):
        (rec,) = parse_rym_csv(rym_csv_text("1,,X,,,Y,2001"))
        assert rec.title == "Y"

    def test_blank_rows_skipped(self, rym_csv_text):
        recs = parse_rym_csv(rym_csv_text(ROW_ABBEY, "", ",,,,,,,,,,,", ROW_BJORK))
        assert len(recs) == 2

    def test_header_only(self, rym_csv_text):
        assert parse_rym_csv(rym_csv_text()) == []

    def test_utf8_bom_bytes(self, rym_csv_text):
        data = b"\xef\xbb\xbf" + rym_csv_text(ROW_ABBEY).encode("utf-8")
        (rec,) = parse_rym_csv(data)
        assert rec.external_id == "1234"

    def test_bom_str(self, rym_csv_text):
        (rec,) = parse_rym_csv("\ufeff" + rym_csv_text(ROW_ABBEY))
        assert rec.external_id == "1234"


class TestValidation:
    def test_empty(self):
        with pytest.raises(InputFormatError, match="empty CSV"):
            parse_rym_csv(b"")

    def test_narrow_header(self):
        with pytest.raises(InputFormatError) as exc:
            parse_rym_csv("a,b,c\n1,2,3\n")
        assert exc.value.row == 0
        assert exc.value.expected == 12
        assert exc.value.actual == 3

    def test_short_row_reports_position(self, rym_csv_text):
        with pytest.raises(InputFormatError) as exc:
            parse_rym_csv(rym_csv_text(ROW_ABBEY, "1,2,3"))
        assert exc.value.row == 2
        assert exc.value.expected == 7
        assert exc.value.actual == 3
        assert "row 2" in str(exc.value)

    def test_invalid_utf8(self):
        with pytest.raises(InputFormatError):
            parse_rym_csv(b"\xff\xfe\x00broken")


class TestReadFile:
    def test_reads_path(self, tmp_path, rym_csv_text):
        path = tmp_path / "rym.csv"
        path.write_bytes(b"\xef\xbb\xbf" + rym_csv_text(ROW_ABBEY, ROW_BJORK).encode("utf-8"))
        assert len(read_rym_csv(path)) == 2
