"""Tests for TabSeparated decoding."""

from __future__ import annotations

from datetime import datetime

import pytest

from conftest import tsv_row
from oichart.data.decoder import decode_row, decode_tab_separated, parse_uint
from oichart.exceptions import NoDataError


class TestDecodeTabSeparated:
    """Tests for payload decoding."""

    def test_full_row_decodes(self) -> None:
        records = decode_tab_separated(tsv_row(0) + "\n")

        assert len(records) == 1
        r = records[0]
        assert r.symbol == "jm2509"
        assert r.time == datetime(2025, 7, 1, 9, 0, 0)
        assert r.price == 1000.0
        assert r.vol == 10
        assert r.open_interest == 50000
        assert r.diff_vol == 1
        assert r.diff_oi == -2
        assert r.bid_1 == 999.5
        assert r.ask_volumn_1 == 4

    def test_short_row_is_skipped(self) -> None:
        short = "\t".join(tsv_row(0).split("\t")[:11])
        assert decode_tab_separated(short) == []

    def test_bad_price_skips_only_that_row(self) -> None:
        fields = tsv_row(1).split("\t")
        fields[2] = "abc"
        payload = "\n".join([tsv_row(0), "\t".join(fields), tsv_row(2)])

        records = decode_tab_separated(payload)

        assert [r.price for r in records] == [1000.0, 1002.0]

    def test_bad_time_skips_row(self) -> None:
        fields = tsv_row(0).split("\t")
        fields[1] = "2025/07/01 09:00"
        assert decode_tab_separated("\t".join(fields)) == []

    def test_negative_open_interest_skips_row(self) -> None:
        fields = tsv_row(0).split("\t")
        fields[4] = "-5"
        assert decode_tab_separated("\t".join(fields)) == []

    def test_unparsable_optional_fields_default_to_zero(self) -> None:
        fields = tsv_row(0).split("\t")
        fields[5:12] = ["x", "", "nan?", "-1", "", "bad", ""]

        records = decode_tab_separated("\t".join(fields))

        assert len(records) == 1
        r = records[0]
        assert (r.diff_vol, r.diff_oi, r.bid_1, r.bid_volumn_1, r.ask_1, r.ask_volumn_1, r.datetime) == (
            0,
            0,
            0.0,
            0,
            0.0,
            0,
            0,
        )

    def test_empty_trailing_column_on_last_row_is_kept(self) -> None:
        fields = tsv_row(0).split("\t")
        fields[11] = ""
        row = "\t".join(fields)

        assert len(decode_tab_separated(row)) == 1
        assert len(decode_tab_separated(row + "\n")) == 1
        records = decode_tab_separated(row + "\n" + row + "\n")
        assert len(records) == 2
        assert records[-1].datetime == 0

    def test_empty_leading_symbol_on_first_row_is_kept(self) -> None:
        fields = tsv_row(0).split("\t")
        fields[0] = ""
        records = decode_tab_separated("\t".join(fields) + "\n" + tsv_row(1))

        assert len(records) == 2
        assert records[0].symbol == ""
        assert records[0].price == 1000.0

    def test_crlf_line_endings(self) -> None:
        payload = tsv_row(0) + "\r\n" + tsv_row(1) + "\r\n"
        records = decode_tab_separated(payload)
        assert len(records) == 2
        assert records[1].datetime == 0

    def test_order_is_preserved(self) -> None:
        payload = "\n".join(tsv_row(i) for i in (3, 1, 2))
        assert [r.vol for r in decode_tab_separated(payload)] == [13, 11, 12]

    @pytest.mark.parametrize("payload", ["", "\n", "  \n\n"])
    def test_empty_payload_raises(self, payload: str) -> None:
        with pytest.raises(NoDataError):
            decode_tab_separated(payload)


class TestFieldParsers:
    """Tests for individual field parsers."""

    def test_parse_uint_rejects_negative(self) -> None:
        with pytest.raises(ValueError):
            parse_uint("-1")
        assert parse_uint("42") == 42

    def test_decode_row_returns_none_on_bad_volume(self) -> None:
        fields = tsv_row(0).split("\t")
        fields[3] = "1.5"
        assert decode_row(fields) is None
