"""TabSeparated payload decoding.

Turns the body of a ``FORMAT TabSeparated`` query into MarketRecord rows.
Required columns (time, price, vol, open_interest) must parse or the row is
dropped with a warning; the remaining columns fall back to zero.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import TypeVar

from oichart.constants import FIELD_COUNT, TIME_FORMAT
from oichart.data.market_data import MarketRecord
from oichart.exceptions import NoDataError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def parse_time(value: str) -> datetime:
    return datetime.strptime(value, TIME_FORMAT)


def parse_uint(value: str) -> int:
    """Parse a non-negative integer."""
    parsed = int(value)
    if parsed < 0:
        raise ValueError(f"expected unsigned integer, got {value!r}")
    return parsed


def _best_effort(parser: Callable[[str], T], value: str, default: T) -> T:
    try:
        return parser(value)
    except ValueError:
        return default


def decode_row(fields: list[str]) -> MarketRecord | None:
    """
    Decode one split row.

    Returns None when a required field fails to parse.
    """
    required = (
        ("time", parse_time, fields[1]),
        ("price", float, fields[2]),
        ("vol", parse_uint, fields[3]),
        ("open_interest", parse_uint, fields[4]),
    )
    parsed = {}
    for name, parser, raw in required:
        try:
            parsed[name] = parser(raw)
        except ValueError as e:
            logger.warning(f"Failed to parse {name} {raw!r}: {e}")
            return None

    return MarketRecord(
        symbol=fields[0],
        time=parsed["time"],
        price=parsed["price"],
        vol=parsed["vol"],
        open_interest=parsed["open_interest"],
        diff_vol=_best_effort(int, fields[5], 0),
        diff_oi=_best_effort(int, fields[6], 0),
        bid_1=_best_effort(float, fields[7], 0.0),
        bid_volumn_1=_best_effort(parse_uint, fields[8], 0),
        ask_1=_best_effort(float, fields[9], 0.0),
        ask_volumn_1=_best_effort(parse_uint, fields[10], 0),
        datetime=_best_effort(parse_uint, fields[11], 0),
    )


def decode_tab_separated(payload: str) -> list[MarketRecord]:
    """
    Decode a TabSeparated payload into records.

    Args:
        payload: Raw response body, one row per line, tab-delimited fields.

    Returns:
        Decoded records in payload order. Short or malformed rows are skipped.

    Raises:
        NoDataError: If the payload is empty.
    """
    if not payload.strip():
        raise NoDataError("No data: empty payload")

    records: list[MarketRecord] = []
    skipped = 0
    for line in payload.split("\n"):
        line = line.rstrip("\r")
        if not line.strip():
            continue

        fields = line.split("\t")
        if len(fields) < FIELD_COUNT:
            skipped += 1
            continue

        record = decode_row(fields)
        if record is None:
            skipped += 1
            continue
        records.append(record)

    if skipped:
        logger.debug(f"Decoded {len(records)} rows, skipped {skipped}")
    return records
