"""Shared fixtures: record factories and a fake ClickHouse HTTP session."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from oichart.data.market_data import MarketRecord

BASE_TIME = datetime(2025, 7, 1, 9, 0, 0)


def make_record(i: int, price: float | None = None, open_interest: int | None = None) -> MarketRecord:
    return MarketRecord(
        symbol="jm2509",
        time=BASE_TIME + timedelta(seconds=i),
        price=1000.0 + i if price is None else price,
        vol=10 + i,
        open_interest=50000 + 10 * i if open_interest is None else open_interest,
    )


def make_records(n: int) -> list[MarketRecord]:
    return [make_record(i) for i in range(n)]


def tsv_row(i: int, symbol: str = "jm2509") -> str:
    t = (BASE_TIME + timedelta(seconds=i)).strftime("%Y-%m-%d %H:%M:%S")
    fields = [symbol, t, f"{1000.0 + i}", str(10 + i), str(50000 + 10 * i), "1", "-2", "999.5", "3", "1000.5", "4", "0"]
    return "\t".join(fields)


class FakeSession:
    """Stands in for requests.Session; answers queries through a handler."""

    def __init__(self, handler: Callable[[str], tuple[int, str]]):
        self.handler = handler
        self.calls: list[dict] = []
        self.closed = False

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        status, text = self.handler(params["query"])
        return SimpleNamespace(status_code=status, text=text)

    def close(self) -> None:
        self.closed = True

    @property
    def queries(self) -> list[str]:
        return [c["params"]["query"] for c in self.calls]


def clickhouse_handler(rows: int = 10, tables: tuple[str, ...] = ("jm", "rb")) -> Callable[[str], tuple[int, str]]:
    """Handler emulating a small feature database."""

    def handle(query: str) -> tuple[int, str]:
        if query == "SELECT 1":
            return 200, "1\n"
        if query == "SHOW TABLES":
            return 200, "\n".join(tables) + "\n"
        if query.startswith("SELECT DISTINCT symbol"):
            return 200, "jm2509\njm2601\n"
        if "symbol = 'missing'" in query:
            return 200, ""
        symbol = query.split("symbol = '")[1].split("'")[0]
        return 200, "\n".join(tsv_row(i, symbol) for i in range(rows)) + "\n"

    return handle


@pytest.fixture
def records() -> list[MarketRecord]:
    return make_records(10)


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession(clickhouse_handler())
