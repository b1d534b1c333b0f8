"""ClickHouse HTTP client.

Issues SQL text to the ClickHouse HTTP interface and decodes TabSeparated
results into MarketRecord rows.

Usage:
    client = ClickHouseClient(config.clickhouse)
    client.ping()
    records = client.fetch_series()
"""

from __future__ import annotations

import logging
import re

import requests

from oichart.config_loader import ClickHouseConfig
from oichart.constants import MARKET_COLUMNS
from oichart.data.decoder import decode_tab_separated
from oichart.data.market_data import MarketRecord
from oichart.exceptions import FetchError, InvalidIdentifierError, NoDataError

logger = logging.getLogger(__name__)

TABLE_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
SYMBOL_PATTERN = re.compile(r"^[A-Za-z0-9_.\-]+$")

_SELECT_COLUMNS = ", ".join(MARKET_COLUMNS)


def validate_table_name(table: str) -> str:
    if not TABLE_PATTERN.fullmatch(table or ""):
        raise InvalidIdentifierError(f"Invalid table name: {table!r}")
    return table


def validate_symbol(symbol: str) -> str:
    if not SYMBOL_PATTERN.fullmatch(symbol or ""):
        raise InvalidIdentifierError(f"Invalid symbol: {symbol!r}")
    return symbol


def _split_lines(body: str) -> list[str]:
    return [line.strip() for line in body.strip().split("\n") if line.strip()]


class ClickHouseClient:
    """
    Thin ClickHouse HTTP client.

    Every query is a GET with ``database`` and ``query`` parameters. Identifiers
    are validated before any SQL text is built; symbols are single-quoted.
    """

    def __init__(self, config: ClickHouseConfig, session: requests.Session | None = None):
        self.config = config
        self._session = session or requests.Session()

    def _url(self) -> str:
        return f"{self.config.base_url}/"

    def execute(self, query: str) -> str:
        """
        Run a query and return the raw response body.

        Raises:
            FetchError: On connection errors, timeouts or non-200 responses.
        """
        params = {"database": self.config.database, "query": query}
        try:
            r = self._session.get(self._url(), params=params, timeout=self.config.timeout_seconds)
        except requests.RequestException as e:
            raise FetchError(f"HTTP request failed: {e}") from e

        if r.status_code != 200:
            raise FetchError(
                f"ClickHouse error (status {r.status_code}): {r.text}",
                status_code=r.status_code,
                body=r.text,
            )
        return r.text

    def ping(self) -> None:
        """Check connectivity with ``SELECT 1``."""
        self.execute("SELECT 1")
        logger.info(f"Connected to ClickHouse at {self.config.base_url}")

    def _series_query(self, table: str, symbol: str, order: str, limit: int | None = None) -> str:
        query = (
            f"SELECT {_SELECT_COLUMNS} "
            f"FROM {self.config.database}.{validate_table_name(table)} "
            f"WHERE symbol = '{validate_symbol(symbol)}' "
            f"ORDER BY time {order} "
        )
        if limit is not None:
            query += f"LIMIT {int(limit)} "
        return query + "FORMAT TabSeparated"

    def fetch_series(self, table: str | None = None, symbol: str | None = None) -> list[MarketRecord]:
        """
        Fetch the full series for a symbol, oldest first.

        Raises:
            FetchError: If the query fails.
            NoDataError: If no rows decode.
        """
        table = table or self.config.table
        symbol = symbol or self.config.symbol

        body = self.execute(self._series_query(table, symbol, "ASC"))
        records = decode_tab_separated(body)
        if not records:
            raise NoDataError(f"No data found in {table} for symbol = {symbol}")

        logger.info(f"Fetched {len(records)} records for {symbol} from {table}")
        return records

    def fetch_latest(
        self, limit: int, table: str | None = None, symbol: str | None = None
    ) -> list[MarketRecord]:
        """Fetch the newest ``limit`` rows, returned oldest first."""
        if limit <= 0:
            raise ValueError(f"limit must be positive, got: {limit}")
        table = table or self.config.table
        symbol = symbol or self.config.symbol

        body = self.execute(self._series_query(table, symbol, "DESC", limit))
        records = decode_tab_separated(body)
        if not records:
            raise NoDataError(f"No data found in {table} for symbol = {symbol}")
        records.reverse()
        return records

    def list_tables(self) -> list[str]:
        """List tables of the configured database."""
        return _split_lines(self.execute("SHOW TABLES"))

    def ensure_table(self, table: str, allowed: list[str] | None = None) -> str:
        """
        Validate a table name against the pattern, the allow-list and SHOW TABLES.

        Raises:
            InvalidIdentifierError: If the table is not acceptable.
        """
        validate_table_name(table)
        if allowed and table not in allowed:
            raise InvalidIdentifierError(f"Table {table} is not allowed")
        if table not in self.list_tables():
            raise InvalidIdentifierError(f"Table {table} does not exist or is not accessible")
        return table

    def list_symbols(self, table: str) -> list[str]:
        """List distinct symbols in a table."""
        query = (
            f"SELECT DISTINCT symbol FROM {self.config.database}.{validate_table_name(table)} "
            "ORDER BY symbol"
        )
        return _split_lines(self.execute(query))

    def close(self) -> None:
        self._session.close()
