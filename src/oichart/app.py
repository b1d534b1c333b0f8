"""oichart main application: composition root for all front ends."""

from __future__ import annotations

import logging

from oichart.config_loader import AppConfig
from oichart.constants import LOG_FORMAT
from oichart.core.refresh_loop import RefreshLoop
from oichart.core.series_store import SeriesStore
from oichart.core.window import WindowCursor
from oichart.data.clickhouse_client import ClickHouseClient, validate_symbol
from oichart.data.market_data import MarketRecord

logger = logging.getLogger(__name__)


def setup_logging(config: AppConfig) -> None:
    logging.basicConfig(level=config.environment.log_level.value, format=LOG_FORMAT)


class ChartApp:
    """
    Wires the ClickHouse client, series store, window cursor and refresh loop.

    The app owns exactly one store and one loop; front ends receive them
    through this object rather than through module state.
    """

    def __init__(self, config: AppConfig, client: ClickHouseClient | None = None):
        self.config = config
        self.client = client or ClickHouseClient(config.clickhouse)
        self.store = SeriesStore()
        self.loop: RefreshLoop | None = None
        self._source = (config.clickhouse.table, config.clickhouse.symbol)

    @property
    def table(self) -> str:
        return self._source[0]

    @property
    def symbol(self) -> str:
        return self._source[1]

    def fetch(self) -> list[MarketRecord]:
        """Fetch the full series for the active table/symbol."""
        table, symbol = self._source
        return self.client.fetch_series(table, symbol)

    def initialize(self, window_size: int, step: int, scroll_step: int | None = None) -> RefreshLoop:
        """
        Connect, load the initial series and build the refresh loop.

        Raises:
            FetchError: If the database cannot be reached or queried.
            NoDataError: If the table holds no rows for the symbol.
        """
        logger.info(f"Connecting to ClickHouse at {self.config.clickhouse.base_url}...")
        self.client.ping()

        records = self.fetch()
        logger.info(f"Found {len(records)} records")
        self.store.replace(records)

        cursor = WindowCursor(window_size=window_size, step=step, scroll_step=scroll_step)
        self.loop = RefreshLoop(self.store, cursor, fetch=self.fetch)
        return self.loop

    def initialize_terminal(self) -> RefreshLoop:
        window = self.config.window
        return self.initialize(window.size, window.step, window.scroll_step)

    def initialize_web(self) -> RefreshLoop:
        web = self.config.web
        return self.initialize(web.window_size, web.step)

    def switch_source(self, table: str, symbol: str) -> int:
        """
        Load another table/symbol into the running loop.

        Identifiers are validated before any query is built. The current series
        is kept if the fetch fails.

        Returns:
            Number of records loaded.
        """
        self.client.ensure_table(table, self.config.web.allowed_tables)
        validate_symbol(symbol)

        records = self.client.fetch_series(table, symbol)

        def set_source() -> None:
            self._source = (table, symbol)

        self.loop.load(records, on_load=set_source)
        logger.info(f"Dynamic query: table={table}, symbol={symbol}, found {len(records)} records")
        return len(records)

    def close(self) -> None:
        self.client.close()
