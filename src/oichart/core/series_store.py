"""Series store: the single owner of the fetched record sequence."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from oichart.core.locks import ReadWriteLock
from oichart.data.market_data import MarketRecord

logger = logging.getLogger(__name__)


class SeriesStore:
    """
    Holds the full ordered series for one symbol.

    The series is an immutable tuple that is only ever replaced as a whole, so a
    snapshot handed to a reader stays valid after later replacements.
    """

    def __init__(self, records: Iterable[MarketRecord] = ()):
        self._lock = ReadWriteLock()
        self._records: tuple[MarketRecord, ...] = tuple(records)
        self._version = 0

    def replace(self, records: Iterable[MarketRecord]) -> int:
        """
        Atomically swap in a new series.

        Returns:
            The new store version.
        """
        new_records = tuple(records)
        with self._lock.write():
            self._records = new_records
            self._version += 1
            version = self._version
        logger.debug(f"Series replaced: {len(new_records)} records (version {version})")
        return version

    def snapshot(self) -> tuple[tuple[MarketRecord, ...], int]:
        """Return the current series and its length."""
        with self._lock.read():
            records = self._records
        return records, len(records)

    @property
    def version(self) -> int:
        with self._lock.read():
            return self._version

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._records)
