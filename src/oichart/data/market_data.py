"""Market data structures and types."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from oichart.constants import TIME_FORMAT


@dataclass(frozen=True)
class MarketRecord:
    """One row of the upstream feature table."""

    symbol: str
    time: datetime
    price: float
    vol: int
    open_interest: int
    diff_vol: int = 0
    diff_oi: int = 0
    bid_1: float = 0.0
    bid_volumn_1: int = 0
    ask_1: float = 0.0
    ask_volumn_1: int = 0
    datetime: int = 0

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "time": self.time.strftime(TIME_FORMAT),
            "price": self.price,
            "vol": self.vol,
            "open_interest": self.open_interest,
            "diff_vol": self.diff_vol,
            "diff_oi": self.diff_oi,
            "bid_1": self.bid_1,
            "bid_volumn_1": self.bid_volumn_1,
            "ask_1": self.ask_1,
            "ask_volumn_1": self.ask_volumn_1,
            "datetime": self.datetime,
        }
