"""oichart: rolling price / open interest charts over a ClickHouse feature table."""

__version__ = "0.1.0"
