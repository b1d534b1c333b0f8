"""Exceptions raised by the I/O facing parts of oichart."""

from __future__ import annotations


class OIChartError(Exception):
    """Base class for oichart errors."""


class FetchError(OIChartError):
    """The upstream database could not be queried."""

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class NoDataError(OIChartError):
    """The upstream query returned no usable rows."""


class InvalidIdentifierError(OIChartError):
    """A table or symbol name failed validation before query construction."""
