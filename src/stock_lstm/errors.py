"""Exception types raised by the stock_lstm package."""

from __future__ import annotations


class StockLstmError(Exception):
    """Base class for errors raised by this package."""


class ParseError(StockLstmError, ValueError):
    """The input CSV is missing columns or contains malformed rows."""

    def __init__(self, message: str, lines: list[int] | None = None):
        super().__init__(message)
        self.lines = list(lines or [])


class IteratorExhaustedError(StockLstmError, LookupError):
    """`next()` was called on a dataset iterator with no batch left."""
