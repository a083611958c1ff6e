"""
Price categories: which OHLCV feature(s) the network predicts.

Every member maps to its feature column(s) through `_CATEGORY_COLUMNS`, so
there is no fallback branch when resolving a category.
"""

from __future__ import annotations

import enum
from typing import Tuple

# Column order used everywhere (CSV loader, normalization, model inputs).
FEATURE_COLUMNS: Tuple[str, ...] = ("open", "close", "low", "high", "volume")


class PriceCategory(enum.Enum):
    OPEN = "open"
    CLOSE = "close"
    LOW = "low"
    HIGH = "high"
    VOLUME = "volume"
    ALL = "all"

    def __str__(self) -> str:
        return self.name

    @classmethod
    def parse(cls, name: str) -> "PriceCategory":
        """Resolve a category from its (case-insensitive) name, e.g. "close"."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            valid = ", ".join(member.name for member in cls)
            raise ValueError(
                f"Unknown price category {name!r}; expected one of: {valid}"
            ) from None

    @property
    def columns(self) -> Tuple[str, ...]:
        """Feature column(s) predicted for this category."""
        return _CATEGORY_COLUMNS[self]

    @property
    def column_indices(self) -> Tuple[int, ...]:
        """Positions of `columns` inside FEATURE_COLUMNS."""
        return tuple(FEATURE_COLUMNS.index(col) for col in self.columns)

    @property
    def is_all(self) -> bool:
        return self is PriceCategory.ALL


_CATEGORY_COLUMNS = {
    PriceCategory.OPEN: ("open",),
    PriceCategory.CLOSE: ("close",),
    PriceCategory.LOW: ("low",),
    PriceCategory.HIGH: ("high",),
    PriceCategory.VOLUME: ("volume",),
    PriceCategory.ALL: FEATURE_COLUMNS,
}

# Chart titles per feature column.
PLOT_NAMES = {
    "open": "Stock OPEN Price",
    "close": "Stock CLOSE Price",
    "low": "Stock LOW Price",
    "high": "Stock HIGH Price",
    "volume": "Stock VOLUME Amount",
}
