"""
Sliding-window dataset iterator for LSTM training and testing.

- Loads the OHLCV rows of one symbol (see `data_loader`).
- Scales all five features to [0, 1] with MinMaxScaler fitted on the whole
  dataset. A constant feature (max == min) is scaled with range 1.
- Builds one window example per row t >= example_length:
      inputs = rows [t - example_length, t)      (all 5 features)
      label  = row t                             (the category's feature(s))
- Rows t < split_point are training labels, the rest are test labels, with
  split_point = round(n_rows * split_ratio).
- Serves training examples in consecutive mini-batches. The last batch of an
  epoch may be shorter than batch_size; it is never padded or dropped.

Public API:
    - StockDataSetIterator
    - normalize(), denormalize()
"""

from __future__ import annotations

import dataclasses
import logging
import math
import os
from typing import Iterator, List, Sequence, Tuple

import numpy as np
import pandas as pd
from sklearn.preprocessing import MinMaxScaler

from .categories import FEATURE_COLUMNS, PriceCategory
from .data_loader import load_stock_csv
from .errors import IteratorExhaustedError

LOGGER = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Normalization helpers
# ---------------------------------------------------------------------------


def value_range(maximum, minimum) -> np.ndarray:
    """max - min, with zero ranges replaced by 1 (same rule as MinMaxScaler)."""
    span = np.asarray(maximum, dtype="float64") - np.asarray(minimum, dtype="float64")
    return np.where(span == 0.0, 1.0, span)


def normalize(values, maximum, minimum) -> np.ndarray:
    """Scale raw values to [0, 1] using the given bounds."""
    values = np.asarray(values, dtype="float64")
    return (values - np.asarray(minimum, dtype="float64")) / value_range(
        maximum, minimum
    )


def denormalize(values, maximum, minimum) -> np.ndarray:
    """Inverse of `normalize`: map scaled values back to price units."""
    values = np.asarray(values, dtype="float64")
    return values * value_range(maximum, minimum) + np.asarray(
        minimum, dtype="float64"
    )


# ---------------------------------------------------------------------------
# Examples & batches
# ---------------------------------------------------------------------------


@dataclasses.dataclass(frozen=True)
class WindowExample:
    """One (window, next value) pair. `timestamp` is the label row's time."""

    inputs: np.ndarray  # (example_length, n_features), normalized
    label: np.ndarray  # (n_outcomes,), normalized
    timestamp: pd.Timestamp


@dataclasses.dataclass(frozen=True)
class Batch:
    inputs: np.ndarray  # (batch, example_length, n_features)
    labels: np.ndarray  # (batch, n_outcomes)

    def __len__(self) -> int:
        return int(self.inputs.shape[0])


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


# ---------------------------------------------------------------------------
# Iterator
# ---------------------------------------------------------------------------


class StockDataSetIterator:
    """Mini-batch iterator over sliding windows of one symbol's price history.

    Parameters
    ----------
    data : str | os.PathLike | pandas.DataFrame
        CSV file to load, or an already loaded frame with the columns
        open, close, low, high, volume (chronological order).
    symbol : str | None
        Symbol to keep when the CSV holds several.
    batch_size : int
        Number of training examples per mini-batch.
    example_length : int
        Window length (time steps fed to the network per example).
    split_ratio : float
        Fraction of rows whose labels belong to the training set, in (0, 1).
    category : PriceCategory
        Feature(s) to predict.
    logger : logging.Logger | None
        Logger to report to. Defaults to this module's logger.
    """

    def __init__(
        self,
        data: str | os.PathLike | pd.DataFrame,
        symbol: str | None,
        batch_size: int,
        example_length: int,
        split_ratio: float,
        category: PriceCategory,
        *,
        logger: logging.Logger | None = None,
    ):
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        if example_length < 1:
            raise ValueError(f"example_length must be >= 1, got {example_length}")
        if not 0.0 < split_ratio < 1.0:
            raise ValueError(f"split_ratio must be in (0, 1), got {split_ratio}")

        self.log = logger or LOGGER
        self.symbol = symbol
        self.batch_size = batch_size
        self.example_length = example_length
        self.split_ratio = split_ratio
        self.category = category

        if isinstance(data, pd.DataFrame):
            records = _prepare_frame(data)
        else:
            records = load_stock_csv(data, symbol, logger=self.log)
        self.records = records

        n_rows = len(records)
        if n_rows <= example_length:
            raise ValueError(
                f"Need more than example_length={example_length} rows to build "
                f"a window, got {n_rows}."
            )

        # Bounds over the full dataset (train and test rows)
        self._scaler = MinMaxScaler()
        normalized = self._scaler.fit_transform(records.to_numpy())
        self._max = self._scaler.data_max_.astype("float64")
        self._min = self._scaler.data_min_.astype("float64")

        self.split_point = _round_half_up(n_rows * split_ratio)
        examples = self._build_examples(normalized, records.index)
        n_train = max(0, self.split_point - example_length)
        self._train: List[WindowExample] = examples[:n_train]
        self._test: List[WindowExample] = examples[n_train:]

        if not self._train:
            raise ValueError(
                f"Training set is empty: split point {self.split_point} leaves "
                f"no room for windows of length {example_length}."
            )
        if not self._test:
            self.log.warning(
                "Test set is empty (rows=%d, split_ratio=%s).", n_rows, split_ratio
            )

        self._cursor = 0
        self.log.info(
            "Built %d window examples (train=%d, test=%d, example_length=%d, "
            "category=%s)",
            len(examples),
            len(self._train),
            len(self._test),
            example_length,
            category,
        )

    def _build_examples(
        self, normalized: np.ndarray, index: pd.Index
    ) -> List[WindowExample]:
        features = normalized.astype("float32")
        label_cols = list(self.category.column_indices)
        examples = []
        for t in range(self.example_length, len(features)):
            examples.append(
                WindowExample(
                    inputs=features[t - self.example_length : t],
                    label=features[t, label_cols],
                    timestamp=index[t],
                )
            )
        return examples

    # -- batching -----------------------------------------------------------

    def has_next(self) -> bool:
        return self._cursor < len(self._train)

    def next(self, num: int | None = None) -> Batch:
        """Return the next mini-batch of `num` (default batch_size) examples."""
        if not self.has_next():
            raise IteratorExhaustedError(
                "No training batch left; call reset() to start a new epoch."
            )
        num = self.batch_size if num is None else num
        if num < 1:
            raise ValueError(f"num must be >= 1, got {num}")
        chunk = self._train[self._cursor : self._cursor + num]
        self._cursor += len(chunk)
        return _stack(chunk)

    def reset(self) -> None:
        self._cursor = 0

    def __iter__(self) -> Iterator[Batch]:
        return self

    def __next__(self) -> Batch:
        if not self.has_next():
            raise StopIteration
        return self.next()

    def num_batches(self) -> int:
        return math.ceil(len(self._train) / self.batch_size)

    # -- data access --------------------------------------------------------

    @property
    def train_size(self) -> int:
        return len(self._train)

    @property
    def test_size(self) -> int:
        return len(self._test)

    def get_train_data_set(self) -> List[WindowExample]:
        return list(self._train)

    def get_test_data_set(self) -> List[WindowExample]:
        return list(self._test)

    def input_columns(self) -> int:
        return len(FEATURE_COLUMNS)

    def total_outcomes(self) -> int:
        return len(self.category.columns)

    # -- normalization bounds -----------------------------------------------

    def get_max_num(self, category: PriceCategory) -> float:
        return float(self._max[_single_index(category)])

    def get_min_num(self, category: PriceCategory) -> float:
        return float(self._min[_single_index(category)])

    def get_max_array(self) -> np.ndarray:
        return self._max.copy()

    def get_min_array(self) -> np.ndarray:
        return self._min.copy()

    def get_bounds(
        self, category: PriceCategory | None = None
    ) -> Tuple[np.ndarray, np.ndarray]:
        """(max, min) arrays aligned with the category's output columns."""
        idx = list((category or self.category).column_indices)
        return self._max[idx].copy(), self._min[idx].copy()


def _prepare_frame(data: pd.DataFrame) -> pd.DataFrame:
    """Feature columns of an in-memory frame, checked and in time order."""
    missing = [col for col in FEATURE_COLUMNS if col not in data.columns]
    if missing:
        raise ValueError(f"DataFrame is missing feature column(s) {missing}.")

    records = data[list(FEATURE_COLUMNS)].astype("float64")
    bad = ~np.isfinite(records.to_numpy()).all(axis=1)
    if bad.any():
        raise ValueError(
            f"DataFrame has {int(bad.sum())} row(s) with non-finite values, "
            f"first at index {records.index[bad][0]!r}."
        )
    return records.sort_index(kind="mergesort")


def _single_index(category: PriceCategory) -> int:
    if category.is_all:
        raise ValueError(
            "PriceCategory.ALL has one bound per feature; "
            "use get_max_array() / get_min_array()."
        )
    return category.column_indices[0]


def _stack(examples: Sequence[WindowExample]) -> Batch:
    return Batch(
        inputs=np.stack([ex.inputs for ex in examples]),
        labels=np.stack([ex.label for ex in examples]),
    )
