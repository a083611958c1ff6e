"""
CSV loader for OHLCV price history.

Expected layout (comma-delimited, header row required):

    timestamp,symbol,open,close,low,high,volume
    2023-07-17 13:50:00,BTC,30231.5,30240.1,30225.0,30250.9,12.34

- Header names are matched case-insensitively; `date` is accepted as an
  alias of `timestamp`.
- The `symbol` column is optional. When present, only rows of the requested
  symbol are kept.
- Extra columns are ignored.

Public helper:
    - load_stock_csv()
"""

from __future__ import annotations

import logging
import os
import pathlib

import numpy as np
import pandas as pd

from .categories import FEATURE_COLUMNS
from .errors import ParseError

LOGGER = logging.getLogger(__name__)

TIMESTAMP_COLUMN = "timestamp"
SYMBOL_COLUMN = "symbol"

# First data row of the CSV is line 2 (line 1 is the header)
_FIRST_DATA_LINE = 2

# Written into the timestamp field of rows with too many fields
_OVERLONG_ROW = "<overlong row>"


def _read_header(path: pathlib.Path) -> list:
    try:
        header = pd.read_csv(path, nrows=0, skipinitialspace=True)
    except pd.errors.EmptyDataError as exc:
        raise ParseError(f"CSV file {path} is empty.") from exc
    except pd.errors.ParserError as exc:
        raise ParseError(f"Could not parse CSV header of {path}: {exc}") from exc

    columns = [str(col).strip().lower() for col in header.columns]
    if TIMESTAMP_COLUMN not in columns and "date" in columns:
        columns[columns.index("date")] = TIMESTAMP_COLUMN

    required = (TIMESTAMP_COLUMN,) + FEATURE_COLUMNS
    missing = [col for col in required if col not in columns]
    if missing:
        raise ParseError(
            f"CSV file {path} is missing required column(s) {missing}. "
            f"Got columns: {columns}"
        )
    return columns


def _read_raw_csv(path: pathlib.Path) -> pd.DataFrame:
    """All data rows as strings, indexed by their line number in the file.

    Rows with more fields than the header are kept (truncated) with their
    timestamp replaced, so they fail validation at their own line. Blank
    lines are read as all-NaN rows to keep the numbering, then dropped.
    """
    columns = _read_header(path)
    ts_pos = columns.index(TIMESTAMP_COLUMN)

    def flag_overlong(fields):
        row = list(fields[: len(columns)])
        row[ts_pos] = _OVERLONG_ROW
        return row

    # The header line is read as a data row too: with header=0 pandas would
    # take an overlong first data row as an implicit index instead of
    # passing it to on_bad_lines.
    try:
        raw = pd.read_csv(
            path,
            header=None,
            names=columns,
            dtype=str,
            skipinitialspace=True,
            skip_blank_lines=False,
            engine="python",
            on_bad_lines=flag_overlong,
        )
    except pd.errors.ParserError as exc:
        raise ParseError(f"Could not parse CSV file {path}: {exc}") from exc

    header_line = _FIRST_DATA_LINE - 1
    raw.index = pd.RangeIndex(header_line, header_line + len(raw))
    return raw.iloc[1:].dropna(how="all")


def load_stock_csv(
    path: str | os.PathLike,
    symbol: str | None = None,
    *,
    strict: bool = True,
    logger: logging.Logger | None = None,
) -> pd.DataFrame:
    """Load OHLCV rows from a CSV file.

    Args:
        path: CSV file to read.
        symbol: Keep only rows of this symbol (if the file has a symbol column).
        strict: If True, malformed rows abort the load with a ParseError.
            If False, they are dropped and reported as a warning.
        logger: Logger to report to. Defaults to this module's logger.

    Returns:
        DataFrame indexed by timestamp (sorted) with float64 columns
        open, close, low, high, volume.

    Raises:
        FileNotFoundError: If the CSV does not exist.
        ParseError: On missing columns, malformed rows (strict mode) or
            when no rows are left to load.
    """
    log = logger or LOGGER
    path = pathlib.Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Stock data CSV not found at: {path}")

    raw = _read_raw_csv(path)

    if symbol is not None and SYMBOL_COLUMN in raw.columns:
        raw = raw[raw[SYMBOL_COLUMN].str.strip() == symbol]

    if raw.empty:
        suffix = f" for symbol {symbol!r}" if symbol is not None else ""
        raise ParseError(f"No data rows found in {path}{suffix}.")

    values = raw[list(FEATURE_COLUMNS)].apply(pd.to_numeric, errors="coerce")
    timestamps = pd.to_datetime(
        raw[TIMESTAMP_COLUMN].str.strip(), errors="coerce", format="mixed"
    )

    bad = ~np.isfinite(values.to_numpy(dtype="float64")).all(axis=1)
    bad |= timestamps.isna().to_numpy()

    if bad.any():
        lines = raw.index[bad].tolist()
        shown = ", ".join(str(line) for line in lines[:10])
        more = f" (+{len(lines) - 10} more)" if len(lines) > 10 else ""
        if strict:
            raise ParseError(
                f"Malformed row(s) in {path} at line(s) {shown}{more}.", lines
            )
        log.warning(
            "Skipping %d malformed row(s) in %s at line(s) %s%s",
            len(lines),
            path,
            shown,
            more,
        )
        values = values.loc[~bad]
        timestamps = timestamps.loc[~bad]
        if values.empty:
            raise ParseError(f"No valid data rows left in {path}.", lines)

    df = values.astype("float64")
    df.index = pd.DatetimeIndex(timestamps, name=TIMESTAMP_COLUMN)
    df = df.sort_index(kind="mergesort")

    log.info(
        "Loaded %d rows%s from %s (%s -> %s)",
        len(df),
        f" for {symbol}" if symbol is not None else "",
        path,
        df.index.min(),
        df.index.max(),
    )
    return df[list(FEATURE_COLUMNS)]
