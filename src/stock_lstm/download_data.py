"""
Raw data download utilities using yfinance.

This module:
- Downloads OHLCV data for `config.TICKER`.
- Writes it in the CSV layout read by `data_loader.load_stock_csv`
  (timestamp,symbol,open,close,low,high,volume) under `data/raw/`.
"""

from __future__ import annotations

import logging
import pathlib

import pandas as pd
import yfinance as yf

from . import config
from .categories import FEATURE_COLUMNS

LOGGER = logging.getLogger(__name__)


def download_ohlcv(
    ticker: str,
    start: str,
    end: str,
    interval: str = "1d",
    symbol: str | None = None,
) -> pd.DataFrame:
    """
    Download historical OHLCV data via yfinance.

    Returns:
        DataFrame with columns timestamp, symbol, open, close, low, high,
        volume in chronological order.
    """
    LOGGER.info(
        "Calling yfinance.download(ticker=%s, start=%s, end=%s, interval=%s)...",
        ticker,
        start,
        end,
        interval,
    )
    df = yf.download(
        ticker,
        start=start,
        end=end,
        interval=interval,
        auto_adjust=False,
        progress=False,
    )

    if df is None or df.empty:
        raise RuntimeError(
            "Downloaded DataFrame is empty. Check ticker or date range in config.py."
        )

    # Handle MultiIndex columns like ('Close', 'BTC-USD')
    if isinstance(df.columns, pd.MultiIndex):
        if "Price" in df.columns.names:
            df.columns = df.columns.get_level_values("Price")
        else:
            df.columns = df.columns.get_level_values(0)

    df.columns = [str(col).lower() for col in df.columns]
    missing = set(FEATURE_COLUMNS) - set(df.columns)
    if missing:
        raise RuntimeError(
            f"Missing required OHLCV columns: {sorted(missing)}. "
            f"Got columns: {list(df.columns)}"
        )

    df.index = pd.to_datetime(df.index)
    df = df.sort_index()

    out = df[list(FEATURE_COLUMNS)].copy()
    out.insert(0, "symbol", symbol or ticker)
    out.index.name = "timestamp"

    LOGGER.info("Downloaded %d rows for %s", len(out), ticker)
    return out.reset_index()


def download_and_save_raw_data(force: bool = False) -> pathlib.Path:
    """
    Download raw data (if needed) and return the CSV path.

    Args:
        force:
            If True, always re-download and overwrite the CSV.
            If False, reuse the existing CSV when available.
    """
    csv_path = config.default_data_file()

    if csv_path.exists() and not force:
        LOGGER.info("Raw CSV already exists at %s, reusing it.", csv_path)
        return csv_path

    df = download_ohlcv(
        ticker=config.TICKER,
        start=config.START_DATE,
        end=config.END_DATE,
        interval=config.INTERVAL,
        symbol=config.SYMBOL,
    )

    csv_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(csv_path, index=False)
    LOGGER.info("Saved raw data to: %s", csv_path.resolve())

    return csv_path


def main() -> None:
    """
    Manual entry point:

        python -m stock_lstm.download_data

    This will force a fresh download/overwrite of the raw CSV.
    """
    config.configure_logging()
    download_and_save_raw_data(force=True)


if __name__ == "__main__":
    main()
