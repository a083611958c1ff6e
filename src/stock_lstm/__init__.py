"""
Top-level package for the LSTM stock price prediction project.

This package provides:

- config: Central configuration (symbol, window length, LSTM hyperparameters, etc.).
- categories: The OHLCV feature(s) a model predicts.
- data_loader: CSV loader for OHLCV rows.
- dataset: Sliding-window iterator with min-max normalization and train/test split.
- models: LSTM network builder and wrapper.
- prediction: Training loop, model persistence and one-step-ahead prediction.
- evaluation: Prediction metrics and CSV export.
- visualization: Predicted vs. actual charts.
- download_data: Utilities to download raw OHLCV data via yfinance.
- pipeline: End-to-end orchestration of the full workflow.

Typical entry points:

    from stock_lstm import config
    from stock_lstm.pipeline import run_pipeline

"""

from __future__ import annotations

from . import config
from .categories import PriceCategory

__version__ = "0.1.0"

__all__ = ["config", "PriceCategory"]
