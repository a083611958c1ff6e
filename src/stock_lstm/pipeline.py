"""
End-to-end pipeline orchestration.

This module coordinates the main steps:

    1. (Optional) Download raw OHLCV data via yfinance.
    2. Train the LSTM on the training windows and save the model.
    3. Reload the model and predict the test windows one step ahead.

All settings (symbol, batch size, split ratio, category, epochs, window
length) are the constants in `config.py`.

Typical usage (from the project root):

    from stock_lstm.pipeline import run_pipeline
    run_pipeline()

The root-level run_pipeline.py script will just import and call this function.
"""

from __future__ import annotations

import logging

from . import config
from .download_data import download_and_save_raw_data
from .prediction import PredictionResult, load_model_and_predict, train_and_store_model

LOGGER = logging.getLogger(__name__)


def run_pipeline(
    download: bool = False,
    logger: logging.Logger | None = None,
) -> PredictionResult:
    """Run training followed by prediction on `config.default_data_file()`.

    Args:
        download:
            If True, fetch the raw CSV first (reusing an existing file).
            If False, the CSV must already exist.
        logger:
            Logger passed down to every step. Defaults to this module's logger.

    Returns:
        The PredictionResult of the test set.
    """
    log = logger or LOGGER
    data_file = config.default_data_file()

    if download:
        log.info("=== STEP 1: Download raw data ===")
        data_file = download_and_save_raw_data(force=False)

    log.info("=== STEP 2: Train and store model ===")
    model_path = train_and_store_model(
        data_file,
        config.SYMBOL,
        config.CATEGORY,
        config.BATCH_SIZE,
        config.SPLIT_RATIO,
        config.EXAMPLE_LENGTH,
        config.EPOCHS,
        logger=log,
    )

    log.info("=== STEP 3: Load model and predict ===")
    result = load_model_and_predict(
        data_file,
        config.SYMBOL,
        config.CATEGORY,
        config.BATCH_SIZE,
        config.SPLIT_RATIO,
        config.EXAMPLE_LENGTH,
        logger=log,
    )

    log.info("=== PIPELINE COMPLETED SUCCESSFULLY ===")
    log.info("  Data CSV:    %s", data_file)
    log.info("  Model file:  %s", model_path)
    log.info("  Predictions: %s", result.csv_path)
    return result


def main() -> None:
    """Allow running this module directly:

    python -m stock_lstm.pipeline
    """
    config.configure_logging()
    run_pipeline()


if __name__ == "__main__":
    main()
