"""
Training and prediction driver.

Two independent phases, both keyed by (symbol, category):

  1) train_and_store_model()
       - build the dataset iterator and the LSTM network
       - fixed number of epochs: fit every mini-batch, reset the iterator,
         clear the recurrent state
       - save the model to data/models/StockPriceLSTM_<symbol>_<CATEGORY>.keras

  2) load_model_and_predict()
       - rebuild the iterator from the same CSV (same bounds and test split)
       - load the saved model
       - predict one step ahead for every test window, denormalize
       - log "prediction,actual" lines, save metrics/CSV/plots

Missing dataset or model files raise FileNotFoundError; nothing is retried.
"""

from __future__ import annotations

import dataclasses
import logging
import os
import pathlib
from typing import List, Sequence, Tuple

import numpy as np
import pandas as pd

from . import config
from .categories import PLOT_NAMES, PriceCategory
from .dataset import StockDataSetIterator, WindowExample, denormalize
from .evaluation import (
    compute_prediction_metrics,
    predictions_frame,
    save_predictions_csv,
)
from .models.lstm import LstmNetwork, PriceModel
from .visualization import plot_predictions, plot_training_loss

LOGGER = logging.getLogger(__name__)


@dataclasses.dataclass
class PredictionResult:
    """Denormalized one-step-ahead predictions over the test set."""

    symbol: str | None
    category: PriceCategory
    timestamps: list
    predictions: np.ndarray  # (n_test, n_outcomes)
    actuals: np.ndarray  # (n_test, n_outcomes)
    metrics: pd.DataFrame
    csv_path: pathlib.Path | None = None
    plot_paths: List[pathlib.Path] = dataclasses.field(default_factory=list)

    @property
    def names(self) -> Tuple[str, ...]:
        return self.category.columns


def get_model_path(
    symbol: str,
    category: PriceCategory,
    model_dir: pathlib.Path | None = None,
) -> pathlib.Path:
    """Model file for (symbol, category), e.g. StockPriceLSTM_BTC_CLOSE.keras."""
    model_dir = model_dir or config.MODELS_DIR
    return model_dir / f"StockPriceLSTM_{symbol}_{category.name}.keras"


# ---------------------------------------------------------------------------
# Training
# ---------------------------------------------------------------------------


def train_network(
    net: PriceModel,
    iterator: StockDataSetIterator,
    epochs: int,
    logger: logging.Logger | None = None,
) -> List[float]:
    """
    Run `epochs` full passes over the training batches.

    Returns the mean mini-batch loss of each epoch.
    """
    if epochs < 1:
        raise ValueError(f"epochs must be >= 1, got {epochs}")
    log = logger or LOGGER

    epoch_losses = []
    for epoch in range(epochs):
        batch_losses = []
        while iterator.has_next():
            batch_losses.append(net.train(iterator.next()))
        iterator.reset()
        net.reset_state()

        epoch_losses.append(float(np.mean(batch_losses)))
        log.info(
            "Epoch %d/%d - loss: %.6f (%d batches)",
            epoch + 1,
            epochs,
            epoch_losses[-1],
            len(batch_losses),
        )
    return epoch_losses


def train_and_store_model(
    data_file: str | os.PathLike,
    symbol: str,
    category: PriceCategory,
    batch_size: int,
    split_ratio: float,
    example_length: int,
    epochs: int,
    *,
    model_dir: pathlib.Path | None = None,
    plot: bool = True,
    seed: int | None = config.RANDOM_SEED,
    logger: logging.Logger | None = None,
) -> pathlib.Path:
    """Train a network on the CSV's training windows and save it.

    Returns:
        Path of the saved model file.
    """
    log = logger or LOGGER

    log.info("Create dataset iterator...")
    iterator = StockDataSetIterator(
        data_file,
        symbol,
        batch_size,
        example_length,
        split_ratio,
        category,
        logger=log,
    )

    log.info("Build LSTM network...")
    net = LstmNetwork.build(
        iterator.input_columns(), iterator.total_outcomes(), seed=seed
    )

    log.info("Training for %d epochs...", epochs)
    losses = train_network(net, iterator, epochs, logger=log)

    model_path = get_model_path(symbol, category, model_dir)
    log.info("Saving model to %s", model_path)
    net.save(model_path)

    if plot:
        loss_path = plot_training_loss(
            losses,
            save_path=config.results_path(
                f"training_loss_{symbol}_{category.name}.png"
            ),
        )
        log.info("Training loss curve saved to %s", loss_path)

    return model_path


# ---------------------------------------------------------------------------
# Prediction
# ---------------------------------------------------------------------------


def predict_one_ahead(
    net: PriceModel,
    test_data: Sequence[WindowExample],
    maximum,
    minimum,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Predict the value(s) following each test window.

    Both predictions and labels are mapped back to price units with the
    per-feature bounds, so the result arrays have shape
    (len(test_data), n_outcomes).
    """
    maximum = np.atleast_1d(np.asarray(maximum, dtype="float64"))
    minimum = np.atleast_1d(np.asarray(minimum, dtype="float64"))
    n_outcomes = maximum.shape[0]

    predicts = np.empty((len(test_data), n_outcomes), dtype="float64")
    actuals = np.empty((len(test_data), n_outcomes), dtype="float64")
    for i, example in enumerate(test_data):
        predicts[i] = denormalize(
            np.ravel(net.predict_step(example.inputs)), maximum, minimum
        )
        actuals[i] = denormalize(example.label, maximum, minimum)
    return predicts, actuals


def _log_predictions(
    log: logging.Logger,
    predicts: np.ndarray,
    actuals: np.ndarray,
    category: PriceCategory,
) -> None:
    log.info("Print out predictions and actual values...")
    if category.is_all:
        log.info("Predict\tActual")
        for pred, actual in zip(predicts, actuals):
            log.info("%s\t%s", np.array2string(pred), np.array2string(actual))
    else:
        log.info("Predict,Actual")
        for pred, actual in zip(predicts[:, 0], actuals[:, 0]):
            log.info("%s,%s", pred, actual)


def load_model_and_predict(
    data_file: str | os.PathLike,
    symbol: str,
    category: PriceCategory,
    batch_size: int,
    split_ratio: float,
    example_length: int,
    *,
    model_dir: pathlib.Path | None = None,
    plot: bool = True,
    logger: logging.Logger | None = None,
) -> PredictionResult:
    """Load the saved model for (symbol, category) and predict the test set."""
    log = logger or LOGGER
    model_path = get_model_path(symbol, category, model_dir)

    log.info("Create dataset iterator...")
    iterator = StockDataSetIterator(
        data_file,
        symbol,
        batch_size,
        example_length,
        split_ratio,
        category,
        logger=log,
    )

    log.info("Load model from %s...", model_path)
    net = LstmNetwork.load(model_path)

    log.info("Load test dataset...")
    test_data = iterator.get_test_data_set()
    if not test_data:
        raise ValueError("Test set is empty; lower split_ratio to get test windows.")

    log.info("Testing on %d examples...", len(test_data))
    maximum, minimum = iterator.get_bounds(category)
    predicts, actuals = predict_one_ahead(net, test_data, maximum, minimum)
    _log_predictions(log, predicts, actuals, category)

    timestamps = [example.timestamp for example in test_data]
    names = category.columns
    metrics = compute_prediction_metrics(predicts, actuals, names)
    log.info("Test metrics:\n%s", metrics.to_string())

    csv_path = save_predictions_csv(
        predictions_frame(timestamps, predicts, actuals, names),
        f"predictions_{symbol}_{category.name}.csv",
    )
    log.info("Predictions saved to %s", csv_path)

    result = PredictionResult(
        symbol=symbol,
        category=category,
        timestamps=timestamps,
        predictions=predicts,
        actuals=actuals,
        metrics=metrics,
        csv_path=csv_path,
    )

    if plot:
        log.info("Plot...")
        for i, name in enumerate(names):
            path = plot_predictions(
                predicts[:, i],
                actuals[:, i],
                PLOT_NAMES[name],
                save_path=config.results_path(f"prediction_{symbol}_{name}.png"),
                timestamps=timestamps,
            )
            result.plot_paths.append(path)

    log.info("Done...")
    return result
