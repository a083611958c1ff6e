"""
Prediction metrics and export.

- RMSE / MAE per predicted feature (in price units).
- CSV export of timestamped predicted vs. actual values under data/results/.
"""

from __future__ import annotations

import pathlib
from typing import Sequence

import numpy as np
import pandas as pd
from sklearn.metrics import mean_absolute_error, mean_squared_error

from . import config


def compute_prediction_metrics(
    predictions: np.ndarray,
    actuals: np.ndarray,
    names: Sequence[str],
) -> pd.DataFrame:
    """Compute RMSE and MAE for each predicted feature.

    Args:
        predictions: Array of shape (n_examples, n_features).
        actuals: Array with the same shape as `predictions`.
        names: One name per feature column.

    Returns:
        DataFrame indexed by feature name with columns rmse, mae.

    Raises:
        ValueError: On shape mismatch, wrong number of names, or no examples.
    """
    predictions = np.asarray(predictions, dtype="float64")
    actuals = np.asarray(actuals, dtype="float64")
    if predictions.ndim == 1:
        predictions = predictions[:, np.newaxis]
    if actuals.ndim == 1:
        actuals = actuals[:, np.newaxis]

    if predictions.shape != actuals.shape:
        raise ValueError(
            f"Shape mismatch: predictions {predictions.shape} vs actuals {actuals.shape}"
        )
    if predictions.shape[1] != len(names):
        raise ValueError(
            f"Expected {predictions.shape[1]} feature names, got {len(names)}"
        )
    if predictions.shape[0] == 0:
        raise ValueError("Cannot compute metrics on an empty prediction set")

    rows = []
    for i, name in enumerate(names):
        mse = mean_squared_error(actuals[:, i], predictions[:, i])
        mae = mean_absolute_error(actuals[:, i], predictions[:, i])
        rows.append({"feature": name, "rmse": float(np.sqrt(mse)), "mae": float(mae)})

    return pd.DataFrame(rows).set_index("feature")


def predictions_frame(
    timestamps: Sequence,
    predictions: np.ndarray,
    actuals: np.ndarray,
    names: Sequence[str],
) -> pd.DataFrame:
    """Side-by-side table: <feature>_pred / <feature>_actual per timestamp."""
    predictions = np.asarray(predictions, dtype="float64").reshape(len(timestamps), -1)
    actuals = np.asarray(actuals, dtype="float64").reshape(len(timestamps), -1)

    data = {}
    for i, name in enumerate(names):
        data[f"{name}_pred"] = predictions[:, i]
        data[f"{name}_actual"] = actuals[:, i]

    return pd.DataFrame(data, index=pd.Index(list(timestamps), name="timestamp"))


def save_predictions_csv(
    frame: pd.DataFrame,
    filename: str,
    results_dir: pathlib.Path | None = None,
) -> pathlib.Path:
    """Write a predictions table to `results_dir` (default data/results/)."""
    results_dir = results_dir or config.RESULTS_DIR
    results_dir.mkdir(parents=True, exist_ok=True)
    path = results_dir / filename
    frame.to_csv(path, index=True)
    return path
