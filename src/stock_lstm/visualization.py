"""
Visualization utilities for training and prediction results.

This module provides functions to generate and save:
- Predicted vs. actual series for one feature
- Per-epoch training loss curves

Plots are saved under data/results/ unless a path is given.
"""

from __future__ import annotations

import pathlib
from typing import Sequence

import matplotlib

matplotlib.use("Agg")  # Non-interactive backend for server environments
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from . import config


def plot_predictions(
    predicts: np.ndarray,
    actuals: np.ndarray,
    name: str,
    save_path: pathlib.Path | None = None,
    timestamps: Sequence | None = None,
) -> pathlib.Path:
    """
    Plot predicted and actual values of one feature over the test period.

    Parameters
    ----------
    predicts : np.ndarray
        Denormalized predictions, one per test example.
    actuals : np.ndarray
        Actual values aligned with `predicts`.
    name : str
        Chart title, e.g. "Stock CLOSE Price". Also used for the file name.
    save_path : pathlib.Path | None, optional
        Where to save the plot. Defaults to data/results/<name>.png.
    timestamps : Sequence | None, optional
        x-axis values. Defaults to the example index.

    Returns
    -------
    pathlib.Path
        Location of the saved figure.

    Raises
    ------
    ValueError
        If predicts and actuals have different shapes or timestamps has the
        wrong length.
    """
    predicts = np.asarray(predicts, dtype="float64").ravel()
    actuals = np.asarray(actuals, dtype="float64").ravel()
    if predicts.shape != actuals.shape:
        raise ValueError(
            f"Shape mismatch: predicts {predicts.shape} vs actuals {actuals.shape}"
        )

    x = np.arange(len(predicts)) if timestamps is None else list(timestamps)
    if len(x) != len(predicts):
        raise ValueError(
            f"Expected {len(predicts)} timestamps, got {len(x)}"
        )

    if save_path is None:
        safe_name = name.lower().replace(" ", "_")
        save_path = config.results_path(f"{safe_name}.png")

    frame = pd.concat(
        [
            pd.DataFrame({"x": x, "value": actuals, "series": "Actual"}),
            pd.DataFrame({"x": x, "value": predicts, "series": "Predicted"}),
        ],
        ignore_index=True,
    )

    fig, ax = plt.subplots(figsize=(12, 5))
    sns.lineplot(
        data=frame,
        x="x",
        y="value",
        hue="series",
        palette={"Actual": "tab:blue", "Predicted": "tab:red"},
        linewidth=1.5,
        ax=ax,
    )
    ax.set_title(name, fontsize=14, fontweight="bold")
    ax.set_xlabel("Time" if timestamps is not None else "Test example", fontsize=12)
    ax.set_ylabel("Value", fontsize=12)
    ax.legend(fontsize=10)
    ax.grid(True, alpha=0.3)

    fig.tight_layout()
    fig.savefig(save_path, dpi=150, bbox_inches="tight")
    plt.close(fig)

    return save_path


def plot_training_loss(
    losses: Sequence[float],
    save_path: pathlib.Path | None = None,
) -> pathlib.Path:
    """
    Plot the mean training loss (MSE) of every epoch.

    Raises
    ------
    ValueError
        If `losses` is empty.
    """
    if len(losses) == 0:
        raise ValueError("No training losses to plot")

    if save_path is None:
        save_path = config.results_path("training_loss.png")

    epochs = np.arange(1, len(losses) + 1)

    fig, ax = plt.subplots(figsize=(8, 5))
    sns.lineplot(x=epochs, y=np.asarray(losses, dtype="float64"), marker="o", ax=ax)
    ax.set_title("Training Loss (MSE) Over Epochs", fontsize=14, fontweight="bold")
    ax.set_xlabel("Epoch", fontsize=12)
    ax.set_ylabel("MSE", fontsize=12)
    ax.grid(True, alpha=0.3)

    fig.tight_layout()
    fig.savefig(save_path, dpi=150, bbox_inches="tight")
    plt.close(fig)

    return save_path
