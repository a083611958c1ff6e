"""
LSTM network: build, train step, one-step-ahead prediction, persistence.

- `build_lstm_model()` creates the compiled (untrained) Keras network.
- `LstmNetwork` wraps it behind the small `PriceModel` interface the
  training / prediction driver works with.
"""

from __future__ import annotations

import os
import pathlib
from typing import Protocol

import numpy as np
import tensorflow as tf
from tensorflow.keras import Input, Sequential
from tensorflow.keras.layers import LSTM, Dense, Dropout
from tensorflow.keras.regularizers import l2

from .. import config
from ..dataset import Batch


class PriceModel(Protocol):
    """What the driver needs from a trainable sequence model."""

    def train(self, batch: Batch) -> float: ...

    def predict_step(self, window: np.ndarray) -> np.ndarray: ...

    def reset_state(self) -> None: ...

    def save(self, path: str | os.PathLike) -> pathlib.Path: ...


# ---------------------------------------------------------------------------
# Model definition
# ---------------------------------------------------------------------------


def build_lstm_model(
    n_inputs: int,
    n_outputs: int,
    seed: int | None = config.RANDOM_SEED,
) -> tf.keras.Model:
    """
    Build a Sequential model with stacked LSTM layers and a linear Dense output
    sized to the number of predicted features.

    Architecture (configurable via config.LSTM_CONFIG):
      - Input(shape=(None, n_inputs))       any window length
      - LSTM(units1, return_sequences=True)
      - Dropout(dropout)
      - LSTM(units2)
      - Dropout(dropout)
      - Dense(dense_units, activation='relu')
      - Dense(n_outputs, activation='linear')

    `seed` fixes the initial weights (None leaves them random).
    """
    if seed is not None:
        tf.keras.utils.set_random_seed(seed)

    units1 = config.LSTM_CONFIG["units1"]
    units2 = config.LSTM_CONFIG["units2"]
    dense_units = config.LSTM_CONFIG["dense_units"]
    dropout_rate = config.LSTM_CONFIG["dropout"]
    weight_decay = config.LSTM_CONFIG["l2"]
    learning_rate = config.LSTM_CONFIG["learning_rate"]

    model = Sequential(
        [
            Input(shape=(None, n_inputs)),
            LSTM(
                units1,
                return_sequences=True,
                kernel_regularizer=l2(weight_decay),
            ),
            Dropout(dropout_rate),
            LSTM(units2, kernel_regularizer=l2(weight_decay)),
            Dropout(dropout_rate),
            Dense(dense_units, activation="relu"),
            Dense(n_outputs, activation="linear"),
        ]
    )

    model.compile(
        optimizer=tf.keras.optimizers.Adam(learning_rate=learning_rate),
        loss="mse",
        metrics=["mae"],
    )
    return model


# ---------------------------------------------------------------------------
# PriceModel implementation
# ---------------------------------------------------------------------------


class LstmNetwork:
    """Keras-backed PriceModel."""

    def __init__(self, model: tf.keras.Model):
        self.model = model

    @classmethod
    def build(cls, n_inputs: int, n_outputs: int, seed: int | None = config.RANDOM_SEED):
        return cls(build_lstm_model(n_inputs, n_outputs, seed=seed))

    def train(self, batch: Batch) -> float:
        """Fit one mini-batch; returns its training loss."""
        logs = self.model.train_on_batch(
            batch.inputs.astype("float32"),
            batch.labels.astype("float32"),
            return_dict=True,
        )
        return float(logs["loss"])

    def predict_step(self, window: np.ndarray) -> np.ndarray:
        """Predict the value(s) following one window of shape (steps, features)."""
        x = np.asarray(window, dtype="float32")[np.newaxis, ...]
        return np.asarray(self.model.predict_on_batch(x))[0]

    def reset_state(self) -> None:
        """Clear the hidden state of stateful recurrent layers."""
        for layer in self.model.layers:
            if getattr(layer, "stateful", False):
                layer.reset_state()

    def save(self, path: str | os.PathLike) -> pathlib.Path:
        # The .keras archive includes the optimizer state
        path = pathlib.Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.model.save(str(path))
        return path

    @classmethod
    def load(cls, path: str | os.PathLike) -> "LstmNetwork":
        path = pathlib.Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Model file not found at: {path}")
        return cls(tf.keras.models.load_model(str(path)))
