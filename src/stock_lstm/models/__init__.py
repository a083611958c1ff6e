"""
Models subpackage.

- lstm: stacked LSTM network predicting the next value(s) of a price series.

Typical usage:

    from stock_lstm.models import LstmNetwork

    net = LstmNetwork.build(n_inputs=5, n_outputs=1)
"""

from __future__ import annotations

from .lstm import LstmNetwork, PriceModel, build_lstm_model

__all__ = [
    "LstmNetwork",
    "PriceModel",
    "build_lstm_model",
]
