#!/usr/bin/env python

"""
Command-line entry point for the LSTM stock price pipeline.

Usage (from project root, inside .venv):

    python run_pipeline.py
"""

import logging
import os

from stock_lstm import config
from stock_lstm.pipeline import run_pipeline

LOGGER = logging.getLogger("stock_lstm.run_pipeline")


def ensure_venv() -> None:
    """Warn if the user is not inside a virtual environment."""
    if "VIRTUAL_ENV" not in os.environ:
        LOGGER.warning(
            "Not running inside a virtual environment. From the project root: "
            "python3 -m venv .venv && source .venv/bin/activate && pip install -e ."
        )


def main() -> None:
    config.configure_logging()
    ensure_venv()
    run_pipeline()


if __name__ == "__main__":
    main()
