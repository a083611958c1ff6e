import logging
import pathlib

from .categories import PriceCategory

# Symbol used to filter the CSV and to name the persisted model
SYMBOL = "BTC"

# yfinance ticker and date range for `download_data`
TICKER = "BTC-USD"
START_DATE = "2018-01-01"
END_DATE = "2024-12-31"
INTERVAL = "1d"

# Project paths (src/stock_lstm/config.py -> project root)
PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[2]
DATA_DIR = PROJECT_ROOT / "data"
RAW_DIR = DATA_DIR / "raw"
MODELS_DIR = DATA_DIR / "models"
RESULTS_DIR = DATA_DIR / "results"

DATA_FILE_NAME = "BTC_USDT.csv"

# Training setup
BATCH_SIZE = 64
SPLIT_RATIO = 0.9  # 90% for training, 10% for testing
CATEGORY = PriceCategory.CLOSE
EPOCHS = 100
EXAMPLE_LENGTH = 80  # time series length of one window

RANDOM_SEED = 12345

# LSTM hyperparameters
LSTM_CONFIG = {
    "units1": 256,
    "units2": 256,
    "dense_units": 32,
    "dropout": 0.2,
    "l2": 1e-4,
    "learning_rate": 1e-3,
}

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def default_data_file() -> pathlib.Path:
    return RAW_DIR / DATA_FILE_NAME


def configure_logging(level: int = logging.INFO) -> None:
    """Install a basic stderr handler. Only entry points call this."""
    logging.basicConfig(level=level, format=LOG_FORMAT)


def results_path(filename: str) -> pathlib.Path:
    """Path under RESULTS_DIR (created on demand)."""
    RESULTS_DIR.mkdir(parents=True, exist_ok=True)
    return RESULTS_DIR / filename
