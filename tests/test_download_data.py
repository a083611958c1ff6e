import pandas as pd
import pytest

from stock_lstm import config, download_data
from stock_lstm.data_loader import load_stock_csv


# --------------------------------------------------------------------------------------
# Helpers
# --------------------------------------------------------------------------------------


def _fake_ohlcv(reverse: bool = False) -> pd.DataFrame:
    dates = pd.date_range("2020-01-01", periods=3, freq="D")
    return pd.DataFrame(
        {
            "Open": [1.0, 2.0, 3.0],
            "High": [1.5, 2.5, 3.5],
            "Low": [0.5, 1.5, 2.5],
            "Close": [1.1, 2.1, 3.1],
            "Adj Close": [1.0, 2.0, 3.0],
            "Volume": [100, 200, 300],
        },
        index=dates[::-1] if reverse else dates,
    )


# --------------------------------------------------------------------------------------
# download_ohlcv
# --------------------------------------------------------------------------------------


def test_download_ohlcv_success(monkeypatch):
    """
    When yfinance.download returns a normal OHLCV DataFrame, download_ohlcv
    should sort by date and return the loader's column layout.
    """
    monkeypatch.setattr(download_data.yf, "download", lambda *a, **k: _fake_ohlcv(True))

    out = download_data.download_ohlcv("FAKE", "2020-01-01", "2020-01-03", symbol="FK")

    assert list(out.columns) == [
        "timestamp",
        "symbol",
        "open",
        "close",
        "low",
        "high",
        "volume",
    ]
    assert out["timestamp"].is_monotonic_increasing
    assert out["symbol"].unique().tolist() == ["FK"]
    assert out["close"].tolist() == [1.1, 2.1, 3.1]


def test_download_ohlcv_flattens_multiindex_columns(monkeypatch):
    df = _fake_ohlcv()
    df.columns = pd.MultiIndex.from_product(
        [df.columns, ["FAKE"]], names=["Price", "Ticker"]
    )
    monkeypatch.setattr(download_data.yf, "download", lambda *a, **k: df)

    out = download_data.download_ohlcv("FAKE", "2020-01-01", "2020-01-03")

    assert out["symbol"].unique().tolist() == ["FAKE"]
    assert out["open"].tolist() == [1.0, 2.0, 3.0]


def test_download_ohlcv_empty_raises(monkeypatch):
    monkeypatch.setattr(download_data.yf, "download", lambda *a, **k: pd.DataFrame())

    with pytest.raises(RuntimeError, match="Downloaded DataFrame is empty"):
        download_data.download_ohlcv("FAKE", "2020-01-01", "2020-01-03")


def test_download_ohlcv_missing_columns_raises(monkeypatch):
    df = _fake_ohlcv().drop(columns=["High", "Low"])
    monkeypatch.setattr(download_data.yf, "download", lambda *a, **k: df)

    with pytest.raises(RuntimeError, match="Missing required OHLCV columns"):
        download_data.download_ohlcv("FAKE", "2020-01-01", "2020-01-03")


# --------------------------------------------------------------------------------------
# download_and_save_raw_data
# --------------------------------------------------------------------------------------


def test_download_and_save_raw_data_writes_loadable_csv(monkeypatch, tmp_path):
    monkeypatch.setattr(config, "RAW_DIR", tmp_path)
    monkeypatch.setattr(download_data.yf, "download", lambda *a, **k: _fake_ohlcv())

    path = download_data.download_and_save_raw_data(force=True)

    assert path == tmp_path / config.DATA_FILE_NAME
    df = load_stock_csv(path, config.SYMBOL)
    assert len(df) == 3
    assert df["volume"].tolist() == [100.0, 200.0, 300.0]


def test_download_and_save_raw_data_reuses_existing_file(monkeypatch, tmp_path):
    monkeypatch.setattr(config, "RAW_DIR", tmp_path)
    existing = tmp_path / config.DATA_FILE_NAME
    existing.write_text("already here")

    def fail_download(*args, **kwargs):
        raise AssertionError("yfinance should not be called")

    monkeypatch.setattr(download_data.yf, "download", fail_download)

    assert download_data.download_and_save_raw_data(force=False) == existing
    assert existing.read_text() == "already here"
