import numpy as np
import pandas as pd
import pytest

from stock_lstm import evaluation


# --------------------------------------------------------------------------------------
# compute_prediction_metrics
# --------------------------------------------------------------------------------------


def test_compute_prediction_metrics_known_values():
    predictions = np.array([[1.0, 10.0], [2.0, 20.0], [3.0, 30.0]])
    actuals = np.array([[2.0, 10.0], [2.0, 22.0], [5.0, 30.0]])

    metrics = evaluation.compute_prediction_metrics(predictions, actuals, ["open", "close"])

    assert list(metrics.index) == ["open", "close"]
    assert list(metrics.columns) == ["rmse", "mae"]
    # open errors: 1, 0, 2 ; close errors: 0, 2, 0
    assert metrics.loc["open", "mae"] == pytest.approx(1.0)
    assert metrics.loc["open", "rmse"] == pytest.approx(np.sqrt(5.0 / 3.0))
    assert metrics.loc["close", "mae"] == pytest.approx(2.0 / 3.0)
    assert metrics.loc["close", "rmse"] == pytest.approx(np.sqrt(4.0 / 3.0))


def test_compute_prediction_metrics_accepts_1d_arrays():
    metrics = evaluation.compute_prediction_metrics(
        np.array([1.0, 2.0]), np.array([1.0, 2.0]), ["close"]
    )

    assert metrics.loc["close", "rmse"] == pytest.approx(0.0)


def test_compute_prediction_metrics_shape_mismatch_raises():
    with pytest.raises(ValueError, match="Shape mismatch"):
        evaluation.compute_prediction_metrics(
            np.zeros((3, 1)), np.zeros((2, 1)), ["close"]
        )


def test_compute_prediction_metrics_wrong_number_of_names_raises():
    with pytest.raises(ValueError, match="feature names"):
        evaluation.compute_prediction_metrics(
            np.zeros((3, 2)), np.zeros((3, 2)), ["close"]
        )


def test_compute_prediction_metrics_empty_raises():
    with pytest.raises(ValueError, match="empty"):
        evaluation.compute_prediction_metrics(
            np.zeros((0, 1)), np.zeros((0, 1)), ["close"]
        )


# --------------------------------------------------------------------------------------
# predictions_frame / save_predictions_csv
# --------------------------------------------------------------------------------------


def test_predictions_frame_pairs_pred_and_actual_columns():
    timestamps = pd.date_range("2023-01-01", periods=2, freq="D")
    frame = evaluation.predictions_frame(
        timestamps,
        np.array([[1.0, 2.0], [3.0, 4.0]]),
        np.array([[1.5, 2.5], [3.5, 4.5]]),
        ["low", "high"],
    )

    assert list(frame.columns) == ["low_pred", "low_actual", "high_pred", "high_actual"]
    assert frame.index.name == "timestamp"
    assert frame.loc[timestamps[1], "high_actual"] == pytest.approx(4.5)


def test_save_predictions_csv_writes_under_results_dir(tmp_path):
    frame = pd.DataFrame({"close_pred": [1.0], "close_actual": [1.1]})

    path = evaluation.save_predictions_csv(frame, "preds.csv", results_dir=tmp_path / "out")

    assert path == tmp_path / "out" / "preds.csv"
    assert path.exists()
    assert pd.read_csv(path, index_col=0)["close_actual"].tolist() == [1.1]
