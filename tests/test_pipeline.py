import importlib.util
import pathlib

from stock_lstm import config, pipeline
from stock_lstm.pipeline import run_pipeline


def test_run_pipeline_is_callable():
    """
    Smoke test: ensure the main orchestrator can be imported and is callable.
    """
    assert callable(run_pipeline)


def test_run_pipeline_trains_then_predicts_with_config_constants(monkeypatch, tmp_path):
    calls = []

    def fake_train(*args, **kwargs):
        calls.append(("train",) + args)
        return tmp_path / "model.keras"

    class FakeResult:
        csv_path = tmp_path / "preds.csv"

    def fake_predict(*args, **kwargs):
        calls.append(("predict",) + args)
        return FakeResult()

    def fake_download(force=False):
        calls.append(("download",))
        return tmp_path / "downloaded.csv"

    monkeypatch.setattr(pipeline, "train_and_store_model", fake_train)
    monkeypatch.setattr(pipeline, "load_model_and_predict", fake_predict)
    monkeypatch.setattr(pipeline, "download_and_save_raw_data", fake_download)

    result = run_pipeline()

    assert isinstance(result, FakeResult)
    assert [c[0] for c in calls] == ["train", "predict"]
    assert calls[0][1:] == (
        config.default_data_file(),
        config.SYMBOL,
        config.CATEGORY,
        config.BATCH_SIZE,
        config.SPLIT_RATIO,
        config.EXAMPLE_LENGTH,
        config.EPOCHS,
    )
    assert calls[1][1:] == calls[0][1:-1]


def test_run_pipeline_downloads_only_when_asked(monkeypatch, tmp_path):
    seen = {}

    monkeypatch.setattr(
        pipeline, "download_and_save_raw_data", lambda force=False: tmp_path / "dl.csv"
    )

    def fake_train(data_file, *args, **kwargs):
        seen["train_file"] = pathlib.Path(data_file)
        return tmp_path / "model.keras"

    class FakeResult:
        csv_path = None

    monkeypatch.setattr(pipeline, "train_and_store_model", fake_train)
    monkeypatch.setattr(pipeline, "load_model_and_predict", lambda *a, **k: FakeResult())

    run_pipeline(download=True)

    assert seen["train_file"] == tmp_path / "dl.csv"


def _load_entry_script():
    script = pathlib.Path(__file__).resolve().parents[1] / "run_pipeline.py"
    spec = importlib.util.spec_from_file_location("run_pipeline_script", script)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_entry_script_warns_outside_venv_through_logging(monkeypatch, caplog, capsys):
    script = _load_entry_script()
    monkeypatch.delenv("VIRTUAL_ENV", raising=False)

    with caplog.at_level("WARNING"):
        script.ensure_venv()

    assert "Not running inside a virtual environment" in caplog.text
    assert capsys.readouterr().out == ""


def test_entry_script_is_quiet_inside_venv(monkeypatch, caplog):
    script = _load_entry_script()
    monkeypatch.setenv("VIRTUAL_ENV", "/tmp/venv")

    with caplog.at_level("WARNING"):
        script.ensure_venv()

    assert not [rec for rec in caplog.records if rec.name == script.LOGGER.name]
