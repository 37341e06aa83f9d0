from __future__ import annotations

from pathlib import Path

from futurework import cli
from futurework.errors import PredictionFailure
from futurework.models import Prediction


class StubRequestor:
    error: Exception | None = None
    calls: list[tuple[str, object]] = []

    def __init__(self, settings) -> None:
        self.settings = settings

    def predict_single(self, job_input):
        StubRequestor.calls.append(("single", job_input))
        if StubRequestor.error:
            raise StubRequestor.error
        return [Prediction(industry=job_input.industry, country=job_input.country, role=job_input.role)]

    def predict_bulk(self, industry):
        StubRequestor.calls.append(("bulk", industry))
        return [Prediction(industry=industry, country="Global", role=f"Role {i}") for i in range(5)]


def _env(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("FUTUREWORK_SKIP_RUNTIME_CHECK", "1")
    monkeypatch.setenv("FUTUREWORK_RUNTIME_ROOT", str(tmp_path / "runtime"))
    monkeypatch.delenv("FUTUREWORK_STATE_PATH", raising=False)
    monkeypatch.delenv("FUTUREWORK_SHEETS_TOKEN", raising=False)
    monkeypatch.setattr(cli, "PredictionRequestor", StubRequestor)
    StubRequestor.calls = []
    StubRequestor.error = None


def test_analyze_writes_csv(tmp_path: Path, monkeypatch, capsys) -> None:
    _env(tmp_path, monkeypatch)
    out_csv = tmp_path / "out" / "predictions.csv"

    code = cli.main(
        ["--no-cache", "--csv", str(out_csv), "analyze", "--industry", "Tech", "--country", "USA", "--role", "Analyst"]
    )

    assert code == 0
    assert StubRequestor.calls[0][0] == "single"
    lines = out_csv.read_text(encoding="utf-8").split("\n")
    assert len(lines) == 2
    assert lines[1].startswith('"Tech","USA","Analyst"')
    assert "Analyst" in capsys.readouterr().out


def test_bulk_defaults_to_technology(tmp_path: Path, monkeypatch) -> None:
    _env(tmp_path, monkeypatch)

    assert cli.main(["bulk"]) == 0
    assert StubRequestor.calls == [("bulk", "Technology")]


def test_prediction_failure_exits_nonzero(tmp_path: Path, monkeypatch, capsys) -> None:
    _env(tmp_path, monkeypatch)
    StubRequestor.error = PredictionFailure("Failed to generate prediction. Please try again.")

    code = cli.main(["analyze", "--industry", "Tech", "--country", "USA", "--role", "Analyst"])

    assert code == 1
    assert "Failed to generate prediction" in capsys.readouterr().err


def test_authorize_without_client_id_falls_back_to_no_cache(tmp_path: Path, monkeypatch, capsys) -> None:
    _env(tmp_path, monkeypatch)

    code = cli.main(["--authorize", "analyze", "--industry", "Tech", "--country", "USA", "--role", "Analyst"])

    assert code == 0
    assert "Sheets not connected" in capsys.readouterr().err


def test_missing_api_key_stops_before_any_request(tmp_path: Path, monkeypatch, capsys) -> None:
    _env(tmp_path, monkeypatch)
    monkeypatch.delenv("FUTUREWORK_SKIP_RUNTIME_CHECK")
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)

    code = cli.main(["--no-cache", "bulk"])

    assert code == 2
    assert StubRequestor.calls == []
    assert "No Gemini API key" in capsys.readouterr().err
