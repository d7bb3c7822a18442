import json
import logging
from pathlib import Path

from typer.testing import CliRunner

from trend_intel.cli import _to_plain, _write_output, app
from trend_intel.models import AnalysisResult, SourceBundle
from trend_intel.pipeline import TrendRunResult, to_response

runner = CliRunner()


def _make_result(log_error=None) -> TrendRunResult:
    return TrendRunResult(
        timestamp="2025-03-01T10:00:00.000Z",
        bundle=SourceBundle(degraded_sources=["instagram"]),
        analysis=AnalysisResult(
            summary="Prices firming in Wakad.",
            patterns=["First pattern"],
            strategies=["First strategy", "Second strategy"],
        ),
        logged=log_error is None,
        log_error=log_error,
    )


def test_to_plain_serializes_models_and_dataclasses(tmp_path):
    payload = _to_plain({"path": tmp_path / "out.json", "run": _make_result()})

    assert payload["path"] == str(tmp_path / "out.json")
    assert payload["run"]["analysis"]["strategies"][1] == "Second strategy"
    assert payload["run"]["bundle"]["degraded_sources"] == ["instagram"]
    # Ensure the payload can be dumped to JSON without raising.
    json.dumps(payload)


def test_write_output_json(tmp_path):
    out_file = tmp_path / "nested" / "result.json"
    payload = _to_plain(to_response(_make_result()))

    _write_output(out_file, payload)

    written = json.loads(out_file.read_text(encoding="utf-8"))
    assert written["sources"] == {"news": 0, "youtube": 0, "instagram": 0}
    assert written["summary"] == "Prices firming in Wakad."


def test_run_command_prints_and_writes(monkeypatch, tmp_path):
    captured = {}

    def fake_run(settings, skip_log=False):
        captured["skip_log"] = skip_log
        return _make_result(log_error="sheet missing")

    monkeypatch.setattr("trend_intel.cli.run_trend_analysis", fake_run)
    out_file = tmp_path / "run.json"

    result = runner.invoke(app, ["run", "--no-log", "--out", str(out_file)])

    assert result.exit_code == 0, result.output
    assert captured["skip_log"] is True
    assert "Prices firming in Wakad." in result.output
    assert "Second strategy" in result.output
    assert "Logging failed" in result.output
    assert json.loads(out_file.read_text(encoding="utf-8"))["patterns"] == ["First pattern"]


def test_history_command_limits_output(monkeypatch):
    monkeypatch.setattr(
        "trend_intel.cli.load_past_strategies",
        lambda settings: ["Oldest", "Middle", "Newest"],
    )

    result = runner.invoke(app, ["history", "--limit", "2"])

    assert result.exit_code == 0, result.output
    assert "Newest" in result.output
    assert "Middle" in result.output
    assert "Oldest" not in result.output


def test_history_command_handles_empty_memory(monkeypatch):
    monkeypatch.setattr("trend_intel.cli.load_past_strategies", lambda settings: [])

    result = runner.invoke(app, ["history"])

    assert result.exit_code == 0
    assert "No stored strategies" in result.output


def test_lowercase_log_level_from_environment(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setattr("trend_intel.cli.load_past_strategies", lambda settings: ["Only"])

    result = runner.invoke(app, ["history"])

    assert result.exit_code == 0, result.output
    assert "Only" in result.output
    assert logging.getLogger("trend_intel").level == logging.DEBUG
