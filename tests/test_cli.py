"""CLI smoke tests."""

import json

import pytest
from typer.testing import CliRunner

from companion import cli
from companion.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _no_log_handlers(monkeypatch):
    # Handlers bound to the runner's stderr would outlive the invocation
    monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: None)


def test_demo_runs(monkeypatch):
    monkeypatch.delenv("COMPANION_CONFIG", raising=False)
    result = runner.invoke(app, ["demo", "--config", "missing.json", "--undo-mode", "restore"])

    assert result.exit_code == 0, result.output
    assert "character_created" in result.output
    assert "History" in result.output


def test_demo_rejects_unknown_undo_mode():
    result = runner.invoke(app, ["demo", "--config", "missing.json", "--undo-mode", "rewind"])
    assert result.exit_code == 2


def test_config_init_and_show(tmp_path):
    path = tmp_path / "companion.json"

    result = runner.invoke(app, ["config", "--init", str(path)])
    assert result.exit_code == 0, result.output
    assert json.loads(path.read_text())["undo_mode"] == "notify"

    result = runner.invoke(app, ["config", "--show", "--config", str(path)])
    assert result.exit_code == 0, result.output
    assert "max_size" in result.output
