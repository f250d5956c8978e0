"""CLI tests for configuration commands."""

import os
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from imagedrop.cli import cli
from imagedrop.config import ConfigManager


def _env_with_home(tmp_path: Path) -> dict[str, Any]:
    env = dict(os.environ)
    env["HOME"] = str(tmp_path)
    return env


def _config_path(tmp_path: Path) -> Path:
    return tmp_path / ".imagedrop" / "config.yaml"


def test_config_view_creates_and_displays_config(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["config", "view"], env=env)

    assert result.exit_code == 0
    assert "storage:" in result.output
    assert _config_path(tmp_path).exists()


def test_config_set_updates_value_and_reports_change(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["config", "set", "conversion.pdf_dpi", "--value", "220"], env=env)

    assert result.exit_code == 0
    assert "conversion.pdf_dpi: 150 -> 220" in result.output

    manager = ConfigManager(config_path=_config_path(tmp_path))
    config = manager.load(include_env=False)
    assert config.conversion.pdf_dpi == 220


def test_config_set_rejects_invalid_value(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(
        cli, ["config", "set", "conversion.backend", "--value", "word-macro"], env=env
    )

    assert result.exit_code != 0
    assert "Invalid configuration values" in result.output


def test_config_set_same_value_leaves_file_untouched(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    runner.invoke(cli, ["config", "view"], env=env)
    before = _config_path(tmp_path).read_text(encoding="utf-8")

    result = runner.invoke(cli, ["config", "set", "watch.consume_inbox", "--value", "true"], env=env)

    assert result.exit_code == 0
    assert "nothing changed" in result.output
    assert _config_path(tmp_path).read_text(encoding="utf-8") == before


def test_config_set_rejects_unknown_setting(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        cli, ["config", "set", "capture.region", "--value", "full"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code != 0
    assert "Unknown setting 'capture.region'" in result.output


def test_config_edit_applies_changes(tmp_path: Path, monkeypatch) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    manager = ConfigManager(config_path=_config_path(tmp_path))
    manager.ensure_exists()

    def _mock_edit(text: str, **_: Any) -> str:
        return text.replace("temperature: 0.2", "temperature: 0.55")

    monkeypatch.setattr("imagedrop.cli.click.edit", _mock_edit)

    result = runner.invoke(cli, ["config", "edit"], env=env)

    assert result.exit_code == 0
    assert "updated" in result.output.lower()

    config = manager.load(include_env=False)
    assert config.llm.temperature == pytest.approx(0.55)


def test_config_edit_cancelled(tmp_path: Path, monkeypatch) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    monkeypatch.setattr("imagedrop.cli.click.edit", lambda *_, **__: None)

    result = runner.invoke(cli, ["config", "edit"], env=env)

    assert result.exit_code == 0
    assert "cancelled" in result.output.lower()
