"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from imagedrop.config import (
    ConfigError,
    ConfigFileError,
    ConfigManager,
    ImageDropConfig,
    env_layer,
    flatten_for_env,
    resolve_with_precedence,
)


def _fresh_manager(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigManager:
    monkeypatch.setenv("HOME", str(tmp_path))
    return ConfigManager()


def test_ensure_exists_creates_default_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    path = manager.ensure_exists()

    assert path == tmp_path / ".imagedrop" / "config.yaml"
    text = path.read_text(encoding="utf-8")
    assert "ImageDrop configuration file" in text
    assert "Last updated:" in text

    config = manager.load(include_env=False)
    assert isinstance(config, ImageDropConfig)
    assert config.storage.root_folder == "~/Documents/ImageDrop"


def test_resolve_with_precedence_respects_order(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.save({"llm": {"model": "gpt-4o"}, "conversion": {"pdf_dpi": 200}})

    env = {"IMAGEDROP__LLM__TEMPERATURE": "0.7", "IMAGEDROP__STORAGE__ROOT_FOLDER": "/env/root"}
    cli = {"storage.root_folder": "/cli/root"}

    config = manager.load(cli_overrides=cli, env_overrides=env)

    assert config.llm.model == "gpt-4o"
    assert config.conversion.pdf_dpi == 200
    assert config.llm.temperature == pytest.approx(0.7)
    # CLI overrides take precedence over environment
    assert config.storage.root_folder == "/cli/root"


def test_env_values_are_parsed_as_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    config = manager.load(env_overrides={"IMAGEDROP__LLM__ENABLED": "true"})

    assert config.llm.enabled is True


def test_invalid_yaml_raises_config_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.config_path.write_text("- not-a-mapping", encoding="utf-8")

    with pytest.raises(ConfigFileError) as excinfo:
        manager.load()

    assert excinfo.value.path == manager.config_path
    assert isinstance(excinfo.value, ConfigError)


def test_unknown_keys_are_rejected() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=ImageDropConfig(),
            file_overrides={"storage": {"unknown": 1}},
        )


def test_flatten_for_env_round_trips_defaults() -> None:
    flat = flatten_for_env(ImageDropConfig())

    assert flat["IMAGEDROP__LLM__PROVIDER"] == "openai"
    assert flat["IMAGEDROP__CONVERSION__SVG_MAX_WIDTH"] == "1080"
    assert flat["IMAGEDROP__CAPTURE__SNIPPING_COMMAND"] == "null"


def test_resolve_with_precedence_invalid_value_raises() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=ImageDropConfig(),
            file_overrides={"conversion": {"timeout_seconds": "not-an-int"}},
        )


def test_storage_paths_expand_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))

    config = ImageDropConfig()

    assert config.storage.root_path() == tmp_path / "Documents" / "ImageDrop"
    assert config.storage.data_path() == tmp_path / ".imagedrop"


def test_env_layer_ignores_unrelated_variables() -> None:
    layer = env_layer(
        {
            "IMAGEDROP__WATCH__DEBOUNCE_SECONDS": "4.5",
            "IMAGEDROP__CAPTURE__SNIPPING_COMMAND": "flameshot gui --clipboard",
            "IMAGEDROP__": "ignored",
            "PATH": "/usr/bin",
        }
    )

    assert layer == {
        "watch.debounce_seconds": 4.5,
        "capture.snipping_command": "flameshot gui --clipboard",
    }


def test_empty_config_file_uses_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.config_path.parent.mkdir(parents=True)
    manager.config_path.write_text("# nothing yet\n", encoding="utf-8")

    config = manager.load(include_env=False)

    assert config.watch.consume_inbox is True
