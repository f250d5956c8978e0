"""Settings for ImageDrop: a YAML file under the user-data directory.

Values are layered defaults < file < ``IMAGEDROP__SECTION__KEY`` environment
variables < command line overrides.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError, ConfigFileError
from .models import ImageDropConfig
from .resolver import ENV_PREFIX, env_layer, flatten_for_env, resolve_with_precedence

DEFAULT_CONFIG_PATH = Path("~/.imagedrop/config.yaml")

_SECTION_NOTES = (
    ("storage", "where organized folders and the folder index live"),
    ("llm", "optional vision model used for folder titles and description.txt"),
    ("conversion", "Office/PDF/SVG conversion backends and limits"),
    ("capture", "clipboard polling and the snipping tool command"),
    ("watch", "inbox debounce and whether processed files are removed"),
    ("logging", "console level and rotating log file size"),
    ("cli", "default output modes"),
)


class ConfigManager:
    """Read, write and resolve the ImageDrop settings file.

    Args:
        config_path: Location of the YAML file; defaults to ``~/.imagedrop/config.yaml``.
        env: Environment mapping consulted for ``IMAGEDROP__`` overrides.
    """

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = os.environ if env is None else env

    @property
    def config_path(self) -> Path:
        return self._path

    def ensure_exists(self) -> Path:
        """Write a file holding the default settings unless one is already present."""
        if not self._path.exists():
            self.save(ImageDropConfig())
        return self._path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = True,
        env_overrides: Mapping[str, str] | None = None,
    ) -> ImageDropConfig:
        """Return the effective settings.

        Args:
            cli_overrides: Dotted keys supplied on the command line, e.g. ``--root``.
            include_env: When False, environment variables are ignored.
            ensure_file: Create the settings file first when it is missing.
            env_overrides: Environment mapping to use instead of the manager's own.

        Raises:
            ConfigError: If any layer is malformed or the result fails validation.
        """
        if ensure_file:
            self.ensure_exists()

        environment = None
        if include_env:
            source = self._env if env_overrides is None else env_overrides
            environment = env_layer(source) or None

        return resolve_with_precedence(
            defaults=ImageDropConfig(),
            file_overrides=self.load_file_overrides(),
            env_overrides=environment,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return the mapping stored in the settings file, or ``{}`` if there is none."""
        if not self._path.exists():
            return {}
        try:
            data = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ConfigFileError(self._path, f"invalid YAML ({exc})") from exc
        except OSError as exc:
            raise ConfigFileError(self._path, f"cannot be read ({exc.strerror})") from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigFileError(self._path, "top level must be a mapping of sections")
        return data

    def save(self, config: ImageDropConfig | Mapping[str, Any]) -> None:
        """Overwrite the settings file with ``config``."""
        if isinstance(config, ImageDropConfig):
            data = config.model_dump(mode="python")
        else:
            data = dict(config)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(_render(data), encoding="utf-8")

    def read_text(self) -> str:
        if not self._path.exists():
            return ""
        return self._path.read_text(encoding="utf-8")


def _render(data: Mapping[str, Any]) -> str:
    updated = datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")
    lines = [
        "# ImageDrop configuration file",
        "# Edit with `imagedrop config edit` or `imagedrop config set KEY --value VALUE`.",
        "#",
    ]
    lines.extend(f"#   {section}: {note}" for section, note in _SECTION_NOTES)
    lines.append(f"# Last updated: {updated}")
    return "\n".join(lines) + "\n" + yaml.safe_dump(dict(data), sort_keys=False)


__all__ = [
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "ENV_PREFIX",
    "ImageDropConfig",
    "resolve_with_precedence",
    "flatten_for_env",
    "env_layer",
    "ConfigError",
    "ConfigFileError",
]
