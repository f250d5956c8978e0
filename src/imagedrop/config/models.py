"""Configuration models describing ImageDrop settings."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ImageDropBaseModel(BaseModel):
    """Shared configuration for ImageDrop Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class StorageSettings(ImageDropBaseModel):
    """Locations used for organized folders and bookkeeping files.

    Attributes:
        root_folder: Directory under which every organized folder is created.
        data_dir: User-data directory holding the folder index and log file.
    """

    root_folder: str = "~/Documents/ImageDrop"
    data_dir: str = "~/.imagedrop"

    def root_path(self) -> Path:
        """Return the root folder as an absolute path."""
        return Path(self.root_folder).expanduser().resolve()

    def data_path(self) -> Path:
        """Return the user-data directory as an absolute path."""
        return Path(self.data_dir).expanduser().resolve()


class LLMSettings(ImageDropBaseModel):
    """Image-description service options.

    Attributes:
        enabled: Whether AI titles and descriptions should be requested.
        provider: Identifier for the language-model provider.
        model: Vision-capable model name.
        api_key: Optional credential; ``OPENAI_API_KEY`` is used when unset.
        api_base_url: Optional custom endpoint for OpenAI-compatible servers.
        temperature: Sampling temperature for generative calls.
        title_max_tokens: Token limit when requesting a short folder title.
        description_max_tokens: Token limit when requesting a description.
    """

    enabled: bool = False
    provider: str = "openai"
    model: str = "gpt-4o-mini"
    api_key: Optional[str] = None
    api_base_url: Optional[str] = None
    temperature: float = 0.2
    title_max_tokens: int = 50
    description_max_tokens: int = 150


class ConversionSettings(ImageDropBaseModel):
    """Document conversion options.

    Attributes:
        backend: Office-to-PDF converter to use; ``auto`` picks per platform.
        soffice_binary: LibreOffice executable used by the ``libreoffice`` backend.
        scripts_dir: Directory with ``word-to-pdf.ps1`` style scripts for ``powershell``.
        timeout_seconds: Upper bound for a single external conversion.
        pdf_dpi: Resolution used when rasterizing PDF pages.
        svg_max_width: Maximum width of PNG renderings produced from SVG files.
    """

    backend: Literal["auto", "libreoffice", "powershell"] = "auto"
    soffice_binary: str = "soffice"
    scripts_dir: Optional[str] = None
    timeout_seconds: int = 30
    pdf_dpi: int = 150
    svg_max_width: int = 1080


class CaptureSettings(ImageDropBaseModel):
    """Clipboard and screen capture options.

    Attributes:
        clipboard_timeout_seconds: How long the snipping flow waits for a new image.
        clipboard_poll_seconds: Interval between clipboard checks.
        snipping_command: Command launching an external snipping tool.
        clear_clipboard: Whether to clear the clipboard after an image was taken.
    """

    clipboard_timeout_seconds: float = 30.0
    clipboard_poll_seconds: float = 0.5
    snipping_command: Optional[str] = None
    clear_clipboard: bool = True


class WatchSettings(ImageDropBaseModel):
    """Inbox monitoring options.

    Attributes:
        debounce_seconds: Quiet period before a batch of inbox events is processed.
        consume_inbox: Remove inbox files once they were organized.
    """

    debounce_seconds: float = 2.0
    consume_inbox: bool = True


class LoggingSettings(ImageDropBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
    """

    level: str = "WARNING"
    max_size_mb: int = 10
    backup_count: int = 3


class CLIOptions(ImageDropBaseModel):
    """CLI behavior defaults.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class ImageDropConfig(ImageDropBaseModel):
    """Top-level configuration struct for ImageDrop.

    Attributes:
        storage: Root folder and user-data locations.
        llm: Image-description service settings.
        conversion: Document conversion settings.
        capture: Clipboard and screen capture settings.
        watch: Inbox monitoring settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    storage: StorageSettings = Field(default_factory=StorageSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    conversion: ConversionSettings = Field(default_factory=ConversionSettings)
    capture: CaptureSettings = Field(default_factory=CaptureSettings)
    watch: WatchSettings = Field(default_factory=WatchSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "ImageDropBaseModel",
    "StorageSettings",
    "LLMSettings",
    "ConversionSettings",
    "CaptureSettings",
    "WatchSettings",
    "LoggingSettings",
    "CLIOptions",
    "ImageDropConfig",
]
