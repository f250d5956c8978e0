"""Office document to PDF converters backed by external processes."""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Optional, Protocol, Sequence

from imagedrop.config.models import ConversionSettings

from .errors import ConversionError

LOGGER = logging.getLogger(__name__)

_SCRIPT_BY_SUFFIX = {
    ".doc": "word-to-pdf.ps1",
    ".docx": "word-to-pdf.ps1",
    ".xls": "excel-to-pdf.ps1",
    ".xlsx": "excel-to-pdf.ps1",
    ".ppt": "powerpoint-to-pdf.ps1",
    ".pptx": "powerpoint-to-pdf.ps1",
}


class DocumentConverter(Protocol):
    """Turn an Office document into a PDF."""

    def convert_to_pdf(self, source: Path, output_dir: Path) -> Path:
        """Convert ``source`` and return the produced PDF inside ``output_dir``.

        Raises:
            ConversionError: If the converter is unavailable, times out, or
                produces no PDF.
        """
        ...


def _run(command: Sequence[str], timeout: float) -> subprocess.CompletedProcess[str]:
    LOGGER.debug("Running converter: %s", " ".join(command))
    try:
        completed = subprocess.run(
            list(command),
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as exc:
        raise ConversionError(f"converter not available: {command[0]}") from exc
    except subprocess.TimeoutExpired as exc:
        raise ConversionError(f"conversion timed out after {timeout:g}s") from exc

    if completed.stderr:
        LOGGER.debug("Converter stderr: %s", completed.stderr.strip())
    if completed.returncode != 0:
        detail = (completed.stderr or completed.stdout or "").strip()
        raise ConversionError(
            f"converter exited with status {completed.returncode}" + (f": {detail}" if detail else "")
        )
    return completed


class LibreOfficeConverter:
    """Convert documents with a headless LibreOffice instance."""

    def __init__(self, binary: str = "soffice", *, timeout: float = 30) -> None:
        self.binary = binary
        self.timeout = timeout

    def convert_to_pdf(self, source: Path, output_dir: Path) -> Path:
        output_dir.mkdir(parents=True, exist_ok=True)
        _run(
            [
                self.binary,
                "--headless",
                "--convert-to",
                "pdf",
                "--outdir",
                str(output_dir),
                str(source),
            ],
            self.timeout,
        )
        produced = output_dir / f"{source.stem}.pdf"
        if not produced.exists():
            raise ConversionError("no PDF output produced")
        return produced


class PowerShellConverter:
    """Convert documents through per-application PowerShell automation scripts."""

    def __init__(self, scripts_dir: Path, *, timeout: float = 30) -> None:
        self.scripts_dir = scripts_dir
        self.timeout = timeout

    def convert_to_pdf(self, source: Path, output_dir: Path) -> Path:
        script_name = _SCRIPT_BY_SUFFIX.get(source.suffix.lower())
        if script_name is None:
            raise ConversionError(f"no conversion script for {source.suffix} files")
        script = self.scripts_dir / script_name
        if not script.exists():
            raise ConversionError(f"conversion script missing: {script}")

        output_dir.mkdir(parents=True, exist_ok=True)
        produced = output_dir / "output.pdf"
        _run(
            [
                "powershell",
                "-ExecutionPolicy",
                "Bypass",
                "-File",
                str(script),
                "-inputPath",
                str(source),
                "-outputPath",
                str(produced),
            ],
            self.timeout,
        )
        if not produced.exists():
            raise ConversionError("no PDF output produced")
        return produced


def build_converter(settings: ConversionSettings) -> Optional[DocumentConverter]:
    """Return the converter selected by ``settings``.

    ``auto`` prefers the PowerShell scripts on Windows when a scripts
    directory is configured and LibreOffice otherwise. ``None`` is returned
    when no backend can run on this machine; documents are then kept as
    originals only.
    """
    backend = settings.backend
    if backend == "auto":
        if sys.platform == "win32" and settings.scripts_dir:
            backend = "powershell"
        else:
            backend = "libreoffice"

    if backend == "powershell":
        if not settings.scripts_dir:
            LOGGER.warning("PowerShell conversion selected but conversion.scripts_dir is unset.")
            return None
        return PowerShellConverter(
            Path(settings.scripts_dir).expanduser(), timeout=settings.timeout_seconds
        )

    if shutil.which(settings.soffice_binary) is None:
        LOGGER.info("LibreOffice binary %r not found; document conversion disabled.", settings.soffice_binary)
        return None
    return LibreOfficeConverter(settings.soffice_binary, timeout=settings.timeout_seconds)


__all__ = [
    "DocumentConverter",
    "LibreOfficeConverter",
    "PowerShellConverter",
    "build_converter",
]
