"""Tests for the conversion adapters."""

from __future__ import annotations

import io
import subprocess
import sys
import types
from pathlib import Path

import pytest
from pdf2image.exceptions import PDFPageCountError
from PIL import Image

from imagedrop.config.models import ConversionSettings
from imagedrop.conversion import (
    ConversionError,
    ImageDecodeError,
    LibreOfficeConverter,
    PopplerRasterizer,
    PowerShellConverter,
    build_converter,
    normalize_to_png,
    svg_to_png,
)
from imagedrop.conversion import office, raster


def _image_bytes(mode: str, size: tuple[int, int], fmt: str) -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, size).save(buffer, format=fmt)
    return buffer.getvalue()


def test_normalize_to_png_converts_jpeg() -> None:
    data = normalize_to_png(_image_bytes("RGB", (5, 4), "JPEG"))

    assert data.startswith(b"\x89PNG")
    with Image.open(io.BytesIO(data)) as image:
        assert image.size == (5, 4)


def test_normalize_to_png_handles_cmyk() -> None:
    data = normalize_to_png(_image_bytes("CMYK", (2, 2), "JPEG"))

    with Image.open(io.BytesIO(data)) as image:
        assert image.format == "PNG"
        assert image.mode == "RGB"


def test_normalize_to_png_rejects_garbage() -> None:
    with pytest.raises(ImageDecodeError):
        normalize_to_png(b"not an image")


def test_normalize_to_png_rejects_decompression_bombs(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10)

    with pytest.raises(ImageDecodeError, match="exceeds limit"):
        normalize_to_png(_image_bytes("RGB", (10, 10), "PNG"))


def test_svg_to_png_limits_width(monkeypatch: pytest.MonkeyPatch) -> None:
    wide = _image_bytes("RGBA", (2000, 1000), "PNG")
    fake = types.SimpleNamespace(svg2png=lambda bytestring: wide)
    monkeypatch.setitem(sys.modules, "cairosvg", fake)

    data = svg_to_png(b"<svg/>", max_width=1080)

    with Image.open(io.BytesIO(data)) as image:
        assert image.size == (1080, 540)
        assert image.mode == "RGBA"


def test_svg_to_png_keeps_small_drawings(monkeypatch: pytest.MonkeyPatch) -> None:
    small = _image_bytes("RGBA", (300, 200), "PNG")
    monkeypatch.setitem(sys.modules, "cairosvg", types.SimpleNamespace(svg2png=lambda bytestring: small))

    with Image.open(io.BytesIO(svg_to_png(b"<svg/>"))) as image:
        assert image.size == (300, 200)


def test_svg_to_png_wraps_render_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def _boom(bytestring: bytes) -> bytes:
        raise ValueError("bad markup")

    monkeypatch.setitem(sys.modules, "cairosvg", types.SimpleNamespace(svg2png=_boom))

    with pytest.raises(ImageDecodeError):
        svg_to_png(b"<svg")


def test_libreoffice_missing_binary(tmp_path: Path) -> None:
    source = tmp_path / "notes.docx"
    source.write_bytes(b"PK")
    converter = LibreOfficeConverter("imagedrop-missing-soffice", timeout=5)

    with pytest.raises(ConversionError, match="not available"):
        converter.convert_to_pdf(source, tmp_path / "out")


def test_libreoffice_timeout(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def _timeout(command, **kwargs):
        raise subprocess.TimeoutExpired(command, kwargs["timeout"])

    monkeypatch.setattr(office.subprocess, "run", _timeout)

    with pytest.raises(ConversionError, match="timed out"):
        LibreOfficeConverter(timeout=30).convert_to_pdf(tmp_path / "a.docx", tmp_path / "out")


def test_libreoffice_non_zero_exit(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        office.subprocess,
        "run",
        lambda command, **_: subprocess.CompletedProcess(command, 1, "", "source file could not be loaded"),
    )

    with pytest.raises(ConversionError, match="could not be loaded"):
        LibreOfficeConverter().convert_to_pdf(tmp_path / "a.docx", tmp_path / "out")


def test_libreoffice_success_returns_pdf(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list[list[str]] = []

    def _run(command, **_):
        seen.append(command)
        outdir = Path(command[command.index("--outdir") + 1])
        (outdir / "a.pdf").write_bytes(b"%PDF")
        return subprocess.CompletedProcess(command, 0, "", "")

    monkeypatch.setattr(office.subprocess, "run", _run)

    produced = LibreOfficeConverter().convert_to_pdf(tmp_path / "a.docx", tmp_path / "out")

    assert produced == tmp_path / "out" / "a.pdf"
    assert seen[0][:4] == ["soffice", "--headless", "--convert-to", "pdf"]


def test_libreoffice_without_output(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        office.subprocess, "run", lambda command, **_: subprocess.CompletedProcess(command, 0, "", "")
    )

    with pytest.raises(ConversionError, match="no PDF output"):
        LibreOfficeConverter().convert_to_pdf(tmp_path / "a.docx", tmp_path / "out")


def test_powershell_converter_uses_kind_script(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    scripts = tmp_path / "scripts"
    scripts.mkdir()
    (scripts / "excel-to-pdf.ps1").write_text("# script", encoding="utf-8")
    seen: list[list[str]] = []

    def _run(command, **_):
        seen.append(command)
        Path(command[command.index("-outputPath") + 1]).write_bytes(b"%PDF")
        return subprocess.CompletedProcess(command, 0, "", "")

    monkeypatch.setattr(office.subprocess, "run", _run)

    produced = PowerShellConverter(scripts).convert_to_pdf(tmp_path / "b.xlsx", tmp_path / "out")

    assert produced.name == "output.pdf"
    assert str(scripts / "excel-to-pdf.ps1") in seen[0]
    assert seen[0][:4] == ["powershell", "-ExecutionPolicy", "Bypass", "-File"]


def test_powershell_converter_missing_script(tmp_path: Path) -> None:
    with pytest.raises(ConversionError, match="script missing"):
        PowerShellConverter(tmp_path).convert_to_pdf(tmp_path / "c.pptx", tmp_path / "out")


def test_build_converter_selection(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(office.shutil, "which", lambda binary: None)
    assert build_converter(ConversionSettings(backend="libreoffice")) is None
    assert build_converter(ConversionSettings(backend="powershell")) is None

    monkeypatch.setattr(office.shutil, "which", lambda binary: f"/usr/bin/{binary}")
    converter = build_converter(ConversionSettings(backend="libreoffice", timeout_seconds=12))
    assert isinstance(converter, LibreOfficeConverter)
    assert converter.timeout == 12

    scripted = build_converter(ConversionSettings(backend="powershell", scripts_dir="/opt/scripts"))
    assert isinstance(scripted, PowerShellConverter)


def test_poppler_rasterizer_writes_pages(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    pages = [Image.new("RGB", (4, 4), "white"), Image.new("RGB", (4, 4), "black")]
    monkeypatch.setattr(raster, "convert_from_path", lambda *_, **__: pages)

    written = PopplerRasterizer(dpi=72).rasterize(tmp_path / "a.pdf", tmp_path / "pages")

    assert [path.name for path in written] == ["page-0001.png", "page-0002.png"]
    assert all(path.exists() for path in written)


def test_poppler_rasterizer_wraps_errors(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def _fail(*_, **__):
        raise PDFPageCountError("Unable to get page count.")

    monkeypatch.setattr(raster, "convert_from_path", _fail)

    with pytest.raises(ConversionError):
        PopplerRasterizer().rasterize(tmp_path / "a.pdf", tmp_path / "pages")


def test_poppler_rasterizer_rejects_empty_documents(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(raster, "convert_from_path", lambda *_, **__: [])

    with pytest.raises(ConversionError, match="no pages"):
        PopplerRasterizer().rasterize(tmp_path / "a.pdf", tmp_path / "pages")


def test_poppler_rasterizer_wraps_page_write_errors(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    class _UnwritablePage:
        def save(self, target, format=None):
            raise OSError(28, "No space left on device")

    monkeypatch.setattr(raster, "convert_from_path", lambda *_, **__: [_UnwritablePage()])

    with pytest.raises(ConversionError, match="cannot write page 1"):
        PopplerRasterizer().rasterize(tmp_path / "a.pdf", tmp_path / "pages")
