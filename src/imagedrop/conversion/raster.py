"""Raster helpers: PNG normalisation, SVG rendering and PDF page rasterization."""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Protocol

from pdf2image import convert_from_path
from pdf2image.exceptions import (
    PDFInfoNotInstalledError,
    PDFPageCountError,
    PDFPopplerTimeoutError,
    PDFSyntaxError,
)
from PIL import Image, UnidentifiedImageError

from .errors import ConversionError, ImageDecodeError

LOGGER = logging.getLogger(__name__)

_PNG_MODES = {"1", "L", "LA", "I", "P", "RGB", "RGBA"}


def encode_png(image: Image.Image) -> bytes:
    """Return ``image`` encoded as PNG bytes."""
    if image.mode not in _PNG_MODES:
        image = image.convert("RGBA" if "A" in image.getbands() else "RGB")
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def normalize_to_png(data: bytes) -> bytes:
    """Decode any Pillow-readable image and re-encode it as PNG.

    Raises:
        ImageDecodeError: If the bytes are not a decodable image.
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            return encode_png(image)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise ImageDecodeError(f"cannot decode image data: {exc}") from exc


def svg_to_png(data: bytes, max_width: int = 1080) -> bytes:
    """Render SVG markup to a transparent PNG no wider than ``max_width``.

    Smaller drawings keep their natural size.

    Raises:
        ImageDecodeError: If the SVG cannot be rendered.
    """
    # cairosvg loads the native cairo library on import.
    try:
        import cairosvg
    except (ImportError, OSError) as exc:
        raise ImageDecodeError(f"SVG rendering unavailable: {exc}") from exc

    try:
        rendered = cairosvg.svg2png(bytestring=data)
    except Exception as exc:  # cairosvg raises parser-specific errors
        raise ImageDecodeError(f"cannot render SVG: {exc}") from exc

    try:
        with Image.open(io.BytesIO(rendered)) as image:
            image.load()
            if image.width > max_width:
                height = max(1, round(image.height * max_width / image.width))
                image = image.resize((max_width, height), Image.Resampling.LANCZOS)
            return encode_png(image)
    except (Image.DecompressionBombError, OSError, ValueError) as exc:
        raise ImageDecodeError(f"rendered SVG is not usable: {exc}") from exc


class PdfRasterizer(Protocol):
    """Render every page of a PDF to an image file."""

    def rasterize(self, pdf_path: Path, output_dir: Path) -> list[Path]:
        """Write one image per page into ``output_dir`` and return them in page order.

        Raises:
            ConversionError: If the PDF cannot be rasterized.
        """
        ...


class PopplerRasterizer:
    """Rasterize PDFs with poppler's ``pdftocairo`` through pdf2image."""

    def __init__(self, dpi: int = 150, *, timeout: float | None = None) -> None:
        self.dpi = dpi
        self.timeout = timeout

    def rasterize(self, pdf_path: Path, output_dir: Path) -> list[Path]:
        output_dir.mkdir(parents=True, exist_ok=True)
        try:
            pages = convert_from_path(
                str(pdf_path),
                dpi=self.dpi,
                use_pdftocairo=True,
                timeout=self.timeout,
            )
        except PDFPopplerTimeoutError as exc:
            raise ConversionError(f"PDF rasterization timed out: {exc}") from exc
        except (PDFInfoNotInstalledError, PDFPageCountError, PDFSyntaxError, OSError) as exc:
            raise ConversionError(f"PDF rasterization failed: {exc}") from exc

        written: list[Path] = []
        for number, page in enumerate(pages, start=1):
            target = output_dir / f"page-{number:04d}.png"
            try:
                page.save(target, format="PNG")
            except OSError as exc:
                raise ConversionError(f"cannot write page {number}: {exc}") from exc
            written.append(target)
        LOGGER.debug("Rasterized %s into %d page(s)", pdf_path.name, len(written))
        if not written:
            raise ConversionError("PDF produced no pages")
        return written


__all__ = [
    "encode_png",
    "normalize_to_png",
    "svg_to_png",
    "PdfRasterizer",
    "PopplerRasterizer",
]
