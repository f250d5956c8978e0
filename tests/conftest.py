"""Shared fixtures and fakes for the ImageDrop test suite."""

from __future__ import annotations

import io
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

import pytest
from PIL import Image

from imagedrop.classification import DescriptionKind
from imagedrop.config import ImageDropConfig
from imagedrop.conversion import ConversionError
from imagedrop.organization import DropProcessor, folder_timestamp
from imagedrop.state import FolderIndex

FIXED_NOW = datetime(2024, 5, 1, 9, 30, 12, 345000, tzinfo=timezone.utc)
FIXED_STAMP = "2024-05-01T09-30-12-345"
FIXED_FOLDER = folder_timestamp(FIXED_NOW.astimezone())


def png_bytes(size: tuple[int, int] = (4, 3), color: str = "red", fmt: str = "PNG") -> bytes:
    buffer = io.BytesIO()
    mode = "RGB" if fmt == "JPEG" else "RGBA"
    Image.new(mode, size, color).save(buffer, format=fmt)
    return buffer.getvalue()


class FakeRasterizer:
    """Writes ``pages`` small PNGs for any PDF."""

    def __init__(self, pages: int = 3) -> None:
        self.pages = pages
        self.calls: list[Path] = []

    def rasterize(self, pdf_path: Path, output_dir: Path) -> list[Path]:
        self.calls.append(pdf_path)
        output_dir.mkdir(parents=True, exist_ok=True)
        written = []
        for number in range(1, self.pages + 1):
            target = output_dir / f"page-{number:04d}.png"
            target.write_bytes(png_bytes(color="blue"))
            written.append(target)
        return written


class FailingRasterizer:
    def rasterize(self, pdf_path: Path, output_dir: Path) -> list[Path]:
        raise ConversionError("poppler exploded")


class FakeConverter:
    """Pretends to convert Office documents by writing a stub PDF."""

    def __init__(self) -> None:
        self.calls: list[Path] = []

    def convert_to_pdf(self, source: Path, output_dir: Path) -> Path:
        self.calls.append(source)
        output_dir.mkdir(parents=True, exist_ok=True)
        produced = output_dir / f"{source.stem}.pdf"
        produced.write_bytes(b"%PDF-1.4 stub")
        return produced


class FailingConverter:
    def convert_to_pdf(self, source: Path, output_dir: Path) -> Path:
        raise ConversionError("conversion timed out after 30s")


class FakeDescriber:
    """Returns canned text and records every request."""

    def __init__(self, title: str = "Invoice", description: str = "An invoice.") -> None:
        self.title = title
        self.description = description
        self.calls: list[DescriptionKind] = []

    def describe(self, image: bytes, kind: DescriptionKind) -> str:
        self.calls.append(kind)
        return self.title if kind is DescriptionKind.TITLE else self.description


class BrokenDescriber:
    def describe(self, image: bytes, kind: DescriptionKind) -> str:
        raise RuntimeError("service unavailable")


@pytest.fixture()
def config(tmp_path: Path) -> ImageDropConfig:
    return ImageDropConfig.model_validate(
        {
            "storage": {
                "root_folder": str(tmp_path / "root"),
                "data_dir": str(tmp_path / "data"),
            }
        }
    )


@pytest.fixture()
def index(config: ImageDropConfig) -> FolderIndex:
    return FolderIndex(config.storage.data_path())


@pytest.fixture()
def make_processor(config: ImageDropConfig, index: FolderIndex) -> Callable[..., DropProcessor]:
    def factory(**overrides) -> DropProcessor:
        options = {
            "index": index,
            "rasterizer": FakeRasterizer(),
            "converter": None,
            "describer": None,
            "clock": lambda: FIXED_NOW,
        }
        options.update(overrides)
        return DropProcessor(config, **options)

    return factory
