"""Drop pipeline: place each artifact in its folder and convert documents to pages."""

from __future__ import annotations

import logging
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable, Optional

from imagedrop.classification import DescriptionKind, ImageDescriber
from imagedrop.config.models import ImageDropConfig
from imagedrop.conversion import (
    ConversionError,
    DocumentConverter,
    ImageDecodeError,
    PdfRasterizer,
    normalize_to_png,
    svg_to_png,
)
from imagedrop.state import DESCRIPTION_FILENAME, FolderIndex, StateError

from .models import (
    IMAGE_EXTENSIONS,
    Artifact,
    ArtifactKind,
    BatchSummary,
    OutcomeStatus,
    ProcessingOutcome,
)
from .naming import choose_base_name, file_timestamp, page_name, resolve_folder_name, synthetic_name

LOGGER = logging.getLogger(__name__)

_DOCUMENT_LABELS = {
    ArtifactKind.PDF: ("PDF", "pages"),
    ArtifactKind.WORD: ("Word", "pages"),
    ArtifactKind.EXCEL: ("Excel", "sheets"),
    ArtifactKind.POWERPOINT: ("PowerPoint", "slides"),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DropProcessor:
    """Run dropped and captured artifacts through the organization pipeline.

    Artifacts are handled one at a time. For each one the processor picks a
    collision-free folder under the root folder, writes the original (images
    re-encoded as PNG), converts documents to a PDF and per-page PNGs when
    possible, optionally stores an AI description and finally updates the
    folder index.
    """

    def __init__(
        self,
        config: ImageDropConfig,
        *,
        index: FolderIndex,
        rasterizer: PdfRasterizer,
        converter: Optional[DocumentConverter] = None,
        describer: Optional[ImageDescriber] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.config = config
        self.root = config.storage.root_path()
        self.index = index
        self.rasterizer = rasterizer
        self.converter = converter
        self.describer = describer
        self._clock = clock

    def process_batch(self, artifacts: Iterable[Artifact]) -> BatchSummary:
        """Process artifacts sequentially and collect their outcomes."""
        summary = BatchSummary()
        for artifact in artifacts:
            summary.outcomes.append(self.process(artifact))
        LOGGER.info("Batch finished: %s", summary.summary_line())
        return summary

    def process(self, artifact: Artifact) -> ProcessingOutcome:
        """Process a single artifact.

        Unsupported extensions are skipped. Filesystem and decoding errors
        abort only this artifact and are reported as ``FAILED``.
        """
        kind = artifact.kind
        if kind is None:
            LOGGER.info("Skipping %s: unsupported file type", artifact.name)
            return ProcessingOutcome(
                artifact=artifact.name,
                status=OutcomeStatus.SKIPPED,
                message=f'File type "{artifact.suffix or artifact.name}" is not supported.',
            )

        now = self._clock()
        try:
            if kind is ArtifactKind.IMAGE:
                return self._process_image(artifact, now)
            if kind is ArtifactKind.SVG:
                return self._process_svg(artifact, now)
            return self._process_document(artifact, kind, now)
        except (OSError, ImageDecodeError, ValueError) as exc:
            LOGGER.error("Failed to process %s: %s", artifact.name, exc)
            return ProcessingOutcome(
                artifact=artifact.name,
                status=OutcomeStatus.FAILED,
                message=f"Error processing {artifact.name}: {exc}",
                reason=str(exc),
            )

    # ------------------------------------------------------------------ #
    # Per-kind handlers                                                  #
    # ------------------------------------------------------------------ #

    def _process_image(self, artifact: Artifact, now: datetime) -> ProcessingOutcome:
        png = normalize_to_png(artifact.read())
        title = self._request_text(png, DescriptionKind.TITLE)
        folder_name, folder_path = self._create_folder(title, None, now)

        if artifact.real_drop:
            file_name = f"{artifact.stem}.png"
        else:
            file_name = synthetic_name(artifact.stem, file_timestamp(now), ".png")
        (folder_path / file_name).write_bytes(png)

        described = self._write_description(folder_path, png)
        self._record(folder_path, folder_name, self._image_files(folder_path))
        return ProcessingOutcome(
            artifact=artifact.name,
            status=OutcomeStatus.SAVED,
            message=f"Saved {file_name} in {folder_name}.",
            folder_name=folder_name,
            folder_path=folder_path,
            files=[file_name],
            description_written=described,
        )

    def _process_svg(self, artifact: Artifact, now: datetime) -> ProcessingOutcome:
        data = artifact.read()
        folder_name, folder_path = self._create_folder(None, artifact.stem, now)
        stamp = file_timestamp(now)

        svg_name = artifact.name if artifact.real_drop else synthetic_name(artifact.stem, stamp, ".svg")
        (folder_path / svg_name).write_bytes(data)
        files = [svg_name]

        try:
            png = svg_to_png(data, self.config.conversion.svg_max_width)
        except ImageDecodeError as exc:
            LOGGER.warning("SVG rendering failed for %s: %s", artifact.name, exc)
            self._record(folder_path, folder_name, files)
            return ProcessingOutcome(
                artifact=artifact.name,
                status=OutcomeStatus.ORIGINAL_ONLY,
                message=f"SVG conversion failed: {exc}. Kept {svg_name}.",
                folder_name=folder_name,
                folder_path=folder_path,
                files=files,
                reason=str(exc),
            )

        png_name = f"{artifact.stem}.png" if artifact.real_drop else synthetic_name(artifact.stem, stamp, ".png")
        (folder_path / png_name).write_bytes(png)
        files.append(png_name)
        self._record(folder_path, folder_name, files)
        return ProcessingOutcome(
            artifact=artifact.name,
            status=OutcomeStatus.CONVERTED,
            message=f"SVG processed: {svg_name} + {png_name}",
            folder_name=folder_name,
            folder_path=folder_path,
            files=files,
            pages=[png_name],
        )

    def _process_document(
        self,
        artifact: Artifact,
        kind: ArtifactKind,
        now: datetime,
    ) -> ProcessingOutcome:
        data = artifact.read()
        label, unit = _DOCUMENT_LABELS[kind]
        folder_name, folder_path = self._create_folder(None, artifact.stem, now)
        stamp = file_timestamp(now)

        if artifact.real_drop:
            original_name = artifact.name
        else:
            original_name = synthetic_name(artifact.stem, stamp, artifact.suffix)
        (folder_path / original_name).write_bytes(data)
        files = [original_name]
        pages: list[str] = []

        try:
            with tempfile.TemporaryDirectory(prefix="imagedrop-") as workdir:
                work = Path(workdir)
                source = work / "input" / artifact.name
                source.parent.mkdir()
                source.write_bytes(data)

                if kind is ArtifactKind.PDF:
                    pdf_path = source
                else:
                    pdf_path = self._convert_to_pdf(source, work / "pdf")
                    pdf_name = (
                        f"{artifact.stem}.pdf"
                        if artifact.real_drop
                        else synthetic_name(artifact.stem, stamp, ".pdf")
                    )
                    shutil.copyfile(pdf_path, folder_path / pdf_name)
                    files.append(pdf_name)

                for page in self._render_pages(pdf_path, work / "pages", artifact, stamp, folder_path):
                    pages.append(page)
                    files.append(page)
        except ConversionError as exc:
            LOGGER.warning("%s conversion failed for %s: %s", label, artifact.name, exc)
            self._record(folder_path, folder_name, files)
            return ProcessingOutcome(
                artifact=artifact.name,
                status=OutcomeStatus.ORIGINAL_ONLY,
                message=f"{label} conversion failed: {exc}. Kept {original_name}.",
                folder_name=folder_name,
                folder_path=folder_path,
                files=files,
                pages=pages,
                reason=str(exc),
            )

        self._record(folder_path, folder_name, files)
        return ProcessingOutcome(
            artifact=artifact.name,
            status=OutcomeStatus.CONVERTED,
            message=f"{label} processed: {original_name} + {len(pages)} {unit}",
            folder_name=folder_name,
            folder_path=folder_path,
            files=files,
            pages=pages,
        )

    # ------------------------------------------------------------------ #
    # Helpers                                                            #
    # ------------------------------------------------------------------ #

    def _create_folder(
        self,
        title: Optional[str],
        fallback: Optional[str],
        now: datetime,
    ) -> tuple[str, Path]:
        base = choose_base_name(title, fallback, now=now.astimezone())
        self.root.mkdir(parents=True, exist_ok=True)
        folder_name = resolve_folder_name(base, self.root)
        folder_path = self.root / folder_name
        folder_path.mkdir(parents=True, exist_ok=True)
        LOGGER.debug("Placing artifact in %s", folder_path)
        return folder_name, folder_path

    def _convert_to_pdf(self, source: Path, output_dir: Path) -> Path:
        if self.converter is None:
            raise ConversionError("no document converter available")
        pdf_path = self.converter.convert_to_pdf(source, output_dir)
        if not pdf_path.exists():
            raise ConversionError("PDF was not created")
        return pdf_path

    def _render_pages(
        self,
        pdf_path: Path,
        work_dir: Path,
        artifact: Artifact,
        stamp: str,
        folder_path: Path,
    ) -> Iterable[str]:
        rendered = self.rasterizer.rasterize(pdf_path, work_dir)
        if not rendered:
            raise ConversionError("PDF produced no pages")
        total = len(rendered)
        for number, page_path in enumerate(rendered, start=1):
            try:
                png = normalize_to_png(page_path.read_bytes())
            except ImageDecodeError as exc:
                raise ConversionError(f"page {number} could not be encoded: {exc}") from exc
            name = page_name(artifact.stem, number, total, real_drop=artifact.real_drop, stamp=stamp)
            (folder_path / name).write_bytes(png)
            yield name

    def _request_text(self, png: bytes, kind: DescriptionKind) -> Optional[str]:
        if self.describer is None:
            return None
        try:
            return self.describer.describe(png, kind)
        except Exception as exc:  # describer failures never abort the pipeline
            LOGGER.warning("Image %s request failed: %s", kind.value, exc)
            return None

    def _write_description(self, folder_path: Path, png: bytes) -> bool:
        if self.describer is None:
            return False
        target = folder_path / DESCRIPTION_FILENAME
        if target.exists():
            return False
        text = self._request_text(png, DescriptionKind.DESCRIPTION)
        if not text:
            return False
        try:
            target.write_text(text, encoding="utf-8")
        except OSError as exc:
            LOGGER.warning("Could not save description for %s: %s", folder_path.name, exc)
            return False
        return True

    def _image_files(self, folder_path: Path) -> list[str]:
        return sorted(
            child.name
            for child in folder_path.iterdir()
            if child.is_file() and child.suffix.lower() in IMAGE_EXTENSIONS
        )

    def _record(self, folder_path: Path, folder_name: str, files: list[str]) -> None:
        try:
            self.index.upsert(folder_path, folder_name, files)
        except (StateError, OSError) as exc:
            LOGGER.warning("Folder index update failed for %s: %s", folder_path, exc)


__all__ = ["DropProcessor"]
