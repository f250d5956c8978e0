"""Tests for the folder library helpers."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from imagedrop.library import (
    EXPORT_FILENAME,
    LibraryError,
    delete_folder,
    export_folder,
    list_folders,
    read_folder,
    resolve_in_root,
)


def _folder(root: Path, name: str, files: dict[str, bytes], mtime: float) -> Path:
    folder = root / name
    folder.mkdir(parents=True)
    for offset, (file_name, data) in enumerate(files.items()):
        path = folder / file_name
        path.write_bytes(data)
        os.utime(path, (mtime + offset, mtime + offset))
    os.utime(folder, (mtime, mtime))
    return folder


def test_list_folders_creates_root(tmp_path: Path) -> None:
    root = tmp_path / "root"

    assert list_folders(root) == []
    assert root.is_dir()


def test_list_folders_newest_first_with_image_counts(tmp_path: Path) -> None:
    root = tmp_path / "root"
    _folder(root, "old", {"a.png": b"1", "b.JPG": b"2", "doc.pdf": b"3"}, 1_000_000)
    _folder(root, "new", {"c.jpeg": b"4"}, 2_000_000)

    summaries = list_folders(root)

    assert [summary.name for summary in summaries] == ["new", "old"]
    assert summaries[1].image_count == 2
    assert summaries[0].first_image == str(root / "new" / "c.jpeg")


def test_read_folder_returns_images_and_description(tmp_path: Path) -> None:
    root = tmp_path / "root"
    folder = _folder(
        root,
        "Invoice",
        {"first.png": b"1", "second.png": b"2", "description.txt": b"An invoice."},
        1_000_000,
    )

    contents = read_folder(folder)

    assert [entry.name for entry in contents.images] == ["second.png", "first.png"]
    assert contents.description == "An invoice."


def test_read_folder_missing_raises(tmp_path: Path) -> None:
    with pytest.raises(LibraryError):
        read_folder(tmp_path / "nope")


def test_resolve_in_root_rejects_escape(tmp_path: Path) -> None:
    root = tmp_path / "root"
    root.mkdir()

    assert resolve_in_root("Foo", root) == (root / "Foo").resolve()
    with pytest.raises(LibraryError):
        resolve_in_root("../outside", root)
    with pytest.raises(LibraryError):
        resolve_in_root(root, root)


def test_delete_folder_removes_tree(tmp_path: Path) -> None:
    root = tmp_path / "root"
    folder = _folder(root, "Foo", {"a.png": b"1"}, 1_000_000)

    delete_folder("Foo", root)

    assert not folder.exists()
    assert root.exists()


def test_delete_folder_outside_root_is_refused(tmp_path: Path) -> None:
    root = tmp_path / "root"
    root.mkdir()
    outside = tmp_path / "precious"
    outside.mkdir()

    with pytest.raises(LibraryError):
        delete_folder(outside, root)
    assert outside.exists()


def test_export_folder_writes_etcim_json(tmp_path: Path) -> None:
    root = tmp_path / "root"
    folder = _folder(root, "report", {"report 1-2.png": b"1", "report.pdf": b"2"}, 1_000_000)
    (root / EXPORT_FILENAME).write_text("stale", encoding="utf-8")

    destination = export_folder(folder, root)

    assert destination == root / "etcim.json"
    payload = json.loads(destination.read_text(encoding="utf-8"))
    assert payload["timestamp"]
    assert payload["folder"]["name"] == "report"
    assert payload["folder"]["fileCount"] == 1
    assert payload["folder"]["files"][0]["name"] == "report 1-2.png"
    assert set(payload["folder"]["files"][0]) == {"name", "path", "created"}
