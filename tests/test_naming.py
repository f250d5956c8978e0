"""Tests for folder and file naming rules."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from pathlib import Path

from imagedrop.organization.naming import (
    MAX_FOLDER_NAME_LENGTH,
    choose_base_name,
    file_timestamp,
    folder_timestamp,
    page_name,
    resolve_folder_name,
    sanitize_folder_name,
    synthetic_name,
)


def test_sanitize_replaces_every_illegal_character() -> None:
    assert sanitize_folder_name('a<b>c:d"e/f\\g|h?i*j') == "a_b_c_d_e_f_g_h_i_j"


def test_sanitize_strips_and_truncates() -> None:
    result = sanitize_folder_name("  " + "x" * 150 + "  ")

    assert result == "x" * MAX_FOLDER_NAME_LENGTH


def test_sanitize_treats_dot_names_as_empty() -> None:
    assert sanitize_folder_name(".") == ""
    assert sanitize_folder_name("..") == ""
    assert sanitize_folder_name("   ") == ""
    assert sanitize_folder_name(None) == ""


def test_choose_base_name_precedence() -> None:
    now = datetime(2024, 5, 1, 9, 30, 12)

    assert choose_base_name("Sunset: beach", "IMG_1", now=now) == "Sunset_ beach"
    assert choose_base_name(None, "IMG_1", now=now) == "IMG_1"
    assert choose_base_name("..", "  ", now=now) == "2024-05-01_09-30-12"


def test_folder_timestamp_format() -> None:
    assert folder_timestamp(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02_03-04-05"


def test_file_timestamp_uses_utc_milliseconds() -> None:
    moment = datetime(2024, 5, 1, 9, 30, 12, 345678, tzinfo=timezone.utc)

    assert file_timestamp(moment) == "2024-05-01T09-30-12-345"
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}-\d{3}", file_timestamp())


def test_resolve_folder_name_appends_counters(tmp_path: Path) -> None:
    created = []
    for _ in range(4):
        name = resolve_folder_name("Foo", tmp_path)
        (tmp_path / name).mkdir()
        created.append(name)

    assert created == ["Foo", "Foo 2", "Foo 3", "Foo 4"]


def test_resolve_folder_name_counts_files_as_taken(tmp_path: Path) -> None:
    (tmp_path / "Foo").write_text("not a folder", encoding="utf-8")

    assert resolve_folder_name("Foo", tmp_path) == "Foo 2"


def test_resolve_folder_name_keeps_suffixed_names_within_limit(tmp_path: Path) -> None:
    base = "y" * MAX_FOLDER_NAME_LENGTH
    (tmp_path / base).mkdir()

    name = resolve_folder_name(base, tmp_path)

    assert len(name) <= MAX_FOLDER_NAME_LENGTH
    assert name.endswith(" 2")
    assert not (tmp_path / name).exists()


def test_synthetic_and_page_names() -> None:
    stamp = "2024-05-01T09-30-12-345"

    assert synthetic_name("clipboard", stamp, ".png") == f"clipboard_{stamp}.png"
    assert page_name("report", 2, 3, real_drop=True, stamp=stamp) == "report 2-3.png"
    assert page_name("clipboard", 1, 2, real_drop=False, stamp=stamp) == f"clipboard_page_1_{stamp}.png"
