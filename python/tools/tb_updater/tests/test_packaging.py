#!/usr/bin/env python3
"""
Tests for tar.bz2 extraction.
"""

import bz2
import io
import os
import stat
from pathlib import Path

import pytest

from tb_updater.exceptions import ExtractionError
from tb_updater.packaging import TarBz2PackageHandler

from conftest import THUNDERBIRD_FILES, make_tar_bz2


@pytest.fixture
def handler() -> TarBz2PackageHandler:
    return TarBz2PackageHandler()


def test_extracts_files_with_relative_paths(handler, tb_archive, tmp_path: Path):
    dest = tmp_path / "apps"
    count = handler.extract_buffer(tb_archive, dest)

    assert count == len(THUNDERBIRD_FILES)
    for name, data in THUNDERBIRD_FILES.items():
        assert (dest / name).read_bytes() == data


def test_preserves_executable_bit(handler, tb_archive, tmp_path: Path):
    handler.extract_buffer(tb_archive, tmp_path)
    mode = (tmp_path / "thunderbird" / "thunderbird").stat().st_mode
    assert mode & stat.S_IXUSR


def test_preserves_symlinks(handler, tmp_path: Path):
    archive = make_tar_bz2(
        {"thunderbird/libxul.so": b"\x7fELF"},
        symlinks={"thunderbird/libxul-link.so": "libxul.so"},
    )
    handler.extract_buffer(archive, tmp_path)
    link = tmp_path / "thunderbird" / "libxul-link.so"
    assert link.is_symlink()
    assert os.readlink(link) == "libxul.so"


def test_overwrites_files_and_merges_directories(handler, tmp_path: Path):
    existing = tmp_path / "thunderbird" / "application.ini"
    existing.parent.mkdir()
    existing.write_text("old")
    unrelated = tmp_path / "thunderbird" / "profile.txt"
    unrelated.write_text("keep me")

    handler.extract_buffer(make_tar_bz2(THUNDERBIRD_FILES), tmp_path)

    assert existing.read_bytes() == THUNDERBIRD_FILES["thunderbird/application.ini"]
    assert unrelated.read_text() == "keep me"


def test_absolute_member_paths_land_inside_destination(handler, tmp_path: Path):
    dest = tmp_path / "dest"
    handler.extract_buffer(make_tar_bz2({"/opt/thunderbird/app.ini": b"x"}), dest)
    assert (dest / "opt" / "thunderbird" / "app.ini").read_bytes() == b"x"


def test_rejects_entries_escaping_destination(handler, tmp_path: Path):
    dest = tmp_path / "dest"
    archive = make_tar_bz2({"thunderbird/ok.txt": b"ok", "../evil.txt": b"pwned"})

    with pytest.raises(ExtractionError) as exc_info:
        handler.extract_buffer(archive, dest)

    assert exc_info.value.member == "../evil.txt"
    assert not (tmp_path / "evil.txt").exists()


def test_rejects_nested_upward_segments(handler, tmp_path: Path):
    dest = tmp_path / "dest"
    archive = make_tar_bz2({"thunderbird/../../escape.txt": b"pwned"})

    with pytest.raises(ExtractionError):
        handler.extract_buffer(archive, dest)
    assert not (tmp_path / "escape.txt").exists()


def test_rejects_hard_link_to_outside_file(handler, tmp_path: Path):
    dest = tmp_path / "dest"
    secret = tmp_path / "secret.txt"
    secret.write_text("original")
    archive = make_tar_bz2(
        {"thunderbird/h": b"overwritten"},
        hardlinks={"thunderbird/h": "../secret.txt"},
    )

    with pytest.raises(ExtractionError) as exc_info:
        handler.extract_buffer(archive, dest)

    assert exc_info.value.member == "thunderbird/h"
    assert secret.read_text() == "original"


def test_rejects_directory_symlink_to_outside(handler, tmp_path: Path):
    dest = tmp_path / "dest"
    archive = make_tar_bz2(
        {"thunderbird/out/planted.txt": b"pwned"},
        symlinks={"thunderbird/out": "../.."},
    )

    with pytest.raises(ExtractionError) as exc_info:
        handler.extract_buffer(archive, dest)

    assert exc_info.value.member == "thunderbird/out"
    assert not (tmp_path / "planted.txt").exists()


def test_rejects_absolute_symlink_target(handler, tmp_path: Path):
    dest = tmp_path / "dest"
    archive = make_tar_bz2({}, symlinks={"thunderbird/passwd": "/etc/passwd"})

    with pytest.raises(ExtractionError) as exc_info:
        handler.extract_buffer(archive, dest)

    assert exc_info.value.member == "thunderbird/passwd"
    assert not (dest / "thunderbird" / "passwd").is_symlink()


def test_rejects_non_bzip2_data(handler, tmp_path: Path):
    with pytest.raises(ExtractionError):
        handler.extract_buffer(b"this is not an archive at all", tmp_path)


def test_rejects_truncated_stream(handler, tmp_path: Path):
    archive = make_tar_bz2({"thunderbird/omni.ja": os.urandom(256 * 1024)})
    with pytest.raises(ExtractionError):
        handler.extract_buffer(archive[: len(archive) // 2], tmp_path)


def test_rejects_compressed_garbage(handler, tmp_path: Path):
    with pytest.raises(ExtractionError):
        handler.extract_buffer(bz2.compress(b"\x01" * 4096), tmp_path)


def test_reads_non_seekable_source(handler, tb_archive, tmp_path: Path):
    class OneWay(io.RawIOBase):
        def __init__(self, data):
            self._inner = io.BytesIO(data)

        def readable(self):
            return True

        def readinto(self, buffer):
            chunk = self._inner.read(min(len(buffer), 333))
            buffer[: len(chunk)] = chunk
            return len(chunk)

    handler.extract(io.BufferedReader(OneWay(tb_archive)), tmp_path)
    assert (tmp_path / "thunderbird" / "thunderbird").exists()


def test_creates_missing_destination(handler, tb_archive, tmp_path: Path):
    dest = tmp_path / "a" / "b" / "c"
    handler.extract_buffer(tb_archive, dest)
    assert (dest / "thunderbird" / "application.ini").exists()
