"""Tests for directory enumeration."""

import os

import pytest

from rekotool import file_enumerator
from rekotool.file_enumerator import compile_pattern, enumerate_files


def _names(files):
    return [image.name for image in files]


def test_matches_pattern_case_insensitively(image_dir):
    files = list(enumerate_files(image_dir, "*.jpg"))

    assert sorted(_names(files)) == ["alice.jpg", "bob.JPG", "carol.jpg"]


def test_preserves_filesystem_order(image_dir):
    expected = [entry.name for entry in os.scandir(image_dir) if entry.name.lower().endswith(".jpg")]

    assert _names(enumerate_files(image_dir, "*.jpg")) == expected


def test_reports_file_sizes(image_dir):
    sizes = {image.name: image.size for image in enumerate_files(image_dir, "*.jpg")}

    assert sizes == {"alice.jpg": 7, "bob.JPG": 50, "carol.jpg": 700}


def test_directories_are_never_returned(image_dir):
    (image_dir / "folder.jpg").mkdir()

    assert "folder.jpg" not in _names(enumerate_files(image_dir, "*.jpg"))


def test_hidden_entries_are_skipped(image_dir):
    (image_dir / ".thumb.jpg").write_bytes(b"x")
    hidden = image_dir / ".cache"
    hidden.mkdir()
    (hidden / "cached.jpg").write_bytes(b"x")

    names = _names(enumerate_files(image_dir, "*.jpg", recurse=True))

    assert ".thumb.jpg" not in names
    assert "cached.jpg" not in names


def test_recurse_visits_subdirectories_after_parent(image_dir):
    nested = image_dir / "nested"
    nested.mkdir()
    (nested / "dave.jpg").write_bytes(b"dave")
    deeper = nested / "deeper"
    deeper.mkdir()
    (deeper / "erin.jpg").write_bytes(b"erin")

    flat = _names(enumerate_files(image_dir, "*.jpg"))
    recursive = _names(enumerate_files(image_dir, "*.jpg", recurse=True))

    assert "dave.jpg" not in flat
    assert recursive[:3] == flat
    assert recursive[3:] == ["dave.jpg", "erin.jpg"]


def test_inaccessible_directory_is_skipped(image_dir, monkeypatch):
    locked = image_dir / "locked"
    locked.mkdir()
    (locked / "secret.jpg").write_bytes(b"x")
    real_scandir = os.scandir

    def scandir(path):
        if os.fspath(path) == os.fspath(locked):
            raise PermissionError(13, "Permission denied", os.fspath(path))
        return real_scandir(path)

    monkeypatch.setattr(file_enumerator.os, "scandir", scandir)

    names = _names(enumerate_files(image_dir, "*.jpg", recurse=True))

    assert sorted(names) == ["alice.jpg", "bob.JPG", "carol.jpg"]


def test_missing_directory_yields_nothing(tmp_path):
    assert list(enumerate_files(tmp_path / "missing", "*")) == []


def test_simple_wildcards():
    assert compile_pattern("img_??.jpg").fullmatch("IMG_01.JPG")
    assert not compile_pattern("img_??.jpg").fullmatch("img_1.jpg")
    assert compile_pattern("*").fullmatch("anything.png")
    assert compile_pattern("[a].jpg").fullmatch("[A].jpg")
    assert not compile_pattern("[a].jpg").fullmatch("a.jpg")
    assert not compile_pattern("*.jpg").fullmatch("photo.jpg.txt")


def _deny_read(monkeypatch, denied):
    real_access = os.access

    def access(path, mode, *args, **kwargs):
        if os.fspath(path) == os.fspath(denied) and mode & os.R_OK:
            return False
        return real_access(path, mode, *args, **kwargs)

    monkeypatch.setattr(file_enumerator.os, "access", access)


def test_unreadable_file_is_skipped(image_dir, monkeypatch):
    _deny_read(monkeypatch, image_dir / "bob.JPG")

    names = _names(enumerate_files(image_dir, "*.jpg"))

    assert sorted(names) == ["alice.jpg", "carol.jpg"]


@pytest.mark.skipif(not hasattr(os, "geteuid") or os.geteuid() == 0,
                    reason="file permissions are not enforced for root")
def test_file_without_read_permission_is_skipped(image_dir):
    locked = image_dir / "locked.jpg"
    locked.write_bytes(b"x")
    locked.chmod(0)
    try:
        names = _names(enumerate_files(image_dir, "*.jpg"))
    finally:
        locked.chmod(0o644)

    assert "locked.jpg" not in names
    assert len(names) == 3
