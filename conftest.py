"""Shared fixtures for the rekotool tests."""

from pathlib import Path

import pytest

from rekotool.rekognition_service import FaceMatch


class FakeRekognitionService:
    """In-memory stand-in for RekognitionService that records every call."""

    def __init__(self, faces=None, matches=None, fail_on=None):
        self.faces = faces or {}
        self.matches = matches or {}
        self.fail_on = fail_on
        self.calls = []
        self.payloads = {}
        self.sources = []
        self._collections = set()

    def ensure_collection(self, collection_id):
        self.calls.append(("ensure_collection", collection_id))
        if collection_id in self._collections:
            return False
        self._collections.add(collection_id)
        return True

    def _receive(self, operation, collection_id, source):
        name = Path(source.stream.name).name
        self.calls.append((operation, collection_id, name))
        self.sources.append(source)
        if name == self.fail_on:
            raise RuntimeError(f"remote failure for {name}")
        self.payloads[name] = bytes(source.readall())
        return name

    def index_face(self, collection_id, source):
        name = self._receive("index_face", collection_id, source)
        return self.faces.get(name)

    def search_face(self, collection_id, source):
        name = self._receive("search_face", collection_id, source)
        match = self.matches.get(name)
        return FaceMatch(*match) if match else None


@pytest.fixture
def fake_service():
    return FakeRekognitionService()


@pytest.fixture
def image_dir(tmp_path):
    """Directory with three *.jpg images (one upper-case) and one text file."""
    folder = tmp_path / "images"
    folder.mkdir()
    (folder / "alice.jpg").write_bytes(b"\xff\xd8alice")
    (folder / "bob.JPG").write_bytes(b"\xff\xd8bob" * 10)
    (folder / "carol.jpg").write_bytes(b"\xff\xd8carol" * 100)
    (folder / "notes.txt").write_text("not an image")
    return folder
