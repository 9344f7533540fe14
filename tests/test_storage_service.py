"""
tests/test_storage_service.py — Local Blob Store Tests
=======================================================
"""

from __future__ import annotations

import io

import pytest

from courseware.services.storage_service import (
    BlobTooLargeError,
    FileUpload,
    LocalBlobStore,
)


def _upload(filename: str, content: bytes = b"data") -> FileUpload:
    return FileUpload(filename, io.BytesIO(content))


class TestPut:
    def test_address_and_url(self, blob_store):
        address = blob_store.put("materials", _upload("upload.txt"))
        assert address == "materials/upload.txt"
        assert blob_store.url(address) == "/uploads/test/materials/upload.txt"
        assert (blob_store.root / "test" / "materials" / "upload.txt").read_bytes() == b"data"

    def test_collision_gets_suffix(self, blob_store):
        first = blob_store.put("materials", _upload("slides.pdf", b"one"))
        second = blob_store.put("materials", _upload("slides.pdf", b"two"))
        assert first != second
        assert second.startswith("materials/slides-")
        assert second.endswith(".pdf")
        assert blob_store.path(first).read_bytes() == b"one"

    def test_directory_parts_stripped(self, blob_store):
        address = blob_store.put("materials", _upload("../../etc/passwd"))
        assert address == "materials/passwd"
        windows = blob_store.put("materials", _upload("C:\\Users\\me\\notes.txt"))
        assert windows == "materials/notes.txt"

    def test_empty_filename_rejected(self, blob_store):
        with pytest.raises(ValueError):
            blob_store.put("materials", _upload(""))

    def test_size_limit(self, tmp_path):
        store = LocalBlobStore(tmp_path, "test", max_bytes=3)
        with pytest.raises(BlobTooLargeError):
            store.put("materials", _upload("big.bin", b"12345"))
        assert list((tmp_path / "test" / "materials").iterdir()) == []


class TestDelete:
    def test_delete_is_idempotent(self, blob_store):
        address = blob_store.put("materials", _upload("a.txt"))
        assert blob_store.delete(address) is True
        assert blob_store.exists(address) is False
        assert blob_store.delete(address) is False

    def test_address_cannot_escape_root(self, blob_store):
        with pytest.raises(ValueError):
            blob_store.delete("../../outside.txt")
