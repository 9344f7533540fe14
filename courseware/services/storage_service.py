"""
courseware.services.storage_service — Local blob storage
=========================================================

Stores uploaded file bytes under ``<upload_dir>/<environment>/<kind>/``
and hands back a relative *address* (``materials/notes.pdf``) that the
database records.  Public URLs are ``<url_prefix>/<environment>/<address>``,
e.g. ``/uploads/prod/materials/notes.pdf``.

Deletion is idempotent: deleting an address that is already gone returns
``False`` instead of raising, so cleanup can be retried safely.
"""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import IO

from courseware.config import CoursewareConfig
from courseware.constants import COPY_CHUNK_SIZE, DEFAULT_MAX_UPLOAD_BYTES

logger = logging.getLogger(__name__)


class BlobTooLargeError(ValueError):
    """Raised when an upload exceeds the configured size limit."""


class FileUpload:
    """An uploaded file: original filename plus a readable binary stream."""

    __slots__ = ("filename", "stream", "content_type")

    def __init__(
        self, filename: str, stream: IO[bytes], content_type: str | None = None
    ) -> None:
        self.filename = filename
        self.stream = stream
        self.content_type = content_type

    def __repr__(self) -> str:
        return f"<FileUpload filename={self.filename!r} type={self.content_type!r}>"


class LocalBlobStore:
    """Filesystem-backed blob store namespaced by environment."""

    def __init__(
        self,
        root: str | Path,
        environment: str,
        *,
        url_prefix: str = "/uploads",
        max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ) -> None:
        self.root = Path(root)
        self.environment = environment
        self.url_prefix = url_prefix.rstrip("/")
        self.max_bytes = max_bytes

    @classmethod
    def from_config(cls, cfg: CoursewareConfig) -> LocalBlobStore:
        return cls(
            cfg.upload_dir,
            cfg.environment,
            url_prefix=cfg.upload_url_prefix,
            max_bytes=cfg.max_upload_bytes,
        )

    @property
    def base_dir(self) -> Path:
        return self.root / self.environment

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def put(self, kind: str, upload: FileUpload) -> str:
        """Copy *upload* into ``<kind>/`` and return its address.

        The original filename is kept when free; otherwise a short random
        suffix is inserted before the extension.

        Raises
        ------
        BlobTooLargeError
            If the stream is larger than ``max_bytes``.  No partial file
            is left behind.
        ValueError
            If the filename is empty after stripping directory parts.
        """
        filename = Path(upload.filename.replace("\\", "/")).name
        if filename in ("", ".", ".."):
            raise ValueError(f"Invalid upload filename: {upload.filename!r}")

        directory = self.base_dir / kind
        directory.mkdir(parents=True, exist_ok=True)
        dest, fh = self._open_unique(directory, filename)

        written = 0
        try:
            with fh:
                while chunk := upload.stream.read(COPY_CHUNK_SIZE):
                    written += len(chunk)
                    if written > self.max_bytes:
                        raise BlobTooLargeError(
                            f"File too large: more than {self.max_bytes} bytes"
                        )
                    fh.write(chunk)
        except Exception:
            dest.unlink(missing_ok=True)
            raise

        address = f"{kind}/{dest.name}"
        logger.info("Stored blob %s (%d bytes)", address, written)
        return address

    @staticmethod
    def _open_unique(directory: Path, filename: str) -> tuple[Path, IO[bytes]]:
        candidate = directory / filename
        while True:
            try:
                return candidate, open(candidate, "xb")
            except FileExistsError:
                stem, suffix = Path(filename).stem, Path(filename).suffix
                candidate = directory / f"{stem}-{uuid.uuid4().hex[:8]}{suffix}"

    def delete(self, address: str) -> bool:
        """Remove the blob at *address*.

        Returns True if the file existed and was deleted, False if it was
        already absent.
        """
        path = self._resolve(address)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        logger.info("Deleted blob %s", address)
        return True

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def exists(self, address: str) -> bool:
        return self._resolve(address).is_file()

    def path(self, address: str) -> Path:
        return self._resolve(address)

    def url(self, address: str) -> str:
        return f"{self.url_prefix}/{self.environment}/{address}"

    def _resolve(self, address: str) -> Path:
        base = self.base_dir.resolve()
        path = (base / address).resolve()
        if not path.is_relative_to(base):
            raise ValueError(f"Blob address escapes storage root: {address!r}")
        return path
