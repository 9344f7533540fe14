"""
courseware.config — YAML Configuration Loader
==============================================

Reads ``config.yaml`` for **infrastructure-only** settings: which
environment namespace blobs are written under, where the local blob store
lives on disk, and how uploaded files are addressed publicly.  Database
credentials stay in ``DATABASE_URL`` (see :mod:`courseware.database.engine`).

Usage::

    from courseware.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.environment)       # "dev"
    print(cfg.upload_dir)        # PosixPath('uploads')
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from courseware.constants import DEFAULT_MAX_UPLOAD_BYTES


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class CoursewareConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Namespace for blob paths (dev / test / prod)
    environment: str

    # Blob storage
    upload_dir: Path
    upload_url_prefix: str = "/uploads"
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> CoursewareConfig:
    """Read *path* and return a :class:`CoursewareConfig` instance.

    ``COURSEWARE_UPLOAD_DIR`` in the environment overrides ``upload_dir``
    (useful when the uploads directory is a mounted volume).

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    upload_dir = os.getenv("COURSEWARE_UPLOAD_DIR") or raw["upload_dir"]

    return CoursewareConfig(
        environment=str(raw["environment"]),
        upload_dir=Path(upload_dir),
        upload_url_prefix=str(raw.get("upload_url_prefix", "/uploads")).rstrip("/"),
        max_upload_bytes=int(raw.get("max_upload_bytes", DEFAULT_MAX_UPLOAD_BYTES)),
    )
