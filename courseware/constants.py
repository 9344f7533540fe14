"""
courseware.constants — Shared Constants
========================================

Single source of truth for user-facing validation messages and upload
limits.  Import from here instead of repeating string literals in
services and schemas.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Validation messages (field → [message, ...] maps)
# ---------------------------------------------------------------------------
MSG_BLANK = "can't be blank"
MSG_NOT_POSITIVE = "must be greater than 0"
MSG_INVALID = "is invalid"
MSG_TOO_LARGE = "is too large"

# ---------------------------------------------------------------------------
# Blob storage
# ---------------------------------------------------------------------------
DEFAULT_MAX_UPLOAD_BYTES = 25 * 1024 * 1024  # 25 MB
MATERIALS_KIND = "materials"
COPY_CHUNK_SIZE = 64 * 1024

# Attempts per blob when cleaning up after a subtree delete
BLOB_DELETE_ATTEMPTS = 3
