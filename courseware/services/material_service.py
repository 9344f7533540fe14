"""
courseware.services.material_service — Course material tree
============================================================

Materials form a rooted tree stored as an adjacency list
(``materials.parent_id``).  Folders may be roots or children of another
folder; files always live inside a folder and never have children.

Deleting a node removes its whole subtree:

    1. Walk the subtree depth-first, collecting ids per depth and the blob
       address of every file node.
    2. Delete the rows deepest level first, in one transaction.
    3. After the commit, remove the collected blobs.  Each blob gets
       ``BLOB_DELETE_ATTEMPTS`` tries; failures are logged and reported
       back as orphans, which :func:`purge_blobs` can retry later.

Blob deletion is idempotent, so running step 3 twice is harmless.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from courseware.constants import (
    BLOB_DELETE_ATTEMPTS,
    MATERIALS_KIND,
    MSG_INVALID,
    MSG_TOO_LARGE,
)
from courseware.database.models import Material, MaterialType, User
from courseware.schemas import FileParams, FolderParams, changeset
from courseware.services.results import Failure, Result
from courseware.services.storage_service import BlobTooLargeError, LocalBlobStore

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DeleteSummary:
    """Outcome of a subtree delete."""

    material: Material
    deleted_ids: list[int] = field(default_factory=list)
    blobs_removed: int = 0
    orphaned_blobs: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _material_id(material: Material | int) -> int:
    return material.id if isinstance(material, Material) else int(material)


def _resolve_parent(
    session: Session, parent: Material | int
) -> tuple[Material | None, Failure | None]:
    """Load *parent* and check it can hold children."""
    row = session.get(Material, _material_id(parent))
    if row is None:
        return None, Failure.NOT_FOUND
    if not row.is_folder:
        return None, Failure.INVALID
    return row, None


def _walk_subtree(session: Session, root: Material) -> list[tuple[Material, int]]:
    """Depth-first (pre-order) list of ``(node, depth)`` under and including *root*."""
    nodes: list[tuple[Material, int]] = []
    stack: list[tuple[Material, int]] = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        nodes.append((node, depth))
        if node.is_folder:
            children = session.scalars(
                select(Material)
                .where(Material.parent_id == node.id)
                .order_by(Material.id.desc())
            ).all()
            stack.extend((child, depth + 1) for child in children)
    logger.debug("Subtree of material %d has %d nodes", root.id, len(nodes))
    return nodes


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------
def create_material_folder(
    engine: Engine,
    uploader: User,
    params: dict[str, Any],
    *,
    parent: Material | int | None = None,
) -> Result[Material]:
    """Create a folder, at the root or inside *parent*.

    *parent* must be an existing folder: a missing parent yields
    ``not_found`` and a file parent yields ``invalid``.
    """
    data, errors = changeset(FolderParams, params)
    if errors:
        return Result.invalid(errors)

    with Session(engine, expire_on_commit=False) as session:
        parent_id = None
        if parent is not None:
            parent_row, failure = _resolve_parent(session, parent)
            if failure:
                return Result.fail(failure)
            parent_id = parent_row.id

        folder = Material(
            name=data.name,
            description=data.description,
            type=MaterialType.FOLDER.value,
            uploader_id=uploader.id,
            parent_id=parent_id,
        )
        session.add(folder)
        session.commit()
        session.refresh(folder)

    logger.info("Folder %d (%r) created under %s", folder.id, folder.name, parent_id)
    return Result.success(folder)


def upload_material_file(
    engine: Engine,
    store: LocalBlobStore,
    parent: Material | int,
    uploader: User,
    params: dict[str, Any],
) -> Result[Material]:
    """Store ``params["file"]`` and create a file node under *parent*.

    The blob is written first so the row can be inserted with its address.
    If the insert fails, the blob is removed again and the error
    propagates.
    """
    data, errors = changeset(FileParams, params)
    if errors:
        return Result.invalid(errors)

    with Session(engine, expire_on_commit=False) as session:
        parent_row, failure = _resolve_parent(session, parent)
        if failure:
            return Result.fail(failure)

        try:
            address = store.put(MATERIALS_KIND, data.file)
        except BlobTooLargeError:
            return Result.invalid({"file": [MSG_TOO_LARGE]})
        except ValueError:
            return Result.invalid({"file": [MSG_INVALID]})

        material = Material(
            name=data.name,
            description=data.description,
            type=MaterialType.FILE.value,
            file=address,
            uploader_id=uploader.id,
            parent_id=parent_row.id,
        )
        try:
            session.add(material)
            session.commit()
        except Exception:
            session.rollback()
            store.delete(address)
            raise
        session.refresh(material)

    logger.info(
        "File %d (%s) uploaded to folder %d by user %d",
        material.id, address, parent_row.id, uploader.id,
    )
    return Result.success(material)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def get_material(engine: Engine, material_id: int) -> Result[Material]:
    with Session(engine, expire_on_commit=False) as session:
        material = session.get(Material, material_id)
    if material is None:
        return Result.fail(Failure.NOT_FOUND)
    return Result.success(material)


def list_children(engine: Engine, folder: Material | int) -> list[Material]:
    """Immediate children (folders and files) of *folder*; not recursive."""
    with Session(engine, expire_on_commit=False) as session:
        return list(session.scalars(
            select(Material).where(Material.parent_id == _material_id(folder))
        ).all())


def list_root_folders(engine: Engine) -> list[Material]:
    with Session(engine, expire_on_commit=False) as session:
        return list(session.scalars(
            select(Material)
            .where(Material.parent_id.is_(None))
            .order_by(Material.name)
        ).all())


def material_url(store: LocalBlobStore, material: Material) -> str | None:
    """Public URL of a file node; None for folders."""
    if material.file is None:
        return None
    return store.url(material.file)


# ---------------------------------------------------------------------------
# Deletion
# ---------------------------------------------------------------------------
def delete_material(
    engine: Engine, store: LocalBlobStore, material: Material | int
) -> Result[DeleteSummary]:
    """Delete *material* and everything below it, then clean up blobs."""
    with Session(engine, expire_on_commit=False) as session:
        root = session.get(Material, _material_id(material))
        if root is None:
            return Result.fail(Failure.NOT_FOUND)

        nodes = _walk_subtree(session, root)
        addresses = [
            node.file for node, _ in nodes
            if node.type == MaterialType.FILE and node.file
        ]
        by_depth: dict[int, list[int]] = defaultdict(list)
        for node, depth in nodes:
            by_depth[depth].append(node.id)

        for depth in sorted(by_depth, reverse=True):
            session.execute(
                delete(Material)
                .where(Material.id.in_(by_depth[depth]))
                .execution_options(synchronize_session=False)
            )
        session.commit()

    summary = DeleteSummary(
        material=root, deleted_ids=[node.id for node, _ in nodes]
    )
    summary.blobs_removed, summary.orphaned_blobs = purge_blobs(store, addresses)
    logger.info(
        "Material %d deleted (%d nodes, %d blobs removed, %d orphaned)",
        root.id, len(summary.deleted_ids), summary.blobs_removed,
        len(summary.orphaned_blobs),
    )
    return Result.success(summary)


def purge_blobs(store: LocalBlobStore, addresses: list[str]) -> tuple[int, list[str]]:
    """Delete each blob in *addresses*, retrying failures.

    Returns ``(removed_count, orphaned_addresses)``.  Blobs that were
    already absent count as neither.
    """
    removed = 0
    orphaned: list[str] = []
    for address in addresses:
        for attempt in range(1, BLOB_DELETE_ATTEMPTS + 1):
            try:
                if store.delete(address):
                    removed += 1
                break
            except OSError as exc:
                logger.warning(
                    "Failed to delete blob %s (attempt %d/%d): %s",
                    address, attempt, BLOB_DELETE_ATTEMPTS, exc,
                )
        else:
            orphaned.append(address)
    return removed, orphaned
