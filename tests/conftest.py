"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import io

import pytest
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from courseware.database.engine import enable_sqlite_foreign_keys
from courseware.database.models import (
    Announcement,
    Base,
    Group,
    Material,
    MaterialType,
    Point,
    Role,
    User,
)
from courseware.services.storage_service import FileUpload, LocalBlobStore


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with all Courseware tables.

    Foreign keys are switched on so ``ON DELETE CASCADE`` and the
    ``materials.parent_id`` reference behave as they do on PostgreSQL.
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def blob_store(tmp_path) -> LocalBlobStore:
    """A blob store rooted in a per-test temp dir, ``test`` environment."""
    return LocalBlobStore(tmp_path / "uploads", "test")


@pytest.fixture
def factory(db_engine, blob_store) -> Factory:
    return Factory(db_engine, blob_store)


class Factory:
    """Inserts rows directly through the ORM, bypassing the services."""

    def __init__(self, engine: Engine, store: LocalBlobStore) -> None:
        self.engine = engine
        self.store = store
        self._seq = 0

    def _save(self, row):
        with Session(self.engine, expire_on_commit=False) as session:
            session.add(row)
            session.commit()
            session.refresh(row)
            return row

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    def user(self, role: Role = Role.STUDENT, name: str | None = None) -> User:
        return self._save(User(name=name or f"user{self._next()}", role=role.value))

    def announcement(self, poster: User | None = None, **kwargs) -> Announcement:
        poster = poster or self.user(Role.STAFF)
        kwargs.setdefault("title", f"Announcement {self._next()}")
        kwargs.setdefault("content", "Some content")
        return self._save(Announcement(poster_id=poster.id, **kwargs))

    def point(
        self,
        given_by: User | None = None,
        recipient: User | None = None,
        amount: int = 100,
    ) -> Point:
        given_by = given_by or self.user(Role.STAFF)
        recipient = recipient or self.user()
        return self._save(Point(
            reason="DG XP Week 4",
            amount=amount,
            given_by_id=given_by.id,
            recipient_id=recipient.id,
        ))

    def group(self, leader: User | None = None, student: User | None = None) -> Group:
        leader = leader or self.user(Role.STAFF)
        student = student or self.user()
        return self._save(Group(leader_id=leader.id, student_id=student.id))

    def folder(self, parent: Material | None = None, name: str | None = None) -> Material:
        uploader = self.user(Role.STAFF)
        return self._save(Material(
            name=name or f"Folder {self._next()}",
            type=MaterialType.FOLDER.value,
            uploader_id=uploader.id,
            parent_id=parent.id if parent else None,
        ))

    def file(
        self,
        parent: Material,
        filename: str | None = None,
        content: bytes = b"lecture notes\n",
    ) -> Material:
        uploader = self.user(Role.STAFF)
        filename = filename or f"file{self._next()}.txt"
        address = self.store.put(
            "materials", FileUpload(filename, io.BytesIO(content), "text/plain")
        )
        return self._save(Material(
            name=filename,
            type=MaterialType.FILE.value,
            file=address,
            uploader_id=uploader.id,
            parent_id=parent.id,
        ))

    def exists(self, model, pk) -> bool:
        with Session(self.engine) as session:
            return session.get(model, pk) is not None
