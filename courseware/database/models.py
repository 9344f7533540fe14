"""
courseware.database.models — SQLAlchemy 2.0 Data Models
========================================================

Tables:
- users          — Platform members with a fixed role
- announcements  — Course-wide notices, optionally pinned
- points         — Manual XP awards given by staff to students
- groups         — Active leader assignment, one row per student
- materials      — Folder/file tree of course materials (adjacency list)
"""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Courseware ORM models."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class Role(enum.StrEnum):
    """Closed set of user roles supplied by the identity provider."""
    STUDENT = "student"
    STAFF = "staff"
    ADMIN = "admin"


class MaterialType(enum.StrEnum):
    FOLDER = "folder"
    FILE = "file"


# ---------------------------------------------------------------------------
# Users — one row per platform member
# ---------------------------------------------------------------------------
class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    role: Mapped[str] = mapped_column(
        String(10), nullable=False, default=Role.STUDENT.value
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint(
            "role IN ('student', 'staff', 'admin')", name="ck_users_role"
        ),
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} name={self.name!r} role={self.role}>"


# ---------------------------------------------------------------------------
# Announcements
# ---------------------------------------------------------------------------
class Announcement(Base):
    __tablename__ = "announcements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    pinned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    poster_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    poster: Mapped[User] = relationship()

    def __repr__(self) -> str:
        return f"<Announcement id={self.id} title={self.title!r} pinned={self.pinned}>"


# ---------------------------------------------------------------------------
# Points — manual XP awards
# ---------------------------------------------------------------------------
class Point(Base):
    __tablename__ = "points"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reason: Mapped[str] = mapped_column(Text, nullable=False, default="")
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    given_by_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    recipient_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    given_by: Mapped[User] = relationship(foreign_keys=[given_by_id])
    recipient: Mapped[User] = relationship(foreign_keys=[recipient_id])

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_points_amount_positive"),
        Index("ix_points_recipient", "recipient_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Point id={self.id} amount={self.amount} "
            f"from={self.given_by_id} to={self.recipient_id}>"
        )


# ---------------------------------------------------------------------------
# Groups — student → leader, keyed by student
# ---------------------------------------------------------------------------
class Group(Base):
    """Current leader of a student.

    ``student_id`` is the primary key, so the store itself refuses a second
    active leader for the same student.
    """
    __tablename__ = "groups"

    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    leader_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    leader: Mapped[User] = relationship(foreign_keys=[leader_id])
    student: Mapped[User] = relationship(foreign_keys=[student_id])

    __table_args__ = (
        CheckConstraint("leader_id <> student_id", name="ck_groups_not_self"),
        Index("ix_groups_leader", "leader_id"),
    )

    def __repr__(self) -> str:
        return f"<Group leader={self.leader_id} student={self.student_id}>"


# ---------------------------------------------------------------------------
# Materials — folder/file tree
# ---------------------------------------------------------------------------
class Material(Base):
    """A node in the course material tree.

    Roots have ``parent_id IS NULL``.  Only folders may be parents; files
    carry the blob address in ``file``.
    """
    __tablename__ = "materials"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    type: Mapped[str] = mapped_column(
        String(10), nullable=False, default=MaterialType.FOLDER.value
    )
    file: Mapped[str | None] = mapped_column(String(512), default=None)
    uploader_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    parent_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("materials.id", ondelete="CASCADE"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    uploader: Mapped[User] = relationship()

    __table_args__ = (
        CheckConstraint(
            "(type = 'folder' AND file IS NULL) OR (type = 'file' AND file IS NOT NULL)",
            name="ck_materials_file_matches_type",
        ),
        Index("ix_materials_parent", "parent_id"),
    )

    @property
    def is_folder(self) -> bool:
        return self.type == MaterialType.FOLDER

    def __repr__(self) -> str:
        return (
            f"<Material id={self.id} name={self.name!r} "
            f"type={self.type} parent={self.parent_id}>"
        )
