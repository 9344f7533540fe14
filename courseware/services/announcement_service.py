"""
courseware.services.announcement_service — Announcement CRUD
=============================================================

Any user may post, edit or delete an announcement by id; authorization
for these actions belongs to the outer API layer.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import select

from courseware.database.engine import get_session
from courseware.database.models import Announcement, User
from courseware.schemas import AnnouncementParams, changeset
from courseware.services.results import Failure, Result

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "content", "pinned")


def create_announcement(
    engine: Engine, poster: User, params: dict[str, Any]
) -> Result[Announcement]:
    """Validate *params* and persist a new, unpinned announcement."""
    data, errors = changeset(AnnouncementParams, params)
    if errors:
        return Result.invalid(errors)

    with get_session(engine) as session:
        announcement = Announcement(
            title=data.title,
            content=data.content,
            pinned=False,
            poster_id=poster.id,
        )
        session.add(announcement)
        session.flush()
        session.refresh(announcement)

    logger.info("Announcement %d posted by user %d", announcement.id, poster.id)
    return Result.success(announcement)


def get_announcement(engine: Engine, announcement_id: int) -> Result[Announcement]:
    with get_session(engine) as session:
        announcement = session.get(Announcement, announcement_id)
    if announcement is None:
        return Result.fail(Failure.NOT_FOUND)
    return Result.success(announcement)


def list_announcements(engine: Engine) -> list[Announcement]:
    """All announcements, pinned first, newest first within each group."""
    with get_session(engine) as session:
        return list(session.scalars(
            select(Announcement).order_by(
                Announcement.pinned.desc(), Announcement.id.desc()
            )
        ).all())


def edit_announcement(
    engine: Engine, announcement_id: int, patch: dict[str, Any]
) -> Result[Announcement]:
    """Apply *patch* (any of title/content/pinned) to an existing announcement.

    The patched record is validated as a whole, so a blank title is
    rejected whether it was supplied or left unchanged.
    """
    with get_session(engine) as session:
        announcement = session.get(Announcement, announcement_id)
        if announcement is None:
            return Result.fail(Failure.NOT_FOUND)

        merged = {key: getattr(announcement, key) for key in EDITABLE_FIELDS}
        merged.update({k: v for k, v in patch.items() if k in EDITABLE_FIELDS})
        data, errors = changeset(AnnouncementParams, merged)
        if errors:
            return Result.invalid(errors)

        for key in EDITABLE_FIELDS:
            setattr(announcement, key, getattr(data, key))
        session.flush()
        session.refresh(announcement)

    logger.info("Announcement %d edited", announcement_id)
    return Result.success(announcement)


def delete_announcement(engine: Engine, announcement_id: int) -> Result[Announcement]:
    with get_session(engine) as session:
        announcement = session.get(Announcement, announcement_id)
        if announcement is None:
            return Result.fail(Failure.NOT_FOUND)
        session.delete(announcement)

    logger.info("Announcement %d deleted", announcement_id)
    return Result.success(announcement)
