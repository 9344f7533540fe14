"""
courseware.services.group_service — Discussion group assignments
=================================================================

A student belongs to at most one staff-led group at a time.  The
``groups`` table is keyed by ``student_id``, so assigning a new leader
*replaces* the student's row instead of adding a second one.

The replace (delete old row, insert new row) runs in one transaction.  If
a concurrent reassignment of the same student commits first, our insert
trips the primary key; the whole replace is then retried against the
fresh state, and the last writer wins.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from courseware.database.models import Group, User
from courseware.engine.policy import is_valid_group_pair
from courseware.services.results import Failure, Result

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)

# Replace attempts before a key conflict is treated as unexpected
REPLACE_ATTEMPTS = 3


def assign_group(engine: Engine, leader: User, student: User) -> Result[Group]:
    """Make *leader* the only leader of *student*.

    Both users are re-read from the store; a missing user, a non-staff
    leader, a non-student student or self-assignment yields
    :attr:`Failure.INVALID`.
    """
    for attempt in range(1, REPLACE_ATTEMPTS + 1):
        with Session(engine, expire_on_commit=False) as session:
            leader_row = session.get(User, leader.id)
            student_row = session.get(User, student.id)
            if (
                leader_row is None
                or student_row is None
                or not is_valid_group_pair(
                    leader_row.id, leader_row.role, student_row.id, student_row.role
                )
            ):
                return Result.fail(Failure.INVALID)

            try:
                session.execute(
                    delete(Group).where(Group.student_id == student_row.id)
                )
                group = Group(leader_id=leader_row.id, student_id=student_row.id)
                session.add(group)
                session.commit()
            except IntegrityError:
                session.rollback()
                if attempt == REPLACE_ATTEMPTS:
                    raise
                logger.info(
                    "Concurrent reassignment of student %d, retrying (%d/%d)",
                    student_row.id, attempt, REPLACE_ATTEMPTS,
                )
                continue

            session.refresh(group)
            logger.info(
                "Student %d assigned to leader %d", student_row.id, leader_row.id
            )
            return Result.success(group)


def get_group(engine: Engine, student: User) -> Group | None:
    """Current assignment of *student*, or None."""
    with Session(engine, expire_on_commit=False) as session:
        return session.get(Group, student.id)


def list_students_by_leader(engine: Engine, leader: User) -> list[Group]:
    """All groups currently led by *leader*, with ``student`` loaded."""
    with Session(engine, expire_on_commit=False) as session:
        return list(session.scalars(
            select(Group)
            .options(selectinload(Group.student))
            .where(Group.leader_id == leader.id)
        ).all())
