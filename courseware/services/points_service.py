"""
courseware.services.points_service — Manual XP ledger
======================================================

Staff and admins award experience points to students by hand (discussion
group participation, bonus tasks).  Each award is its own row; there is no
cap and no uniqueness across awards.

Revocation is a hard delete, allowed for the awarding user or any admin.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select

from courseware.database.engine import get_session
from courseware.database.models import Point, User
from courseware.engine.policy import can_grant, can_revoke
from courseware.schemas import PointParams, changeset
from courseware.services.results import Failure, Result

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


def give_manual_xp(
    engine: Engine, given_by: User, recipient: User, params: dict[str, Any]
) -> Result[Point]:
    """Award ``params["amount"]`` XP to *recipient* on behalf of *given_by*.

    Privileges are checked before the amount, so a student always gets
    ``insufficient_privileges``.
    """
    if not can_grant(given_by.role):
        logger.warning(
            "User %d (%s) tried to give manual XP", given_by.id, given_by.role
        )
        return Result.fail(Failure.INSUFFICIENT_PRIVILEGES)

    data, errors = changeset(PointParams, params)
    if errors:
        return Result.invalid(errors)

    with get_session(engine) as session:
        point = Point(
            reason=data.reason,
            amount=data.amount,
            given_by_id=given_by.id,
            recipient_id=recipient.id,
        )
        session.add(point)
        session.flush()
        session.refresh(point)

    logger.info(
        "Manual XP %d → user %d by user %d (%s)",
        point.amount, recipient.id, given_by.id, point.reason,
    )
    return Result.success(point)


def delete_manual_xp(engine: Engine, actor: User, point_id: int) -> Result[Point]:
    """Revoke a manual award."""
    with get_session(engine) as session:
        point = session.get(Point, point_id)
        if point is None:
            return Result.fail(Failure.NOT_FOUND)

        if not can_revoke(actor.role, actor.id == point.given_by_id):
            logger.warning(
                "User %d (%s) tried to revoke point %d given by user %d",
                actor.id, actor.role, point_id, point.given_by_id,
            )
            return Result.fail(Failure.INSUFFICIENT_PRIVILEGES)

        session.delete(point)

    logger.info("Point %d revoked by user %d", point_id, actor.id)
    return Result.success(point)


def list_points_for(engine: Engine, recipient: User) -> list[Point]:
    with get_session(engine) as session:
        return list(session.scalars(
            select(Point).where(Point.recipient_id == recipient.id).order_by(Point.id)
        ).all())


def total_manual_xp(engine: Engine, recipient: User) -> int:
    """Sum of all manual awards currently held by *recipient*."""
    with get_session(engine) as session:
        total = session.scalar(
            select(func.coalesce(func.sum(Point.amount), 0)).where(
                Point.recipient_id == recipient.id
            )
        )
    return int(total or 0)
