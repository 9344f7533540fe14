"""
courseware.engine.policy — Role-based authorization predicates
===============================================================

Pure functions, no database access.  Each service asks one of these
before touching the store, so the whole policy can be read (and tested)
in one place.
"""

from __future__ import annotations

from courseware.database.models import Role

__all__ = ["can_grant", "can_revoke", "is_valid_group_pair"]

GRANTING_ROLES: frozenset[Role] = frozenset({Role.STAFF, Role.ADMIN})


def can_grant(role: str) -> bool:
    """Staff and admins may award manual XP."""
    return role in GRANTING_ROLES


def can_revoke(role: str, is_owner: bool) -> bool:
    """Admins may revoke any award; everyone else only their own."""
    return role == Role.ADMIN or is_owner


def is_valid_group_pair(
    leader_id: int, leader_role: str, student_id: int, student_role: str
) -> bool:
    """A group pairs a staff leader with a different, student-role user."""
    return (
        leader_role == Role.STAFF
        and student_role == Role.STUDENT
        and leader_id != student_id
    )
