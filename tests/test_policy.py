"""
tests/test_policy.py — Authorization Predicate Tests
=====================================================
"""

from __future__ import annotations

import pytest

from courseware.database.models import Role
from courseware.engine.policy import can_grant, can_revoke, is_valid_group_pair


class TestCanGrant:
    @pytest.mark.parametrize(
        ("role", "expected"),
        [(Role.STUDENT, False), (Role.STAFF, True), (Role.ADMIN, True)],
    )
    def test_roles(self, role, expected):
        assert can_grant(role) is expected

    def test_accepts_plain_strings(self):
        assert can_grant("staff") is True
        assert can_grant("student") is False


class TestCanRevoke:
    def test_admin_revokes_anything(self):
        assert can_revoke(Role.ADMIN, is_owner=False) is True

    def test_owner_revokes_own(self):
        assert can_revoke(Role.STAFF, is_owner=True) is True

    @pytest.mark.parametrize("role", [Role.STAFF, Role.STUDENT])
    def test_non_owner_refused(self, role):
        assert can_revoke(role, is_owner=False) is False


class TestGroupPair:
    def test_staff_leads_student(self):
        assert is_valid_group_pair(1, Role.STAFF, 2, Role.STUDENT) is True

    @pytest.mark.parametrize(
        ("leader_role", "student_role"),
        [
            (Role.STUDENT, Role.STUDENT),
            (Role.STUDENT, Role.STAFF),
            (Role.STAFF, Role.STAFF),
            (Role.ADMIN, Role.STUDENT),
        ],
    )
    def test_wrong_roles(self, leader_role, student_role):
        assert is_valid_group_pair(1, leader_role, 2, student_role) is False

    def test_self_assignment(self):
        assert is_valid_group_pair(7, Role.STAFF, 7, Role.STUDENT) is False
