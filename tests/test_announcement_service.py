"""
tests/test_announcement_service.py — Announcement CRUD Tests
=============================================================
"""

from __future__ import annotations

from courseware.database.models import Announcement, Role
from courseware.services import announcement_service
from courseware.services.results import Failure


class TestCreateAnnouncement:
    def test_create_valid(self, db_engine, factory):
        poster = factory.user()
        result = announcement_service.create_announcement(
            db_engine, poster, {"title": "Test", "content": "Some content"}
        )
        assert result.ok
        assert result.value.title == "Test"
        assert result.value.content == "Some content"
        assert result.value.pinned is False
        assert result.value.poster_id == poster.id

    def test_create_ignores_pinned_flag(self, db_engine, factory):
        poster = factory.user(Role.STAFF)
        result = announcement_service.create_announcement(
            db_engine, poster, {"title": "Test", "content": "", "pinned": True}
        )
        assert result.ok
        assert result.value.pinned is False

    def test_create_blank_title(self, db_engine, factory):
        poster = factory.user()
        result = announcement_service.create_announcement(
            db_engine, poster, {"title": "", "content": "Some content"}
        )
        assert not result.ok
        assert result.errors == {"title": ["can't be blank"]}
        assert not factory.exists(Announcement, 1)

    def test_create_missing_title(self, db_engine, factory):
        result = announcement_service.create_announcement(
            db_engine, factory.user(), {"content": "Some content"}
        )
        assert result.errors == {"title": ["can't be blank"]}

    def test_whitespace_title_is_blank(self, db_engine, factory):
        result = announcement_service.create_announcement(
            db_engine, factory.user(), {"title": "   ", "content": ""}
        )
        assert result.errors == {"title": ["can't be blank"]}


class TestGetAnnouncement:
    def test_get_valid(self, db_engine, factory):
        announcement = factory.announcement()
        result = announcement_service.get_announcement(db_engine, announcement.id)
        assert result.ok
        assert result.value.id == announcement.id
        assert result.value.title == announcement.title

    def test_get_not_found(self, db_engine):
        result = announcement_service.get_announcement(db_engine, 255)
        assert result.failure == Failure.NOT_FOUND
        assert result.errors == {}

    def test_list_pinned_first(self, db_engine, factory):
        first = factory.announcement()
        pinned = factory.announcement(pinned=True)
        last = factory.announcement()
        ids = [a.id for a in announcement_service.list_announcements(db_engine)]
        assert ids == [pinned.id, last.id, first.id]


class TestEditAnnouncement:
    def test_edit_valid(self, db_engine, factory):
        announcement = factory.announcement()
        result = announcement_service.edit_announcement(
            db_engine, announcement.id, {"title": "New title", "pinned": True}
        )
        assert result.ok
        assert result.value.title == "New title"
        assert result.value.pinned is True
        assert result.value.content == announcement.content

    def test_edit_persists(self, db_engine, factory):
        announcement = factory.announcement()
        announcement_service.edit_announcement(
            db_engine, announcement.id, {"content": "Updated"}
        )
        fetched = announcement_service.get_announcement(db_engine, announcement.id)
        assert fetched.value.content == "Updated"

    def test_edit_invalid(self, db_engine, factory):
        announcement = factory.announcement()
        result = announcement_service.edit_announcement(
            db_engine, announcement.id, {"title": ""}
        )
        assert result.errors == {"title": ["can't be blank"]}
        fetched = announcement_service.get_announcement(db_engine, announcement.id)
        assert fetched.value.title == announcement.title

    def test_edit_not_found(self, db_engine):
        assert announcement_service.edit_announcement(db_engine, 255, {}).failure == (
            Failure.NOT_FOUND
        )
        assert announcement_service.edit_announcement(
            db_engine, 255, {"title": ""}
        ).failure == Failure.NOT_FOUND


class TestDeleteAnnouncement:
    def test_delete_valid(self, db_engine, factory):
        announcement = factory.announcement()
        result = announcement_service.delete_announcement(db_engine, announcement.id)
        assert result.ok
        assert not factory.exists(Announcement, announcement.id)

    def test_delete_not_found(self, db_engine):
        result = announcement_service.delete_announcement(db_engine, 255)
        assert result.failure == Failure.NOT_FOUND
