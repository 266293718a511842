"""End-to-end tests for CaptureManager: take, restore and flush through disk."""

from __future__ import annotations

import json
from datetime import timedelta
from pathlib import Path

import pytest

from orm_models import Color, Comment, User, Widget
from recap.capture.manager import CaptureManager
from recap.capture.storage import CaptureStorage
from recap.core.config import CaptureConfig, RecapConfig
from recap.core.errors import IdentityMismatch, InvalidInput, StorageError


@pytest.fixture()
def manager(host, storage: CaptureStorage, tmp_path: Path) -> CaptureManager:
    return CaptureManager(host, storage, project_path=tmp_path)


class TestTake:
    def test_capture_with_associations(self, manager: CaptureManager, blog):
        path = manager.take(blog.user, associations=["posts", {"posts": "comments"}])

        assert path.parent == manager.storage.root / "user"
        content = json.loads(path.read_text())
        assert len(content["associations"]["posts"]) == 1
        assert len(content["associations"]["posts"][0]["associations"]["comments"]) == 2

    def test_datetimes_written_as_iso(self, manager: CaptureManager, blog):
        path = manager.take(blog.user)
        created_at = json.loads(path.read_text())["attributes"]["created_at"]
        assert created_at == blog.user.created_at.isoformat()

    def test_invalid_name_rejected_before_capture(self, manager: CaptureManager, blog):
        with pytest.raises(StorageError):
            manager.take(blog.user, name="../../etc/passwd")
        assert manager.list_captures() == []

    def test_non_mapped_object(self, manager: CaptureManager):
        with pytest.raises(InvalidInput):
            manager.take({"id": 1})

    def test_redaction_from_config(self, host, storage: CaptureStorage, blog):
        config = RecapConfig(capture=CaptureConfig(redact_sensitive=True))
        manager = CaptureManager(host, storage, config=config)

        path = manager.take(blog.user)
        assert json.loads(path.read_text())["attributes"]["password_digest"] == "<REDACTED>"


class TestRestore:
    def test_restore_with_merge(self, manager: CaptureManager, session, blog):
        path = manager.take(blog.user, associations=["posts", {"posts": "comments"}])

        blog.post.title = "updated title"
        new_comment = Comment(content="Another comment")
        blog.post.comments.append(new_comment)
        session.commit()

        manager.restore(blog.user, path, merge=True)

        assert blog.user.name == "John Doe"
        assert blog.post.title == "First Post"
        assert len(blog.post.comments) == 3
        assert session.get(Comment, new_comment.id) is not None

    def test_restore_coerces_datetimes(self, manager: CaptureManager, session, blog):
        original = blog.user.created_at
        path = manager.take(blog.user)
        blog.user.created_at = original - timedelta(days=400)
        session.commit()

        manager.restore(blog.user, path)

        assert session.get(User, blog.user.id).created_at == original

    def test_restore_enum_interval_and_binary(self, manager: CaptureManager, session):
        widget = Widget(name="gear", color=Color.RED, ttl=timedelta(days=1, seconds=30), blob=b"\x00\xffab")
        session.add(widget)
        session.commit()

        path = manager.take(widget)
        stored = json.loads(path.read_text())["attributes"]
        assert stored["color"] == "RED"
        assert stored["ttl"] == 86430.0
        assert stored["blob"] == "AP9hYg=="

        widget.color = Color.GREEN
        widget.ttl = timedelta(minutes=5)
        widget.blob = b"changed"
        session.commit()

        manager.restore(widget, path)

        session.expire_all()
        restored = session.get(Widget, widget.id)
        assert restored.color is Color.RED
        assert restored.ttl == timedelta(days=1, seconds=30)
        assert restored.blob == b"\x00\xffab"

    def test_restore_other_record(self, manager: CaptureManager, session, blog):
        path = manager.take(blog.user)
        other = User(name="Someone Else")
        session.add(other)
        session.commit()

        with pytest.raises(IdentityMismatch):
            manager.restore(other, path)
        assert other.name == "Someone Else"

    def test_restore_missing_file(self, manager: CaptureManager, blog, tmp_path: Path):
        with pytest.raises(StorageError):
            manager.restore(blog.user, tmp_path / "missing.json")


class TestFlush:
    def test_flush_namespace(self, manager: CaptureManager, blog):
        manager.take(blog.user, name="one")
        manager.take(blog.user, name="two")

        report = manager.flush("user")

        assert report.ok
        assert len(report.deleted) == 2
        assert manager.list_captures("user") == []

    def test_flush_missing_namespace_does_not_raise(self, manager: CaptureManager):
        report = manager.flush("nothing_here")
        assert report.error is not None
