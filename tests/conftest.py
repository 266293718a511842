"""Shared fixtures: an in-memory SQLite session seeded with a small blog."""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from orm_models import Base, Comment, Post, Summary, User
from recap.capture.storage import CaptureStorage
from recap.host.sqlalchemy import SQLAlchemyHost


@pytest.fixture()
def session():
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    engine.dispose()


@pytest.fixture()
def host(session: Session) -> SQLAlchemyHost:
    return SQLAlchemyHost(session)


@pytest.fixture()
def blog(session: Session) -> SimpleNamespace:
    """A user with one post, two comments and a post summary, committed."""
    user = User(name="John Doe", email="john@example.com", password_digest="s3cret-hash")
    post = Post(title="First Post", content="This is my first post.")
    comment1 = Comment(content="Great post!")
    comment2 = Comment(content="Thanks for sharing.")
    post.comments.extend([comment1, comment2])
    post.summary = Summary(content="x")
    user.posts.append(post)
    session.add(user)
    session.commit()
    return SimpleNamespace(user=user, post=post, comment1=comment1, comment2=comment2)


@pytest.fixture()
def storage(tmp_path: Path) -> CaptureStorage:
    """Return a CaptureStorage rooted in a temporary directory."""
    return CaptureStorage(tmp_path / "captures", project_path=tmp_path)
