"""Shared test fixtures for sqla-ability tests."""

from __future__ import annotations

import enum
from dataclasses import dataclass

import pytest
from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Table, create_engine
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    Session,
    mapped_column,
    relationship,
    sessionmaker,
)

# ---------------------------------------------------------------------------
# Test models
# ---------------------------------------------------------------------------


class Base(DeclarativeBase):
    pass


class PostStatus(enum.IntEnum):
    active = 1
    archived = 2


class Tier(enum.IntEnum):
    free = 1
    pro = 2
    enterprise = 3


class Organization(Base):
    __tablename__ = "organizations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    parent_id: Mapped[int | None] = mapped_column(ForeignKey("organizations.id"), nullable=True)

    parent: Mapped[Organization | None] = relationship(
        "Organization", remote_side="Organization.id", uselist=False
    )
    users: Mapped[list[User]] = relationship("User", back_populates="organization")


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    role: Mapped[str] = mapped_column(String(50), default="viewer")
    org_id: Mapped[int | None] = mapped_column(ForeignKey("organizations.id"), nullable=True)

    organization: Mapped[Organization | None] = relationship(
        "Organization", back_populates="users"
    )
    posts: Mapped[list[Post]] = relationship("Post", back_populates="author")


post_tags = Table(
    "post_tags",
    Base.metadata,
    Column("post_id", Integer, ForeignKey("posts.id"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id"), primary_key=True),
)


class Post(Base):
    __tablename__ = "posts"
    __enum_attributes__ = {"status": {"active": 1, "archived": 2}}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(200))
    is_published: Mapped[bool] = mapped_column(Boolean, default=False)
    status: Mapped[int | None] = mapped_column(Integer, nullable=True, default=1)
    locked: Mapped[bool] = mapped_column(Boolean, default=False)
    author_id: Mapped[int] = mapped_column(ForeignKey("users.id"))

    author: Mapped[User] = relationship("User", back_populates="posts")
    tags: Mapped[list[Tag]] = relationship("Tag", secondary=post_tags, back_populates="posts")
    comments: Mapped[list[Comment]] = relationship("Comment", back_populates="post")


class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(50))
    visibility: Mapped[str] = mapped_column(String(20), default="public")

    posts: Mapped[list[Post]] = relationship("Post", secondary=post_tags, back_populates="tags")


class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    body: Mapped[str] = mapped_column(String(200))
    flagged: Mapped[bool] = mapped_column(Boolean, default=False)
    post_id: Mapped[int] = mapped_column(ForeignKey("posts.id"))

    post: Mapped[Post] = relationship("Post", back_populates="comments")


class Document(Base):
    __tablename__ = "documents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    owner_id: Mapped[int] = mapped_column(Integer)
    locked: Mapped[bool] = mapped_column(Boolean, default=False)
    tier: Mapped[int] = mapped_column(Integer, default=1)


# ---------------------------------------------------------------------------
# MockActor — satisfies ActorLike protocol
# ---------------------------------------------------------------------------


@dataclass
class MockActor:
    """Test actor that satisfies ActorLike protocol."""

    id: int | str
    role: str = "viewer"
    org_id: int | None = None


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def engine():
    """Create an in-memory SQLite engine with all tables."""
    eng = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(eng)
    return eng


@pytest.fixture()
def session(engine):
    """Provide a transactional session that rolls back after each test."""
    factory = sessionmaker(bind=engine)
    sess = factory()
    try:
        yield sess
    finally:
        sess.rollback()
        sess.close()


def seed(session: Session) -> dict[str, list]:
    """Insert the shared sample rows and flush.

    Organizations: Acme (1), Globex (2, child of Acme).
    Users: Alice and Bob (Acme), Charlie (no org), Dana (Globex).
    Posts:
        1 published, active, Alice, tag python, comments 1-3 (3 flagged)
        2 draft, archived, locked, Alice, tag internal
        3 published, active, Bob, tags python + internal, comment 4
        4 draft, active, Charlie
        5 published, archived, Dana
    Documents: (id, owner, locked, tier) (1, 5, no, free), (2, 5, yes, pro),
        (3, 6, no, free), (4, 6, yes, enterprise).
    """
    acme = Organization(id=1, name="Acme Corp")
    globex = Organization(id=2, name="Globex", parent_id=1)
    session.add_all([acme, globex])

    alice = User(id=1, name="Alice", role="admin", org_id=1)
    bob = User(id=2, name="Bob", role="editor", org_id=1)
    charlie = User(id=3, name="Charlie", role="viewer", org_id=None)
    dana = User(id=4, name="Dana", role="editor", org_id=2)
    session.add_all([alice, bob, charlie, dana])

    python = Tag(id=1, name="python", visibility="public")
    internal = Tag(id=2, name="internal", visibility="private")
    session.add_all([python, internal])

    post1 = Post(id=1, title="Public Post", is_published=True, status=1, author_id=1)
    post2 = Post(id=2, title="Draft Post", is_published=False, status=2, locked=True, author_id=1)
    post3 = Post(id=3, title="Bob's Post", is_published=True, status=1, author_id=2)
    post4 = Post(id=4, title="Charlie's Draft", is_published=False, status=1, author_id=3)
    post5 = Post(id=5, title="Dana's Post", is_published=True, status=2, author_id=4)
    post1.tags.append(python)
    post2.tags.append(internal)
    post3.tags.extend([python, internal])
    session.add_all([post1, post2, post3, post4, post5])

    comments = [
        Comment(id=1, body="nice", flagged=False, post_id=1),
        Comment(id=2, body="agreed", flagged=False, post_id=1),
        Comment(id=3, body="spam", flagged=True, post_id=1),
        Comment(id=4, body="thanks", flagged=False, post_id=3),
    ]
    session.add_all(comments)

    documents = [
        Document(id=1, owner_id=5, locked=False, tier=1),
        Document(id=2, owner_id=5, locked=True, tier=2),
        Document(id=3, owner_id=6, locked=False, tier=1),
        Document(id=4, owner_id=6, locked=True, tier=3),
    ]
    session.add_all(documents)

    session.flush()
    return {
        "organizations": [acme, globex],
        "users": [alice, bob, charlie, dana],
        "tags": [python, internal],
        "posts": [post1, post2, post3, post4, post5],
        "comments": comments,
        "documents": documents,
    }


@pytest.fixture()
def sample_data(session: Session) -> dict[str, list]:
    """Seed the database with sample data for testing."""
    return seed(session)
