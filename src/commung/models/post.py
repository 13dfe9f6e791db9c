# src/commung/models/post.py
"""SQLAlchemy models for timeline posts and what hangs off them."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from commung.db.ids import new_id
from commung.db.session import Base
from commung.db.time import UTCDateTime, utcnow


class Post(Base):
    """A timeline post or a reply to one.

    Replies form a tree: ``in_reply_to_id`` points at the direct parent,
    ``root_post_id`` at the top-level post of the thread, and ``depth`` counts
    the hops from the root (0 for top-level posts).
    """

    __tablename__ = "post"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    community_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("community.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profile.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_by_user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("user_account.id"),
        nullable=False,
    )

    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    content_warning: Mapped[str | None] = mapped_column(Text, nullable=True)
    announcement: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    in_reply_to_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("post.id"),
        nullable=True,
        index=True,
    )
    root_post_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("post.id"),
        nullable=True,
        index=True,
    )
    depth: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)
    deleted_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    author = relationship("Profile", lazy="joined")
    images = relationship(
        "Image",
        secondary="post_image",
        order_by="PostImage.position",
        viewonly=True,
    )


class PostImage(Base):
    """Ordered association between a post and its attached images."""

    __tablename__ = "post_image"

    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("post.id", ondelete="CASCADE"),
        primary_key=True,
    )
    image_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("image.id", ondelete="CASCADE"),
        primary_key=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class PostReaction(Base):
    """An emoji reaction; one per (post, profile, emoji)."""

    __tablename__ = "post_reaction"
    __table_args__ = (UniqueConstraint("post_id", "profile_id", "emoji"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    profile_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profile.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("user_account.id"), nullable=False)
    emoji: Mapped[str] = mapped_column(String(32), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    profile = relationship("Profile", lazy="joined")


class Mention(Base):
    """Records that a post mentions a profile via ``@username``."""

    __tablename__ = "mention"
    __table_args__ = (UniqueConstraint("post_id", "profile_id"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
    )
    profile_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profile.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)


class PostBookmark(Base):
    """A post saved by a profile for later."""

    __tablename__ = "post_bookmark"
    __table_args__ = (UniqueConstraint("profile_id", "post_id"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    profile_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profile.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    post = relationship("Post", lazy="joined")


class PostHistory(Base):
    """The state of a post before one edit."""

    __tablename__ = "post_history"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    content_warning: Mapped[str | None] = mapped_column(Text, nullable=True)
    edited_by_profile_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profile.id", ondelete="CASCADE"),
        nullable=False,
    )
    edited_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    edited_by = relationship("Profile", lazy="joined")
    images = relationship(
        "Image",
        secondary="post_history_image",
        order_by="PostHistoryImage.position",
        viewonly=True,
    )


class PostHistoryImage(Base):
    __tablename__ = "post_history_image"

    post_history_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("post_history.id", ondelete="CASCADE"),
        primary_key=True,
    )
    image_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("image.id", ondelete="CASCADE"),
        primary_key=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
