# src/commung/models/message.py
"""Models for direct messages and group chats."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from commung.db.ids import new_id
from commung.db.session import Base
from commung.db.time import UTCDateTime, utcnow


class DirectMessage(Base):
    """A 1:1 message between two profiles of the same community.

    Read state lives on the row itself since there is exactly one reader.
    """

    __tablename__ = "direct_message"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    community_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("community.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sender_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profile.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    receiver_id: Mapped[str] = mapped_column(
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

    read_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, index=True)
    deleted_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    sender = relationship("Profile", foreign_keys=[sender_id], lazy="joined")
    images = relationship(
        "Image",
        secondary="direct_message_image",
        order_by="DirectMessageImage.position",
        viewonly=True,
    )


class DirectMessageImage(Base):
    __tablename__ = "direct_message_image"

    message_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("direct_message.id", ondelete="CASCADE"),
        primary_key=True,
    )
    image_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("image.id", ondelete="CASCADE"),
        primary_key=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class DirectMessageReaction(Base):
    __tablename__ = "direct_message_reaction"
    __table_args__ = (UniqueConstraint("message_id", "profile_id", "emoji"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    message_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("direct_message.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    profile_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profile.id", ondelete="CASCADE"),
        nullable=False,
    )
    emoji: Mapped[str] = mapped_column(String(32), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    profile = relationship("Profile", lazy="joined")


class GroupChat(Base):
    """A named conversation between several profiles."""

    __tablename__ = "group_chat"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    community_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("community.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    created_by_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profile.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)
    deleted_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    memberships: Mapped[list[GroupChatMembership]] = relationship(
        "GroupChatMembership",
        cascade="all, delete-orphan",
        order_by="GroupChatMembership.created_at",
    )


class GroupChatMembership(Base):
    __tablename__ = "group_chat_membership"
    __table_args__ = (UniqueConstraint("group_chat_id", "profile_id"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    group_chat_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("group_chat.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    profile_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profile.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    added_by_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profile.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    profile = relationship("Profile", foreign_keys=[profile_id], lazy="joined")


class GroupChatMessage(Base):
    __tablename__ = "group_chat_message"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    group_chat_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("group_chat.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sender_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profile.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_by_user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("user_account.id"),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, index=True)
    deleted_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    sender = relationship("Profile", lazy="joined")
    images = relationship(
        "Image",
        secondary="group_chat_message_image",
        order_by="GroupChatMessageImage.position",
        viewonly=True,
    )


class GroupChatMessageImage(Base):
    __tablename__ = "group_chat_message_image"

    message_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("group_chat_message.id", ondelete="CASCADE"),
        primary_key=True,
    )
    image_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("image.id", ondelete="CASCADE"),
        primary_key=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class GroupChatMessageReaction(Base):
    __tablename__ = "group_chat_message_reaction"
    __table_args__ = (UniqueConstraint("message_id", "profile_id", "emoji"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    message_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("group_chat_message.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    profile_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profile.id", ondelete="CASCADE"),
        nullable=False,
    )
    emoji: Mapped[str] = mapped_column(String(32), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    profile = relationship("Profile", lazy="joined")


class GroupChatMessageRead(Base):
    """Per-participant read receipt for a group chat message."""

    __tablename__ = "group_chat_message_read"
    __table_args__ = (UniqueConstraint("message_id", "profile_id"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    message_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("group_chat_message.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    profile_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profile.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    read_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
