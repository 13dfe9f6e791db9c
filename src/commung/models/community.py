"""SQLAlchemy models for communities (tenants), their hashtags and links."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from commung.db.ids import new_id
from commung.db.session import Base
from commung.db.time import UTCDateTime, utcnow


class Community(Base):
    """An isolated social space served at ``<slug>.<console domain>``."""

    __tablename__ = "community"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Schedule: posting is closed after ends_at and staff-only before starts_at.
    starts_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    ends_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    is_recruiting: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    recruiting_starts_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    recruiting_ends_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    minimum_birth_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    mute_new_members: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    custom_domain: Mapped[str | None] = mapped_column(Text, unique=True, nullable=True)
    banner_image_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("image.id", ondelete="SET NULL"),
        nullable=True,
    )
    owner_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("user_account.id"),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)
    deleted_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    hashtags: Mapped[list[CommunityHashtag]] = relationship(
        "CommunityHashtag",
        back_populates="community",
        cascade="all, delete-orphan",
        order_by="CommunityHashtag.tag",
    )
    banner_image = relationship("Image", lazy="joined")


class CommunityHashtag(Base):
    """A searchable tag attached to a community."""

    __tablename__ = "community_hashtag"
    __table_args__ = (UniqueConstraint("community_id", "tag"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    community_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("community.id", ondelete="CASCADE"),
        nullable=False,
    )
    tag: Mapped[str] = mapped_column(Text, nullable=False)

    community: Mapped[Community] = relationship("Community", back_populates="hashtags")


class CommunityLink(Base):
    """An external link shown on a community's page; managed by the owner."""

    __tablename__ = "community_link"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    community_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("community.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)
    deleted_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
