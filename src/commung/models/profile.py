"""SQLAlchemy model for per-community profiles."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from commung.db.ids import new_id
from commung.db.session import Base
from commung.db.time import UTCDateTime, utcnow


class Profile(Base):
    """A per-community identity, distinct from the account that owns it."""

    __tablename__ = "profile"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    community_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("community.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    # Unique among live profiles of the same community; enforced in the service layer.
    username: Mapped[str] = mapped_column(Text, nullable=False)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    picture_image_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("image.id", ondelete="SET NULL"),
        nullable=True,
    )
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_bot: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    activated_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    muted_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    muted_by_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("profile.id", ondelete="SET NULL"),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)
    deleted_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    picture = relationship("Image", lazy="joined")

    @property
    def picture_url(self) -> str | None:
        """Return the profile picture URL, if one is set."""
        return self.picture.url if self.picture is not None else None

    @property
    def is_muted(self) -> bool:
        return self.muted_at is not None
