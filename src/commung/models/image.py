"""SQLAlchemy model for uploaded images."""

from datetime import datetime

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from commung.core.settings import settings
from commung.db.ids import new_id
from commung.db.session import Base
from commung.db.time import UTCDateTime, utcnow


class Image(Base):
    """An image stored on disk under ``settings.upload_dir``."""

    __tablename__ = "image"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    uploader_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("user_account.id", ondelete="SET NULL"),
        nullable=True,
    )
    # Original client filename; ``key`` is the name on disk.
    filename: Mapped[str] = mapped_column(Text, nullable=False)
    key: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    content_type: Mapped[str] = mapped_column(Text, nullable=False)
    size_bytes: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    deleted_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    @property
    def url(self) -> str:
        """Return the public URL the file is served from."""
        return f"{settings.upload_url_prefix.rstrip('/')}/{self.key}"
