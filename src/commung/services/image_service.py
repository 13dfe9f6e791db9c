"""Image upload handling.

Files are stored under ``settings.upload_dir`` and served as static files
from ``settings.upload_url_prefix``.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from pathlib import Path

from sqlalchemy.orm import Session

from commung.core.constants import IMAGE_EXTENSIONS
from commung.core.exceptions import BadRequest, NotFound
from commung.core.settings import settings
from commung.models import Image, User
from commung.services.validation import validate_image_upload

logger = logging.getLogger(__name__)


def upload_dir() -> Path:
    """Return the upload directory, creating it if needed."""
    path = Path(settings.upload_dir)
    path.mkdir(parents=True, exist_ok=True)
    return path


async def save_upload(
    db: Session,
    uploader: User,
    filename: str | None,
    content: bytes,
    content_type: str | None,
) -> Image:
    """Validate and persist an uploaded image.

    Raises:
        BadRequest: If the type is not an allowed image type or the file is too large.
    """
    try:
        normalized_type = validate_image_upload(content_type, len(content))
    except ValueError as exc:
        raise BadRequest(str(exc)) from exc

    key = f"{uuid.uuid4().hex}{IMAGE_EXTENSIONS[normalized_type]}"
    dest = upload_dir() / key
    # Offload blocking file I/O to a thread to avoid stalling the event loop
    await asyncio.to_thread(dest.write_bytes, content)

    image = Image(
        uploader_id=uploader.id,
        filename=filename or key,
        key=key,
        content_type=normalized_type,
        size_bytes=len(content),
    )
    db.add(image)
    db.commit()
    db.refresh(image)
    logger.info("Stored image %s (%d bytes) for user %s", image.id, image.size_bytes, uploader.id)
    return image


def require_images(db: Session, image_ids: list[str]) -> list[Image]:
    """Return the images for ``image_ids`` in the given order.

    Raises:
        NotFound: If any id does not name a live image.
    """
    if not image_ids:
        return []
    unique_ids = list(dict.fromkeys(image_ids))
    images = (
        db.query(Image)
        .filter(Image.id.in_(unique_ids), Image.deleted_at.is_(None))
        .all()
    )
    by_id = {image.id: image for image in images}
    if len(by_id) != len(unique_ids):
        raise NotFound("일부 이미지를 찾을 수 없습니다")
    return [by_id[image_id] for image_id in unique_ids]
