"""Image upload endpoint."""

from typing import Any

from fastapi import APIRouter, File, UploadFile, status

from commung.api.v1.dependencies import CurrentUserDep, SessionDep
from commung.schemas.common import DataResponse, ImageOut
from commung.services import image_service

router = APIRouter(prefix="/uploads", tags=["uploads"])


@router.post(
    "/images",
    response_model=DataResponse[ImageOut],
    status_code=status.HTTP_201_CREATED,
)
async def upload_image(
    db: SessionDep,
    user: CurrentUserDep,
    file: UploadFile = File(...),
) -> dict[str, Any]:
    """Store an uploaded JPEG, PNG, GIF or WebP image and return its id and URL."""
    content = await file.read()
    image = await image_service.save_upload(
        db,
        user,
        file.filename,
        content,
        file.content_type,
    )
    return {"data": image}
