"""Image metadata service; bytes live in the MinIO images bucket."""

import uuid
from typing import BinaryIO
from sqlmodel import Session

from app.core.config import get_settings
from app.exceptions import InsufficientPermissionsError, ValidationError
from app.models.image import Image, ImagePublic
from app.models.user import User
from app.services.storage import storage_service
from app.services.utils import get_or_404
from app.utils.validation import ensure_id

ALLOWED_CONTENT_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}


def upload_image(
    session: Session,
    owner: User,
    file_data: BinaryIO,
    content_type: str | None,
    size: int,
    alt_text: str | None = None,
) -> Image:
    """
    Store an uploaded image and record its metadata.

    The object key is generated (`<uuid>.<ext>`); client file names are never
    used as keys.

    Raises:
        ValidationError: If the type is not an accepted image type or the file
            is empty or too large.
    """
    extension = ALLOWED_CONTENT_TYPES.get(content_type or "")
    if extension is None:
        raise ValidationError(
            f"Unsupported image type: {content_type}", field="file"
        )
    if size <= 0:
        raise ValidationError("Uploaded file is empty", field="file")
    if size > get_settings().MAX_IMAGE_SIZE_BYTES:
        raise ValidationError("Uploaded file is too large", field="file")

    object_name = storage_service.upload_file(
        file_data, f"{uuid.uuid4().hex}.{extension}", content_type or "", size
    )
    image = Image(
        id_owner=ensure_id(owner.id_user, "User"),
        object_name=object_name,
        content_type=content_type or "",
        size=size,
        alt_text=alt_text,
    )
    session.add(image)
    session.commit()
    session.refresh(image)
    return image


def get_image(session: Session, image_id: int) -> Image:
    return get_or_404(session, Image, image_id, "Image")


def to_image_public(image: Image) -> ImagePublic:
    return ImagePublic.model_validate(
        image, update={"url": storage_service.get_presigned_url(image.object_name)}
    )


def delete_image(session: Session, image_id: int, user: User) -> None:
    """
    Remove the stored object and its metadata (owner or admin).

    Raises:
        NotFoundError: If the image does not exist.
        InsufficientPermissionsError: If the caller is neither owner nor admin.
    """
    image = get_image(session, image_id)
    if image.id_owner != user.id_user and not user.is_admin:
        raise InsufficientPermissionsError("You cannot delete this image")
    storage_service.delete_file(image.object_name)
    session.delete(image)
    session.commit()
