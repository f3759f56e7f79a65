"""Image upload router backed by MinIO."""

from typing import Annotated
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlmodel import Session

from app.core.dependencies import get_current_user
from app.database.database import get_session
from app.models.image import ImagePublic
from app.models.user import User
from app.services import image as image_service

router = APIRouter(prefix="/images", tags=["images"])


@router.post("/", response_model=ImagePublic, status_code=status.HTTP_201_CREATED)
def upload_image(
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
    file: UploadFile = File(...),
    alt_text: str | None = Form(default=None, max_length=200),
):
    """
    Upload a JPEG, PNG, WebP or GIF image.

    Returns the stored metadata and a temporary download URL.
    """
    image = image_service.upload_image(
        session,
        current_user,
        file.file,
        file.content_type,
        file.size or 0,
        alt_text,
    )
    return image_service.to_image_public(image)


@router.get("/{image_id}", response_model=ImagePublic)
def read_image(image_id: int, session: Annotated[Session, Depends(get_session)]):
    return image_service.to_image_public(image_service.get_image(session, image_id))


@router.delete("/{image_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_image(
    image_id: int,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    image_service.delete_image(session, image_id, current_user)
