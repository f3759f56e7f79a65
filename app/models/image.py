from datetime import datetime
from sqlmodel import SQLModel, Field


class ImageBase(SQLModel):
    alt_text: str | None = Field(default=None, max_length=200)


class Image(ImageBase, table=True):
    id_image: int | None = Field(default=None, primary_key=True)
    id_owner: int = Field(foreign_key="user.id_user", index=True)
    object_name: str = Field(unique=True, max_length=255)
    content_type: str = Field(max_length=100)
    size: int
    date_creation: datetime = Field(default_factory=datetime.now)


class ImagePublic(ImageBase):
    id_image: int
    id_owner: int
    content_type: str
    size: int
    date_creation: datetime
    url: str | None = None
