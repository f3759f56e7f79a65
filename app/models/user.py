from datetime import datetime
from typing import TYPE_CHECKING
from pydantic import EmailStr
from sqlmodel import SQLModel, Field, Relationship
from .enums import UserRole, ADMIN_ROLES

if TYPE_CHECKING:
    from app.models.host import Host


class UserBase(SQLModel):
    username: str = Field(unique=True, index=True, max_length=50)
    email: str = Field(unique=True, index=True)
    name: str = Field(default="", max_length=100)


class User(UserBase, table=True):
    id_user: int | None = Field(default=None, primary_key=True)
    role: UserRole = Field(default=UserRole.USER, index=True)
    hashed_password: str
    is_active: bool = Field(default=True)
    password_reset_token: str | None = Field(default=None, index=True, max_length=64)
    password_reset_expires: datetime | None = None
    date_creation: datetime = Field(default_factory=datetime.now)
    host_profile: "Host" = Relationship(
        back_populates="user", sa_relationship_kwargs={"uselist": False}
    )

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES


class UserCreate(UserBase):
    email: EmailStr
    password: str = Field(min_length=8)


class UserPublic(UserBase):
    id_user: int
    role: UserRole
    date_creation: datetime


class UserUpdate(SQLModel):
    email: EmailStr | None = None
    name: str | None = Field(default=None, max_length=100)
    password: str | None = Field(default=None, min_length=8)
