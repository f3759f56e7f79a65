"""Password reset request and response models."""

from pydantic import EmailStr
from sqlmodel import SQLModel, Field


class PasswordResetRequest(SQLModel):
    email: EmailStr


class PasswordResetConfirm(SQLModel):
    """Token from the reset email plus the new password."""

    token: str = Field(min_length=64, max_length=64)
    new_password: str = Field(min_length=8)


class PasswordResetResponse(SQLModel):
    message: str
