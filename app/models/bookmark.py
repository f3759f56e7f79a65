"""Bookmark model - link table for users' saved opportunities."""

from datetime import datetime
from sqlmodel import SQLModel, Field


class Bookmark(SQLModel, table=True):
    """Link table for user-opportunity bookmarks (many-to-many)."""

    id_user: int = Field(foreign_key="user.id_user", primary_key=True)
    id_opportunity: int = Field(
        foreign_key="opportunity.id_opportunity", primary_key=True
    )
    created_at: datetime = Field(default_factory=datetime.now)


class BookmarkState(SQLModel):
    id_opportunity: int
    is_bookmarked: bool
