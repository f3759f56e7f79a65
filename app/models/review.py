from datetime import datetime
from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


class ReviewBase(SQLModel):
    id_host: int = Field(foreign_key="host.id_host", index=True)
    id_opportunity: int | None = Field(
        default=None, foreign_key="opportunity.id_opportunity"
    )
    rating: int = Field(ge=1, le=5)
    comment: str = Field(max_length=2000)


class Review(ReviewBase, table=True):
    __table_args__ = (
        UniqueConstraint(
            "id_author", "id_host", "id_opportunity", name="uq_review_author_target"
        ),
    )

    id_review: int | None = Field(default=None, primary_key=True)
    id_author: int = Field(foreign_key="user.id_user", index=True)
    is_public: bool = Field(default=True)
    date_creation: datetime = Field(default_factory=datetime.now)


class ReviewCreate(ReviewBase):
    pass


class ReviewPublic(ReviewBase):
    id_review: int
    id_author: int
    date_creation: datetime
