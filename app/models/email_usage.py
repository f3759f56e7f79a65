"""Per-provider daily email counter used for rate limiting."""

from datetime import date, datetime
from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field
from .enums import EmailProvider


class EmailUsage(SQLModel, table=True):
    __tablename__ = "email_usage"
    __table_args__ = (
        UniqueConstraint("provider", "usage_date", name="uq_email_usage_provider_date"),
    )

    id_usage: int | None = Field(default=None, primary_key=True)
    provider: EmailProvider = Field(index=True)
    usage_date: date
    count: int = Field(default=0)
    last_reset: datetime = Field(default_factory=datetime.now)
