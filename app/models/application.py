from datetime import date, datetime
from typing import TYPE_CHECKING
from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field, Relationship
from .enums import ApplicationStatus

if TYPE_CHECKING:
    from app.models.opportunity import Opportunity


class ApplicationBase(SQLModel):
    message: str = Field(max_length=3000)
    start_date: date
    end_date: date | None = None
    duration_days: int = Field(ge=1)


class Application(ApplicationBase, table=True):
    __table_args__ = (
        UniqueConstraint(
            "id_applicant", "id_opportunity", name="uq_application_applicant_opportunity"
        ),
    )

    id_application: int | None = Field(default=None, primary_key=True)
    id_applicant: int = Field(foreign_key="user.id_user", index=True)
    id_opportunity: int = Field(foreign_key="opportunity.id_opportunity", index=True)
    id_host: int = Field(foreign_key="host.id_host", index=True)
    status: ApplicationStatus = Field(default=ApplicationStatus.PENDING, index=True)
    status_note: str | None = None
    date_creation: datetime = Field(default_factory=datetime.now)
    date_update: datetime = Field(default_factory=datetime.now)

    # Review details (ACCEPTED / REJECTED / REVIEWING)
    reviewed_by: int | None = Field(default=None, foreign_key="user.id_user")
    reviewed_at: datetime | None = None
    review_notes: str | None = None

    # Confirmation details (CONFIRMED)
    confirmed_by: int | None = Field(default=None, foreign_key="user.id_user")
    confirmed_at: datetime | None = None

    # Cancellation details (CANCELLED / WITHDRAWN)
    cancelled_by: int | None = Field(default=None, foreign_key="user.id_user")
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    cancellation_initiated_by: str | None = Field(default=None, max_length=10)

    # Completion details (COMPLETED)
    completed_at: datetime | None = None

    opportunity: "Opportunity" = Relationship()


class ApplicationCreate(ApplicationBase):
    id_opportunity: int
    submit: bool = True


class ApplicationPublic(ApplicationBase):
    id_application: int
    id_applicant: int
    id_opportunity: int
    id_host: int
    status: ApplicationStatus
    status_note: str | None
    date_creation: datetime
    date_update: datetime
    reviewed_by: int | None
    reviewed_at: datetime | None
    review_notes: str | None
    confirmed_by: int | None
    confirmed_at: datetime | None
    cancelled_by: int | None
    cancelled_at: datetime | None
    cancellation_reason: str | None
    cancellation_initiated_by: str | None
    completed_at: datetime | None


class ApplicationStatusChange(SQLModel):
    status: str | None = None
    note: str | None = Field(default=None, max_length=1000)
