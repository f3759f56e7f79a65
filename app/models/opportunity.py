from datetime import datetime
from typing import TYPE_CHECKING
from sqlmodel import SQLModel, Field, Relationship
from .enums import OpportunityStatus, OpportunityType
from .host import HostPublic
from app.core.status_rules import StatusAction

if TYPE_CHECKING:
    from app.models.host import Host


class OpportunityBase(SQLModel):
    title: str = Field(max_length=100)
    description: str = Field(max_length=5000)
    short_description: str = Field(max_length=200)
    opportunity_type: OpportunityType = Field(default=OpportunityType.OTHER)
    city: str = Field(max_length=50)
    work_hours_per_week: int = Field(default=20, ge=1, le=60)
    minimum_stay_days: int = Field(default=14, ge=1)
    max_applications: int | None = Field(default=None, ge=1)


class Opportunity(OpportunityBase, table=True):
    id_opportunity: int | None = Field(default=None, primary_key=True)
    id_host: int = Field(foreign_key="host.id_host", index=True)
    slug: str = Field(unique=True, index=True, max_length=150)
    status: OpportunityStatus = Field(default=OpportunityStatus.DRAFT, index=True)
    status_note: str | None = None
    published_at: datetime | None = None
    date_creation: datetime = Field(default_factory=datetime.now)
    date_update: datetime = Field(default_factory=datetime.now)
    host: "Host" = Relationship(back_populates="opportunities")
    status_history: list["OpportunityStatusHistory"] = Relationship(
        back_populates="opportunity",
        sa_relationship_kwargs={"order_by": "OpportunityStatusHistory.id_history"},
    )


class OpportunityStatusHistory(SQLModel, table=True):
    """Append-only audit row written on every opportunity status change."""

    id_history: int | None = Field(default=None, primary_key=True)
    id_opportunity: int = Field(foreign_key="opportunity.id_opportunity", index=True)
    status: OpportunityStatus
    reason: str | None = Field(default=None, max_length=1000)
    changed_by: int = Field(foreign_key="user.id_user")
    changed_at: datetime = Field(default_factory=datetime.now)
    opportunity: Opportunity = Relationship(back_populates="status_history")


class OpportunityCreate(OpportunityBase):
    pass


class OpportunityUpdate(SQLModel):
    title: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=5000)
    short_description: str | None = Field(default=None, max_length=200)
    opportunity_type: OpportunityType | None = None
    city: str | None = Field(default=None, max_length=50)
    work_hours_per_week: int | None = Field(default=None, ge=1, le=60)
    minimum_stay_days: int | None = Field(default=None, ge=1)
    max_applications: int | None = Field(default=None, ge=1)


class StatusHistoryPublic(SQLModel):
    status: OpportunityStatus
    reason: str | None
    changed_by: int
    changed_at: datetime


class OpportunityPublic(OpportunityBase):
    id_opportunity: int
    id_host: int
    slug: str
    status: OpportunityStatus
    status_note: str | None
    published_at: datetime | None
    date_creation: datetime
    date_update: datetime


class OpportunityDetail(OpportunityPublic):
    host: HostPublic
    status_history: list[StatusHistoryPublic] = []


class OpportunityStatusChange(SQLModel):
    """Request body for the status endpoints; status is parsed by the service."""

    status: str | None = None
    reason: str | None = Field(default=None, max_length=1000)


class OpportunityStatusResult(SQLModel):
    success: bool = True
    message: str
    opportunity: OpportunityDetail


class OpportunityStatusActions(SQLModel):
    """What the caller may do with an opportunity in its current status."""

    status: OpportunityStatus
    label: str
    description: str
    editable: bool | str
    next_allowed: list[OpportunityStatus]
    actions: list[StatusAction]
