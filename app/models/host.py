from datetime import datetime
from typing import TYPE_CHECKING
from sqlmodel import SQLModel, Field, Relationship
from .enums import HostStatus, HostType

if TYPE_CHECKING:
    from app.models.user import User
    from app.models.opportunity import Opportunity


class HostBase(SQLModel):
    name: str = Field(index=True, max_length=100)
    description: str = Field(default="", max_length=3000)
    host_type: HostType = Field(default=HostType.OTHER)
    city: str = Field(max_length=50)
    district: str | None = Field(default=None, max_length=50)
    contact_email: str | None = None
    contact_phone: str | None = Field(default=None, max_length=30)


class Host(HostBase, table=True):
    id_host: int | None = Field(default=None, primary_key=True)
    id_user: int = Field(foreign_key="user.id_user", unique=True)
    slug: str = Field(unique=True, index=True, max_length=120)
    status: HostStatus = Field(default=HostStatus.PENDING, index=True)
    status_note: str | None = None
    verified: bool = Field(default=False)
    verified_at: datetime | None = None
    date_creation: datetime = Field(default_factory=datetime.now)
    user: "User" = Relationship(back_populates="host_profile")
    opportunities: list["Opportunity"] = Relationship(back_populates="host")
    status_history: list["HostStatusHistory"] = Relationship(
        back_populates="host",
        sa_relationship_kwargs={"order_by": "HostStatusHistory.id_history"},
    )


class HostStatusHistory(SQLModel, table=True):
    id_history: int | None = Field(default=None, primary_key=True)
    id_host: int = Field(foreign_key="host.id_host", index=True)
    status: HostStatus
    status_note: str | None = None
    changed_by: int = Field(foreign_key="user.id_user")
    changed_at: datetime = Field(default_factory=datetime.now)
    host: Host = Relationship(back_populates="status_history")


class HostCreate(HostBase):
    pass


class HostPublic(HostBase):
    id_host: int
    id_user: int
    slug: str
    status: HostStatus
    verified: bool
    date_creation: datetime


class HostUpdate(SQLModel):
    name: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=3000)
    host_type: HostType | None = None
    city: str | None = Field(default=None, max_length=50)
    district: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None


class HostStatusUpdate(SQLModel):
    status: HostStatus
    status_note: str | None = Field(default=None, max_length=500)


class HostAdminPublic(HostPublic):
    status_note: str | None
    verified_at: datetime | None
