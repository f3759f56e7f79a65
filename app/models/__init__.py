"""Import every table model so SQLModel.metadata and relationships are complete."""

from app.models.user import User
from app.models.host import Host, HostStatusHistory
from app.models.opportunity import Opportunity, OpportunityStatusHistory
from app.models.application import Application
from app.models.review import Review
from app.models.image import Image
from app.models.email_usage import EmailUsage
from app.models.bookmark import Bookmark

__all__ = [
    "User",
    "Host",
    "HostStatusHistory",
    "Opportunity",
    "OpportunityStatusHistory",
    "Application",
    "Review",
    "Image",
    "EmailUsage",
    "Bookmark",
]
