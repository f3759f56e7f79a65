from enum import Enum


class UserRole(str, Enum):
    USER = "USER"
    HOST = "HOST"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"


ADMIN_ROLES = frozenset({UserRole.ADMIN, UserRole.SUPER_ADMIN})


class HostStatus(str, Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    REJECTED = "REJECTED"
    SUSPENDED = "SUSPENDED"


class HostType(str, Enum):
    FARM = "FARM"
    HOSTEL = "HOSTEL"
    HOMESTAY = "HOMESTAY"
    NGO = "NGO"
    ECO_VILLAGE = "ECO_VILLAGE"
    OTHER = "OTHER"


class OpportunityStatus(str, Enum):
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    ADMIN_PAUSED = "ADMIN_PAUSED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"
    FILLED = "FILLED"
    ARCHIVED = "ARCHIVED"
    DELETED = "DELETED"


class OpportunityType(str, Enum):
    FARMING = "FARMING"
    HOSPITALITY = "HOSPITALITY"
    CONSERVATION = "CONSERVATION"
    EDUCATION = "EDUCATION"
    COMMUNITY = "COMMUNITY"
    CREATIVE = "CREATIVE"
    OTHER = "OTHER"


class ApplicationStatus(str, Enum):
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    REVIEWING = "REVIEWING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"
    WITHDRAWN = "WITHDRAWN"


class EmailType(str, Enum):
    TRANSACTIONAL = "transactional"
    IMPORTANT = "important"
    MARKETING = "marketing"


class EmailProvider(str, Enum):
    BREVO = "brevo"
    MAILERLITE = "mailerlite"
