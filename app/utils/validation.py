import re
import unicodedata
from typing import TypeVar
from app.exceptions import AppException

T = TypeVar("T")


def ensure_id(id_value: T | None, resource_name: str = "Resource") -> T:
    """
    Ensure that an ID value is not None.

    Args:
        id_value: The ID value to check.
        resource_name: The name of the resource for the error message.

    Returns:
        The non-None ID value.

    Raises:
        AppException: If the ID value is None.
    """
    if id_value is None:
        raise AppException(f"{resource_name} ID is missing")
    return id_value


def mask_email(email: str) -> str:
    """
    Mask an email address for safe logging.
    Example: 'user@example.com' -> 'u***r@example.com'
    """
    try:
        user_part, domain = email.split("@")
        if len(user_part) <= 2:
            return f"{user_part[0]}***@{domain}"
        return f"{user_part[0]}***{user_part[-1]}@{domain}"
    except Exception:
        return "***@***.***"


def slugify(text: str, max_length: int = 100) -> str:
    """
    Build a lowercase, hyphen-separated ASCII slug.

    Characters without an ASCII form (e.g. Chinese place names) are dropped;
    an empty result falls back to "item".

    Example: 'Organic Farm in Hualien!' -> 'organic-farm-in-hualien'
    """
    normalized = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode()
    slug = re.sub(r"[^a-z0-9]+", "-", normalized.lower()).strip("-")
    return slug[:max_length].rstrip("-") or "item"


def has_text(value: str | None) -> bool:
    """True when `value` contains at least one non-whitespace character."""
    return bool(value and value.strip())
