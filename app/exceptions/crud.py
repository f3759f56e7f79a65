"""Exceptions raised by service-layer reads and writes."""

from app.exceptions.base import AppException


class NotFoundError(AppException):
    """Requested entity does not exist (or was logically removed)."""

    def __init__(self, resource: str, identifier: int | str):
        """
        Parameters:
            resource (str): Entity type that was looked up, e.g. "Opportunity".
            identifier (int | str): Primary key or slug that did not resolve.
        """
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} with identifier '{identifier}' not found")


class AlreadyExistsError(AppException):
    """A unique constraint would be violated."""

    def __init__(self, resource: str, field: str, value: int | str):
        """
        Parameters:
            resource (str): Entity type, e.g. "User".
            field (str): Field that must be unique, e.g. "email".
            value (int | str): The conflicting value.
        """
        self.resource = resource
        self.field = field
        self.value = value
        super().__init__(f"{resource} with {field}='{value}' already exists")


class ValidationError(AppException):
    """Business rule rejected the input."""

    def __init__(self, message: str, field: str | None = None):
        """
        Parameters:
            message (str): Human-readable description of the failed rule.
            field (str | None): Input field the failure relates to, if any.
        """
        self.field = field
        super().__init__(message)
