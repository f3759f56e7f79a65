"""Authentication and authorization exceptions."""

from app.exceptions.base import AppException


class AuthenticationError(AppException):
    """Base class for authentication-related errors."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class InvalidCredentialsError(AuthenticationError):
    """Username/email or password is incorrect."""

    def __init__(self, message: str = "Incorrect username or password"):
        """
        Initialize the InvalidCredentialsError with a human-readable message.

        Parameters:
            message: Custom error message describing the authentication failure; defaults to "Incorrect username or password".
        """
        super().__init__(message)


class InvalidTokenError(AuthenticationError):
    """Token is invalid, expired, malformed, or its user no longer exists."""

    def __init__(self, message: str = "Could not validate credentials"):
        """
        Initialize the InvalidTokenError with a descriptive message.

        Parameters:
            message (str): Error message describing the token problem. Defaults to "Could not validate credentials".
        """
        super().__init__(message)


class InsufficientPermissionsError(AppException):
    """User is authenticated but not allowed to perform this action."""

    def __init__(self, message: str = "Insufficient permissions"):
        """
        Initialize InsufficientPermissionsError with an optional message describing the permission failure.

        Parameters:
            message (str): Human-readable error message; defaults to "Insufficient permissions".
        """
        super().__init__(message)
