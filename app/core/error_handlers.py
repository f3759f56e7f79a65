"""HTTP error handlers for the FastAPI application.

Maps domain exceptions raised by the service layer to HTTP status codes.
Every error body has the same shape: ``{"success": false, "message": "..."}``,
plus ``field`` for validation failures tied to one input.
"""

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.exceptions import (
    AppException,
    NotFoundError,
    AlreadyExistsError,
    ValidationError,
    AuthenticationError,
    InsufficientPermissionsError,
    InvalidStatusTransitionError,
    ReasonRequiredError,
)


def error_body(message: str, **extra) -> dict:
    """
    Build the standard error payload.

    Parameters:
        message (str): Human-readable error message.
        **extra: Additional keys merged into the payload (skipped when None).

    Returns:
        dict: ``{"success": False, "message": message, **extra}``.
    """
    body = {"success": False, "message": message}
    body.update({key: value for key, value in extra.items() if value is not None})
    return body


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """Map a NotFoundError to 404."""
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND, content=error_body(str(exc))
    )


async def already_exists_handler(
    request: Request, exc: AlreadyExistsError
) -> JSONResponse:
    """
    Convert an AlreadyExistsError into an HTTP 409 Conflict response.

    HTTP 409 semantics: the request conflicts with the current state of the server
    (e.g., attempting to create a duplicate resource).
    """
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT, content=error_body(str(exc))
    )


async def status_transition_handler(
    request: Request, exc: InvalidStatusTransitionError | ReasonRequiredError
) -> JSONResponse:
    """
    Map rejected status changes to 400 Bad Request.

    Covers both an unreachable target status and a missing mandatory reason. The
    response echoes the current and requested status so clients can re-render.
    """
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(
            str(exc),
            field=exc.field,
            currentStatus=exc.current,
            requestedStatus=exc.target,
        ),
    )


async def validation_error_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    """
    Convert a ValidationError into an HTTP 422 Unprocessable Entity response.

    Parameters:
        request (Request): The incoming HTTP request.
        exc (ValidationError): The domain validation error; if `exc.field` is set, the response will include a `field` key indicating the related field.
    """
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
        content=error_body(str(exc), field=exc.field),
    )


async def insufficient_permissions_handler(
    request: Request, exc: InsufficientPermissionsError
) -> JSONResponse:
    """Map an InsufficientPermissionsError to 403 Forbidden."""
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN, content=error_body(str(exc))
    )


async def authentication_error_handler(
    request: Request, exc: AuthenticationError
) -> JSONResponse:
    """
    Convert an AuthenticationError into a 401 Unauthorized response that includes a WWW-Authenticate header.
    """
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content=error_body(str(exc)),
        headers={"WWW-Authenticate": "Bearer"},  # OAuth2 spec compliance
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """
    Render framework HTTP errors (405, OAuth2 401, unmatched routes) in the standard shape.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Render request body/query validation failures as 422 with the first error message.
    """
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
        content=error_body(message, field=location or None),
    )


async def database_error_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    """
    Log a database failure and return a generic 500 response.
    """
    logger.opt(exception=exc).error(
        f"Database error on {request.method} {request.url.path}"
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("An internal error occurred"),
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handle unhandled application-level exceptions with a standardized 500 response.
    """
    logger.error(f"Unhandled application error: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("An internal error occurred"),
    )


def register_exception_handlers(app) -> None:
    """
    Register the application's domain-to-HTTP exception handlers on a FastAPI app.

    Starlette resolves handlers along the exception's MRO, so subclasses such as
    InvalidStatusTransitionError (a ValidationError) get their own status code.
    Mappings: NotFoundError -> 404, AlreadyExistsError -> 409,
    InvalidStatusTransitionError / ReasonRequiredError -> 400, ValidationError -> 422,
    InsufficientPermissionsError -> 403, AuthenticationError -> 401,
    SQLAlchemyError and AppException -> 500.

    Parameters:
        app: The FastAPI application instance to which the exception handlers will be attached.
    """
    # CRUD exception handlers
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(AlreadyExistsError, already_exists_handler)
    app.add_exception_handler(InvalidStatusTransitionError, status_transition_handler)
    app.add_exception_handler(ReasonRequiredError, status_transition_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)

    # Auth exception handlers
    app.add_exception_handler(
        InsufficientPermissionsError, insufficient_permissions_handler
    )
    app.add_exception_handler(AuthenticationError, authentication_error_handler)

    # Framework errors rendered in the same shape
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # Catch-all for unhandled application and database exceptions
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(AppException, app_exception_handler)
