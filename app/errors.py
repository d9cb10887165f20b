"""
Error taxonomy and the JSON bodies each error maps to.

Every endpoint is its own boundary: an operation raises one of the errors
below and the handlers registered by ``register_exception_handlers`` turn it
into a single response. Nothing is retried.
"""

from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.logging_config import get_logger

logger = get_logger(__name__)


class AppError(Exception):
    """Base class for errors that map to an HTTP status."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str | None = None):
        super().__init__(message)
        self.message = message

    def to_body(self) -> dict:
        body = {"status": "error"}
        if self.message:
            body["message"] = self.message
        return body


class ValidationError(AppError):
    """Missing or malformed required field."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthError(AppError):
    """Unknown user or wrong credential."""

    status_code = status.HTTP_401_UNAUTHORIZED


class NotFoundError(AppError):
    """Operation targets an id that does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class StoreError(AppError):
    """Underlying data-access failure. The caller only sees ``message``."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


@contextmanager
def store_errors(
    message: str | None = None,
    catch: type[Exception] | tuple[type[Exception], ...] = SQLAlchemyError,
) -> Iterator[None]:
    """Translate failures raised inside the block into ``StoreError``.

    ``catch`` selects which exceptions are translated; ``AppError`` subclasses
    always pass through untouched. The original exception is logged, never
    exposed to the client.
    """
    try:
        yield
    except AppError:
        raise
    except catch as e:
        logger.error("store_error", error=str(e), exc_info=True)
        raise StoreError(message) from e


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed bodies and path/query params are client errors, reported as 400."""
    logger.info("request_rejected", path=request.url.path, errors=str(exc.errors()))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"status": "error", "message": "Neispravan zahtjev."},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_error", path=request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"status": "error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_error_handler)
