"""Error types raised by route handlers and services.

Handlers raise one of these instead of building error responses themselves;
``register_error_handlers`` maps each type to its HTTP status and a
``{"error": message}`` body in one place.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

NOT_SIGNED_IN = "User not signed in"
INVALID_CREDENTIALS = "Invalid credentials"
INTERNAL_ERROR = "Internal server error"


class PackError(Exception):
    status_code = 500
    default_message = INTERNAL_ERROR

    def __init__(self, message: str | None = None, *, detail: object | None = None):
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)

    def body(self) -> dict:
        payload: dict = {"error": self.message}
        if self.detail is not None:
            payload["detail"] = self.detail
        return payload


class BadRequest(PackError):
    status_code = 400
    default_message = "Missing required fields"


class NotAuthenticated(PackError):
    status_code = 401
    default_message = NOT_SIGNED_IN


class Forbidden(PackError):
    status_code = 403
    default_message = "User not authorised to perform this action"


class NotFound(PackError):
    status_code = 404
    default_message = "Not found"


class Conflict(PackError):
    status_code = 409
    default_message = "Resource already exists"


class Internal(PackError):
    status_code = 500
    default_message = INTERNAL_ERROR


async def _pack_error_handler(_: Request, exc: PackError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.body())


async def _validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [".".join(str(part) for part in err.get("loc", ())[1:]) for err in exc.errors()]
    return JSONResponse(
        status_code=400,
        content={"error": BadRequest.default_message, "fields": [f for f in fields if f]},
    )


async def _database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR})


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PackError, _pack_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, _database_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
