"""
Exception handlers that turn domain and database errors into JSON responses.

Clients get ``{"error": message}`` bodies; internals such as SQL or driver
messages only ever reach the server log.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..auth.exceptions import AuthError, SessionCollision
from ..db.exceptions import DatabaseError, StoreUnavailable

logger = logging.getLogger("legacy.errors")

SERVICE_UNAVAILABLE = "Service temporarily unavailable"
INTERNAL_ERROR = "Internal server error"
VALIDATION_ERROR = "Validation failed"


async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    if isinstance(exc, SessionCollision):
        logger.critical("Session collision on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def _describe(error: dict) -> str:
    location = ".".join(str(part) for part in error["loc"] if part != "body")
    return f"{location}: {error['msg']}"


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [_describe(error) for error in exc.errors()]
    logger.info("Rejected %s %s: %s", request.method, request.url.path, "; ".join(details))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": VALIDATION_ERROR, "details": details},
    )


async def store_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Database unavailable on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"error": SERVICE_UNAVAILABLE},
    )


async def dbapi_error_handler(request: Request, exc: DBAPIError) -> JSONResponse:
    if exc.connection_invalidated:
        return await store_unavailable_handler(request, exc)
    return await database_error_handler(request, exc)


async def database_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Database error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": INTERNAL_ERROR},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AuthError, auth_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(OperationalError, store_unavailable_handler)
    app.add_exception_handler(StoreUnavailable, store_unavailable_handler)
    app.add_exception_handler(DBAPIError, dbapi_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(DatabaseError, database_error_handler)


__all__ = ["register_exception_handlers", "SERVICE_UNAVAILABLE", "INTERNAL_ERROR", "VALIDATION_ERROR"]
