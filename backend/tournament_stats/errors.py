import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

DEFAULT_META_CODES = {
    status.HTTP_400_BAD_REQUEST: "BAD_REQUEST",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    status.HTTP_409_CONFLICT: "CONFLICT",
    status.HTTP_500_INTERNAL_SERVER_ERROR: "INTERNAL_ERROR",
}


class ApiError(HTTPException):
    """HTTP error that carries the envelope ``meta`` code."""

    def __init__(self, status_code: int, detail: str, meta: str | None = None) -> None:
        super().__init__(status_code=status_code, detail=detail)
        self.meta = meta or DEFAULT_META_CODES.get(status_code, "ERROR")


def not_found(exc: Exception, meta: str = "NOT_FOUND") -> ApiError:
    return ApiError(status.HTTP_404_NOT_FOUND, str(exc), meta)


def bad_request(exc: Exception, meta: str = "BAD_REQUEST") -> ApiError:
    return ApiError(status.HTTP_400_BAD_REQUEST, str(exc), meta)


def error_body(message: str, meta: str) -> dict[str, str]:
    return {"error": message, "meta": meta}


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    meta = getattr(exc, "meta", None) or DEFAULT_META_CODES.get(exc.status_code, "ERROR")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail), meta),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("; ".join(messages) or "Invalid request.", "VALIDATION_ERROR"),
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("A database error occurred.", "DATABASE_ERROR"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
