"""
Dungeon Loop - Error Handler Middleware

Every failure leaves the API as the same JSON shape:

    {"error": {"code", "message", "details", "recoverable",
               "recovery_hint", "error_id", "timestamp"}}
"""
import traceback
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from dungeon_loop.core.errors import DungeonLoopError, ErrorCode

logger = logging.getLogger("dungeon_loop.errors")


STATUS_ERROR_CODES = {
    400: ErrorCode.VALIDATION_ERROR,
    404: ErrorCode.NOT_FOUND,
    405: ErrorCode.VALIDATION_ERROR,
    422: ErrorCode.VALIDATION_ERROR,
}


def _new_error_id() -> str:
    return uuid.uuid4().hex[:8]


def _stamp(body: Dict[str, Any], error_id: str) -> Dict[str, Any]:
    """Add the tracking id and UTC time to an error body."""
    body["error"]["error_id"] = error_id
    body["error"]["timestamp"] = datetime.now(timezone.utc).isoformat()
    return body


def _field_errors(exc: RequestValidationError) -> List[Dict[str, str]]:
    """Flatten pydantic errors into field/message/type entries."""
    return [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", "Invalid value"),
            "type": error.get("type", "value_error"),
        }
        for error in exc.errors()
    ]


def _debug_info(exc: Exception) -> Dict[str, Any]:
    return {
        "exception_type": type(exc).__name__,
        "exception_message": str(exc),
        "traceback": traceback.format_exception(type(exc), exc, exc.__traceback__),
    }


def setup_error_handlers(app: FastAPI, debug: bool = False) -> FastAPI:
    """
    Register the exception handlers on an app.

    Args:
        app: The FastAPI application
        debug: Include exception type and traceback in 500 responses
    """

    @app.exception_handler(DungeonLoopError)
    async def dungeon_loop_error_handler(request: Request, exc: DungeonLoopError):
        error_id = _new_error_id()
        log = logger.warning if exc.recoverable else logger.error
        log(
            "[%s] %s on %s: %s",
            error_id, exc.code.value, request.url.path, exc.message,
            extra={"error_id": error_id, "error_code": exc.code.value},
        )
        return JSONResponse(
            status_code=exc.http_status,
            content=_stamp(exc.to_dict(), error_id),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        error = DungeonLoopError(
            code=ErrorCode.VALIDATION_ERROR,
            message="Request validation failed",
            details={"errors": _field_errors(exc)},
            recovery_hint="Correct the listed fields and resend the request",
            http_status=422,
        )
        return JSONResponse(status_code=422, content=_stamp(error.to_dict(), _new_error_id()))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        error = DungeonLoopError(
            code=STATUS_ERROR_CODES.get(exc.status_code, ErrorCode.UNKNOWN),
            message=str(exc.detail) if exc.detail else "HTTP error",
            recoverable=exc.status_code < 500,
            http_status=exc.status_code,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=_stamp(error.to_dict(), _new_error_id()),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        error_id = _new_error_id()
        logger.error(
            "[%s] Unhandled %s on %s %s: %s",
            error_id, type(exc).__name__, request.method, request.url.path, exc,
            extra={"error_id": error_id},
            exc_info=True,
        )

        error = DungeonLoopError(
            message="An unexpected error occurred",
            recoverable=False,
            recovery_hint="Retry the request; report the error id if it persists",
        )
        content = _stamp(error.to_dict(), error_id)
        if debug:
            content["error"]["debug"] = _debug_info(exc)
        return JSONResponse(status_code=500, content=content)

    return app
