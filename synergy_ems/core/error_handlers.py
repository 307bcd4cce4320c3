"""
Exception handlers that render every failure in the same envelope:

    {"success": false, "errors": [{"field": ..., "msg": ..., "code": ...}]}

`field` is only present when the error belongs to one input.
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from synergy_ems.core.exceptions import AppException, AuthenticationError

logger = logging.getLogger(__name__)

_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


def error_response(status_code: int, errors: List[Dict[str, Any]],
                   headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "errors": errors}, headers=headers)


def _field_name(loc) -> str:
    parts = [str(p) for p in loc if str(p) not in _LOCATION_PREFIXES]
    return ".".join(parts) or "request"


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": _field_name(error.get("loc", ())), "msg": error["msg"], "code": "VALIDATION_FAILED"}
        for error in exc.errors()
    ]
    logger.warning(f"Request validation failed on {request.url.path}: {errors}")
    return error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, errors)


async def app_exception_handler(request: Request, exc: AppException):
    logger.warning(f"{exc.error_code}: {exc.message}", extra={"path": request.url.path, "error_code": exc.error_code})
    fields = (exc.details or {}).get("fields")
    if fields:
        errors = [{"field": field, "msg": msg, "code": exc.error_code} for field, msg in fields.items()]
    else:
        errors = [{"msg": exc.message, "code": exc.error_code}]

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return error_response(exc.status_code, errors, headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    msg = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return error_response(exc.status_code, [{"msg": msg}], getattr(exc, "headers", None))


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled server error", extra={"path": request.url.path})
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, [{"msg": "An unexpected server error occurred."}]
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(AppException, app_exception_handler)
    # fastapi.HTTPException subclasses the starlette one, so one registration covers both
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
