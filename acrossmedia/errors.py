"""
HTTP error with a machine-readable type tag, plus the app-level handlers that render
every error as {"success": false, "message": ..., "type": ...}.
"""
import logging
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from acrossmedia.middleware.security_headers import SECURITY_HEADERS

logger = logging.getLogger(__name__)

RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
ACCOUNT_LOCKED = "ACCOUNT_LOCKED"
CAPTCHA_REQUIRED = "CAPTCHA_REQUIRED"
CAPTCHA_INVALID = "CAPTCHA_INVALID"
VALIDATION_ERROR = "VALIDATION_ERROR"
INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
PENDING_APPROVAL = "PENDING_APPROVAL"
ACCOUNT_DISABLED = "ACCOUNT_DISABLED"


class ApiError(HTTPException):
    def __init__(
        self,
        status_code: int,
        message: str,
        error_type: str | None = None,
        details: list | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.error_type = error_type
        self.details = details


def error_body(message: str, error_type: str | None = None, details: list | None = None) -> dict:
    body = {"success": False, "message": message}
    if error_type:
        body["type"] = error_type
    if details is not None:
        body["details"] = details
    return body


def _request_headers(request: Request, extra: dict | None = None) -> dict:
    """Headers collected for this request (e.g. RateLimit-*) plus the error's own headers."""
    headers = dict(getattr(request.state, "response_headers", None) or {})
    headers.update(extra or {})
    return headers


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    error_type = getattr(exc, "error_type", None)
    details = getattr(exc, "details", None)
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(error_body(str(exc.detail), error_type, details)),
        headers=_request_headers(request, getattr(exc, "headers", None)),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder(error_body("Invalid input data", VALIDATION_ERROR, details)),
        headers=_request_headers(request),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # Rendered by ServerErrorMiddleware, outside SecurityHeadersMiddleware
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Something went wrong!"),
        headers=dict(SECURITY_HEADERS),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
