"""Exception handlers mapping every failure onto the response envelope."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from kollabs_repo import KollabsError
from kollabs_repo.errors import format_validation_errors

from .responses import send_error
from .schemas import WHITESPACE_ONLY

HIDDEN_ERROR_MESSAGE = "An unexpected error occurred"
_PAYLOAD_LOG_LIMIT = 500
_BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


def _payload_fragment(payload: object) -> str:
    text = repr(payload)
    if len(text) > _PAYLOAD_LOG_LIMIT:
        return text[:_PAYLOAD_LOG_LIMIT] + "..."
    return text


async def _remember_payload(request: Request, call_next):
    # The 500 handler runs outside the route and can no longer read the body.
    if request.method in _BODY_METHODS:
        body = await request.body()
        request.state.payload = body.decode("utf-8", errors="replace")
    return await call_next(request)


async def _domain_error_handler(request: Request, exc: KollabsError) -> JSONResponse:
    logger.warning(
        "{method} {path} - {status} - {message}",
        method=request.method,
        path=request.url.path,
        status=exc.status_code,
        message=exc.message,
    )
    return send_error(
        exc.error or exc.message,
        status_code=exc.status_code,
        message=exc.message,
        data=exc.data,
    )


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if any(entry.get("type") == "json_invalid" for entry in errors):
        status_code, error, message = 400, "Invalid JSON format", "Bad Request"
    else:
        blank = next((entry for entry in errors if entry.get("type") == WHITESPACE_ONLY), None)
        if blank is not None:
            status_code, error = 422, blank["msg"]
        else:
            status_code, error = 400, format_validation_errors(errors)
        message = error

    logger.warning(
        "{method} {path} - {status} - {error} (payload={payload})",
        method=request.method,
        path=request.url.path,
        status=status_code,
        error=error,
        payload=_payload_fragment(exc.body),
    )
    return send_error(error, status_code=status_code, message=message)


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404 and exc.detail == "Not Found":
        error = f"Can't find {request.url.path} on this server!"
    else:
        error = str(exc.detail)
    logger.warning(
        "{method} {path} - {status} - {error}",
        method=request.method,
        path=request.url.path,
        status=exc.status_code,
        error=error,
    )
    return send_error(error, status_code=exc.status_code, message=error)


def register_exception_handlers(app: FastAPI, *, expose_internal_errors: bool = True) -> None:
    """
    Install the envelope handlers on ``app``.

    With ``expose_internal_errors`` disabled (production) unexpected exceptions
    reach the client only as a generic message; the full traceback is logged
    either way, together with the request payload.
    """

    async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.opt(exception=exc).error(
            "{method} {path} - 500 - {error} (path_params={path_params}, query={query}, payload={payload})",
            method=request.method,
            path=request.url.path,
            error=str(exc),
            path_params=dict(request.path_params),
            query=dict(request.query_params),
            payload=_payload_fragment(getattr(request.state, "payload", None)),
        )
        error = str(exc) if expose_internal_errors else HIDDEN_ERROR_MESSAGE
        return send_error(error, status_code=500, message="Internal Server Error")

    app.middleware("http")(_remember_payload)
    app.add_exception_handler(KollabsError, _domain_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
