"""Uniform JSON envelope: ``{success, data?, message?, error?}``."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def send_success(
    data: Any = None,
    message: Optional[str] = None,
    status_code: int = 200,
) -> JSONResponse:
    content: dict[str, Any] = {"success": True}
    if data is not None:
        content["data"] = jsonable_encoder(data, by_alias=True)
    if message:
        content["message"] = message
    return JSONResponse(status_code=status_code, content=content)


def send_error(
    error: str,
    status_code: int = 500,
    message: Optional[str] = None,
    data: Optional[Mapping[str, Any]] = None,
) -> JSONResponse:
    content: dict[str, Any] = {"success": False, "error": error}
    if message:
        content["message"] = message
    if data:
        content["data"] = jsonable_encoder(data)
    return JSONResponse(status_code=status_code, content=content)
