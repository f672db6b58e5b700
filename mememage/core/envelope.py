"""Uniform ``{success, data, error}`` response wrapper."""

from __future__ import annotations

from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def ok(data: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        {"success": True, "data": jsonable_encoder(data), "error": None},
        status_code=status_code,
    )


def error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        {"success": False, "data": None, "error": message},
        status_code=status_code,
    )
