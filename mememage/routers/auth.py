from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Request

from mememage.core import envelope
from mememage.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


def _get_auth_service(request: Request) -> AuthService:
    svc = getattr(getattr(request.app, "state", None), "auth_service", None)
    if not svc:
        raise RuntimeError("AuthService not configured")
    return svc


@router.post("/signup")
def signup(request: Request, payload: Any = Body(...)):
    result = _get_auth_service(request).signup(payload)
    return envelope.ok(result, status_code=201)


@router.post("/login")
def login(request: Request, payload: Any = Body(...)):
    return envelope.ok(_get_auth_service(request).login(payload))
