from __future__ import annotations

import json
from typing import Any, Optional

from fastapi import APIRouter, Header, Request
from starlette.concurrency import run_in_threadpool

from mememage.core import envelope
from mememage.core.errors import ValidationError
from mememage.core.tokens import TokenService
from mememage.services.meme_service import MemeService
from mememage.services.session_service import authenticate

router = APIRouter(prefix="/memes", tags=["memes"])


def _get_meme_service(request: Request) -> MemeService:
    svc = getattr(getattr(request.app, "state", None), "meme_service", None)
    if not svc:
        raise RuntimeError("MemeService not configured")
    return svc


def _get_token_service(request: Request) -> TokenService:
    svc = getattr(getattr(request.app, "state", None), "token_service", None)
    if not svc:
        raise RuntimeError("TokenService not configured")
    return svc


async def _read_json(request: Request) -> Any:
    raw = await request.body()
    if not raw.strip():
        return None
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise ValidationError("Validation error: request body is not valid JSON") from exc


@router.post("")
async def create_meme(request: Request, authorization: Optional[str] = Header(None)):
    # The body is only read once the caller is authenticated.
    claims = authenticate(authorization, _get_token_service(request))
    payload = await _read_json(request)
    meme = await run_in_threadpool(_get_meme_service(request).create_meme, claims, payload)
    return envelope.ok(meme, status_code=201)


@router.get("")
def list_memes(request: Request, limit: Optional[str] = None, offset: Optional[str] = None):
    return envelope.ok(_get_meme_service(request).list_memes(limit, offset))


# Declared before /{meme_id} so "user" is never parsed as an id.
@router.get("/user/my-memes")
def my_memes(request: Request, authorization: Optional[str] = Header(None)):
    claims = authenticate(authorization, _get_token_service(request))
    return envelope.ok(_get_meme_service(request).list_user_memes(claims))


@router.get("/{meme_id}")
def get_meme(meme_id: str, request: Request):
    return envelope.ok(_get_meme_service(request).get_meme(meme_id))


@router.post("/{meme_id}/like")
def like_meme(meme_id: str, request: Request):
    return envelope.ok(_get_meme_service(request).like_meme(meme_id))
