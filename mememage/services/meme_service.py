"""Meme use cases: create (compositing + persist), browse, view and like."""

from __future__ import annotations

import base64
import binascii
import logging
import uuid
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Any

from PIL import Image, UnidentifiedImageError

from mememage.core.errors import AppError, NotFoundError, StorageError, UnauthenticatedError, ValidationError
from mememage.core.tokens import Claims
from mememage.domain.schemas import CreateMemeRequest, MemeOut, parse_payload
from mememage.domain.templates import find_template, is_valid_template_name
from mememage.repositories.sql_repository import SQLRepository
from mememage.services.compositor import Compositor, ensure_default_template, ensure_no_nul
from mememage.services.session_service import resolve_user_id

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
MAX_LIMIT = 100
MAX_UPLOAD_BYTES = 10 * 1024 * 1024
MAX_UPLOAD_PIXELS = 25_000_000
MEMES_URL_PREFIX = "/uploads/memes"


def _parse_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _parse_meme_id(value: uuid.UUID | str) -> uuid.UUID:
    """An id that cannot name a meme is reported the same way as a missing one."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError as exc:
        raise NotFoundError("Meme not found") from exc


def _serialize(meme) -> dict:
    return MemeOut.model_validate(meme).model_dump(mode="json")


@dataclass
class MemeService:
    repository: SQLRepository
    compositor: Compositor
    uploads_dir: str

    @property
    def templates_dir(self) -> Path:
        return Path(self.uploads_dir) / "templates"

    @property
    def memes_dir(self) -> Path:
        return Path(self.uploads_dir) / "memes"

    @property
    def sources_dir(self) -> Path:
        return Path(self.uploads_dir) / "sources"

    # -------------------------------------- create --------------------------------------
    def create_meme(self, claims: Claims, data: Any) -> dict:
        request = parse_payload(CreateMemeRequest, data)
        user_id = resolve_user_id(claims)
        top_text = request.top_text or ""
        bottom_text = request.bottom_text or ""
        ensure_no_nul(top_text=top_text, bottom_text=bottom_text)
        if self.repository.get_user(user_id) is None:
            raise UnauthenticatedError("User no longer exists")

        meme_id = uuid.uuid4()
        source = self._resolve_source(meme_id, request)
        upload = source if request.image_data else None
        output_path = self.memes_dir / f"{meme_id}.jpg"
        self.memes_dir.mkdir(parents=True, exist_ok=True)

        try:
            self.compositor.composite(str(source), top_text, bottom_text, str(output_path))
            meme = self.repository.create_meme(
                user_id,
                request.title,
                f"{MEMES_URL_PREFIX}/{meme_id}.jpg",
                request.top_text,
                request.bottom_text,
                request.template_name,
                meme_id=meme_id,
            )
        except AppError:
            output_path.unlink(missing_ok=True)
            if upload is not None:
                upload.unlink(missing_ok=True)
            raise
        logger.info("User %s created meme %s", user_id, meme_id)
        return _serialize(meme)

    def _resolve_source(self, meme_id: uuid.UUID, request: CreateMemeRequest) -> Path:
        if request.image_data:
            return self._store_upload(meme_id, request.image_data)
        name = request.template_name
        if name:
            if not is_valid_template_name(name):
                raise ValidationError("Validation error: template_name must match [A-Za-z0-9_-]{1,64}")
            found = find_template(self.templates_dir, name)
            if found is not None:
                return found
            logger.debug("Template %s not available; falling back to default", name)
        return ensure_default_template(str(self.templates_dir))

    def _store_upload(self, meme_id: uuid.UUID, image_data: str) -> Path:
        encoded = image_data.strip()
        if encoded.startswith("data:"):
            _, _, encoded = encoded.partition(",")
        try:
            raw = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValidationError("Validation error: image_data is not valid base64") from exc
        if not raw:
            raise ValidationError("Validation error: image_data is empty")
        if len(raw) > MAX_UPLOAD_BYTES:
            raise ValidationError("Validation error: image_data exceeds 10 MB")
        try:
            with Image.open(BytesIO(raw)) as probe:
                # The header is enough to reject oversized canvases before decoding.
                if probe.width * probe.height > MAX_UPLOAD_PIXELS:
                    raise ValidationError("Validation error: image_data dimensions are too large")
                probe.verify()
            with Image.open(BytesIO(raw)) as upload:
                converted = upload.convert("RGB")
        except (Image.DecompressionBombError, UnidentifiedImageError, OSError, SyntaxError) as exc:
            raise ValidationError("Validation error: image_data is not a supported image") from exc

        self.sources_dir.mkdir(parents=True, exist_ok=True)
        target = self.sources_dir / f"{meme_id}.png"
        with converted:
            converted.save(target, format="PNG")
        return target

    # -------------------------------------- browse --------------------------------------
    def list_memes(self, limit: Any = None, offset: Any = None) -> list[dict]:
        page_size = min(max(_parse_int(limit, DEFAULT_LIMIT), 1), MAX_LIMIT)
        start = max(_parse_int(offset, 0), 0)
        return [_serialize(meme) for meme in self.repository.list_memes(page_size, start)]

    def get_meme(self, meme_id: uuid.UUID | str) -> dict:
        meme_id = _parse_meme_id(meme_id)
        meme = self.repository.get_meme(meme_id)
        if meme is None:
            raise NotFoundError("Meme not found")
        data = _serialize(meme)
        try:
            if self.repository.increment_views(meme_id):
                data["views"] += 1
        except StorageError as exc:
            logger.warning("Ignoring view increment failure for meme %s: %s", meme_id, exc.message)
        return data

    def list_user_memes(self, claims: Claims) -> list[dict]:
        user_id = resolve_user_id(claims)
        return [_serialize(meme) for meme in self.repository.list_user_memes(user_id)]

    # -------------------------------------- likes --------------------------------------
    def like_meme(self, meme_id: uuid.UUID | str) -> str:
        if not self.repository.increment_likes(_parse_meme_id(meme_id)):
            raise NotFoundError("Meme not found")
        return "Meme liked"
