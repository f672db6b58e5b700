"""Request/response shapes and their validation rules."""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic import ValidationError as PydanticValidationError

from mememage.core.errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


class SignupRequest(BaseModel):
    username: str = Field(min_length=3, max_length=30)
    email: EmailStr
    password: str = Field(min_length=8)


class LoginRequest(BaseModel):
    # Only non-empty here; the strength rule applies at signup.
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class CreateMemeRequest(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    top_text: Optional[str] = None
    bottom_text: Optional[str] = None
    template_name: Optional[str] = None
    image_data: Optional[str] = None


class UserPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    email: str


class AuthPayload(BaseModel):
    token: str
    user: UserPublic


class MemeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    image_url: str
    top_text: Optional[str] = None
    bottom_text: Optional[str] = None
    template_name: Optional[str] = None
    views: int
    likes: int
    created_at: datetime


def _describe(exc: PydanticValidationError) -> str:
    parts = []
    for err in exc.errors():
        field = ".".join(str(loc) for loc in err.get("loc", ())) or "body"
        parts.append(f"{field}: {err.get('msg')}")
    return "; ".join(parts)


def parse_payload(model: Type[ModelT], data: Any) -> ModelT:
    """Validate ``data`` against ``model`` or raise the app ValidationError."""
    if not isinstance(data, dict):
        raise ValidationError("Validation error: request body must be a JSON object")
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(f"Validation error: {_describe(exc)}") from exc
