"""High-level data access helpers backed by SQLAlchemy."""
from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker as SessionMaker

from mememage.core.errors import ConflictError, StorageError
from mememage.db.models import Meme, User
from mememage.db.session import get_session

logger = logging.getLogger(__name__)


class SQLRepository:
    """CRUD helpers wrapping the SQLAlchemy session.

    Lookups return ``None`` for absence. Any driver/ORM failure surfaces as
    ``StorageError``.
    """

    def __init__(self, sessionmaker: SessionMaker | None = None) -> None:
        self._sessionmaker = sessionmaker

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            if self._sessionmaker is None:
                with get_session() as session:
                    yield session
            else:
                session = self._sessionmaker()
                try:
                    yield session
                finally:
                    session.close()
        except IntegrityError:
            raise
        except SQLAlchemyError as exc:
            logger.exception("Storage operation failed")
            raise StorageError(f"Database error: {exc.__class__.__name__}") from exc

    # -------------------------- users --------------------------
    def create_user(self, username: str, email: str, password_hash: str) -> User:
        now = datetime.now(timezone.utc)
        entity = User(
            id=uuid.uuid4(),
            username=username,
            email=email,
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )
        try:
            with self._session() as session:
                session.add(entity)
                session.commit()
                session.refresh(entity)
                return entity
        except IntegrityError as exc:
            raise ConflictError("Username or email already exists") from exc

    def get_user(self, user_id: uuid.UUID) -> Optional[User]:
        with self._session() as session:
            return session.get(User, user_id)

    def find_user_by_username(self, username: str) -> Optional[User]:
        with self._session() as session:
            stmt = select(User).where(User.username == username)
            return session.execute(stmt).scalar_one_or_none()

    def find_user_by_email(self, email: str) -> Optional[User]:
        with self._session() as session:
            stmt = select(User).where(User.email == email)
            return session.execute(stmt).scalar_one_or_none()

    # -------------------------- memes --------------------------
    def create_meme(
        self,
        user_id: uuid.UUID,
        title: str,
        image_url: str,
        top_text: str | None = None,
        bottom_text: str | None = None,
        template_name: str | None = None,
        *,
        meme_id: uuid.UUID | None = None,
    ) -> Meme:
        entity = Meme(
            id=meme_id or uuid.uuid4(),
            user_id=user_id,
            title=title,
            image_url=image_url,
            top_text=top_text,
            bottom_text=bottom_text,
            template_name=template_name,
            views=0,
            likes=0,
            created_at=datetime.now(timezone.utc),
        )
        try:
            with self._session() as session:
                session.add(entity)
                session.commit()
                session.refresh(entity)
                return entity
        except IntegrityError as exc:
            # Unknown owner (FK) or a colliding id.
            raise StorageError("Failed to save meme: integrity constraint violated") from exc

    def list_memes(self, limit: int, offset: int) -> list[Meme]:
        with self._session() as session:
            stmt = (
                select(Meme)
                .order_by(Meme.created_at.desc(), Meme.id)
                .limit(limit)
                .offset(offset)
            )
            return list(session.execute(stmt).scalars().all())

    def get_meme(self, meme_id: uuid.UUID) -> Optional[Meme]:
        with self._session() as session:
            return session.get(Meme, meme_id)

    def list_user_memes(self, user_id: uuid.UUID) -> list[Meme]:
        with self._session() as session:
            stmt = (
                select(Meme)
                .where(Meme.user_id == user_id)
                .order_by(Meme.created_at.desc(), Meme.id)
            )
            return list(session.execute(stmt).scalars().all())

    def increment_views(self, meme_id: uuid.UUID) -> bool:
        with self._session() as session:
            stmt = update(Meme).where(Meme.id == meme_id).values(views=Meme.views + 1)
            result = session.execute(stmt)
            session.commit()
            return result.rowcount > 0

    def increment_likes(self, meme_id: uuid.UUID) -> bool:
        with self._session() as session:
            stmt = update(Meme).where(Meme.id == meme_id).values(likes=Meme.likes + 1)
            result = session.execute(stmt)
            session.commit()
            return result.rowcount > 0
