from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the mememage package importable when running the tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mememage.core import config as core_config  # noqa: E402
from mememage.core.errors import CompositingError  # noqa: E402
from mememage.core.tokens import TokenService  # noqa: E402
from mememage.db import models  # noqa: E402
from mememage.db import session as db_session  # noqa: E402
from mememage.repositories.sql_repository import SQLRepository  # noqa: E402

TEST_SECRET = "test-signing-secret-with-enough-bytes-for-hs256"


class FakeCompositor:
    """Records calls; writes a placeholder file unless told to fail."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[tuple[str, str, str, str]] = []

    def composite(self, template_path: str, top_text: str, bottom_text: str, output_path: str) -> None:
        self.calls.append((template_path, top_text, bottom_text, output_path))
        if self.fail:
            raise CompositingError("Failed to process meme: boom")
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        Path(output_path).write_bytes(b"fake-jpeg")


@pytest.fixture()
def temp_db(tmp_path, monkeypatch):
    """Temporary SQLite database; resets settings/engine caches around the test."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    monkeypatch.setenv("UPLOADS_DIR", str(tmp_path / "uploads"))
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]

    engine = db_session.get_engine()
    models.Base.metadata.drop_all(bind=engine)
    models.Base.metadata.create_all(bind=engine)

    yield db_file

    try:
        models.Base.metadata.drop_all(bind=engine)
    except Exception:
        pass
    engine.dispose()
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture()
def repo(temp_db) -> SQLRepository:
    return SQLRepository()


@pytest.fixture()
def tokens() -> TokenService:
    return TokenService(TEST_SECRET)


@pytest.fixture()
def fake_compositor() -> FakeCompositor:
    return FakeCompositor()
