"""
Configuration helpers for the MemEmage backend.

Exposes a frozen Settings object that reads environment variables (database
URL, bind address, log verbosity, signing secret, storage paths) so that
routers/services do not fetch os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    database_url: str
    db_pool_size: int
    host: str
    port: int
    log_level: str
    jwt_secret: str
    uploads_dir: str
    frontend_dir: str
    cors_origins: tuple[str, ...]

    @property
    def templates_dir(self) -> str:
        return os.path.join(self.uploads_dir, "templates")

    @property
    def memes_dir(self) -> str:
        return os.path.join(self.uploads_dir, "memes")


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _csv(value: str | None) -> tuple[str, ...]:
        return tuple(item.strip() for item in (value or "").split(",") if item.strip())

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./mememage.db"),
        db_pool_size=max(1, _int(os.getenv("DB_POOL_SIZE", "5"), 5)),
        host=os.getenv("HOST", "127.0.0.1"),
        port=_int(os.getenv("PORT", "8080"), 8080),
        log_level=os.getenv("LOG_LEVEL", "info"),
        jwt_secret=os.getenv("JWT_SECRET", ""),
        uploads_dir=os.getenv("UPLOADS_DIR", "uploads"),
        frontend_dir=os.getenv("FRONTEND_DIR", os.path.join("frontend", "dist")),
        cors_origins=_csv(os.getenv("CORS_ORIGINS", "*")) or ("*",),
    )
