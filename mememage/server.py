"""Run the MemEmage API with uvicorn.

Configuration (HOST, PORT, DATABASE_URL, LOG_LEVEL, JWT_SECRET, ...) is read
from the environment; a ``.env`` file in the working directory is loaded
first.

Usage:
    mememage
    python -m mememage.server
"""
import logging

import uvicorn
from dotenv import load_dotenv

from mememage.app import create_app
from mememage.core.config import get_settings
from mememage.core.logging_config import setup_logging


def main() -> None:
    load_dotenv()
    get_settings.cache_clear()
    settings = get_settings()
    setup_logging(settings.log_level)
    logging.getLogger(__name__).info("Starting MemEmage server at %s:%s", settings.host, settings.port)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
