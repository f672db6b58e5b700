"""
Logging configuration for the application.

``setup_logging`` attaches a console handler to the root logger exactly once
and sets the level from ``LOG_LEVEL``.
"""

import logging


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger.

    Parameters
    ----------
    level : str
        Logging level name (e.g. ``"debug"``, ``"INFO"``).  Case
        insensitive; unknown names fall back to INFO.
    """
    logger = logging.getLogger()
    numeric_level = getattr(logging, (level or "INFO").upper(), logging.INFO)
    logger.setLevel(numeric_level)
    if logger.handlers:
        # Already configured (tests, repeated create_app calls).
        return

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)
