"""Template name validation and lookup on disk."""
from __future__ import annotations

import re
from pathlib import Path

TEMPLATE_PATTERN = re.compile(r"[A-Za-z0-9_-]{1,64}")
DEFAULT_TEMPLATE = "default"
TEMPLATE_EXTENSIONS = (".jpg", ".jpeg", ".png")


def is_valid_template_name(value: str | None) -> bool:
    """Return True when the name is safe to use as a file stem."""
    if not value:
        return False
    return bool(TEMPLATE_PATTERN.fullmatch(value))


def find_template(templates_dir: str | Path, name: str) -> Path | None:
    """Return the first existing ``<name>.<ext>`` under ``templates_dir``."""
    if not is_valid_template_name(name):
        return None
    base = Path(templates_dir)
    for ext in TEMPLATE_EXTENSIONS:
        candidate = base / f"{name}{ext}"
        if candidate.is_file():
            return candidate
    return None
