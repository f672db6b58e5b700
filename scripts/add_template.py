#!/usr/bin/env python3
"""
Register a meme template image under UPLOADS_DIR/templates.

Usage:
  python scripts/add_template.py --name drake --image ./drake.jpg [--force]
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from PIL import Image, UnidentifiedImageError

# Make the mememage package importable when run directly from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mememage.core.config import get_settings  # noqa: E402
from mememage.domain.templates import find_template, is_valid_template_name  # noqa: E402


def main() -> None:
    ap = argparse.ArgumentParser(description="Register a meme template")
    ap.add_argument("--name", required=True, help="Template name (ex.: drake)")
    ap.add_argument("--image", required=True, help="Source image file")
    ap.add_argument("--force", action="store_true", help="Replace an existing template")
    args = ap.parse_args()

    name = (args.name or "").strip()
    if not is_valid_template_name(name):
        raise SystemExit("Invalid template name (use 1-64 chars [A-Za-z0-9_-])")
    templates_dir = Path(get_settings().templates_dir)
    existing = find_template(templates_dir, name)
    if existing and not args.force:
        raise SystemExit(f"Template '{name}' already exists at {existing}")

    try:
        with Image.open(args.image) as source, source.convert("RGB") as converted:
            templates_dir.mkdir(parents=True, exist_ok=True)
            target = templates_dir / f"{name}.jpg"
            converted.save(target, format="JPEG", quality=95)
            size = converted.size
    except (FileNotFoundError, UnidentifiedImageError) as exc:
        raise SystemExit(f"Cannot read image '{args.image}': {exc}")
    if existing and existing != target:
        existing.unlink()

    print("OK: template registered")
    print(f"  Name: {name}")
    print(f"  File: {target}")
    print(f"  Size: {size[0]}x{size[1]}")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
