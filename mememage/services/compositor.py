"""
Image compositing adapter.

Handlers only see the ``Compositor`` interface: given a template image, two
captions and an output path, write the finished meme or raise
``CompositingError``. ``PillowCompositor`` is the production implementation;
tests inject a fake.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from PIL import Image, ImageDraw, ImageFont

from mememage.core.errors import CompositingError, CompositingInputError
from mememage.domain.templates import DEFAULT_TEMPLATE, TEMPLATE_EXTENSIONS

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_SIZE = (800, 600)
_REFERENCE_HEIGHT = 600
_FONT_CANDIDATES = ("DejaVuSans-Bold.ttf", "Impact.ttf", "arial.ttf")


class Compositor(Protocol):
    def composite(self, template_path: str, top_text: str, bottom_text: str, output_path: str) -> None:
        ...


def ensure_no_nul(**values: str) -> None:
    """Reject any value with an embedded NUL byte."""
    for name, value in values.items():
        if "\x00" in (value or ""):
            raise CompositingInputError(f"Invalid input: {name} contains a NUL byte")


class PillowCompositor:
    """Classic top/bottom caption renderer.

    Each call opens its own image handle inside ``with`` blocks, so handles
    are closed on every exit path and calls from different worker threads
    share nothing.
    """

    def __init__(
        self,
        font_path: str | None = None,
        font_size: int = 48,
        stroke_width: int = 2,
        margin: int = 20,
        quality: int = 90,
    ) -> None:
        self.font_path = font_path
        self.font_size = font_size
        self.stroke_width = stroke_width
        self.margin = margin
        self.quality = quality

    def composite(self, template_path: str, top_text: str, bottom_text: str, output_path: str) -> None:
        ensure_no_nul(
            template_path=template_path,
            top_text=top_text,
            bottom_text=bottom_text,
            output_path=output_path,
        )
        try:
            with Image.open(template_path) as source, source.convert("RGB") as canvas:
                draw = ImageDraw.Draw(canvas)
                size = max(12, round(self.font_size * canvas.height / _REFERENCE_HEIGHT))
                font = self._load_font(size)
                if top_text:
                    self._draw_caption(draw, canvas.size, top_text, font, position="top")
                if bottom_text:
                    self._draw_caption(draw, canvas.size, bottom_text, font, position="bottom")
                Path(output_path).parent.mkdir(parents=True, exist_ok=True)
                canvas.save(output_path, format="JPEG", quality=self.quality)
        except (OSError, ValueError) as exc:
            logger.error("Compositing failed for template %s: %s", template_path, exc)
            raise CompositingError(f"Failed to process meme: {exc}") from exc

    # ------------------------------------------------------------------ helpers
    def _load_font(self, size: int) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
        candidates = (self.font_path,) if self.font_path else _FONT_CANDIDATES
        for candidate in candidates:
            try:
                return ImageFont.truetype(candidate, size)
            except OSError:
                continue
        return ImageFont.load_default(size=size)

    def _wrap(self, draw: ImageDraw.ImageDraw, text: str, font, max_width: int) -> list[str]:
        lines: list[str] = []
        current = ""
        for word in text.split():
            candidate = f"{current} {word}" if current else word
            if current and draw.textlength(candidate, font=font) > max_width:
                lines.append(current)
                current = word
            else:
                current = candidate
        if current:
            lines.append(current)
        return lines

    def _draw_caption(self, draw: ImageDraw.ImageDraw, size: tuple[int, int], text: str, font, position: str) -> None:
        width, height = size
        lines = self._wrap(draw, text.upper(), font, max(1, width - 2 * self.margin))
        if not lines:
            return
        boxes = [draw.textbbox((0, 0), line, font=font, stroke_width=self.stroke_width) for line in lines]
        line_height = max(box[3] - box[1] for box in boxes) + self.stroke_width * 2
        block_height = line_height * len(lines)
        y = self.margin if position == "top" else height - self.margin - block_height
        for line, box in zip(lines, boxes):
            line_width = box[2] - box[0]
            x = (width - line_width) // 2
            draw.text(
                (x, y),
                line,
                font=font,
                fill=(255, 255, 255),
                stroke_width=self.stroke_width,
                stroke_fill=(0, 0, 0),
            )
            y += line_height


def ensure_default_template(templates_dir: str) -> Path:
    """Return the default template, writing a blank one when none exists."""
    base = Path(templates_dir)
    base.mkdir(parents=True, exist_ok=True)
    for ext in TEMPLATE_EXTENSIONS:
        existing = base / f"{DEFAULT_TEMPLATE}{ext}"
        if existing.is_file():
            return existing
    target = base / f"{DEFAULT_TEMPLATE}.jpg"
    with Image.new("RGB", DEFAULT_TEMPLATE_SIZE, (255, 255, 255)) as blank:
        blank.save(target, format="JPEG")
    logger.info("Created blank default template at %s", target)
    return target
