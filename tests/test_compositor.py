from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest
from PIL import Image

from mememage.core.errors import CompositingError, CompositingInputError
from mememage.services.compositor import DEFAULT_TEMPLATE_SIZE, PillowCompositor, ensure_default_template


@pytest.fixture()
def template(tmp_path):
    path = tmp_path / "templates" / "plain.png"
    path.parent.mkdir()
    Image.new("RGB", (400, 300), (30, 60, 90)).save(path)
    return path


def test_classic_meme_is_written_with_template_size(template, tmp_path):
    output = tmp_path / "out" / "meme.jpg"
    PillowCompositor().composite(str(template), "one does not simply", "write a meme server", str(output))

    with Image.open(output) as result:
        assert result.format == "JPEG"
        assert result.size == (400, 300)
        # White caption pixels were drawn somewhere in the top band.
        top_band = result.crop((0, 0, 400, 80)).convert("L")
        assert max(top_band.getdata()) > 200


def test_empty_captions_leave_image_untouched(template, tmp_path):
    output = tmp_path / "blank.jpg"
    PillowCompositor().composite(str(template), "", "", str(output))

    with Image.open(output) as result:
        r, g, b = result.convert("RGB").getpixel((200, 150))
        assert abs(r - 30) < 8 and abs(g - 60) < 8 and abs(b - 90) < 8


def test_long_caption_wraps_inside_image(template, tmp_path):
    compositor = PillowCompositor()
    output = tmp_path / "long.jpg"
    compositor.composite(str(template), "word " * 40, "", str(output))

    with Image.open(output) as result:
        assert result.size == (400, 300)


@pytest.mark.parametrize("field", ["template_path", "top_text", "bottom_text", "output_path"])
def test_nul_bytes_are_rejected_before_opening(template, tmp_path, field):
    args = {
        "template_path": str(template),
        "top_text": "top",
        "bottom_text": "bottom",
        "output_path": str(tmp_path / "x.jpg"),
    }
    args[field] = args[field] + "\x00"

    with pytest.raises(CompositingInputError):
        PillowCompositor().composite(**args)
    assert not (tmp_path / "x.jpg").exists()


def test_missing_or_corrupt_template_is_a_compositing_error(tmp_path):
    broken = tmp_path / "broken.jpg"
    broken.write_bytes(b"not an image")

    with pytest.raises(CompositingError):
        PillowCompositor().composite(str(tmp_path / "missing.jpg"), "a", "b", str(tmp_path / "o.jpg"))
    with pytest.raises(CompositingError):
        PillowCompositor().composite(str(broken), "a", "b", str(tmp_path / "o.jpg"))


def test_concurrent_calls_are_independent(template, tmp_path):
    compositor = PillowCompositor()
    outputs = [tmp_path / f"m{i}.jpg" for i in range(8)]

    with ThreadPoolExecutor(max_workers=4) as pool:
        list(pool.map(lambda out: compositor.composite(str(template), "top", "bottom", str(out)), outputs))

    assert all(out.exists() for out in outputs)


def test_default_template_is_created_once(tmp_path):
    first = ensure_default_template(str(tmp_path / "templates"))
    mtime = first.stat().st_mtime_ns
    second = ensure_default_template(str(tmp_path / "templates"))

    assert first == second
    assert second.stat().st_mtime_ns == mtime
    with Image.open(first) as img:
        assert img.size == DEFAULT_TEMPLATE_SIZE
