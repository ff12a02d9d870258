import io
import json

import pytest
from PIL import Image

from book_renderer import generate_image
from book_renderer.errors import (
    FontAtlasError,
    GlyphOutOfBoundsError,
    MissingFallbackGlyphError,
    MissingImageError,
)
from book_renderer.render_page import ImageCache, overlay, render_page

from conftest import PAGE_COLOR, PAGE_SIZE, encode_image, make_font_data


def decode(data):
    return Image.open(io.BytesIO(data))


def test_single_glyph_page(font_json):
    image = decode(generate_image(font_json, "A"))
    assert image.size == PAGE_SIZE
    assert image.mode == "RGBA"
    assert image.getpixel((16, 29)) == (0, 0, 0, 255)
    assert image.getpixel((20, 35)) == (0, 0, 0, 255)
    assert image.getpixel((21, 29)) == PAGE_COLOR
    assert image.getpixel((16, 36)) == PAGE_COLOR


def test_control_codes_only_leave_background(font_json):
    image = decode(generate_image(font_json, "§z§y §q"))
    assert image.tobytes() == Image.new("RGBA", PAGE_SIZE, PAGE_COLOR).tobytes()


def test_truncated_text_renders_like_cut_text(font_json):
    assert generate_image(font_json, "A\n" * 20) == generate_image(font_json, "A\n" * 14)


def test_render_page_reports_truncation(atlas):
    page = render_page(atlas, "A\n" * 20)
    assert page.truncated
    assert page.size == PAGE_SIZE
    assert len(page.placements) == 14


def test_colored_glyph(font_json):
    image = decode(generate_image(font_json, "§9A"))
    assert image.getpixel((18, 32)) == (85, 85, 255, 255)


def test_rgb_background_keeps_its_mode():
    data = make_font_data()
    data["images"]["gui/book.png"] = encode_image(Image.new("RGB", (50, 60), (1, 2, 3)))
    image = decode(generate_image(json.dumps(data), "A"))
    assert image.mode == "RGB"
    assert image.size == (50, 60)
    assert image.getpixel((16, 29)) == (0, 0, 0)


def test_later_glyphs_paint_over_earlier():
    canvas = Image.new("RGBA", (4, 4), (0, 0, 0, 255))
    overlay(canvas, Image.new("RGBA", (2, 2), (255, 0, 0, 255)), 1, 1)
    overlay(canvas, Image.new("RGBA", (2, 2), (0, 255, 0, 255)), 2, 2)
    assert canvas.getpixel((1, 1)) == (255, 0, 0, 255)
    assert canvas.getpixel((2, 2)) == (0, 255, 0, 255)


def test_overlay_clips_to_canvas():
    canvas = Image.new("RGBA", (4, 4), (0, 0, 0, 255))
    overlay(canvas, Image.new("RGBA", (3, 3), (255, 255, 255, 255)), -1, -2)
    assert canvas.getpixel((0, 0)) == (255, 255, 255, 255)
    assert canvas.getpixel((1, 1)) == (0, 0, 0, 255)
    overlay(canvas, Image.new("RGBA", (3, 3), (255, 255, 255, 255)), 10, 10)


def test_image_cache_decodes_once(atlas):
    cache = ImageCache(atlas)
    assert cache.get("font/ascii.png") is cache.get("font/ascii.png")
    assert len(cache) == 1
    with pytest.raises(MissingImageError):
        cache.get("font/missing.png")


def test_undecodable_image(font_data):
    font_data["images"]["font/ascii.png"] = "not base64!"
    with pytest.raises(FontAtlasError, match="font/ascii.png"):
        generate_image(font_data, "A")


def test_glyph_referencing_missing_image(font_data):
    font_data["chars"]["A"]["image"] = "font/missing.png"
    with pytest.raises(MissingImageError):
        generate_image(font_data, "A")


def test_glyph_outside_its_image(font_data):
    font_data["chars"]["A"]["pos"] = [10, 0, 8, 8]
    with pytest.raises(GlyphOutOfBoundsError):
        generate_image(font_data, "A")


def test_bad_font_json_gives_no_output():
    with pytest.raises(FontAtlasError, match="Failed to parse font data"):
        generate_image("[", "A")


def test_missing_fallback_glyph(font_data):
    del font_data["chars"]["\0"]
    with pytest.raises(MissingFallbackGlyphError):
        generate_image(font_data, "A")


def test_oversized_atlas_image_is_an_atlas_error(font_data, monkeypatch):
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10)
    with pytest.raises(FontAtlasError, match="gui/book.png"):
        generate_image(font_data, "A")
