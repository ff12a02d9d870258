from __future__ import annotations

import base64
import io
import json

import pytest
from PIL import Image

from book_renderer.font_atlas import FontAtlas, load_font_atlas

PAGE_COLOR = (200, 180, 140, 255)
PAGE_SIZE = (200, 200)


def encode_image(image: Image.Image) -> str:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("ascii")


def glyph_sheet() -> Image.Image:
    """White-on-transparent sheet: 'A' at x 0-4, 'B' at x 5-7, 'W' at x 8-15."""
    sheet = Image.new("RGBA", (16, 8), (0, 0, 0, 0))
    sheet.paste((255, 255, 255, 255), (0, 0, 5, 7))
    sheet.paste((255, 255, 255, 255), (5, 0, 8, 7))
    sheet.paste((255, 255, 255, 255), (8, 0, 16, 8))
    return sheet


def make_font_data(**overrides) -> dict:
    data = {
        "images": {
            "gui/book.png": encode_image(Image.new("RGBA", PAGE_SIZE, PAGE_COLOR)),
            "font/ascii.png": encode_image(glyph_sheet()),
        },
        "chars": {
            "\0": {"image": "font/ascii.png", "pos": [0, 0, 5, 7], "ascent": 7},
            " ": {"image": None, "pos": [0, 0, 3, 8], "ascent": 7},
            "A": {"image": "font/ascii.png", "pos": [0, 0, 5, 7], "ascent": 7},
            "B": {"image": "font/ascii.png", "pos": [5, 0, 3, 7], "ascent": 7},
            "W": {"image": "font/ascii.png", "pos": [8, 0, 8, 8], "ascent": 7},
        },
    }
    data.update(overrides)
    return data


@pytest.fixture
def font_data() -> dict:
    return make_font_data()


@pytest.fixture
def font_json(font_data) -> str:
    return json.dumps(font_data)


@pytest.fixture
def atlas(font_data) -> FontAtlas:
    return load_font_atlas(font_data)
