from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Mapping, Tuple

from loguru import logger

from .errors import FontAtlasError, MissingBackgroundError, MissingFallbackGlyphError

FALLBACK_CHAR = "\0"
DEFAULT_BACKGROUND = "gui/book.png"

Rect = Tuple[int, int, int, int]


@dataclass(frozen=True)
class GlyphMetrics:
    image: str | None
    rect: Rect
    ascent: int

    @property
    def width(self) -> int:
        return self.rect[2]

    @property
    def height(self) -> int:
        return self.rect[3]

    @property
    def is_whitespace(self) -> bool:
        return self.image is None


@dataclass
class FontAtlas:
    """Named atlas images (base64 PNG text) plus per-character glyph metrics."""

    images: Dict[str, str]
    chars: Dict[str, GlyphMetrics]
    background: str = DEFAULT_BACKGROUND
    fallback: GlyphMetrics | None = field(init=False, default=None, repr=False)

    def __post_init__(self) -> None:
        self.fallback = self.chars.get(FALLBACK_CHAR)

    def glyph_for(self, char: str) -> GlyphMetrics:
        metrics = self.chars.get(char)
        if metrics is not None:
            return metrics
        if self.fallback is None:
            raise MissingFallbackGlyphError()
        return self.fallback

    def validate(self) -> None:
        if self.fallback is None:
            raise MissingFallbackGlyphError()
        if self.background not in self.images:
            raise MissingBackgroundError(self.background)


def _parse_int(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise FontAtlasError(f"{what} must be a non-negative integer, got {value!r}")
    return value


def parse_glyph(char: str, payload: Any) -> GlyphMetrics:
    if not isinstance(payload, dict):
        raise FontAtlasError(f"glyph entry for {char!r} must be an object")
    image = payload.get("image")
    if image is not None and not isinstance(image, str):
        raise FontAtlasError(f"glyph {char!r} image must be a string or null")

    # "pos" is the field name used by the published atlas files
    rect = payload.get("pos", payload.get("rect"))
    if not isinstance(rect, (list, tuple)) or len(rect) != 4:
        raise FontAtlasError(f"glyph {char!r} needs a 4-item rect, got {rect!r}")
    x, y, w, h = (_parse_int(v, f"glyph {char!r} rect") for v in rect)

    if "ascent" not in payload:
        raise FontAtlasError(f"glyph {char!r} is missing its ascent")
    ascent = _parse_int(payload["ascent"], f"glyph {char!r} ascent")
    return GlyphMetrics(image=image, rect=(x, y, w, h), ascent=ascent)


def iter_glyph_metrics(chars: Mapping[str, Any]) -> Iterator[Tuple[str, GlyphMetrics]]:
    for char, payload in chars.items():
        if not isinstance(char, str) or len(char) != 1:
            raise FontAtlasError(f"char keys must be single characters, got {char!r}")
        yield char, parse_glyph(char, payload)


def build_font_atlas(
    font_data: Mapping[str, Any],
    background: str = DEFAULT_BACKGROUND,
) -> FontAtlas:
    images = font_data.get("images")
    chars = font_data.get("chars")
    if not isinstance(images, dict):
        raise FontAtlasError("font data needs an 'images' object")
    if not isinstance(chars, dict):
        raise FontAtlasError("font data needs a 'chars' object")
    for name, encoded in images.items():
        if not isinstance(encoded, str):
            raise FontAtlasError(f"image {name!r} must be base64 text")

    atlas = FontAtlas(
        images=dict(images),
        chars=dict(iter_glyph_metrics(chars)),
        background=background,
    )
    atlas.validate()
    logger.debug(
        "Loaded font atlas with {} images and {} glyphs", len(atlas.images), len(atlas.chars)
    )
    return atlas


def load_font_atlas(
    font: str | bytes | Mapping[str, Any],
    background: str = DEFAULT_BACKGROUND,
) -> FontAtlas:
    """Parse font atlas JSON (or an already-decoded mapping) into a FontAtlas."""
    if isinstance(font, Mapping):
        font_data = font
    else:
        try:
            font_data = json.loads(font)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise FontAtlasError(f"Failed to parse font data: {exc}") from exc
    if not isinstance(font_data, Mapping):
        raise FontAtlasError("Failed to parse font data: expected a JSON object")
    return build_font_atlas(font_data, background=background)
