from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from PIL import Image, ImageOps

from .errors import GlyphOutOfBoundsError
from .font_atlas import Rect
from .layout import Placement
from .markup import DEFAULT_COLOR, AnyColor, Color


@dataclass(frozen=True)
class GlyphRender:
    image: Image.Image
    position: Tuple[int, int]


def crop_glyph(source: Image.Image, rect: Rect, name: str = "") -> Image.Image:
    x, y, w, h = rect
    if x + w > source.width or y + h > source.height:
        raise GlyphOutOfBoundsError(name, rect, source.size)
    return source.crop((x, y, x + w, y + h)).convert("RGBA")


def recolor(glyph: Image.Image, color: AnyColor) -> Image.Image:
    """Tint a white atlas glyph; the default color inverts it to black."""
    if color == Color.WHITE:
        return glyph
    alpha = glyph.getchannel("A")
    if color == DEFAULT_COLOR:
        inverted = ImageOps.invert(glyph.convert("RGB")).convert("RGBA")
        inverted.putalpha(alpha)
        return inverted

    tinted = Image.new("RGBA", glyph.size, color.rgb)
    tinted.putalpha(alpha)
    # fully transparent pixels keep their original color channels
    mask = alpha.point(lambda value: 255 if value else 0)
    return Image.composite(tinted, glyph, mask)


def embolden(glyph: Image.Image) -> Image.Image:
    bold = Image.new("RGBA", (glyph.width + 1, glyph.height))
    bold.paste(glyph, (0, 0))
    bold.alpha_composite(glyph, dest=(1, 0))
    return bold


def italicize(glyph: Image.Image) -> Image.Image:
    """Shear a glyph to the right in three horizontal bands."""
    width, height = glyph.size
    italic = Image.new("RGBA", (width + 2, height))
    if height < 4:
        italic.paste(glyph, (1, 0))
        return italic

    italic.paste(glyph.crop((0, 0, width, 2)), (2, 0))
    italic.paste(glyph.crop((0, 2, width, height - 2)), (1, 2))
    # the bottom band is the second-to-last row; the last row is dropped
    italic.paste(glyph.crop((0, height - 2, width, height - 1)), (0, height - 2))
    return italic


def rasterize_glyph(source: Image.Image, placement: Placement) -> GlyphRender:
    glyph = crop_glyph(source, placement.rect, placement.image)
    style = placement.style
    x, y = placement.position

    glyph = recolor(glyph, style.color)
    if style.bold:
        glyph = embolden(glyph)
    if style.italic:
        glyph = italicize(glyph)
        x -= 1
    # underline, strikethrough and obfuscated have no visual effect yet
    return GlyphRender(image=glyph, position=(x, y))
