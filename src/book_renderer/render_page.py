from __future__ import annotations

import base64
import binascii
import io
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple

from loguru import logger
from PIL import Image, UnidentifiedImageError

from .errors import FontAtlasError, MissingBackgroundError, MissingImageError
from .font_atlas import DEFAULT_BACKGROUND, FontAtlas, load_font_atlas
from .layout import DEFAULT_LAYOUT, LayoutConfig, Placement, layout_text
from .rasterize import rasterize_glyph

# modes that survive a round trip through RGBA compositing
_RESTORABLE_MODES = {"RGB", "RGBA", "L", "LA"}


class ImageCache:
    """Decodes atlas images on first use; lives for a single render."""

    def __init__(self, atlas: FontAtlas) -> None:
        self.atlas = atlas
        self._images: Dict[str, Image.Image] = {}

    def get(self, name: str) -> Image.Image:
        image = self._images.get(name)
        if image is None:
            encoded = self.atlas.images.get(name)
            if encoded is None:
                raise MissingImageError(name)
            image = decode_image(name, encoded)
            self._images[name] = image
        return image

    def __len__(self) -> int:
        return len(self._images)


def decode_image(name: str, encoded: str) -> Image.Image:
    try:
        data = base64.b64decode(encoded, validate=True)
        image = Image.open(io.BytesIO(data))
        image.load()
    except (binascii.Error, UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        raise FontAtlasError(f"could not decode atlas image {name!r}: {exc}") from exc
    return image


def overlay(canvas: Image.Image, image: Image.Image, x: int, y: int) -> None:
    """Alpha-composite image over canvas at (x, y), clipped to the canvas."""
    left, top = max(x, 0), max(y, 0)
    right = min(x + image.width, canvas.width)
    bottom = min(y + image.height, canvas.height)
    if right <= left or bottom <= top:
        return
    clipped = image.crop((left - x, top - y, right - x, bottom - y))
    canvas.alpha_composite(clipped, dest=(left, top))


@dataclass(frozen=True)
class RenderedPage:
    image: Image.Image
    placements: Tuple[Placement, ...]
    truncated: bool = False

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size


def render_page(
    atlas: FontAtlas,
    text: str,
    config: LayoutConfig = DEFAULT_LAYOUT,
) -> RenderedPage:
    cache = ImageCache(atlas)
    if atlas.background not in atlas.images:
        raise MissingBackgroundError(atlas.background)
    background = cache.get(atlas.background)
    mode = background.mode

    layout = layout_text(text, atlas, config)
    canvas = background.convert("RGBA")
    for placement in layout.placements:
        render = rasterize_glyph(cache.get(placement.image), placement)
        overlay(canvas, render.image, *render.position)

    if mode in _RESTORABLE_MODES and mode != "RGBA":
        canvas = canvas.convert(mode)

    logger.debug(
        "Rendered {} glyphs from {} atlas images onto {}x{} page",
        len(layout.placements),
        len(cache),
        canvas.width,
        canvas.height,
    )
    return RenderedPage(image=canvas, placements=layout.placements, truncated=layout.truncated)


def encode_png(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def generate_image(
    font: str | bytes | Mapping[str, Any],
    text: str,
    background: str = DEFAULT_BACKGROUND,
    config: LayoutConfig = DEFAULT_LAYOUT,
) -> bytes:
    """Render text onto the atlas's book page and return the PNG bytes.

    Raises FontAtlasError (or one of its subclasses) if the atlas is malformed.
    """
    atlas = load_font_atlas(font, background=background)
    page = render_page(atlas, text, config)
    if page.truncated:
        logger.warning("Text did not fit on the page and was truncated")
    return encode_png(page.image)
