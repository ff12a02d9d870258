from __future__ import annotations


class BookRendererError(Exception):
    """Base class for every error raised by book_renderer."""


class FontAtlasError(BookRendererError, ValueError):
    """The font atlas could not be parsed or is malformed."""


class MissingImageError(FontAtlasError):
    def __init__(self, name: str) -> None:
        super().__init__(f"font atlas has no image named {name!r}")
        self.name = name


class MissingBackgroundError(FontAtlasError):
    def __init__(self, name: str) -> None:
        super().__init__(f"font atlas has no background image {name!r}")
        self.name = name


class MissingFallbackGlyphError(FontAtlasError):
    def __init__(self) -> None:
        super().__init__("font atlas has no glyph for the null character")


class GlyphOutOfBoundsError(FontAtlasError):
    def __init__(
        self,
        image: str,
        rect: tuple[int, int, int, int],
        size: tuple[int, int],
    ) -> None:
        super().__init__(
            f"glyph rect {rect} lies outside image {image!r} of size {size[0]}x{size[1]}"
        )
        self.image = image
        self.rect = rect
        self.size = size
