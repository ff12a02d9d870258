"""Word wrapping of marked-up text into glyph placements on a book page.

Each word is laid out by a small state machine:

* ``FRESH``: first try at the current cursor position. If a drawable glyph
  does not fit, the whole word moves to the start of the next line.
* ``RETRIED_ON_NEW_LINE``: the word still does not fit, so whatever fitted is
  kept and the rest of the word continues on a new line.
* ``SPLITTING``: laying out the remainder of a split word. Further overflows
  split again.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Tuple

from loguru import logger

from .font_atlas import FontAtlas, Rect
from .markup import LINE_BREAK, MarkupScanner, Style, has_visible_text, split_words


@dataclass(frozen=True)
class LayoutConfig:
    x_min: int = 16
    y_min: int = 36
    y_step: int = 9
    max_width: int = 129
    max_lines: int = 14

    @property
    def max_height(self) -> int:
        return self.y_min + self.y_step * self.max_lines - 1


DEFAULT_LAYOUT = LayoutConfig()


class WordState(Enum):
    FRESH = auto()
    RETRIED_ON_NEW_LINE = auto()
    SPLITTING = auto()


@dataclass(frozen=True)
class Placement:
    image: str
    position: Tuple[int, int]
    rect: Rect
    style: Style


@dataclass
class LayoutCursor:
    x: int
    y: int
    start_of_line: bool = True

    def new_line(self, config: LayoutConfig) -> None:
        self.x = config.x_min
        self.y += config.y_step
        self.start_of_line = True


@dataclass(frozen=True)
class LayoutResult:
    placements: Tuple[Placement, ...]
    truncated: bool = False


@dataclass
class WordAttempt:
    placements: List[Placement]
    width: int
    overflow_at: int | None = None


@dataclass
class LayoutContext:
    atlas: FontAtlas
    config: LayoutConfig
    cursor: LayoutCursor
    scanner: MarkupScanner = field(default_factory=MarkupScanner)
    placements: List[Placement] = field(default_factory=list)
    truncated: bool = False

    @classmethod
    def start(cls, atlas: FontAtlas, config: LayoutConfig = DEFAULT_LAYOUT) -> LayoutContext:
        return cls(atlas=atlas, config=config, cursor=LayoutCursor(config.x_min, config.y_min))

    @property
    def style(self) -> Style:
        return self.scanner.style

    @property
    def page_full(self) -> bool:
        return self.cursor.y > self.config.max_height

    def result(self) -> LayoutResult:
        return LayoutResult(placements=tuple(self.placements), truncated=self.truncated)


def attempt_word(ctx: LayoutContext, word: str) -> WordAttempt:
    """Walk one word at the current cursor without moving the cursor's x.

    Stops at the first drawable glyph that would overflow the line. A line
    feed moves the cursor to the next line and ends the word.
    """
    cursor = ctx.cursor
    scanner = ctx.scanner
    scanner.start_word()
    space_left = ctx.config.max_width - cursor.x
    attempt = WordAttempt(placements=[], width=0)

    for index, char in enumerate(word):
        if scanner.consume(char):
            continue
        if char == LINE_BREAK:
            cursor.new_line(ctx.config)
            return attempt

        glyph = ctx.atlas.glyph_for(char)
        bold = 1 if scanner.style.bold else 0
        if glyph.is_whitespace:
            attempt.width += glyph.width + bold
            continue

        if attempt.width + glyph.width > space_left:
            attempt.overflow_at = index
            return attempt

        attempt.placements.append(
            Placement(
                image=glyph.image,
                position=(cursor.x + attempt.width, cursor.y - glyph.ascent),
                rect=glyph.rect,
                style=scanner.style,
            )
        )
        attempt.width += glyph.width + 1 + bold
        cursor.start_of_line = False

    return attempt


def layout_word(ctx: LayoutContext, word: str) -> bool:
    """Lay out one word, wrapping or splitting it as needed.

    Returns False once the page is full and nothing more can be placed.
    """
    cursor = ctx.cursor
    state = WordState.FRESH

    while True:
        if ctx.page_full:
            return False

        attempt = attempt_word(ctx, word)
        if attempt.overflow_at is None:
            ctx.placements.extend(attempt.placements)
            cursor.x += attempt.width
            return True

        if state is WordState.FRESH:
            logger.debug("Wrapping {!r} onto line y={}", word, cursor.y + ctx.config.y_step)
            cursor.x = ctx.config.x_min
            if not cursor.start_of_line:
                cursor.y += ctx.config.y_step
                cursor.start_of_line = True
            state = WordState.RETRIED_ON_NEW_LINE
            continue

        logger.debug("Splitting {!r} at index {}", word, attempt.overflow_at)
        ctx.placements.extend(attempt.placements)
        word = word[attempt.overflow_at:]
        cursor.x = ctx.config.x_min
        cursor.y += ctx.config.y_step
        state = WordState.SPLITTING


def layout_text(
    text: str,
    atlas: FontAtlas,
    config: LayoutConfig = DEFAULT_LAYOUT,
) -> LayoutResult:
    ctx = LayoutContext.start(atlas, config)
    words = split_words(text)

    for index, word in enumerate(words):
        if not layout_word(ctx, word):
            ctx.truncated = any(has_visible_text(rest) for rest in words[index:])
            if ctx.truncated:
                logger.info("Page is full, dropping text after word {}", index)
            break

    return ctx.result()
