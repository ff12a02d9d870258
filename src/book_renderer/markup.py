"""Inline color and format codes.

A control sequence is the marker character followed by one code character:
``0``-``9`` and ``a``-``f`` pick a palette color, ``k``-``o`` add a format
and ``r`` resets both. Color changes always clear the active formats.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, NamedTuple, Union

MARKER = "§"
RESET_CODE = "r"
LINE_BREAK = "\n"


class Color(Enum):
    BLACK = ("0", (0, 0, 0))
    DARK_BLUE = ("1", (0, 0, 170))
    DARK_GREEN = ("2", (0, 170, 0))
    DARK_AQUA = ("3", (0, 170, 170))
    DARK_RED = ("4", (170, 0, 0))
    DARK_PURPLE = ("5", (170, 0, 170))
    GOLD = ("6", (255, 170, 0))
    GRAY = ("7", (170, 170, 170))
    DARK_GRAY = ("8", (85, 85, 85))
    BLUE = ("9", (85, 85, 255))
    GREEN = ("a", (85, 255, 85))
    AQUA = ("b", (85, 255, 255))
    RED = ("c", (255, 85, 85))
    LIGHT_PURPLE = ("d", (255, 85, 255))
    YELLOW = ("e", (255, 255, 85))
    WHITE = ("f", (255, 255, 255))

    def __init__(self, code: str, rgb: tuple[int, int, int]) -> None:
        self.code = code
        self.rgb = rgb

    @classmethod
    def from_code(cls, code: str) -> Color | None:
        return _COLORS_BY_CODE.get(code)


class CustomColor(NamedTuple):
    r: int
    g: int
    b: int

    @property
    def rgb(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)


AnyColor = Union[Color, CustomColor]

_COLORS_BY_CODE = {color.code: color for color in Color}

# atlas glyphs are white, so the default color is drawn by inverting them
DEFAULT_COLOR = Color.BLACK


class Format(Enum):
    OBFUSCATED = "k"
    BOLD = "l"
    STRIKETHROUGH = "m"
    UNDERLINED = "n"
    ITALIC = "o"

    @classmethod
    def from_code(cls, code: str) -> Format | None:
        try:
            return cls(code)
        except ValueError:
            return None


@dataclass(frozen=True)
class Style:
    color: AnyColor = DEFAULT_COLOR
    formats: frozenset = field(default_factory=frozenset)

    @property
    def bold(self) -> bool:
        return Format.BOLD in self.formats

    @property
    def italic(self) -> bool:
        return Format.ITALIC in self.formats

    def with_color(self, color: AnyColor) -> Style:
        return Style(color=color)

    def with_format(self, fmt: Format) -> Style:
        return Style(color=self.color, formats=self.formats | {fmt})


DEFAULT_STYLE = Style()


def apply_control_code(style: Style, code: str) -> Style:
    if code == RESET_CODE:
        return DEFAULT_STYLE
    color = Color.from_code(code)
    if color is not None:
        return style.with_color(color)
    fmt = Format.from_code(code)
    if fmt is not None:
        return style.with_format(fmt)
    return style


def split_words(text: str) -> List[str]:
    """Split text into layout words, each carrying its trailing space.

    Line feeds become standalone words so they always force a break.
    """
    text = text.replace(LINE_BREAK, f" {LINE_BREAK} ")
    return [f"{word} " for word in text.split(" ")]


def has_visible_text(word: str) -> bool:
    """True if the word has a character besides control codes, spaces and line feeds."""
    scanner = MarkupScanner()
    return any(
        not scanner.consume(char) and char not in (" ", LINE_BREAK) for char in word
    )


class MarkupScanner:
    """Tracks the active style while the characters of one word are walked."""

    def __init__(self, style: Style = DEFAULT_STYLE) -> None:
        self.style = style
        self._pending_code = False

    def start_word(self) -> None:
        self._pending_code = False

    def consume(self, char: str) -> bool:
        """Feed one character; return True if it was part of a control sequence."""
        if char == MARKER:
            self._pending_code = True
            return True
        if self._pending_code:
            self.style = apply_control_code(self.style, char)
            self._pending_code = False
            return True
        return False
