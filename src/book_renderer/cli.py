"""Command line entry point: render text onto a book page PNG."""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import List

from dotenv import load_dotenv
from loguru import logger

from .errors import BookRendererError
from .font_atlas import DEFAULT_BACKGROUND, load_font_atlas
from .render_page import encode_png, render_page

FONT_ENV_VAR = "BOOK_RENDERER_FONT"


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Render styled text onto a book page image.")
    parser.add_argument(
        "--font",
        default=os.environ.get(FONT_ENV_VAR),
        help=f"Path to the font atlas JSON. Defaults to ${FONT_ENV_VAR}, which only this command reads.",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--text", help="Text to render; may contain § control codes.")
    source.add_argument("--text-file", help="Read the text to render from this file.")
    parser.add_argument(
        "--output",
        required=True,
        help="Where to write the rendered PNG.",
    )
    parser.add_argument(
        "--background",
        default=DEFAULT_BACKGROUND,
        help="Name of the atlas image used as the page background.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log layout decisions.",
    )
    args = parser.parse_args(argv)
    if not args.font:
        parser.error(f"--font is required when ${FONT_ENV_VAR} is not set")
    return args


def read_text(args: argparse.Namespace) -> str:
    if args.text is not None:
        return args.text
    if args.text_file is not None:
        return Path(args.text_file).expanduser().read_text(encoding="utf-8")
    return sys.stdin.read()


def configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")
    logger.enable("book_renderer")


def main(argv: List[str] | None = None) -> int:
    """Render the requested page and print a JSON summary."""
    load_dotenv()
    args = parse_args(argv)
    configure_logging(args.verbose)

    font_path = Path(args.font).expanduser().resolve()
    if not font_path.exists():
        raise FileNotFoundError(f"font atlas not found at {font_path}")
    output_path = Path(args.output).expanduser().resolve()

    try:
        atlas = load_font_atlas(font_path.read_text(encoding="utf-8"), background=args.background)
        page = render_page(atlas, read_text(args))
    except BookRendererError as exc:
        logger.error("{}", exc)
        return 1

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(encode_png(page.image))

    summary = {
        "output": str(output_path),
        "width": page.image.width,
        "height": page.image.height,
        "placements": len(page.placements),
        "truncated": page.truncated,
    }
    print(json.dumps(summary))
    return 0


if __name__ == "__main__":
    sys.exit(main())
