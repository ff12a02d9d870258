"""Render styled text onto a book page image from a bitmap font atlas."""

from loguru import logger

from .render_page import generate_image

logger.disable("book_renderer")

__all__ = ["generate_image"]
