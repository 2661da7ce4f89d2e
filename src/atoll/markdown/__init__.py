"""Markdown page rendering via patitas."""

from atoll.markdown.renderer import MarkdownRenderer

__all__ = ["MarkdownRenderer"]
