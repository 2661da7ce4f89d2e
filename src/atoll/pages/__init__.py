"""Page discovery, layouts and rendering."""

from atoll.pages.discovery import discover_pages, load_page
from atoll.pages.frontmatter import parse_frontmatter
from atoll.pages.layouts import LayoutRegistry
from atoll.pages.renderer import PageRenderer
from atoll.pages.types import BuildResult, BuiltPage, Page, validate_meta

__all__ = [
    "BuildResult",
    "BuiltPage",
    "LayoutRegistry",
    "Page",
    "PageRenderer",
    "discover_pages",
    "load_page",
    "parse_frontmatter",
    "validate_meta",
]
