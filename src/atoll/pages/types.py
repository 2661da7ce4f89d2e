"""Data models for page builds.

Frozen dataclasses describing discovered pages and their build output.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from atoll.errors import InvalidMetaError

PageKind = Literal["html", "markdown"]

NO_LAYOUT = "none"
DEFAULT_LAYOUT = "default"


def validate_meta(meta: Mapping[str, Any], source: str) -> dict[str, Any]:
    """Check the reserved frontmatter keys.

    ``title`` must be a string when set; ``layout`` a string or a bool.
    All issues are collected and raised together as
    :class:`InvalidMetaError`.
    """
    issues: list[str] = []

    title = meta.get("title")
    if title and not isinstance(title, str):
        issues.append(f'Invalid type for "title": expected string, got {type(title).__name__}')

    if "layout" in meta and meta["layout"] is not None:
        layout = meta["layout"]
        if not isinstance(layout, (str, bool)):
            issues.append(f'Invalid type for "layout": expected string or boolean, got {type(layout).__name__}')

    if issues:
        raise InvalidMetaError(source, issues)
    return dict(meta)


@dataclass(frozen=True, slots=True)
class Page:
    """A page source discovered under the pages directory.

    Attributes:
        source_path: Absolute path of the source file.
        template_name: Root-relative posix path, used as the kida
            template name for html pages.
        output_name: Output path relative to the output directory.
        kind: ``"html"`` (kida template) or ``"markdown"``.
        meta: Parsed and validated frontmatter.
        body: Source text with the frontmatter block removed.
    """

    source_path: Path
    template_name: str
    output_name: str
    kind: PageKind
    meta: dict[str, Any] = field(default_factory=dict)
    body: str = ""

    @property
    def title(self) -> str:
        return self.meta.get("title") or self.source_path.name.split(".", 1)[0]

    @property
    def layout(self) -> str | None:
        """Name of the layout to wrap this page in, or ``None`` for none."""
        layout = self.meta.get("layout", True)
        if layout is None or layout is True:
            return DEFAULT_LAYOUT
        if layout is False or layout == NO_LAYOUT:
            return None
        return layout


@dataclass(frozen=True, slots=True)
class BuiltPage:
    """A page that has been rendered and written."""

    page: Page
    output_path: Path
    islands: frozenset[str] = frozenset()
    hydrated: bool = False


@dataclass(frozen=True, slots=True)
class BuildResult:
    """Summary returned by ``Site.build()``."""

    pages: tuple[BuiltPage, ...]
    islands: tuple[str, ...]
    elapsed: float

    @property
    def page_count(self) -> int:
        return len(self.pages)
