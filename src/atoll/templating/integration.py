"""Kida environment setup and template collection.

Each build gathers every template source (pages, layouts, components,
and plain partials inside the islands directory), runs island import
interception over it, and serves the result from a ``DictLoader``.
Island sources themselves are never registered as templates; the
island compiler reads them directly.

Template names are root-relative posix paths, which is also how pages
name the islands and partials they import.
"""

import os
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from kida import DictLoader, Environment

from atoll.config import SiteConfig
from atoll.islands.ids import is_island_source
from atoll.islands.plugin import IslandImportRewriter
from atoll.pages.types import Page

_TEMPLATE_DIRS = ("layouts_dir", "components_dir", "islands_dir")


def create_environment(
    config: SiteConfig,
    templates: dict[str, str],
    filters: dict[str, Callable[..., Any]] | None = None,
    globals_: dict[str, Any] | None = None,
) -> Environment:
    """Create a kida Environment serving *templates* from memory.

    Called once per build with the sources from :func:`collect_templates`.
    """
    env = Environment(
        loader=DictLoader(templates),
        autoescape=config.autoescape,
    )

    if filters:
        env.update_filters(filters)

    for name, value in (globals_ or {}).items():
        env.add_global(name, value)

    return env


def collect_templates(
    config: SiteConfig,
    pages: Iterable[Page],
    rewriter: IslandImportRewriter,
) -> dict[str, str]:
    """Template name -> rewritten source for one build.

    Page sources come from *pages*, already stripped of frontmatter.
    Markdown pages are not templates and are skipped.
    """
    root = config.root_path
    templates: dict[str, str] = {}

    for attr in _TEMPLATE_DIRS:
        for path in _html_files(config.path(attr)):
            if is_island_source(path.name):
                continue
            name = path.relative_to(root).as_posix()
            templates[name] = rewriter.rewrite(path.read_text(encoding="utf-8"))

    for page in pages:
        if page.kind == "html":
            templates[page.template_name] = rewriter.rewrite(page.body)

    return templates


def _html_files(directory: Path) -> list[Path]:
    if not directory.is_dir():
        return []
    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(directory):
        dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
        found.extend(Path(dirpath) / name for name in sorted(filenames) if name.endswith(".html"))
    return found
