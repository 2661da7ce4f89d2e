"""Page discovery for the pages/ directory.

Walks the pages directory tree and collects every ``.html`` (kida
template) and ``.md`` (Markdown) file. Each maps to the same relative
path with an ``.html`` extension under the output directory. Files and
directories starting with ``_`` or ``.`` are skipped.
"""

from __future__ import annotations

import os
from pathlib import Path

from atoll.errors import PageBuildError, RouteConflictError
from atoll.islands.ids import ISLAND_SUFFIX
from atoll.pages.frontmatter import parse_frontmatter
from atoll.pages.types import Page, PageKind, validate_meta

_KINDS: dict[str, PageKind] = {".html": "html", ".md": "markdown"}


def discover_pages(pages_dir: str | Path, root: str | Path) -> list[Page]:
    """Walk *pages_dir* and load every page source.

    Args:
        pages_dir: Path to the ``pages/`` directory.
        root: Project root; template names are relative to it.

    Returns:
        Pages sorted by output path.

    Raises:
        RouteConflictError: Two sources map to the same output file.
    """
    pages_root = Path(pages_dir).resolve()
    if not pages_root.is_dir():
        raise PageBuildError(f"Pages directory not found: {pages_root}")
    root_path = Path(root).resolve()

    by_output: dict[str, Page] = {}
    for path in _walk(pages_root):
        page = load_page(path, pages_root, root_path)
        existing = by_output.get(page.output_name)
        if existing is not None:
            raise RouteConflictError(
                output_path=page.output_name,
                first=existing.template_name,
                second=page.template_name,
            )
        by_output[page.output_name] = page

    return [by_output[name] for name in sorted(by_output)]


def load_page(path: Path, pages_root: Path, root: Path) -> Page:
    """Read, split and validate a single page source."""
    relative = path.relative_to(pages_root)
    template_name = path.relative_to(root).as_posix()
    text = path.read_text(encoding="utf-8")
    meta, body = parse_frontmatter(text, template_name)
    return Page(
        source_path=path,
        template_name=template_name,
        output_name=relative.with_suffix(".html").as_posix(),
        kind=_KINDS[path.suffix],
        meta=validate_meta(meta, template_name),
        body=body,
    )


def _walk(pages_root: Path) -> list[Path]:
    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(pages_root):
        dirnames[:] = sorted(d for d in dirnames if not d.startswith(("_", ".")))
        for name in sorted(filenames):
            if name.startswith(("_", ".")):
                continue
            path = Path(dirpath) / name
            if path.suffix in _KINDS and not name.endswith(ISLAND_SUFFIX):
                found.append(path)
    return found
