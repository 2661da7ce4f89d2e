"""Stable island identifiers.

An island is keyed by its project-relative, forward-slash source path
(``islands/ui/counter.island.html``). The compiler, the import rewriter,
and the marker runtime all derive ids through :func:`island_id`; any
divergence would break registry lookups silently.
"""

import posixpath
from pathlib import Path, PurePosixPath

ISLAND_SUFFIX = ".island.html"


def island_id(source: str | Path, root: str | Path) -> str:
    """Return the stable id for an island source path.

    *source* may be absolute or relative to *root*. Backslashes,
    ``.`` and ``..`` segments are normalized away.
    """
    root_path = Path(root).resolve()
    path = Path(str(source).replace("\\", "/"))
    if not path.is_absolute():
        path = root_path / path
    return path.resolve().relative_to(root_path).as_posix()


def template_island_id(target: str) -> str:
    """Normalize a template import target into an island id.

    Template names are already root-relative, so this only cleans the
    separators and dot segments.
    """
    normalized = posixpath.normpath(target.replace("\\", "/"))
    return str(PurePosixPath(normalized)).lstrip("/")


def is_island_source(name: str | Path) -> bool:
    """True if *name* follows the island file-naming convention."""
    return str(name).replace("\\", "/").endswith(ISLAND_SUFFIX)


def island_stem(source: str | Path) -> str:
    """``counter.island.html`` -> ``counter.island``."""
    name = Path(source).name
    return name[: -len(".html")] if name.endswith(".html") else name
