"""Atoll exception hierarchy.

Shared across the island compiler, registry, marker runtime, and the
page builder so every stage raises and catches the same types.
"""

from dataclasses import dataclass
from pathlib import Path


class AtollError(Exception):
    """Base for all atoll-specific errors."""


class ConfigurationError(AtollError):
    """Raised when site configuration is invalid.

    Typically raised by ``load_config()`` before any build work starts.
    """


# -- Islands --


class IslandError(AtollError):
    """Base for island subsystem errors."""


class IslandCompileError(IslandError):
    """An island source file could not be compiled.

    Fatal for the whole ``IslandRegistry.load()`` call: a partial
    registry is never installed.
    """

    def __init__(self, source_path: str | Path, reason: str) -> None:
        self.source_path = Path(source_path)
        self.reason = reason
        super().__init__(f"Failed to compile island {self.source_path}: {reason}")


class BundleError(IslandError):
    """Raised by a bundler when an island entry cannot be bundled."""


class IslandNotFoundError(IslandError):
    """A page referenced an island identifier absent from the registry."""

    def __init__(self, island_id: str) -> None:
        self.island_id = island_id
        super().__init__(f'Island "{island_id}" not found in registry')


class DirectiveConflictError(IslandError):
    """More than one hydration directive on a single island invocation."""

    def __init__(self, island_id: str, directives: tuple[str, ...]) -> None:
        self.island_id = island_id
        self.directives = directives
        joined = ", ".join(directives)
        super().__init__(
            f'Multiple directives on island "{island_id}": {joined}. Use only one.'
        )


class InvalidPropError(IslandError):
    """An island property key cannot be written as a ``data-*`` attribute.

    Keys may contain ASCII letters, digits, ``_`` and ``-`` only.
    """

    def __init__(self, island_id: str, key: object) -> None:
        self.island_id = island_id
        self.key = key
        super().__init__(
            f"Invalid property name {key!r} on island {island_id}: "
            "use only letters, digits, '_' and '-'"
        )


# -- Pages --


class PageBuildError(AtollError):
    """A page could not be rendered or written."""


class LayoutNotFoundError(PageBuildError):
    """A page asked for a layout that does not exist."""

    def __init__(self, layout: str) -> None:
        self.layout = layout
        super().__init__(f"Layout '{layout}' not found in layouts directory")


@dataclass(slots=True)
class RouteConflictError(PageBuildError):
    """Two page sources map to the same output file."""

    output_path: str
    first: str
    second: str

    def __str__(self) -> str:
        return (
            f"Route conflict: multiple pages map to {self.output_path}\n"
            f"  - {self.first}\n"
            f"  - {self.second}\n"
            "Remove or rename one of these files."
        )


class InvalidMetaError(PageBuildError):
    """Page frontmatter failed validation."""

    def __init__(self, source: str, issues: list[str]) -> None:
        self.source = source
        self.issues = issues
        details = "\n".join(f"  - {issue}" for issue in issues)
        super().__init__(f"Invalid page meta in {source}:\n{details}")


class FrontmatterError(PageBuildError):
    """A page's YAML frontmatter block could not be parsed."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to parse YAML frontmatter in {source}: {reason}")
