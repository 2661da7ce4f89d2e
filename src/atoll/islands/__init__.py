"""Islands: interactive components inside static pages.

An island is a ``*.island.html`` single-file component. At build time it
is compiled into a server template (rendered into the page) and a
client bundle (loaded by the ``<atoll-island>`` element when its
hydration directive fires).

Directives, passed as property keys on an island invocation:

- ``comrade:visible`` (default): hydrate when scrolled into view.
- ``lenin:awake``: hydrate as soon as the page loads.
- ``no:pasaran``: static markup only, no client code.
"""

from atoll.islands.bundler import Bundler, EsbuildBundler, PassthroughBundler, create_bundler
from atoll.islands.compiler import CompiledIsland, IslandCompiler, split_island
from atoll.islands.marker import (
    DEFAULT_DIRECTIVE,
    DIRECTIVES,
    EAGER,
    STATIC,
    VISIBLE,
    IslandNode,
    MarkerRuntime,
    PageState,
    current_page_state,
    page_scope,
)
from atoll.islands.plugin import IslandImportRewriter, IslandProxy, install_island_globals
from atoll.islands.registry import IslandRecord, IslandRegistry

__all__ = [
    "DEFAULT_DIRECTIVE",
    "DIRECTIVES",
    "EAGER",
    "STATIC",
    "VISIBLE",
    "Bundler",
    "CompiledIsland",
    "EsbuildBundler",
    "IslandCompiler",
    "IslandImportRewriter",
    "IslandNode",
    "IslandProxy",
    "IslandRecord",
    "IslandRegistry",
    "MarkerRuntime",
    "PageState",
    "PassthroughBundler",
    "create_bundler",
    "current_page_state",
    "install_island_globals",
    "page_scope",
    "split_island",
]
