"""Site build orchestration.

A :class:`Site` owns the pieces that live across builds (configuration,
the island registry, the marker runtime) and recreates the rest on each
``build()``: a fresh kida environment over freshly collected sources, a
compiler bound to it, layouts, and the page list.

Build order::

    clean output -> copy public/ -> discover pages -> environment
    -> compile islands -> write hydration runtime -> layouts -> pages

Any island compile failure aborts the build before a single page is
written. A failing island *render* only affects that island's markup.
"""

from __future__ import annotations

import contextvars
import logging
import shutil
import threading
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

from atoll.assets import Asset, inject_assets, island_style_assets, live_reload_asset
from atoll.config import SiteConfig
from atoll.errors import AtollError, ConfigurationError, PageBuildError
from atoll.islands.bundler import Bundler, create_bundler
from atoll.islands.compiler import IslandCompiler
from atoll.islands.hydration import runtime_asset, write_runtime
from atoll.islands.marker import MarkerRuntime, PageState, find_island_error, page_scope
from atoll.islands.plugin import IslandImportRewriter, install_island_globals
from atoll.islands.registry import IslandRegistry
from atoll.markdown import MarkdownRenderer
from atoll.pages.discovery import discover_pages
from atoll.pages.layouts import LayoutRegistry, copy_stylesheet
from atoll.pages.renderer import PageRenderer
from atoll.pages.types import BuildResult, BuiltPage, Page
from atoll.templating.integration import collect_templates, create_environment

logger = logging.getLogger("atoll.build")


class Site:
    """A buildable site rooted at ``config.root``.

    Usage::

        site = Site(load_config("my-site"))
        result = site.build()

    Args:
        config: Site configuration (defaults to the current directory).
        filters: Extra kida filters available to every template.
        globals_: Extra kida globals available to every template.
        bundler: Override the bundler selected by ``config.bundler``.
    """

    def __init__(
        self,
        config: SiteConfig | None = None,
        *,
        filters: dict[str, Callable[..., Any]] | None = None,
        globals_: dict[str, Any] | None = None,
        bundler: Bundler | None = None,
    ) -> None:
        self.config = config or SiteConfig()
        self._filters = dict(filters or {})
        self._globals = dict(globals_ or {})
        self._bundler = bundler or create_bundler(self.config)
        self._rewriter = IslandImportRewriter()
        self.registry = IslandRegistry(
            islands_dir=self.config.path("islands_dir"),
            output_dir=self.output_dir,
        )
        self.runtime = MarkerRuntime(self.registry)
        self.markdown = MarkdownRenderer()
        self._lock = threading.Lock()

    @property
    def output_dir(self) -> Path:
        return self.config.path("output_dir")

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    def build(self) -> BuildResult:
        """Build the whole site into the output directory.

        Builds are serialized: a second call waits for the first to
        finish, so page renders never observe a half-loaded registry.
        """
        with self._lock:
            started = time.perf_counter()
            config = self.config
            out = self.output_dir

            self._prepare_output(out)

            pages = discover_pages(config.path("pages_dir"), config.root_path)
            templates = collect_templates(config, pages, self._rewriter)
            env = create_environment(config, templates, self._filters, self._globals)
            install_island_globals(env, self.runtime)

            self.registry.compiler = IslandCompiler(env, self._bundler, self._rewriter, root=config.root_path)
            records = self.registry.load()
            write_runtime(out)

            layouts = LayoutRegistry(config.path("layouts_dir"), out, root=config.root_path)
            layouts.load()
            renderer = PageRenderer(env, layouts, self.markdown)

            built = self._build_pages(pages, renderer, layouts)

            elapsed = time.perf_counter() - started
            logger.info("Built %d page%s in %.2fs", len(built), "" if len(built) == 1 else "s", elapsed)
            return BuildResult(
                pages=tuple(built),
                islands=tuple(record.id for record in records),
                elapsed=elapsed,
            )

    def _prepare_output(self, out: Path) -> None:
        root = self.config.root_path
        resolved = out.resolve()
        if resolved == root or resolved in root.parents:
            raise ConfigurationError(f"Refusing to clean output directory {resolved}: it contains the site root")

        if out.exists():
            shutil.rmtree(out)
        out.mkdir(parents=True)

        public = self.config.path("public_dir")
        if public.is_dir():
            shutil.copytree(public, out, dirs_exist_ok=True)
            logger.debug("Copied public assets from %s", public)

    def _build_pages(self, pages: list[Page], renderer: PageRenderer, layouts: LayoutRegistry) -> list[BuiltPage]:
        workers = min(self.config.workers, len(pages))
        if workers <= 1:
            return [self._build_page(page, renderer, layouts) for page in pages]

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="atoll-page") as pool:
            futures = [
                pool.submit(contextvars.copy_context().run, self._build_page, page, renderer, layouts)
                for page in pages
            ]
            return [future.result() for future in futures]

    def _build_page(self, page: Page, renderer: PageRenderer, layouts: LayoutRegistry) -> BuiltPage:
        try:
            with page_scope() as state:
                html = renderer.render(page)
            html = inject_assets(html, self._page_assets(page, state, layouts), import_map=self._import_map())
            target = self.output_dir / page.output_name
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(html, encoding="utf-8")
        except AtollError:
            raise
        except Exception as exc:
            nested = find_island_error(exc)
            if nested is not None:
                raise nested
            raise PageBuildError(f"Failed to build {page.template_name}: {exc}") from exc

        logger.debug("Wrote %s", page.output_name)
        return BuiltPage(
            page=page,
            output_path=target,
            islands=frozenset(state.used_islands),
            hydrated=state.needs_hydration,
        )

    # ------------------------------------------------------------------
    # Assets
    # ------------------------------------------------------------------

    def _page_assets(self, page: Page, state: PageState, layouts: LayoutRegistry) -> list[Asset]:
        """Page CSS, layout CSS, island styles, runtime, live reload."""
        assets: list[Asset] = []

        css_name = Path(page.output_name).with_suffix(".css").as_posix()
        page_css = copy_stylesheet(page.source_path, self.output_dir, css_name)
        if page_css is not None:
            assets.append(page_css)

        layout = page.layout
        if layout is not None:
            layout_css = layouts.css_asset(layout)
            if layout_css is not None:
                assets.append(layout_css)

        assets.extend(island_style_assets(state.used_islands, self.registry.get_style_manifest()))

        if state.needs_hydration:
            assets.append(runtime_asset())
        if self.config.dev:
            assets.append(live_reload_asset())
        return assets

    def _import_map(self) -> dict[str, str] | None:
        if self.config.import_map and len(self.registry):
            return self.config.import_map
        return None
