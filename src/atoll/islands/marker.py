"""Island marker runtime.

Called synchronously while a page template is being rendered, whenever
the page invokes an island proxy. For each call it:

1. Looks up the island's precompiled server module in the registry.
2. Records the island as used by the current page.
3. Validates and strips the hydration directive from the properties.
4. Renders static markup, substituting a visible error box if the
   island's server render raises.
5. Returns either a plain container (``no:pasaran``) or an
   ``<atoll-island>`` hydration wrapper.

Per-page usage state lives in a ``ContextVar``. Each page build enters
its own :func:`page_scope`, so pages rendered on different threads never
share state.
"""

from __future__ import annotations

import html
import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from atoll.errors import DirectiveConflictError, IslandError, IslandNotFoundError
from atoll.islands.props import encode_props, format_attrs

if TYPE_CHECKING:
    from atoll.islands.registry import IslandRegistry

logger = logging.getLogger("atoll.islands")

ELEMENT_TAG = "atoll-island"

STATIC = "no:pasaran"
EAGER = "lenin:awake"
VISIBLE = "comrade:visible"

DIRECTIVES: tuple[str, ...] = (EAGER, VISIBLE, STATIC)
DEFAULT_DIRECTIVE = VISIBLE


# -- Per-page usage state --


@dataclass(slots=True)
class PageState:
    """Islands touched while rendering one page.

    Attributes:
        used_islands: Ids of every island rendered on the page.
            Drives island stylesheet injection.
        needs_hydration: True once any island used a directive other
            than ``no:pasaran``. Drives runtime script injection.
    """

    used_islands: set[str] = field(default_factory=set)
    needs_hydration: bool = False


_page_state: ContextVar[PageState] = ContextVar("atoll_page_state")


@contextmanager
def page_scope() -> Iterator[PageState]:
    """Install a fresh :class:`PageState` for the duration of one page render."""
    state = PageState()
    token = _page_state.set(state)
    try:
        yield state
    finally:
        _page_state.reset(token)


def current_page_state() -> PageState:
    """Return the active page state.

    Raises :class:`IslandError` outside a :func:`page_scope`.
    """
    try:
        return _page_state.get()
    except LookupError:
        raise IslandError("Island rendered outside of a page scope") from None


# -- Directives --


def resolve_directive(island_id: str, props: Mapping[str, Any] | None) -> tuple[str, dict[str, Any]]:
    """Extract the directive from *props*.

    Returns ``(directive, clean_props)`` where *clean_props* no longer
    carries the directive key. Zero directives resolves to
    ``comrade:visible``; more than one raises
    :class:`DirectiveConflictError`.
    """
    clean = dict(props or {})
    found = tuple(d for d in DIRECTIVES if d in clean)
    if len(found) > 1:
        raise DirectiveConflictError(island_id, found)
    for directive in found:
        del clean[directive]
    return (found[0] if found else DEFAULT_DIRECTIVE), clean


# -- Render nodes --


@dataclass(frozen=True, slots=True)
class IslandNode:
    """A render-tree node produced by the marker.

    ``html`` is trusted, already-rendered inner markup.
    """

    tag: str
    attrs: tuple[tuple[str, str | bool], ...] = ()
    html: str = ""

    def get(self, name: str) -> str | bool | None:
        for key, value in self.attrs:
            if key == name:
                return value
        return None

    @property
    def is_hydrated(self) -> bool:
        return self.tag == ELEMENT_TAG

    def to_html(self) -> str:
        attrs = format_attrs(dict(self.attrs))
        open_tag = f"<{self.tag} {attrs}>" if attrs else f"<{self.tag}>"
        return f"{open_tag}{self.html}</{self.tag}>"

    def __html__(self) -> str:
        return self.to_html()

    def __str__(self) -> str:
        return self.to_html()


_FALLBACK_STYLE = (
    "border:2px dashed #c41e3a;padding:1rem;color:#c41e3a;"
    "background:#fff0f0;font-family:monospace;font-size:0.9em"
)


def fallback_markup(island_id: str, error: BaseException) -> str:
    """Visible error box that replaces an island whose server render failed."""
    return (
        f'<div class="atoll-island-error" style="{_FALLBACK_STYLE}">'
        "<strong>Island failed to render</strong>"
        f'<div style="margin-top:0.5rem;opacity:0.8">Error in {html.escape(island_id)}</div>'
        f'<pre style="margin-top:0.5rem;white-space:pre-wrap;word-break:break-word">'
        f"{html.escape(str(error) or type(error).__name__)}</pre>"
        "</div>"
    )


def find_island_error(exc: BaseException) -> IslandError | None:
    """Return the first :class:`IslandError` in the cause chain of *exc*."""
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, IslandError):
            return current
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return None


# -- Runtime --


class MarkerRuntime:
    """Resolve island invocations against a registry during page renders.

    One instance is shared by every page of a build; all per-page state
    is held in the active :func:`page_scope`.
    """

    __slots__ = ("_registry",)

    def __init__(self, registry: IslandRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> IslandRegistry:
        return self._registry

    def render_marker(self, island_id: str, props: Mapping[str, Any] | None = None) -> IslandNode:
        record = self._registry.get_record(island_id)
        if record is None:
            raise IslandNotFoundError(island_id)

        state = current_page_state()
        state.used_islands.add(island_id)

        directive, clean_props = resolve_directive(island_id, props)
        static_html = self._render_server(record.server_module, island_id, clean_props)

        if directive == STATIC:
            return IslandNode(tag="div", html=static_html)

        state.needs_hydration = True
        attrs: list[tuple[str, str | bool]] = [
            ("directive", directive),
            ("import", record.client_path),
        ]
        attrs.extend(encode_props(clean_props, island_id).items())
        return IslandNode(tag=ELEMENT_TAG, attrs=tuple(attrs), html=static_html)

    def render_static(self, island_id: str, props: Mapping[str, Any] | None = None) -> str:
        """Render an island's server markup with no wrapper.

        Used for islands nested inside another island: the outer
        island's hydration owns the whole subtree, so the inner one
        contributes styles but never its own wrapper.
        """
        record = self._registry.get_record(island_id)
        if record is None:
            raise IslandNotFoundError(island_id)
        current_page_state().used_islands.add(island_id)
        _, clean_props = resolve_directive(island_id, props)
        return self._render_server(record.server_module, island_id, clean_props)

    @staticmethod
    def _render_server(server_module: Any, island_id: str, props: dict[str, Any]) -> str:
        try:
            return str(server_module.render(props))
        except IslandError:
            raise
        except Exception as exc:
            # Nested island failures may arrive wrapped by the template engine.
            nested = find_island_error(exc)
            if nested is not None:
                raise nested
            logger.warning("Island %s failed to render on the server: %s", island_id, exc, exc_info=exc)
            return fallback_markup(island_id, exc)
