"""Island import interception for page and layout templates.

Pages import islands like any other template::

    {% from "islands/counter.island.html" import Counter %}
    {% import "islands/counter.island.html" as Counter %}
    {% include "islands/counter.island.html" %}

Before a page, layout, or component template is handed to kida, the
rewriter replaces each such statement with a proxy binding::

    {% set Counter = atoll_island("islands/counter.island.html") %}

so the real island source is never compiled into the page. Calling the
proxy delegates to the shared :class:`MarkerRuntime`.

While the compiler builds an island's own server template it enters
:meth:`IslandImportRewriter.passthrough`. In that context island
imports bind to ``atoll_island_static`` instead: nested islands render
their plain markup and the island being compiled is never proxied back
onto itself.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

from kida.template import Markup

from atoll.islands.ids import template_island_id

if TYPE_CHECKING:
    from kida import Environment

    from atoll.islands.marker import MarkerRuntime

PROXY_GLOBAL = "atoll_island"
STATIC_GLOBAL = "atoll_island_static"

_TARGET = r"""(?P<q>['"])(?P<target>[^'"]+\.island\.html)(?P=q)"""

_FROM_RE = re.compile(
    r"\{%(?P<lws>-?)\s*from\s+" + _TARGET + r"\s+import\s+(?P<names>.+?)\s*(?P<rws>-?)%\}",
    re.DOTALL,
)
_IMPORT_RE = re.compile(
    r"\{%(?P<lws>-?)\s*import\s+" + _TARGET + r"\s+as\s+(?P<alias>\w+)"
    r"(?:\s+(?:with|without)\s+context)?\s*(?P<rws>-?)%\}",
)
_INCLUDE_RE = re.compile(
    r"\{%(?P<lws>-?)\s*include\s+" + _TARGET + r"(?:\s+(?:with|without)\s+context)?\s*(?P<rws>-?)%\}",
)
_CONTEXT_SUFFIX_RE = re.compile(r"\s+(?:with|without)\s+context\s*$")
_NAME_RE = re.compile(r"^(?P<name>\w+)(?:\s+as\s+(?P<alias>\w+))?$")

_passthrough: ContextVar[bool] = ContextVar("atoll_island_passthrough", default=False)


class IslandImportRewriter:
    """Rewrite island imports in template source into proxy bindings."""

    __slots__ = ()

    @contextmanager
    def passthrough(self) -> Iterator[None]:
        """Mark the current context as compiling an island's own template."""
        token = _passthrough.set(True)
        try:
            yield
        finally:
            _passthrough.reset(token)

    @property
    def in_passthrough(self) -> bool:
        return _passthrough.get()

    def rewrite(self, source: str) -> str:
        """Return *source* with every island import replaced by a proxy."""
        factory = STATIC_GLOBAL if self.in_passthrough else PROXY_GLOBAL
        source = _FROM_RE.sub(lambda m: self._rewrite_from(m, factory), source)
        source = _IMPORT_RE.sub(lambda m: self._bind(m, factory, [m.group("alias")]), source)
        return _INCLUDE_RE.sub(lambda m: self._rewrite_include(m, factory), source)

    def _rewrite_from(self, match: re.Match[str], factory: str) -> str:
        names = _CONTEXT_SUFFIX_RE.sub("", match.group("names"))
        aliases: list[str] = []
        for part in names.split(","):
            parsed = _NAME_RE.match(part.strip())
            if parsed is None:
                # Leave anything unexpected for kida to report.
                return match.group(0)
            aliases.append(parsed.group("alias") or parsed.group("name"))
        return self._bind(match, factory, aliases)

    @staticmethod
    def _bind(match: re.Match[str], factory: str, aliases: list[str]) -> str:
        ident = template_island_id(match.group("target"))
        statements = [f'{{% set {alias} = {factory}("{ident}") %}}' for alias in aliases]
        # Carry whitespace control over to the first and last statement.
        if match.group("lws"):
            statements[0] = "{%-" + statements[0][2:]
        if match.group("rws"):
            statements[-1] = statements[-1][:-2] + "-%}"
        return "".join(statements)

    @staticmethod
    def _rewrite_include(match: re.Match[str], factory: str) -> str:
        ident = template_island_id(match.group("target"))
        lws = "-" if match.group("lws") else ""
        rws = "-" if match.group("rws") else ""
        return f'{{{{{lws} {factory}("{ident}")() {rws}}}}}'


class IslandProxy:
    """Stand-in for an island component inside page templates.

    Accepts an optional positional properties mapping (needed for
    directive keys such as ``"lenin:awake"``, which are not valid
    keyword names) plus keyword properties::

        {{ Counter(initial=5) }}
        {{ Counter({"initial": 5, "lenin:awake": true}) }}
    """

    __slots__ = ("_runtime", "island_id")

    def __init__(self, runtime: MarkerRuntime, island_id: str) -> None:
        self._runtime = runtime
        self.island_id = island_id

    def __call__(self, props: Mapping[str, Any] | None = None, /, **kwargs: Any) -> Markup:
        merged = {**(props or {}), **kwargs}
        return Markup(self._runtime.render_marker(self.island_id, merged).to_html())

    def __repr__(self) -> str:
        return f"IslandProxy({self.island_id!r})"


class IslandStaticProxy(IslandProxy):
    """Proxy for islands nested in another island: plain markup, no wrapper."""

    __slots__ = ()

    def __call__(self, props: Mapping[str, Any] | None = None, /, **kwargs: Any) -> Markup:
        merged = {**(props or {}), **kwargs}
        return Markup(self._runtime.render_static(self.island_id, merged))


def install_island_globals(env: Environment, runtime: MarkerRuntime) -> None:
    """Bind the proxy factories to *env*.

    Every template compiled by *env* resolves islands through the same
    *runtime*, and therefore the same registry.
    """
    env.add_global(PROXY_GLOBAL, lambda island_id: IslandProxy(runtime, island_id))
    env.add_global(STATIC_GLOBAL, lambda island_id: IslandStaticProxy(runtime, island_id))
