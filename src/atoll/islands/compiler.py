"""Island compiler.

Turns one ``*.island.html`` single-file component into two independent
artifacts:

- a **server module**: the kida template part, with every ``<style>``
  and ``<script>`` block stubbed out, ready for synchronous rendering
  during page builds;
- a **client bundle**: the ``<script>`` block wrapped into an ES module
  whose default export is ``async (container, props) => void``, named
  by a hash of its content so unchanged islands keep their URL.

Extracted ``<style>`` blocks become a sibling stylesheet artifact.

Only blocks whose opening tag starts at column 0 are extracted; an
indented ``<script>`` inside the markup stays part of the template.

The two sides see property names differently. The server template gets
each key as written in the invocation (``initial_count``); the client
mount reads them back from ``data-*`` attributes, camelCased
(``props.initialCount``).
"""

from __future__ import annotations

import hashlib
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from atoll.errors import BundleError, IslandCompileError
from atoll.islands.ids import island_id, island_stem

if TYPE_CHECKING:
    from kida import Environment

    from atoll.islands.bundler import Bundler
    from atoll.islands.plugin import IslandImportRewriter

logger = logging.getLogger("atoll.islands")

_STYLE_RE = re.compile(r"^<style\b[^>]*>(.*?)</style>[ \t]*\n?", re.MULTILINE | re.DOTALL)
_SCRIPT_RE = re.compile(r"^<script\b([^>]*)>(.*?)</script>[ \t]*\n?", re.MULTILINE | re.DOTALL)
_EXPORT_DEFAULT_RE = re.compile(r"^\s*export\s+default\b", re.MULTILINE)
_EXPORT_HYDRATE_RE = re.compile(
    r"^\s*export\s+(?:(?:async\s+)?function\s*\*?\s*hydrate\b|(?:const|let|var)\s+hydrate\b)"
    r"|^\s*export\s*\{[^}]*\bhydrate\b[^}]*\}",
    re.MULTILINE,
)

HASH_LENGTH = 8

NOOP_MOUNT = "export default async () => {};\n"

MOUNT_WRAPPER = """
export default async (container, props) => {
  await hydrate(container, props);
};
"""


class ServerModule(Protocol):
    """Anything that renders an island to markup from properties."""

    def render(self, props: Mapping[str, Any]) -> str: ...


class TemplateServerModule:
    """Server module backed by a compiled kida template.

    Each property is a top-level template variable; the full mapping is
    also exposed as ``props``.
    """

    __slots__ = ("_template", "island_id")

    def __init__(self, template: Any, island_id: str) -> None:
        self._template = template
        self.island_id = island_id

    def render(self, props: Mapping[str, Any]) -> str:
        context = dict(props)
        context["props"] = dict(props)
        return self._template.render(context)

    def __repr__(self) -> str:
        return f"TemplateServerModule({self.island_id!r})"


@dataclass(frozen=True, slots=True)
class IslandParts:
    """The three sections of an island source file."""

    markup: str
    styles: tuple[str, ...]
    script: str | None


@dataclass(frozen=True, slots=True)
class ClientArtifact:
    filename: str
    code: str


@dataclass(frozen=True, slots=True)
class StyleArtifact:
    filename: str
    content: str


@dataclass(frozen=True, slots=True)
class CompiledIsland:
    """Output of :meth:`IslandCompiler.compile`."""

    id: str
    source_path: Path
    server: ServerModule
    client: ClientArtifact
    style: StyleArtifact | None = None


def split_island(source: str, source_path: str | Path = "<island>") -> IslandParts:
    """Separate an island source into markup, styles, and script."""
    styles = tuple(m.group(1).strip() for m in _STYLE_RE.finditer(source))
    scripts = list(_SCRIPT_RE.finditer(source))
    if len(scripts) > 1:
        raise IslandCompileError(source_path, f"expected at most one <script> block, found {len(scripts)}")
    if scripts and "src=" in scripts[0].group(1):
        raise IslandCompileError(source_path, "the island <script> block must be inline (no src attribute)")

    markup = _SCRIPT_RE.sub("", _STYLE_RE.sub("", source)).strip()
    script = scripts[0].group(2).strip() if scripts else None
    return IslandParts(markup=markup, styles=tuple(s for s in styles if s), script=script or None)


def content_hash(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:HASH_LENGTH]


def client_entry(script: str | None, source_path: str | Path = "<island>") -> str:
    """Build the mount entry module for an island script.

    A script with its own ``export default`` is used unchanged. One that
    only exports ``hydrate`` gets a default mount wrapper appended.
    """
    if script is None:
        return NOOP_MOUNT
    if _EXPORT_DEFAULT_RE.search(script):
        return script + "\n"
    if _EXPORT_HYDRATE_RE.search(script):
        return script + "\n" + MOUNT_WRAPPER
    raise IslandCompileError(
        source_path,
        "the <script> block must export a hydrate(container, props) function or a default mount function",
    )


class IslandCompiler:
    """Compile island sources against one kida environment.

    The server template is compiled inside the import rewriter's
    passthrough context, so the island is never replaced by its own
    marker proxy.
    """

    __slots__ = ("_bundler", "_env", "_rewriter", "_root")

    def __init__(
        self,
        env: Environment,
        bundler: Bundler,
        rewriter: IslandImportRewriter,
        *,
        root: str | Path,
    ) -> None:
        self._env = env
        self._bundler = bundler
        self._rewriter = rewriter
        self._root = Path(root).resolve()

    def compile(self, source_path: str | Path) -> CompiledIsland:
        path = Path(source_path).resolve()
        ident = island_id(path, self._root)
        try:
            source = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise IslandCompileError(path, f"cannot read source: {exc}") from exc

        parts = split_island(source, path)
        server = self._compile_server(parts, ident, path)
        client = self._compile_client(parts, ident, path)
        style = self._extract_style(parts, path)

        logger.debug("Compiled island %s -> %s", ident, client.filename)
        return CompiledIsland(id=ident, source_path=path, server=server, client=client, style=style)

    def _compile_server(self, parts: IslandParts, ident: str, path: Path) -> ServerModule:
        with self._rewriter.passthrough():
            markup = self._rewriter.rewrite(parts.markup)
        try:
            template = self._env.from_string(markup)
        except Exception as exc:
            raise IslandCompileError(path, f"server template failed to compile: {exc}") from exc
        return TemplateServerModule(template, ident)

    def _compile_client(self, parts: IslandParts, ident: str, path: Path) -> ClientArtifact:
        entry = f"// {ident}\n" + client_entry(parts.script, path)
        try:
            code = self._bundler.bundle(entry, resolve_dir=path.parent, filename=path.name)
        except BundleError as exc:
            raise IslandCompileError(path, f"client bundle failed: {exc}") from exc
        return ClientArtifact(filename=f"{island_stem(path)}.{content_hash(code)}.js", code=code)

    def _extract_style(self, parts: IslandParts, path: Path) -> StyleArtifact | None:
        if not parts.styles:
            return None
        content = "\n\n".join(parts.styles) + "\n"
        return StyleArtifact(filename=f"{island_stem(path)}.{content_hash(content)}.css", content=content)
