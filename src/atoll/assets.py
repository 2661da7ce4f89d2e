"""Page asset collection and injection.

Every page gets the same treatment once its markup is rendered:

1. Resolution: page CSS, layout CSS, styles of the islands the page
   actually used, the hydration runtime (only if something hydrates),
   and the live-reload client in dev mode.
2. Injection: tags are inserted before ``</head>``, falling back to
   ``</body>``, falling back to appending. An import map goes first.
3. A ``<!DOCTYPE html>`` is ensured.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Literal

from atoll.islands.props import format_attrs

AssetTag = Literal["link", "script", "style"]

LIVE_RELOAD_SCRIPT = """\
(function() {
  var es = new EventSource("/__reload__");
  es.addEventListener("reload", function() { location.reload(); });
  es.onerror = function() { setTimeout(function() { location.reload(); }, 2000); };
})();"""


@dataclass(frozen=True, slots=True)
class Asset:
    """A ``<link>``, ``<script>``, or ``<style>`` tag destined for the page head.

    Usage::

        Asset.stylesheet("/about.css")
        Asset.script(src="/atoll-island.js", type="module")
        Asset.script(content="console.log(1)")
    """

    tag: AssetTag
    attrs: tuple[tuple[str, str | bool], ...] = ()
    content: str | None = None
    attributes: dict[str, str | bool] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", dict(self.attrs))

    @classmethod
    def stylesheet(cls, href: str) -> Asset:
        return cls("link", (("rel", "stylesheet"), ("href", href)))

    @classmethod
    def script(cls, *, src: str | None = None, content: str | None = None, **attrs: str | bool) -> Asset:
        pairs: list[tuple[str, str | bool]] = list(attrs.items())
        if src is not None:
            pairs.append(("src", src))
        return cls("script", tuple(pairs), content)

    @classmethod
    def style(cls, content: str, **attrs: str | bool) -> Asset:
        return cls("style", tuple(attrs.items()), content)

    def to_html(self) -> str:
        attrs = format_attrs(self.attributes)
        space = " " if attrs else ""
        if self.tag == "link":
            return f"<link{space}{attrs}>"
        return f"<{self.tag}{space}{attrs}>{self.content or ''}</{self.tag}>"


def live_reload_asset() -> Asset:
    return Asset.script(content=LIVE_RELOAD_SCRIPT)


def island_style_assets(used_islands: Iterable[str], manifest: Mapping[str, str]) -> list[Asset]:
    """Inline ``<style>`` tags for the used islands that carry styles.

    Sorted by island id so output is stable regardless of render order.
    """
    return [
        Asset.style(manifest[ident], **{"data-island": ident})
        for ident in sorted(set(used_islands))
        if manifest.get(ident)
    ]


def import_map_html(import_map: Mapping[str, str]) -> str:
    if not import_map:
        return ""
    payload = json.dumps({"imports": dict(import_map)}, indent=2)
    return f'<script type="importmap">{payload}</script>'


def inject_assets(
    page_html: str,
    assets: Iterable[Asset] = (),
    *,
    import_map: Mapping[str, str] | None = None,
) -> str:
    """Insert asset tags into *page_html*. Pure string transform."""
    tags = [import_map_html(import_map or {})]
    tags.extend(asset.to_html() for asset in assets)
    injection = "\n".join(tag for tag in tags if tag)

    output = page_html
    if injection:
        for target in ("</head>", "</body>"):
            index = output.find(target)
            if index != -1:
                output = output[:index] + injection + "\n" + output[index:]
                break
        else:
            output = output + "\n" + injection

    if not output.lstrip().lower().startswith("<!doctype"):
        output = "<!DOCTYPE html>\n" + output
    return output
