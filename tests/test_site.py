"""End-to-end builds through atoll.site.Site."""

import re
from pathlib import Path

import pytest

from atoll.config import SiteConfig
from atoll.errors import (
    DirectiveConflictError,
    InvalidPropError,
    IslandCompileError,
    IslandNotFoundError,
    LayoutNotFoundError,
    RouteConflictError,
)
from atoll.islands.hydration import RUNTIME_FILENAME
from atoll.site import Site

from conftest import Writer

COUNTER_PAGE = """\
{% from "islands/counter.island.html" import Counter %}
<h1>Counter</h1>
{{ Counter(initial=5) }}
"""

_WRAPPER_RE = re.compile(
    r'<atoll-island directive="comrade:visible" import="(/islands/counter\.island\.[0-9a-f]{8}\.js)" data-initial="5">'
)


def _build(root: Path, **overrides: object) -> Site:
    site = Site(SiteConfig(root=root, **overrides))  # type: ignore[arg-type]
    site.build()
    return site


def _read(root: Path, name: str) -> str:
    return (root / "dist" / name).read_text(encoding="utf-8")


class TestIslandPages:
    def test_counter_wrapper_and_bundle(self, site_root: Path, write: Writer) -> None:
        write("pages/index.html", COUNTER_PAGE)
        site = _build(site_root)

        html = _read(site_root, "index.html")
        match = _WRAPPER_RE.search(html)
        assert match is not None
        assert (site_root / "dist" / match.group(1).lstrip("/")).is_file()
        assert '<div class="counter"><button>5</button></div></atoll-island>' in html
        assert len(site.registry) == 1

    def test_runtime_and_island_style_injected(self, site_root: Path, write: Writer) -> None:
        write("pages/index.html", COUNTER_PAGE)
        _build(site_root)

        html = _read(site_root, "index.html")
        assert html.startswith("<!DOCTYPE html>")
        assert f'<script type="module" src="/{RUNTIME_FILENAME}"></script>' in html
        assert '<style data-island="islands/counter.island.html">' in html
        assert html.index("tomato") < html.index("</head>")
        assert (site_root / "dist" / RUNTIME_FILENAME).is_file()

    def test_two_invocations_one_record(self, site_root: Path, write: Writer) -> None:
        write(
            "pages/index.html",
            """\
            {% from "islands/counter.island.html" import Counter %}
            {{ Counter(initial=1) }}
            {{ Counter(initial=2) }}
            """,
        )
        site = _build(site_root)

        html = _read(site_root, "index.html")
        assert html.count("<atoll-island ") == 2
        assert html.count('<style data-island="islands/counter.island.html">') == 1
        assert len(site.registry) == 1

    def test_static_directive_from_frontmatter(self, site_root: Path, write: Writer) -> None:
        write(
            "pages/index.html",
            """\
            ---
            counter:
              initial: 3
              "no:pasaran": true
            ---
            {% from "islands/counter.island.html" import Counter %}
            {{ Counter(counter) }}
            """,
        )
        _build(site_root)

        html = _read(site_root, "index.html")
        assert "<atoll-island" not in html
        assert '<div><div class="counter"><button>3</button></div></div>' in html
        assert RUNTIME_FILENAME not in html
        assert '<style data-island="islands/counter.island.html">' in html

    def test_page_without_islands(self, site_root: Path, write: Writer) -> None:
        write("pages/index.html", COUNTER_PAGE)
        write("pages/about.html", "<p>plain</p>")
        _build(site_root)

        html = _read(site_root, "about.html")
        assert RUNTIME_FILENAME not in html
        assert "<style" not in html
        assert "<p>plain</p>" in html

    def test_styles_only_for_used_islands(self, site_root: Path, write: Writer) -> None:
        for name in ("a", "b", "c"):
            write(f"islands/{name}.island.html", f"<i>{name}</i>\n<style>\n.{name} {{ color: red; }}\n</style>\n")
        write(
            "pages/index.html",
            """\
            {% from "islands/a.island.html" import A %}
            {% from "islands/b.island.html" import B %}
            {{ A() }}{{ B() }}
            """,
        )
        _build(site_root)

        html = _read(site_root, "index.html")
        assert ".a { color: red; }" in html
        assert ".b { color: red; }" in html
        assert ".c { color: red; }" not in html

    def test_failing_island_still_writes_page(self, site_root: Path, write: Writer) -> None:
        write("islands/boom.island.html", "<p>{{ explode() }}</p>\n")
        write(
            "pages/index.html",
            """\
            {% from "islands/boom.island.html" import Boom %}
            {% from "islands/counter.island.html" import Counter %}
            {{ Boom() }}
            {{ Counter(initial=5) }}
            """,
        )

        def explode() -> str:
            raise RuntimeError("kaboom")

        Site(SiteConfig(root=site_root), globals_={"explode": explode}).build()

        html = _read(site_root, "index.html")
        assert "atoll-island-error" in html
        assert "islands/boom.island.html" in html
        assert "<button>5</button>" in html

    def test_missing_nested_island_aborts(self, site_root: Path, write: Writer) -> None:
        write(
            "islands/panel.island.html",
            """\
            {% from "islands/missing.island.html" import Missing %}
            <section>{{ Missing() }}</section>
            """,
        )
        write("pages/index.html", '{% from "islands/panel.island.html" import Panel %}{{ Panel() }}')
        with pytest.raises(IslandNotFoundError) as exc_info:
            _build(site_root)
        assert exc_info.value.island_id == "islands/missing.island.html"

    def test_nested_directive_conflict_aborts(self, site_root: Path, write: Writer) -> None:
        write(
            "islands/panel.island.html",
            """\
            {% from "islands/counter.island.html" import Counter %}
            <section>{{ Counter(inner) }}</section>
            """,
        )
        write(
            "pages/index.html",
            """\
            ---
            panel:
              inner:
                "lenin:awake": true
                "no:pasaran": true
            ---
            {% from "islands/panel.island.html" import Panel %}
            {{ Panel(panel) }}
            """,
        )
        with pytest.raises(DirectiveConflictError):
            _build(site_root)

    def test_unsafe_prop_key_aborts(self, site_root: Path, write: Writer) -> None:
        write(
            "pages/index.html",
            """\
            ---
            bad:
              'a" onmouseover="alert(1)': 1
            ---
            {% from "islands/counter.island.html" import Counter %}
            {{ Counter(bad) }}
            """,
        )
        with pytest.raises(InvalidPropError):
            _build(site_root)
        assert not (site_root / "dist" / "index.html").exists()

    def test_islands_in_layout(self, site_root: Path, write: Writer) -> None:
        write(
            "layouts/default.html",
            """\
            {% from "islands/counter.island.html" import Counter %}
            <html><head><title>{{ title }}</title></head>
            <body>{{ Counter(initial=9) }}{{ content }}</body></html>
            """,
        )
        write("pages/index.md", "# Hello\n")
        _build(site_root)

        html = _read(site_root, "index.html")
        assert 'data-initial="9"' in html
        assert "<h1" in html
        assert RUNTIME_FILENAME in html


class TestPagesAndLayouts:
    def test_markdown_page_in_layout(self, site_root: Path, write: Writer) -> None:
        write("pages/blog/post.md", "---\ntitle: First post\n---\nSome *text*.\n")
        _build(site_root)

        html = _read(site_root, "blog/post.html")
        assert "<title>First post</title>" in html
        assert "<em>text</em>" in html

    def test_layout_false(self, site_root: Path, write: Writer) -> None:
        write("pages/raw.html", "---\nlayout: false\n---\n<p>raw</p>")
        _build(site_root)

        html = _read(site_root, "raw.html")
        assert html == "<!DOCTYPE html>\n<p>raw</p>"

    def test_missing_layout(self, site_root: Path, write: Writer) -> None:
        write("pages/index.html", "---\nlayout: wide\n---\n<p>x</p>")
        with pytest.raises(LayoutNotFoundError, match="wide"):
            _build(site_root)

    def test_page_and_layout_css(self, site_root: Path, write: Writer) -> None:
        write("layouts/default.css", "body { margin: 0; }")
        write("pages/about.html", "<p>about</p>")
        write("pages/about.css", "p { color: blue; }")
        _build(site_root)

        html = _read(site_root, "about.html")
        assert '<link rel="stylesheet" href="/about.css">' in html
        assert '<link rel="stylesheet" href="/layouts/default.css">' in html
        assert html.index("/about.css") < html.index("/layouts/default.css")
        assert _read(site_root, "about.css") == "p { color: blue; }"

    def test_components_are_importable(self, site_root: Path, write: Writer) -> None:
        write("components/nav.html", "<nav>menu</nav>")
        write("pages/index.html", '{% include "components/nav.html" %}<p>home</p>')
        _build(site_root)

        assert "<nav>menu</nav><p>home</p>" in _read(site_root, "index.html")

    def test_route_conflict(self, site_root: Path, write: Writer) -> None:
        write("pages/about.html", "<p>a</p>")
        write("pages/about.md", "b")
        with pytest.raises(RouteConflictError):
            _build(site_root)


class TestBuild:
    def test_result(self, site_root: Path, write: Writer) -> None:
        write("pages/index.html", COUNTER_PAGE)
        write("pages/about.html", "<p>about</p>")
        result = Site(SiteConfig(root=site_root)).build()

        assert result.page_count == 2
        assert result.islands == ("islands/counter.island.html",)
        hydrated = {built.page.output_name: built.hydrated for built in result.pages}
        assert hydrated == {"about.html": False, "index.html": True}

    def test_output_cleaned_and_public_copied(self, site_root: Path, write: Writer) -> None:
        write("dist/stale.html", "old")
        write("public/robots.txt", "User-agent: *")
        write("pages/index.html", "<p>x</p>")
        _build(site_root)

        assert not (site_root / "dist" / "stale.html").exists()
        assert _read(site_root, "robots.txt") == "User-agent: *"

    def test_island_compile_error_aborts(self, site_root: Path, write: Writer) -> None:
        write("islands/broken.island.html", "<script>a</script>\n<script>b</script>\n")
        write("pages/index.html", "<p>x</p>")
        with pytest.raises(IslandCompileError):
            _build(site_root)
        assert not (site_root / "dist" / "index.html").exists()

    def test_parallel_matches_serial(self, site_root: Path, write: Writer) -> None:
        for i in range(6):
            body = COUNTER_PAGE if i % 2 else f"<p>page {i}</p>"
            write(f"pages/p{i}.html", body)

        _build(site_root)
        serial = {i: _read(site_root, f"p{i}.html") for i in range(6)}
        _build(site_root, workers=4)
        parallel = {i: _read(site_root, f"p{i}.html") for i in range(6)}

        assert serial == parallel
        assert RUNTIME_FILENAME in parallel[1]
        assert RUNTIME_FILENAME not in parallel[0]

    def test_dev_live_reload(self, site_root: Path, write: Writer) -> None:
        write("pages/index.html", "<p>x</p>")
        _build(site_root, dev=True)
        assert "/__reload__" in _read(site_root, "index.html")

    def test_import_map(self, site_root: Path, write: Writer) -> None:
        write("pages/index.html", COUNTER_PAGE)
        _build(site_root, import_map={"preact": "https://esm.sh/preact"})
        assert '<script type="importmap">' in _read(site_root, "index.html")

    def test_rebuild_reuses_registry(self, site_root: Path, write: Writer) -> None:
        write("pages/index.html", COUNTER_PAGE)
        site = _build(site_root)
        write("islands/extra.island.html", "<p>extra</p>\n")
        site.build()
        assert len(site.registry) == 2
