"""Tests for atoll.assets: asset tags and page injection."""

from atoll.assets import (
    Asset,
    import_map_html,
    inject_assets,
    island_style_assets,
    live_reload_asset,
)
from atoll.islands.hydration import RUNTIME_URL, runtime_asset


class TestAsset:
    def test_stylesheet(self) -> None:
        assert Asset.stylesheet("/about.css").to_html() == '<link rel="stylesheet" href="/about.css">'

    def test_module_script(self) -> None:
        assert runtime_asset().to_html() == f'<script type="module" src="{RUNTIME_URL}"></script>'

    def test_inline_style(self) -> None:
        asset = Asset.style(".a{}", **{"data-island": "islands/a.island.html"})
        assert asset.to_html() == '<style data-island="islands/a.island.html">.a{}</style>'

    def test_live_reload(self) -> None:
        html = live_reload_asset().to_html()
        assert html.startswith("<script>")
        assert "/__reload__" in html


class TestIslandStyles:
    def test_only_used_islands_with_styles(self) -> None:
        manifest = {"islands/a.island.html": ".a{}", "islands/c.island.html": ".c{}"}
        assets = island_style_assets({"islands/b.island.html", "islands/a.island.html"}, manifest)
        assert [a.content for a in assets] == [".a{}"]

    def test_sorted_by_id(self) -> None:
        manifest = {"islands/b.island.html": ".b{}", "islands/a.island.html": ".a{}"}
        assets = island_style_assets(["islands/b.island.html", "islands/a.island.html"], manifest)
        assert [a.content for a in assets] == [".a{}", ".b{}"]


class TestInjectAssets:
    def test_before_head_close(self) -> None:
        html = inject_assets(
            "<!DOCTYPE html><html><head><title>x</title></head><body></body></html>",
            [Asset.stylesheet("/a.css")],
        )
        assert '<link rel="stylesheet" href="/a.css">\n</head>' in html

    def test_falls_back_to_body_close(self) -> None:
        html = inject_assets("<body><p>x</p></body>", [Asset.stylesheet("/a.css")])
        assert '<link rel="stylesheet" href="/a.css">\n</body>' in html

    def test_appends_without_targets(self) -> None:
        html = inject_assets("<p>x</p>", [Asset.stylesheet("/a.css")])
        assert html.endswith('<link rel="stylesheet" href="/a.css">')

    def test_preserves_order(self) -> None:
        html = inject_assets("<head></head>", [Asset.stylesheet("/1.css"), Asset.stylesheet("/2.css")])
        assert html.index("/1.css") < html.index("/2.css")

    def test_doctype_added_once(self) -> None:
        assert inject_assets("<p>x</p>").startswith("<!DOCTYPE html>\n<p>x</p>")
        already = "<!doctype html><p>x</p>"
        assert inject_assets(already) == already

    def test_import_map_first(self) -> None:
        html = inject_assets(
            "<head></head>",
            [Asset.stylesheet("/a.css")],
            import_map={"preact": "https://esm.sh/preact"},
        )
        assert '<script type="importmap">' in html
        assert html.index("importmap") < html.index("/a.css")
        assert '"preact": "https://esm.sh/preact"' in html

    def test_empty_import_map(self) -> None:
        assert import_map_html({}) == ""
