"""Shared fixtures for atoll tests: throwaway site projects on disk."""

from collections.abc import Callable
from pathlib import Path
from textwrap import dedent

import pytest

Writer = Callable[[str, str], Path]

COUNTER_ISLAND = """\
<div class="counter"><button>{{ initial }}</button></div>
<style>
.counter { color: tomato; }
</style>
<script>
export function hydrate(container, props) {
  let count = props.initial;
  container.querySelector("button").onclick = () => { count += 1; };
}
</script>
"""

DEFAULT_LAYOUT = """\
<html>
<head><title>{{ title }}</title></head>
<body>{{ content }}</body>
</html>
"""


@pytest.fixture
def write(tmp_path: Path) -> Writer:
    """Write a dedented file relative to the project root and return its path."""

    def _write(relative: str, text: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(dedent(text), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def site_root(tmp_path: Path, write: Writer) -> Path:
    """A minimal project: default layout plus one counter island."""
    write("layouts/default.html", DEFAULT_LAYOUT)
    write("islands/counter.island.html", COUNTER_ISLAND)
    return tmp_path
