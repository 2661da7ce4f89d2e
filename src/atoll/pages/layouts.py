"""Layout discovery and stylesheet handling.

A layout is a kida template ``layouts/<name>.html``. It receives the
rendered page as ``content`` plus ``title`` and every page meta key. A
sibling ``layouts/<name>.css`` is copied to the output directory and
linked into every page using that layout.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from atoll.assets import Asset
from atoll.errors import LayoutNotFoundError

logger = logging.getLogger("atoll.build")


def copy_stylesheet(source: Path, output_dir: Path, relative: str) -> Asset | None:
    """Copy the ``.css`` sibling of *source*, if any, and link it.

    *relative* is the output path of the copied stylesheet, relative to
    *output_dir*.
    """
    css = source.with_suffix(".css")
    if not css.is_file():
        return None
    target = output_dir / relative
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(css, target)
    return Asset.stylesheet("/" + relative)


class LayoutRegistry:
    """Layouts available to the current build, keyed by name."""

    __slots__ = ("_css", "_layouts", "_layouts_dir", "_output_dir", "_root")

    def __init__(self, layouts_dir: str | Path, output_dir: str | Path, *, root: str | Path) -> None:
        self._layouts_dir = Path(layouts_dir).resolve()
        self._output_dir = Path(output_dir)
        self._root = Path(root).resolve()
        self._layouts: dict[str, str] = {}
        self._css: dict[str, Asset] = {}

    def discover(self) -> dict[str, Path]:
        """Layout name -> source path for every layout template."""
        if not self._layouts_dir.is_dir():
            return {}
        return {p.stem: p for p in sorted(self._layouts_dir.glob("*.html"))}

    def load(self) -> dict[str, str]:
        """Register every layout and copy its stylesheet.

        Returns the layout name -> template name mapping.
        """
        layouts: dict[str, str] = {}
        css: dict[str, Asset] = {}
        for name, path in self.discover().items():
            layouts[name] = path.relative_to(self._root).as_posix()
            asset = copy_stylesheet(path, self._output_dir, f"layouts/{name}.css")
            if asset is not None:
                css[name] = asset
        self._layouts = layouts
        self._css = css
        if layouts:
            logger.info("Loaded %d layout%s", len(layouts), "" if len(layouts) == 1 else "s")
        return dict(layouts)

    def template_name(self, name: str) -> str:
        try:
            return self._layouts[name]
        except KeyError:
            raise LayoutNotFoundError(name) from None

    def css_asset(self, name: str) -> Asset | None:
        return self._css.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._layouts

    def __len__(self) -> int:
        return len(self._layouts)
