"""Client hydration runtime.

The ``<atoll-island>`` custom element ships as package data and is
copied to the site root on every build. Pages reference it only when at
least one island on the page needs hydration.
"""

from importlib import resources
from pathlib import Path

from atoll.assets import Asset

RUNTIME_FILENAME = "atoll-island.js"
RUNTIME_URL = f"/{RUNTIME_FILENAME}"


def runtime_source() -> str:
    """Return the browser runtime source."""
    return resources.files("atoll.islands").joinpath("runtime").joinpath(RUNTIME_FILENAME).read_text(encoding="utf-8")


def write_runtime(output_dir: str | Path) -> Path:
    """Copy the runtime into *output_dir* and return its path."""
    target = Path(output_dir) / RUNTIME_FILENAME
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(runtime_source(), encoding="utf-8")
    return target


def runtime_asset() -> Asset:
    return Asset.script(src=RUNTIME_URL, type="module")
