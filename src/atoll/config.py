"""Site configuration.

SiteConfig is a frozen dataclass, immutable after creation. Directory fields
are relative to ``root``.
"""

import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from atoll.errors import ConfigurationError

CONFIG_FILE = "atoll.toml"

_BUNDLERS = frozenset({"none", "esbuild"})


@dataclass(frozen=True, slots=True)
class SiteConfig:
    """Site configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = SiteConfig(root="site", dev=True, workers=4)
    """

    root: str | Path = "."

    # Source layout
    pages_dir: str = "pages"
    layouts_dir: str = "layouts"
    islands_dir: str = "islands"
    components_dir: str = "components"
    public_dir: str = "public"

    # Output
    output_dir: str = "dist"

    # Islands
    bundler: str = "none"  # "none" (passthrough) or "esbuild"
    esbuild_path: str = "esbuild"
    import_map: dict[str, str] = field(default_factory=dict)

    # Build
    dev: bool = False  # Injects the live-reload client script
    workers: int = 1  # >1 renders pages on a thread pool
    autoescape: bool = True

    def __post_init__(self) -> None:
        if self.bundler not in _BUNDLERS:
            msg = f"Unknown bundler {self.bundler!r}; expected one of: {', '.join(sorted(_BUNDLERS))}"
            raise ConfigurationError(msg)
        if self.workers < 1:
            raise ConfigurationError(f"workers must be >= 1, got {self.workers}")

    @property
    def root_path(self) -> Path:
        return Path(self.root).resolve()

    def path(self, name: str) -> Path:
        """Resolve one of the ``*_dir`` fields against ``root``."""
        return self.root_path / getattr(self, name)


def load_config(root: str | Path = ".", **overrides: Any) -> SiteConfig:
    """Build a SiteConfig from an optional ``atoll.toml`` in *root*.

    A missing file means all defaults. Keyword *overrides* win over
    file values (the CLI passes its flags through here).
    """
    root_path = Path(root)
    values: dict[str, Any] = {}

    config_file = root_path / CONFIG_FILE
    if config_file.is_file():
        try:
            with config_file.open("rb") as fh:
                values = tomllib.load(fh)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigurationError(f"Invalid {config_file}: {exc}") from exc

    known = {f.name for f in fields(SiteConfig)} - {"root"}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigurationError(
            f"Unknown keys in {config_file}: {', '.join(unknown)}"
        )

    values.update(overrides)
    return SiteConfig(root=root_path, **values)
