"""Client bundling backends.

The bundler is a black box: it takes the generated entry module for an
island and returns browser-executable ESM text. Two backends ship:

- :class:`PassthroughBundler` emits the entry unchanged. Bare imports
  (``import { signal } from "@preact/signals"``) are left for the
  browser to resolve through the configured import map.
- :class:`EsbuildBundler` pipes the entry through the ``esbuild``
  executable, inlining relative imports.
"""

import logging
import subprocess
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from atoll.config import SiteConfig
from atoll.errors import BundleError, ConfigurationError

logger = logging.getLogger("atoll.islands")


class Bundler(Protocol):
    """Turns an island entry module into a self-contained browser module."""

    def bundle(self, entry: str, *, resolve_dir: Path, filename: str) -> str: ...


class PassthroughBundler:
    """Return the entry as-is."""

    __slots__ = ()

    def bundle(self, entry: str, *, resolve_dir: Path, filename: str) -> str:
        return entry


class EsbuildBundler:
    """Bundle via the external ``esbuild`` executable.

    The entry is fed on stdin with ``resolve_dir`` as the resolution
    root, so relative imports in an island script resolve against the
    island's own directory. Import-map keys stay external.
    """

    __slots__ = ("_executable", "_externals", "_target")

    def __init__(
        self,
        executable: str = "esbuild",
        *,
        externals: Iterable[str] = (),
        target: str = "es2020",
    ) -> None:
        self._executable = executable
        self._externals = tuple(externals)
        self._target = target

    def command(self, *, resolve_dir: Path, filename: str) -> list[str]:
        cmd = [
            self._executable,
            "--bundle",
            "--format=esm",
            f"--target={self._target}",
            "--loader=js",
            f"--sourcefile={filename}",
            "--log-level=warning",
        ]
        cmd.extend(f"--external:{name}" for name in self._externals)
        return cmd

    def bundle(self, entry: str, *, resolve_dir: Path, filename: str) -> str:
        cmd = self.command(resolve_dir=resolve_dir, filename=filename)
        logger.debug("esbuild %s (cwd=%s)", filename, resolve_dir)
        try:
            result = subprocess.run(
                cmd,
                input=entry,
                capture_output=True,
                text=True,
                cwd=resolve_dir,
                check=False,
            )
        except FileNotFoundError as exc:
            raise BundleError(f"esbuild executable not found: {self._executable}") from exc

        if result.returncode != 0:
            raise BundleError(result.stderr.strip() or f"esbuild exited with {result.returncode}")
        if result.stderr.strip():
            logger.warning("esbuild: %s", result.stderr.strip())
        return result.stdout


def create_bundler(config: SiteConfig) -> Bundler:
    """Pick the bundler backend named by ``config.bundler``."""
    if config.bundler == "none":
        return PassthroughBundler()
    if config.bundler == "esbuild":
        return EsbuildBundler(config.esbuild_path, externals=config.import_map.keys())
    raise ConfigurationError(f"Unknown bundler {config.bundler!r}")
