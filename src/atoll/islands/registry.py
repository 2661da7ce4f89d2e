"""Island registry.

Process-lifetime store of compiled islands, keyed by island id. A
``load()`` pass discovers every ``*.island.html`` under the islands
directory, compiles each one, writes the client bundles and stylesheets,
and then swaps the new record set in atomically. Any single failure
aborts the pass and leaves the previous record set in place.
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from atoll.errors import IslandCompileError, IslandError
from atoll.islands.ids import ISLAND_SUFFIX

if TYPE_CHECKING:
    from atoll.islands.compiler import CompiledIsland, IslandCompiler, ServerModule

logger = logging.getLogger("atoll.islands")


@dataclass(frozen=True, slots=True)
class IslandRecord:
    """A compiled island as seen by page builds.

    Attributes:
        id: Project-relative island id.
        source_path: Absolute source path, for diagnostics.
        server_module: Synchronous renderer for static markup.
        client_path: Public URL of the hashed client bundle.
        style_path: Public URL of the extracted stylesheet, if any.
        style_content: Extracted stylesheet text, if any.
    """

    id: str
    source_path: Path
    server_module: ServerModule
    client_path: str
    style_path: str | None = None
    style_content: str | None = None


class IslandRegistry:
    """Compiled islands for the current build.

    Args:
        compiler: Compiles one island source. Rebound by the site before
            each build, since it carries that build's template
            environment.
        islands_dir: Directory scanned for ``*.island.html`` files.
        output_dir: Site output root; bundles go under
            ``<output_dir>/<public_prefix>/``.
        public_prefix: URL path segment for island assets.
    """

    __slots__ = ("_islands_dir", "_lock", "_output_dir", "_public_prefix", "_records", "compiler")

    def __init__(
        self,
        compiler: IslandCompiler | None = None,
        *,
        islands_dir: str | Path,
        output_dir: str | Path,
        public_prefix: str = "islands",
    ) -> None:
        self.compiler = compiler
        self._islands_dir = Path(islands_dir)
        self._output_dir = Path(output_dir)
        self._public_prefix = public_prefix.strip("/")
        self._records: dict[str, IslandRecord] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> tuple[IslandRecord, ...]:
        """Discover, compile, and install every island.

        A missing islands directory yields an empty registry. Returns
        the newly installed records.
        """
        with self._lock:
            sources = self.discover()
            if sources and self.compiler is None:
                raise IslandError("IslandRegistry.load() called without a compiler")

            compiled = [self._compile(path) for path in sources]
            records = {}
            for island in compiled:
                record = self._write(island)
                records[record.id] = record

            self._records = records

        if records:
            logger.info("Compiled %d island%s", len(records), "" if len(records) == 1 else "s")
            for ident in sorted(records):
                logger.info("  · %s", ident)
        return tuple(records.values())

    def discover(self) -> list[Path]:
        """Return every island source under the islands directory, sorted."""
        root = self._islands_dir
        if not root.exists():
            logger.info("Islands directory not found: %s", root)
            return []
        if not root.is_dir():
            raise IslandError(f"Islands path is not a directory: {root}")

        def _fail(exc: OSError) -> None:
            raise IslandError(f"Cannot read islands directory {exc.filename}: {exc.strerror}") from exc

        found: list[Path] = []
        for dirpath, dirnames, filenames in os.walk(root, onerror=_fail):
            dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
            found.extend(Path(dirpath) / name for name in filenames if name.endswith(ISLAND_SUFFIX))
        return sorted(found)

    def _compile(self, path: Path) -> CompiledIsland:
        assert self.compiler is not None
        try:
            return self.compiler.compile(path)
        except IslandCompileError:
            raise
        except Exception as exc:
            raise IslandCompileError(path, str(exc)) from exc

    def _write(self, island: CompiledIsland) -> IslandRecord:
        relative_dir = island.source_path.parent.relative_to(self._islands_dir.resolve())
        out_dir = self._output_dir / self._public_prefix / relative_dir
        public_dir = "/" + "/".join(p for p in (self._public_prefix, relative_dir.as_posix()) if p and p != ".")

        try:
            out_dir.mkdir(parents=True, exist_ok=True)
            (out_dir / island.client.filename).write_text(island.client.code, encoding="utf-8")
            if island.style is not None:
                (out_dir / island.style.filename).write_text(island.style.content, encoding="utf-8")
        except OSError as exc:
            raise IslandCompileError(island.source_path, f"cannot write output: {exc}") from exc

        return IslandRecord(
            id=island.id,
            source_path=island.source_path,
            server_module=island.server,
            client_path=f"{public_dir}/{island.client.filename}",
            style_path=f"{public_dir}/{island.style.filename}" if island.style else None,
            style_content=island.style.content if island.style else None,
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def is_island(self, island_id: str) -> bool:
        return island_id in self._records

    def get_record(self, island_id: str) -> IslandRecord | None:
        return self._records.get(island_id)

    def get_style_manifest(self) -> dict[str, str]:
        """Island id -> stylesheet text, for islands that have styles."""
        return {ident: r.style_content for ident, r in self._records.items() if r.style_content}

    def records(self) -> tuple[IslandRecord, ...]:
        return tuple(self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, island_id: object) -> bool:
        return island_id in self._records
