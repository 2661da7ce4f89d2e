"""Atoll CLI.

Entry point registered as ``atoll`` in ``pyproject.toml``::

    [project.scripts]
    atoll = "atoll.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``atoll`` command."""
    parser = argparse.ArgumentParser(
        prog="atoll",
        description="Atoll: static sites with lazily hydrated islands.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- atoll build ------------------------------------------------------
    build_parser = subparsers.add_parser("build", help="Build the site into the output directory")
    build_parser.add_argument("--root", default=".", help="Site root directory (default: current directory)")
    build_parser.add_argument(
        "--dev",
        action="store_true",
        help="Inject the live-reload client into every page",
    )
    build_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Render pages on N threads",
    )
    build_parser.add_argument("-v", "--verbose", action="store_true", help="Log every island and page")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "build":
        from atoll.cli._build import run_build

        run_build(args)
