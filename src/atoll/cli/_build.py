"""``atoll build`` command."""

import argparse
import logging
import sys

from atoll.errors import AtollError


def run_build(args: argparse.Namespace) -> None:
    """Load configuration from ``args.root`` and build the site.

    Any atoll error is reported on stderr and exits with status 1.
    """
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    from atoll.config import load_config
    from atoll.site import Site

    overrides: dict[str, object] = {}
    if args.dev:
        overrides["dev"] = True
    if args.workers is not None:
        overrides["workers"] = args.workers

    try:
        config = load_config(args.root, **overrides)
        result = Site(config).build()
    except AtollError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    print(
        f"Built {result.page_count} page(s) and {len(result.islands)} island(s) "
        f"into {config.path('output_dir')} in {result.elapsed:.2f}s"
    )
