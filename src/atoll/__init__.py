"""Atoll: a static-site builder with island hydration.

Pages are kida templates or Markdown. Interactive parts are islands:
single-file components rendered to static markup at build time and
hydrated in the browser only when their directive says so.

Basic usage::

    from atoll import Site, load_config

    site = Site(load_config("my-site"))
    site.build()

Or from the shell::

    atoll build --root my-site
"""

__version__ = "0.1.0"
__all__ = [
    "AtollError",
    "BuildResult",
    "ConfigurationError",
    "IslandError",
    "PageBuildError",
    "Site",
    "SiteConfig",
    "load_config",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import atoll`` fast while providing a clean top-level API.
    """
    if name == "Site":
        from atoll.site import Site

        return Site

    if name in ("SiteConfig", "load_config"):
        from atoll import config as _config

        return getattr(_config, name)

    if name == "BuildResult":
        from atoll.pages.types import BuildResult

        return BuildResult

    if name in ("AtollError", "ConfigurationError", "IslandError", "PageBuildError"):
        from atoll import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
