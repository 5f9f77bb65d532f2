"""filecat: a file catalog organized by hierarchical categories.

Subpackages:
    ``filecat.state``: the Markdown metadata document and its models.
    ``filecat.catalog``: categories, file entries, the category tree, and
    :class:`~filecat.catalog.CatalogSession`, the command API used by the CLI.
    ``filecat.shortcuts``: creating and cleaning up desktop shortcuts.
    ``filecat.config``: the YAML configuration file.

The installed distribution version is available as ``filecat.__version__``.
"""

from importlib import metadata as _metadata

__all__ = ["__version__"]


def __getattr__(name: str) -> str:
    if name != "__version__":
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    return _metadata.version(__name__)
