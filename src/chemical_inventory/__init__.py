"""Chemical inventory core: permissions, product upserts and stock."""

from importlib import metadata as _metadata

__all__ = ["__version__"]

try:
    __version__ = _metadata.version("chemical-inventory")
except _metadata.PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"
