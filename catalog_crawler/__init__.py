"""Multi-level catalog crawler: home menu -> category -> subcategory -> product."""

from .version import __version__

__all__ = ["__version__"]
