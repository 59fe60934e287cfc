"""Resolve catalog identifiers into ranked magnet streams from a torrent index."""

from .__version__ import __version__

__all__ = ["__version__"]
