"""Ranked search over bookmarks, open tabs and browsing history."""

__version__ = "0.1.0"
