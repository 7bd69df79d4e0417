"""Scrape-and-mirror library for the wiki image mirror.

This package contains the pieces a scrape pass is built from:
- fetch.py: Network fetching helpers
- parse.py: HTML parsing helpers
- store.py: The on-disk mirror of canonically named images
- acquire.py: Download + convert + store for a single image URL
- gallery.py: Gallery page rendering
- errors.py: Failure types
"""

# No exports needed - import directly from submodules
__all__ = []
