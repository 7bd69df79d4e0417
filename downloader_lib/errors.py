"""Failure types raised inside a scrape pass.

None of these stop a pass: callers log them and move on to the next page,
image or file. The next scheduled pass is the retry.
"""


class MirrorError(Exception):
    """Base class for scrape-pass failures."""


class PageFetchFailure(MirrorError):
    """A wiki page could not be fetched (network error, timeout, non-2xx)."""


class ImageFetchFailure(MirrorError):
    """An image URL could not be fetched."""


class ImageDecodeFailure(MirrorError):
    """Fetched bytes could not be decoded as an image."""


class FilesystemFailure(MirrorError):
    """Creating a directory, writing, or renaming a file failed."""


class EntryExistsError(FilesystemFailure):
    """A mirror entry with that name is already on disk."""
