import re
from typing import Iterable
from urllib.parse import urlsplit

# Trailing extension on a lowercased name, e.g. '.webp' or '.mp4'
_EXT_RE = re.compile(r'\.[a-z0-9]+$')


def _canonical_ext(ext: str) -> str:
    ext = ext.lower()
    return ext if ext.startswith('.') else '.' + ext


def _tidy_underscores(stem: str) -> str:
    """Collapse runs of underscores and strip them from both ends."""
    return re.sub(r'_+', '_', stem).strip('_')


def last_segment(locator: str) -> str:
    """Return the last path segment of a URL, ignoring query and fragment."""
    path = urlsplit(locator).path
    return path.rsplit('/', 1)[-1]


def _stopword_pattern(stopwords: Iterable[str]):
    words = sorted({w.lower() for w in stopwords if w}, key=len, reverse=True)
    if not words:
        return None
    return re.compile('|'.join(re.escape(w) for w in words), re.IGNORECASE)


def normalize_filename(locator: str, stopwords: Iterable[str] = (), canonical_ext: str = '.png') -> str:
    """Map an image URL to the canonical local filename.

    The last path segment is lowercased, every stopword is removed wherever it
    appears, hyphens become underscores, underscore runs are collapsed and
    trimmed, and the extension is replaced with ``canonical_ext``.

    >>> normalize_filename('https://site.example/images/gear/Water-Bucket.webp?x=1', ['gear'])
    'water_bucket.png'
    """
    name = last_segment(locator).lower()
    stem = _EXT_RE.sub('', name)

    pattern = _stopword_pattern(stopwords)
    if pattern is not None:
        stem = pattern.sub('', stem)

    stem = stem.replace('-', '_')
    return _tidy_underscores(stem) + _canonical_ext(canonical_ext)


def clean_existing_name(filename: str, canonical_ext: str = '.png') -> str:
    """Rename rule for files already on disk.

    Only the underscore tidy-up and the extension are re-applied; stopwords
    are left alone. Running this on a name produced by ``normalize_filename``
    returns it unchanged.
    """
    # Match against the lowercased name so '.PNG' is treated like '.png'
    match = _EXT_RE.search(filename.lower())
    stem = filename[:match.start()] if match else filename
    return _tidy_underscores(stem) + _canonical_ext(canonical_ext)


def is_degenerate_name(filename: str, canonical_ext: str = '.png') -> bool:
    """True when nothing but the extension survived normalization."""
    return filename == _canonical_ext(canonical_ext) or not filename
