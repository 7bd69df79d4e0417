"""HTML parsing helpers for the wiki image mirror."""
from typing import List
from urllib.parse import urlsplit

from bs4 import BeautifulSoup


def page_origin(url: str) -> str:
    """Return ``scheme://host[:port]`` for a page URL."""
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


def extract_image_urls(html_content: str, base_origin: str) -> List[str]:
    """Return the ``src`` of every ``<img>`` in document order.

    Missing or blank ``src`` attributes are skipped. Root-relative paths are
    joined to ``base_origin`` and scheme-relative ones (``//cdn/x.png``) take
    its scheme; anything else is returned as written. Duplicates are kept.
    """
    soup = BeautifulSoup(html_content, 'html.parser')
    base_origin = base_origin.rstrip('/')
    scheme = urlsplit(base_origin).scheme or 'https'

    images = []
    for img in soup.find_all('img'):
        src = img.get('src')
        if isinstance(src, (list, tuple)):
            src = src[0] if src else None
        if not src:
            continue
        src = str(src).strip()
        if not src:
            continue
        if src.startswith('//'):
            src = f"{scheme}:{src}"
        elif src.startswith('/'):
            src = base_origin + src
        images.append(src)
    return images
