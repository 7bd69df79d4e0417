"""Pytest configuration for wiki-image-mirror tests."""
import sys
from io import BytesIO
from pathlib import Path
from types import SimpleNamespace

import pytest
import requests
from PIL import Image

# Add the project root to path so tests can import the top-level scripts
root_dir = Path(__file__).parent.parent
if str(root_dir) not in sys.path:
    sys.path.insert(0, str(root_dir))

from utils.config import MirrorConfig  # noqa: E402


def make_response(status_code=200, text='', content=b''):
    """Return a requests.Response look-alike."""
    def raise_for_status():
        if status_code >= 400:
            raise requests.HTTPError(f"{status_code} Server Error")
    return SimpleNamespace(
        status_code=status_code,
        text=text,
        content=content,
        headers={},
        raise_for_status=raise_for_status,
    )


class FakeSession:
    """Serves canned responses by URL and records every requested URL."""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    def get(self, url, headers=None, timeout=None, **kwargs):
        self.calls.append(url)
        route = self.routes.get(url)
        if route is None:
            raise requests.ConnectionError(f"No route for {url}")
        if isinstance(route, Exception):
            raise route
        return route


def image_bytes(fmt='GIF', size=(4, 4), color='red'):
    buf = BytesIO()
    mode = 'RGB' if fmt != 'GIF' else 'P'
    Image.new(mode, size, color if mode == 'RGB' else 1).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def config(tmp_path):
    return MirrorConfig(
        pages=[],
        direct_images=[],
        stopwords=['brainrots', 'brainrot', 'gear', 'plants', 'seed'],
        canonical_ext='.png',
        interval_seconds=300,
        output_dir=tmp_path / 'i' / 'images',
        gallery_file=tmp_path / 'index.html',
        log_file=None,
        request_timeout=5,
    )
