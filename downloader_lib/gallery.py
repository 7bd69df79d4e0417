"""Render the gallery page from the current mirror listing."""
from pathlib import Path
from typing import Sequence

from jinja2 import Environment, select_autoescape

from downloader_lib.errors import FilesystemFailure
from downloader_lib.store import MirrorStore
from utils.constants import GALLERY_TITLE, IMAGE_URL_PATH

GALLERY_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<title>{{ title }}</title>
<style>
body { font-family: sans-serif; padding: 20px; background: #f0f0f0; }
h1 { margin-bottom: 20px; }
img { display: block; margin: 10px 0; max-width: 200px; }
</style>
</head>
<body>
<h1>Total Images: {{ filenames|length }}</h1>
{% for name in filenames %}<img src="{{ image_url_path }}/{{ name|urlencode }}" alt="{{ name }}">
{% endfor %}</body>
</html>
"""

_env = Environment(autoescape=select_autoescape(default=True, default_for_string=True))
_template = _env.from_string(GALLERY_TEMPLATE)


def render_gallery(filenames: Sequence[str], image_url_path: str = IMAGE_URL_PATH, title: str = GALLERY_TITLE) -> str:
    """Return the gallery HTML for ``filenames``, in the order given."""
    return _template.render(
        filenames=list(filenames),
        image_url_path=image_url_path.rstrip('/'),
        title=title,
    )


def write_gallery(store: MirrorStore, path, image_url_path: str = IMAGE_URL_PATH, title: str = GALLERY_TITLE) -> int:
    """Render from the store's listing and overwrite the gallery file.

    Returns:
        The number of images listed
    """
    filenames = store.list_entries()
    html = render_gallery(filenames, image_url_path, title)
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(html, encoding='utf-8')
    except OSError as e:
        raise FilesystemFailure(f"Could not write gallery {path}: {e}") from e
    return len(filenames)
