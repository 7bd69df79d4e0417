"""Network fetch helpers for the wiki image mirror."""
import logging
import random
from typing import Optional

import requests

from downloader_lib.errors import ImageFetchFailure, PageFetchFailure
from utils.constants import LOGGER_NAME, REQUEST_TIMEOUT, USER_AGENTS

logger = logging.getLogger(f'{LOGGER_NAME}.fetch')


def _get_random_user_agent() -> str:
    """Return a random user agent."""
    return random.choice(USER_AGENTS)


def get_page_html(session: requests.Session, url: str, timeout: float = REQUEST_TIMEOUT) -> str:
    """Fetch the HTML of a wiki page (one attempt).

    Raises:
        PageFetchFailure: on any network error or non-2xx status
    """
    headers = {
        'User-Agent': _get_random_user_agent(),
        'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
    }
    try:
        response = session.get(url, headers=headers, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise PageFetchFailure(f"Failed to fetch {url}: {e}") from e
    return response.text


def fetch_page(session: requests.Session, url: str, timeout: float = REQUEST_TIMEOUT) -> Optional[str]:
    """Like get_page_html, but logs the failure and returns None.

    One bad page never stops a pass.
    """
    try:
        return get_page_html(session, url, timeout)
    except PageFetchFailure as e:
        logger.error(str(e))
        return None


def fetch_image_bytes(session: requests.Session, url: str, timeout: float = REQUEST_TIMEOUT, referer: Optional[str] = None) -> bytes:
    """Download an image body as raw bytes.

    Raises:
        ImageFetchFailure: on any network error or non-2xx status
    """
    headers = {
        'User-Agent': _get_random_user_agent(),
        'Accept': 'image/avif,image/webp,image/apng,image/*,*/*;q=0.8',
    }
    if referer:
        headers['Referer'] = referer
    try:
        response = session.get(url, headers=headers, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise ImageFetchFailure(f"Failed to download {url}: {e}") from e
    return response.content
