"""Download images and store them in the canonical format."""
import logging
import threading
from enum import Enum
from io import BytesIO
from typing import Iterable, Optional

import requests
from PIL import Image, UnidentifiedImageError

from downloader_lib.errors import (
    EntryExistsError,
    FilesystemFailure,
    ImageDecodeFailure,
    ImageFetchFailure,
)
from downloader_lib.fetch import fetch_image_bytes
from downloader_lib.store import MirrorStore
from utils.constants import LOGGER_NAME, REQUEST_TIMEOUT
from utils.filenames import is_degenerate_name, normalize_filename

# Modes every Pillow writer accepts without conversion
_SAFE_MODES = {'1', 'L', 'LA', 'P', 'RGB', 'RGBA', 'I', 'I;16'}


class AcquireResult(Enum):
    DOWNLOADED = 'downloaded'
    SKIPPED = 'skipped'
    FAILED = 'failed'


def pillow_format_for(ext: str) -> str:
    """Pillow format name for a file extension, e.g. '.png' -> 'PNG'."""
    ext = ext.lower() if ext.startswith('.') else '.' + ext.lower()
    fmt = Image.registered_extensions().get(ext)
    if not fmt:
        raise ValueError(f"No image writer registered for {ext}")
    return fmt


def encode_canonical_image(data: bytes, image_format: str = 'PNG') -> bytes:
    """Decode ``data`` as any image Pillow understands and re-encode it.

    Animated inputs keep their first frame.

    Raises:
        ImageDecodeFailure: the bytes are not a decodable image
    """
    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            if img.mode not in _SAFE_MODES:
                img = img.convert('RGBA' if 'A' in img.getbands() else 'RGB')
            if image_format == 'JPEG' and img.mode not in ('RGB', 'L'):
                img = img.convert('RGB')
            out = BytesIO()
            img.save(out, format=image_format)
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        raise ImageDecodeFailure(f"Not a decodable image: {e}") from e
    return out.getvalue()


class ImageAcquirer:
    """Fetch an image URL into the mirror store unless its name is already there."""

    def __init__(self, store: MirrorStore, session: Optional[requests.Session] = None, stopwords: Iterable[str] = (), timeout: float = REQUEST_TIMEOUT, logger: Optional[logging.Logger] = None):
        self.store = store
        self.session = session or requests.Session()
        self.stopwords = list(stopwords)
        self.timeout = timeout
        self.image_format = pillow_format_for(store.canonical_ext)
        self.logger = logger or logging.getLogger(f'{LOGGER_NAME}.acquire')
        # Names being fetched right now; guards callers that share this acquirer
        self._in_flight = set()
        self._lock = threading.Lock()

    def filename_for(self, url: str) -> str:
        return normalize_filename(url, self.stopwords, self.store.canonical_ext)

    def acquire(self, url: str, referer: Optional[str] = None) -> AcquireResult:
        """Mirror one image URL.

        Returns SKIPPED without touching the network when the canonical name
        already exists. On FAILED nothing has been written.
        """
        filename = self.filename_for(url)

        if is_degenerate_name(filename, self.store.canonical_ext):
            self.logger.warning(f"Rejected {url}: no usable name left after normalization")
            return AcquireResult.FAILED

        if self.store.exists(filename):
            return AcquireResult.SKIPPED

        with self._lock:
            if filename in self._in_flight:
                return AcquireResult.SKIPPED
            self._in_flight.add(filename)

        try:
            return self._download(url, filename, referer)
        finally:
            with self._lock:
                self._in_flight.discard(filename)

    def _download(self, url: str, filename: str, referer: Optional[str]) -> AcquireResult:
        try:
            data = fetch_image_bytes(self.session, url, timeout=self.timeout, referer=referer)
        except ImageFetchFailure as e:
            self.logger.error(str(e))
            return AcquireResult.FAILED

        try:
            encoded = encode_canonical_image(data, self.image_format)
        except ImageDecodeFailure as e:
            self.logger.error(f"Failed to convert {url}: {e}")
            return AcquireResult.FAILED

        try:
            self.store.write(filename, encoded)
        except EntryExistsError:
            return AcquireResult.SKIPPED
        except FilesystemFailure as e:
            self.logger.error(str(e))
            return AcquireResult.FAILED

        self.logger.info(f"Downloaded and converted: {filename}")
        return AcquireResult.DOWNLOADED
