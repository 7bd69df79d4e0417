import threading
from io import BytesIO

import pytest
from PIL import Image

from conftest import FakeSession, image_bytes, make_response
from downloader_lib.acquire import AcquireResult, ImageAcquirer, encode_canonical_image, pillow_format_for
from downloader_lib.errors import FilesystemFailure, ImageDecodeFailure
from downloader_lib.store import MirrorStore

STOPWORDS = ['gear', 'plants', 'brainrots', 'seed']
URL = 'https://site.example/images/gear/Water-Bucket.gif?x=1'


@pytest.fixture
def store(tmp_path):
    s = MirrorStore(tmp_path / 'images')
    s.ensure_directory()
    return s


def make_acquirer(store, routes):
    session = FakeSession(routes)
    return ImageAcquirer(store, session=session, stopwords=STOPWORDS), session


def test_pillow_format_for():
    assert pillow_format_for('.png') == 'PNG'
    assert pillow_format_for('JPG') == 'JPEG'
    with pytest.raises(ValueError):
        pillow_format_for('.notanimage')


def test_encode_canonical_image_converts_to_png():
    out = encode_canonical_image(image_bytes('GIF'), 'PNG')
    with Image.open(BytesIO(out)) as img:
        assert img.format == 'PNG'
        assert img.size == (4, 4)


def test_encode_canonical_image_rejects_garbage():
    with pytest.raises(ImageDecodeFailure):
        encode_canonical_image(b'<html>not an image</html>')


def test_encode_cmyk_to_png():
    buf = BytesIO()
    Image.new('CMYK', (2, 2)).save(buf, format='JPEG')
    out = encode_canonical_image(buf.getvalue(), 'PNG')
    with Image.open(BytesIO(out)) as img:
        assert img.mode == 'RGB'


def test_acquire_downloads_and_writes_png(store):
    acquirer, session = make_acquirer(store, {URL: make_response(content=image_bytes('GIF'))})
    assert acquirer.acquire(URL) is AcquireResult.DOWNLOADED
    assert store.list_entries() == ['water_bucket.png']
    with Image.open(store.path_for('water_bucket.png')) as img:
        assert img.format == 'PNG'
    assert session.calls == [URL]


def test_acquire_existing_entry_skips_without_network(store):
    store.write('water_bucket.png', b'already here')
    acquirer, session = make_acquirer(store, {})
    assert acquirer.acquire(URL) is AcquireResult.SKIPPED
    assert session.calls == []
    assert store.path_for('water_bucket.png').read_bytes() == b'already here'


def test_second_locator_with_same_canonical_name_is_skipped(store):
    first = 'https://w.example/images/a-b--c.png'
    second = 'https://w.example/images/a_b_c.PNG'
    acquirer, session = make_acquirer(store, {
        first: make_response(content=image_bytes('PNG')),
        second: make_response(content=image_bytes('PNG')),
    })
    assert acquirer.acquire(first) is AcquireResult.DOWNLOADED
    assert acquirer.acquire(second) is AcquireResult.SKIPPED
    assert store.list_entries() == ['a_b_c.png']
    assert session.calls == [first]


def test_fetch_failure_returns_failed_and_writes_nothing(store):
    acquirer, _ = make_acquirer(store, {URL: make_response(status_code=503)})
    assert acquirer.acquire(URL) is AcquireResult.FAILED
    assert store.list_entries() == []


def test_decode_failure_returns_failed_and_writes_nothing(store):
    acquirer, _ = make_acquirer(store, {URL: make_response(content=b'not an image')})
    assert acquirer.acquire(URL) is AcquireResult.FAILED
    assert store.list_entries() == []


def test_degenerate_name_rejected_without_network(store):
    acquirer, session = make_acquirer(store, {})
    assert acquirer.acquire('https://w.example/images/Gear-Seed.png') is AcquireResult.FAILED
    assert session.calls == []
    assert store.list_entries() == []


def test_write_failure_returns_failed(store, monkeypatch):
    acquirer, _ = make_acquirer(store, {URL: make_response(content=image_bytes('GIF'))})

    def broken_write(filename, data):
        raise FilesystemFailure('disk full')

    monkeypatch.setattr(store, 'write', broken_write)
    assert acquirer.acquire(URL) is AcquireResult.FAILED


def test_concurrent_acquire_of_same_name_downloads_once(store):
    entered = threading.Event()
    release = threading.Event()

    class SlowSession(FakeSession):
        def get(self, url, headers=None, timeout=None, **kwargs):
            entered.set()
            assert release.wait(timeout=5)
            return super().get(url, headers=headers, timeout=timeout)

    session = SlowSession({URL: make_response(content=image_bytes('GIF'))})
    acquirer = ImageAcquirer(store, session=session, stopwords=STOPWORDS)
    results = []

    worker = threading.Thread(target=lambda: results.append(acquirer.acquire(URL)))
    worker.start()
    assert entered.wait(timeout=5)

    # First caller is still downloading; the name is not on disk yet
    assert not store.exists('water_bucket.png')
    assert acquirer.acquire(URL) is AcquireResult.SKIPPED

    release.set()
    worker.join(timeout=5)
    assert results == [AcquireResult.DOWNLOADED]
    assert session.calls == [URL]
    assert store.list_entries() == ['water_bucket.png']


def test_downloaded_xor_failed(store):
    good = 'https://w.example/images/Rose.gif'
    bad = 'https://w.example/images/Tulip.gif'
    acquirer, _ = make_acquirer(store, {
        good: make_response(content=image_bytes('GIF')),
        bad: make_response(content=b'garbage'),
    })
    assert acquirer.acquire(good) is AcquireResult.DOWNLOADED
    assert acquirer.acquire(bad) is AcquireResult.FAILED
    assert store.list_entries() == ['rose.png']
