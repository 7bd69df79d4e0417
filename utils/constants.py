"""Shared constants for the wiki image mirror."""

LOGGER_NAME = 'wiki_mirror'

# Wiki pages scraped on every pass
DEFAULT_PAGES = [
    'https://plantsvsbrainrotswikia.com/brainrots',
    'https://plantsvsbrainrotswikia.com/gear',
    'https://plantsvsbrainrotswikia.com/plants',
]

# Images fetched on every pass even when no scraped page links to them
DEFAULT_DIRECT_IMAGES = [
    'https://plantsvsbrainrotswikia.com/images/gear/water-bucket.webp',
]

# Category words the wiki bakes into image names
DEFAULT_STOPWORDS = ['brainrots', 'brainrot', 'gear', 'plants', 'seed']

CANONICAL_EXT = '.png'

SCRAPE_INTERVAL_SECONDS = 5 * 60
MIN_INTERVAL_SECONDS = 10
REQUEST_TIMEOUT = 30

DEFAULT_OUTPUT_DIR = 'i/images'
DEFAULT_GALLERY_FILE = 'index.html'
DEFAULT_LOG_FILE = 'logs/wiki_mirror.log'

# URL path the mirror directory is served under
IMAGE_URL_PATH = '/i/images'

DEFAULT_HOST = '0.0.0.0'
DEFAULT_PORT = 3000

GALLERY_TITLE = 'Plants vs Brainrots Images'

USER_AGENTS = [
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.1 Safari/605.1.15',
    'Mozilla/5.0 (X11; Linux x86_64; rv:121.0) Gecko/20100101 Firefox/121.0',
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0',
]
