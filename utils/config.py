"""Load the mirror configuration from ``mirror_config.json``.

The file is optional; every key falls back to the defaults in
``utils.constants``. Keys starting with ``_`` are treated as comments.
"""
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from utils.constants import (
    CANONICAL_EXT,
    DEFAULT_DIRECT_IMAGES,
    DEFAULT_GALLERY_FILE,
    DEFAULT_HOST,
    DEFAULT_LOG_FILE,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_PAGES,
    DEFAULT_PORT,
    DEFAULT_STOPWORDS,
    LOGGER_NAME,
    MIN_INTERVAL_SECONDS,
    REQUEST_TIMEOUT,
    SCRAPE_INTERVAL_SECONDS,
)

CONFIG_FILENAME = 'mirror_config.json'
PROJECT_ROOT = Path(__file__).resolve().parent.parent

logger = logging.getLogger(f'{LOGGER_NAME}.config')


@dataclass
class MirrorConfig:
    pages: List[str] = field(default_factory=lambda: list(DEFAULT_PAGES))
    direct_images: List[str] = field(default_factory=lambda: list(DEFAULT_DIRECT_IMAGES))
    stopwords: List[str] = field(default_factory=lambda: list(DEFAULT_STOPWORDS))
    canonical_ext: str = CANONICAL_EXT
    interval_seconds: float = SCRAPE_INTERVAL_SECONDS
    output_dir: Path = PROJECT_ROOT / DEFAULT_OUTPUT_DIR
    gallery_file: Path = PROJECT_ROOT / DEFAULT_GALLERY_FILE
    log_file: Optional[Path] = PROJECT_ROOT / DEFAULT_LOG_FILE
    request_timeout: float = REQUEST_TIMEOUT
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT


def _strip_comments(section: Any) -> Dict[str, Any]:
    if not isinstance(section, dict):
        return {}
    return {k: v for k, v in section.items() if not str(k).startswith('_')}


def _resolve(base: Path, value: str) -> Path:
    p = Path(value).expanduser()
    return p if p.is_absolute() else (base / p)


def _number(section: Dict[str, Any], key: str, default, cast=float, minimum=None):
    """Read a numeric setting; bad values keep ``default``, small ones are raised to ``minimum``."""
    if key not in section:
        return default
    try:
        value = cast(section[key])
    except (TypeError, ValueError):
        logger.warning(f"Ignoring non-numeric {key}={section[key]!r}; using {default}")
        return default
    if minimum is not None and value < minimum:
        logger.warning(f"{key}={value} is below {minimum}; using {minimum}")
        return minimum
    return value


def _read_json(path: Path) -> Dict[str, Any]:
    if not path.exists():
        logger.info(f"No config file at {path}; using defaults")
        return {}
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Could not read config {path}: {e}; using defaults")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Config {path} is not a JSON object; using defaults")
        return {}
    return data


def load_config(path: Optional[str] = None, env: Optional[Dict[str, str]] = None) -> MirrorConfig:
    """Build a MirrorConfig from a JSON file plus the ``PORT`` environment variable.

    Args:
        path: Config file to read (default: ``mirror_config.json`` in the project root)
        env: Environment mapping, mainly for tests (default: ``os.environ``)
    """
    cfg_path = Path(path).expanduser().resolve() if path else PROJECT_ROOT / CONFIG_FILENAME
    base = cfg_path.parent
    raw = _strip_comments(_read_json(cfg_path))
    env = os.environ if env is None else env

    config = MirrorConfig()

    if isinstance(raw.get('pages'), list):
        config.pages = [str(u) for u in raw['pages'] if u]
    if isinstance(raw.get('direct_images'), list):
        config.direct_images = [str(u) for u in raw['direct_images'] if u]

    norm = _strip_comments(raw.get('normalization'))
    if isinstance(norm.get('stopwords'), list):
        config.stopwords = [str(w) for w in norm['stopwords'] if w]
    if norm.get('canonical_ext'):
        ext = str(norm['canonical_ext']).lower()
        config.canonical_ext = ext if ext.startswith('.') else '.' + ext

    schedule = _strip_comments(raw.get('schedule'))
    config.interval_seconds = _number(schedule, 'interval_seconds', config.interval_seconds, minimum=MIN_INTERVAL_SECONDS)

    paths = _strip_comments(raw.get('paths'))
    # Relative paths in a config file are relative to that file, defaults to the project root
    if paths.get('output_dir'):
        config.output_dir = _resolve(base, paths['output_dir'])
    if paths.get('gallery_file'):
        config.gallery_file = _resolve(base, paths['gallery_file'])
    if 'log_file' in paths:
        config.log_file = _resolve(base, paths['log_file']) if paths['log_file'] else None

    net = _strip_comments(raw.get('network'))
    config.request_timeout = _number(net, 'request_timeout', config.request_timeout, minimum=1)

    server = _strip_comments(raw.get('server'))
    if server.get('host'):
        config.host = str(server['host'])
    config.port = _number(server, 'port', config.port, cast=int)

    env_port = env.get('PORT')
    if env_port:
        try:
            config.port = int(env_port)
        except ValueError:
            logger.warning(f"Ignoring non-numeric PORT={env_port!r}")

    return config
