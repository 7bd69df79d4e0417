"""Logger setup shared by the scraper, the web app and the cleanup tool."""
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from utils.constants import LOGGER_NAME


def setup_logging(log_file: Optional[Path] = None, level: str = 'INFO') -> logging.Logger:
    """Attach a rotating file handler and a console handler to the project logger.

    Calling this more than once does not add duplicate handlers. If the log
    file cannot be opened the logger still writes to the console.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    if logger.handlers:
        return logger

    fmt = logging.Formatter('%(asctime)s %(levelname)s %(message)s')

    ch = logging.StreamHandler()
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    if log_file is not None:
        try:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            handler = RotatingFileHandler(str(log_file), maxBytes=5 * 1024 * 1024, backupCount=3, encoding='utf-8')
            handler.setFormatter(fmt)
            logger.addHandler(handler)
        except OSError as e:
            logger.warning(f"Could not open log file {log_file}: {e}; logging to console only")

    return logger


def close_logging() -> None:
    """Close and detach handlers to release the log file (tests, temporary dirs)."""
    logger = logging.getLogger(LOGGER_NAME)
    for h in list(logger.handlers):
        try:
            h.close()
        finally:
            logger.removeHandler(h)
