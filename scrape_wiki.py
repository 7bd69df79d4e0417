#!/usr/bin/env python3
"""
Wiki Image Mirror (canonical runner)

This script mirrors the images embedded in a few wiki pages into a local
folder and publishes a gallery page listing them.

One scrape pass:
- Fetches each configured page (a failed page is logged and skipped)
- Collects every <img> source, plus the configured direct image URLs
- Normalizes each URL to a canonical filename and skips names already on disk
- Downloads the rest, converts them to the canonical format (PNG) and saves them
- Renames leftover files from older naming rules
- Rewrites the gallery page from the folder listing

By default the runner does one pass, then serves the gallery over HTTP while
repeating the pass every `schedule.interval_seconds` (5 minutes).

Configuration note:
- Settings come from `mirror_config.json` in the project root (or `--config`).
  The `PORT` environment variable overrides the configured port; CLI flags
  override both.

Typical usage:
        # Scrape, then serve on http://localhost:3000 and rescrape every 5 minutes
        python scrape_wiki.py

        # One pass and exit
        python scrape_wiki.py --once
"""

import argparse
import logging
import threading
import time
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import requests

from downloader_lib.acquire import AcquireResult, ImageAcquirer
from downloader_lib.errors import FilesystemFailure
from downloader_lib.fetch import fetch_page
from downloader_lib.gallery import write_gallery
from downloader_lib.parse import extract_image_urls, page_origin
from downloader_lib.store import MirrorStore
from utils.config import MirrorConfig, load_config
from utils.constants import LOGGER_NAME, MIN_INTERVAL_SECONDS
from utils.logs import setup_logging


@dataclass
class ScrapeSummary:
    """Tally of one scrape pass."""
    started_at: str = field(default_factory=lambda: datetime.now().isoformat())
    finished_at: Optional[str] = None
    pages_fetched: int = 0
    pages_failed: int = 0
    downloaded: int = 0
    skipped: int = 0
    failed: int = 0
    renamed: List[List[str]] = field(default_factory=list)
    image_count: int = 0

    def record(self, result: AcquireResult) -> None:
        if result is AcquireResult.DOWNLOADED:
            self.downloaded += 1
        elif result is AcquireResult.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1

    def to_dict(self) -> Dict:
        return asdict(self)


class WikiImageScraper:
    """Runs scrape passes for one MirrorConfig."""

    def __init__(self, config: MirrorConfig, session: Optional[requests.Session] = None, logger: Optional[logging.Logger] = None):
        self.config = config
        self.session = session or requests.Session()
        self.logger = logger or logging.getLogger(f'{LOGGER_NAME}.scraper')
        self.store = MirrorStore(config.output_dir, config.canonical_ext)
        self.acquirer = ImageAcquirer(
            self.store,
            session=self.session,
            stopwords=config.stopwords,
            timeout=config.request_timeout,
        )
        self.last_summary = None  # type: Optional[ScrapeSummary]
        self._pass_lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._pass_lock.locked()

    def scrape_all(self) -> ScrapeSummary:
        """Fetch every page, mirror its images and the direct images, then clean up names."""
        self.logger.info('Scraping wiki pages...')
        summary = ScrapeSummary()

        for url in self.config.pages:
            html = fetch_page(self.session, url, timeout=self.config.request_timeout)
            if html is None:
                summary.pages_failed += 1
                continue
            summary.pages_fetched += 1

            images = extract_image_urls(html, page_origin(url))
            self.logger.info(f"Found {len(images)} image(s) on {url}")
            for img in images:
                summary.record(self.acquirer.acquire(img, referer=url))

        for img in self.config.direct_images:
            summary.record(self.acquirer.acquire(img))

        summary.renamed = [list(pair) for pair in self.store.cleanup()]

        self.logger.info(
            f"Scrape complete. {summary.downloaded} new images downloaded "
            f"({summary.skipped} already present, {summary.failed} failed, "
            f"{summary.pages_failed} page(s) unreachable)."
        )
        return summary

    def render(self) -> int:
        """Rewrite the gallery file; returns the number of images listed."""
        count = write_gallery(self.store, self.config.gallery_file)
        self.logger.info(f"Updated {self.config.gallery_file.name} ({count} images)")
        return count

    def run_pass(self) -> ScrapeSummary:
        """One full pass: scrape, clean up, render. Concurrent callers wait their turn."""
        with self._pass_lock:
            self.store.ensure_directory()
            summary = self.scrape_all()
            try:
                summary.image_count = self.render()
            except FilesystemFailure as e:
                self.logger.error(str(e))
                summary.image_count = len(self.store.list_entries())
            summary.finished_at = datetime.now().isoformat()
            self.last_summary = summary
            return summary


class ScrapeScheduler:
    """Repeats scrape passes on a fixed interval in a single worker thread.

    The next pass starts `interval` seconds after the previous one started,
    or immediately if the previous pass took longer, so passes never overlap.
    """

    def __init__(self, scraper: WikiImageScraper, interval: float):
        self.scraper = scraper
        self.interval = float(interval)
        self.logger = scraper.logger
        self._wake = threading.Event()
        self._stop = threading.Event()
        self._thread = None  # type: Optional[threading.Thread]
        self._last_start = None  # type: Optional[float]

    def trigger(self) -> None:
        """Ask for a pass now instead of at the end of the current wait."""
        self._wake.set()

    def stop(self) -> None:
        self._stop.set()
        self._wake.set()

    def seconds_until_next(self) -> float:
        if self._last_start is None:
            return 0.0
        return max(0.0, self.interval - (time.monotonic() - self._last_start))

    def run_once(self) -> None:
        """Run one pass now; errors are logged, never raised."""
        self._last_start = time.monotonic()
        try:
            self.scraper.run_pass()
        except Exception:
            # Keep the schedule alive; the next pass retries everything
            self.logger.exception('Scrape pass failed')
        self.logger.debug(f"Pass took {time.monotonic() - self._last_start:.1f}s")

    def run_forever(self) -> None:
        if self._last_start is None:
            self.run_once()
        while not self._stop.is_set():
            self._wake.wait(timeout=self.seconds_until_next())
            self._wake.clear()
            if self._stop.is_set():
                break
            self.run_once()

    def start(self) -> threading.Thread:
        self._thread = threading.Thread(target=self.run_forever, name='scrape-scheduler', daemon=True)
        self._thread.start()
        return self._thread

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)


def main(argv=None):
    """Main entry point"""
    parser = argparse.ArgumentParser(description='Mirror wiki images into a local folder and serve a gallery of them')
    parser.add_argument('--config', '-c', help='Path to mirror_config.json (default: project root)')
    parser.add_argument('--once', action='store_true', help='Run a single scrape pass and exit')
    parser.add_argument('--no-server', action='store_true', help='Keep rescraping on schedule without starting the web server')
    parser.add_argument('--interval', type=float, help='Seconds between scrape passes (overrides config)')
    parser.add_argument('--output-dir', help='Folder for mirrored images (overrides config)')
    parser.add_argument('--host', help='Address for the web server (overrides config)')
    parser.add_argument('--port', type=int, help='Port for the web server (overrides config and PORT)')
    parser.add_argument('--log-level', default='INFO', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'], help='Logging verbosity')
    args = parser.parse_args(argv)

    config = load_config(args.config)
    if args.interval is not None:
        config.interval_seconds = max(MIN_INTERVAL_SECONDS, args.interval)
    if args.output_dir:
        config.output_dir = Path(args.output_dir).expanduser().resolve()
    if args.host:
        config.host = args.host
    if args.port is not None:
        config.port = args.port

    logger = setup_logging(config.log_file, args.log_level)

    scraper = WikiImageScraper(config)
    try:
        scraper.store.ensure_directory()
    except FilesystemFailure as e:
        logger.error(str(e))
        return 1

    # Initial pass runs in the foreground so the first gallery exists before serving
    scheduler = ScrapeScheduler(scraper, config.interval_seconds)
    scheduler.run_once()

    if args.once:
        return 0

    if args.no_server:
        try:
            scheduler.run_forever()
        except KeyboardInterrupt:
            logger.info('Stopped by user.')
        return 0

    from webapp import create_app

    scheduler.start()
    app = create_app(config, scraper=scraper, scheduler=scheduler)
    logger.info(f"Server running on http://localhost:{config.port}")
    app.run(host=config.host, port=config.port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
