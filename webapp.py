"""Minimal Flask web UI serving the gallery page and the mirrored images."""
import logging

from flask import Flask, abort, jsonify, send_from_directory

from downloader_lib.store import MirrorStore
from utils.config import MirrorConfig
from utils.constants import IMAGE_URL_PATH, LOGGER_NAME

PLACEHOLDER_HTML = '<h1>No images yet</h1>'

logger = logging.getLogger(f'{LOGGER_NAME}.webui')


def create_app(config: MirrorConfig, scraper=None, scheduler=None) -> Flask:
    """Build the web app for one mirror.

    Args:
        config: Mirror settings (image folder and gallery file locations)
        scraper: Optional WikiImageScraper, used to report the last pass
        scheduler: Optional ScrapeScheduler, needed for POST /api/scrape
    """
    app = Flask(__name__)
    store = MirrorStore(config.output_dir, config.canonical_ext)

    @app.route('/')
    def index():
        # Always serve whatever gallery was last written, even mid-pass
        try:
            return config.gallery_file.read_text(encoding='utf-8')
        except FileNotFoundError:
            return PLACEHOLDER_HTML
        except OSError:
            logger.exception(f'Could not read {config.gallery_file}')
            return PLACEHOLDER_HTML

    @app.route(f'{IMAGE_URL_PATH}/<path:filename>')
    def mirror_image(filename):
        if not store.directory.is_dir():
            abort(404)
        return send_from_directory(store.directory, filename)

    @app.route('/api/status', methods=['GET'])
    def api_status():
        summary = getattr(scraper, 'last_summary', None)
        return jsonify({
            'image_count': len(store.list_entries()),
            'running': bool(getattr(scraper, 'running', False)),
            'last_run': summary.to_dict() if summary is not None else None,
        })

    @app.route('/api/scrape', methods=['POST'])
    def api_scrape():
        if scheduler is None:
            return jsonify({'error': 'No scheduler is running'}), 503
        scheduler.trigger()
        logger.info('Scrape pass requested via API')
        return jsonify({'status': 'queued'}), 202

    return app
