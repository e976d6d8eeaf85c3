"""
Impressum-Service - Web Edition
Flask-Endpoint: URL rein, Impressum-Kandidaten (Firma, Adresse, Telefon,
E-Mail, Geschäftsführer) als JSON raus
"""
import logging
from typing import Optional
from urllib.parse import urlparse

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from config import Settings
from errors import ImpressumError, InputError, RateLimitError
from impressum_locator import PageFetcher
from impressum_scraper import ImpressumScraper
from rate_limiter import RateLimiterStore, client_key

settings = Settings.from_env()

# Logging
logging.basicConfig(level=settings.log_level, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

# CORS für Browser-Zugriff
CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Headers': 'authorization, x-client-info, apikey, content-type',
}


def is_valid_url(url: str) -> bool:
    """Nur absolute http(s)-URLs mit Host"""
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return parsed.scheme in ('http', 'https') and bool(parsed.netloc)


def create_app(settings: Optional[Settings] = None,
               rate_limiter: Optional[RateLimiterStore] = None,
               fetcher: Optional[PageFetcher] = None) -> Flask:
    """
    Baut die Flask-App

    Args:
        settings: Konfiguration (Default: aus Umgebung)
        rate_limiter: Zähler-Store, pro App-Instanz eigener Zustand
        fetcher: ausgehende HTTP-Requests (in Tests gemockt)
    """
    settings = settings or Settings.from_env()
    limiter = rate_limiter or RateLimiterStore(
        limit=settings.rate_limit,
        window_seconds=settings.rate_window_seconds,
    )
    fetcher = fetcher or PageFetcher(user_agent=settings.user_agent, timeout=settings.fetch_timeout)
    scraper = ImpressumScraper(fetcher)

    app = Flask(__name__)
    app.json.sort_keys = False
    app.config['MAX_CONTENT_LENGTH'] = 64 * 1024
    app.extensions['impressum'] = {
        'settings': settings,
        'rate_limiter': limiter,
        'scraper': scraper,
    }

    # ============================================================
    # API: SCRAPE IMPRESSUM
    # ============================================================
    @app.route('/', methods=['POST', 'OPTIONS'])
    @app.route('/scrape-impressum', methods=['POST', 'OPTIONS'])
    def scrape_impressum():
        """Impressum einer Website finden und auswerten"""
        # CORS Preflight
        if request.method == 'OPTIONS':
            return '', 200

        key = client_key(request.headers)
        if not limiter.hit(key):
            logger.warning(f"⚠️ Rate Limit erreicht für {key}")
            raise RateLimitError('Rate limit exceeded. Try again later.')

        data = request.get_json(force=True, silent=True)
        url = data.get('url') if isinstance(data, dict) else None
        if not url or not isinstance(url, str):
            raise InputError('URL parameter is required')

        if not is_valid_url(url):
            raise InputError('Invalid URL format')

        url = url.strip()
        logger.info(f"Fetching root URL: {url}")
        result = scraper.scrape(url)
        return jsonify(result.to_dict())

    # ============================================================
    # FEHLERBEHANDLUNG
    # ============================================================
    @app.errorhandler(ImpressumError)
    def handle_impressum_error(e):
        return jsonify({'error': e.message}), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({'error': e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        logger.exception(f"Fehler in scrape-impressum: {e}")
        return jsonify({'error': str(e) or e.__class__.__name__}), 500

    @app.after_request
    def add_cors_headers(response):
        for header, value in CORS_HEADERS.items():
            response.headers[header] = value
        return response

    return app


app = create_app(settings)

# ============================================================
# RUN
# ============================================================
if __name__ == '__main__':
    app.run(host='0.0.0.0', port=settings.port, debug=settings.debug)
