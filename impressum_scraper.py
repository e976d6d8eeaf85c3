"""
Impressum Scraper
Startseite → Impressum-Link → Impressum-Seite → Kandidaten je Feld

Aufruf von der Kommandozeile:
    python impressum_scraper.py https://www.example.de [weitere URLs]
"""
import json
import logging
import sys
from typing import Optional

from candidates import FIELDS, ExtractionResult
from config import Settings
from errors import ImpressumError
from impressum_extractor import ImpressumExtractor, get_extractor
from impressum_locator import ImpressumLocator, PageFetcher

logger = logging.getLogger(__name__)


class ImpressumScraper:
    """Zwei sequenzielle Fetches, keine Retries"""

    def __init__(self, fetcher: PageFetcher, extractor: Optional[ImpressumExtractor] = None):
        self.fetcher = fetcher
        self.locator = ImpressumLocator(fetcher)
        self.extractor = extractor or get_extractor()

    @classmethod
    def from_settings(cls, settings: Settings) -> 'ImpressumScraper':
        return cls(PageFetcher(user_agent=settings.user_agent, timeout=settings.fetch_timeout))

    def scrape(self, url: str) -> ExtractionResult:
        """
        HAUPTMETHODE: Kandidaten aus dem Impressum einer Website

        Raises:
            UpstreamFetchError: Startseite oder Impressum nicht 2xx
            NotFoundError: kein Impressum-Link
        """
        # Schritt 1: Impressum-URL finden
        impressum_url = self.locator.locate(url)

        # Schritt 2: Impressum laden
        html = self.fetcher.fetch(impressum_url, label='Impressum')

        # Schritt 3: Felder extrahieren
        result = self.extractor.extract(html, source=impressum_url)

        found = {name: sum(1 for c in result.fields[name] if c.method != 'none') for name in FIELDS}
        logger.info(f"📊 Kandidaten für {impressum_url}: {found}")
        return result


# ===== KOMMANDOZEILE =====
if __name__ == "__main__":
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level, format='%(asctime)s - %(levelname)s - %(message)s')

    if len(sys.argv) < 2:
        print("Aufruf: python impressum_scraper.py <url> [<url> ...]")
        sys.exit(2)

    scraper = ImpressumScraper.from_settings(settings)
    exit_code = 0

    for url in sys.argv[1:]:
        print(f"\n{'='*60}")
        try:
            result = scraper.scrape(url)
        except ImpressumError as e:
            print(f"Fehler ({e.status_code}): {e}")
            exit_code = 1
            continue

        print(json.dumps(
            {'summary': result.summary(), **result.to_dict()},
            indent=2,
            ensure_ascii=False,
        ))

    sys.exit(exit_code)
