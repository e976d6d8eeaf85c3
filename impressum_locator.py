"""
Impressum-Suche: lädt eine Startseite und findet den Link zum Impressum
"""
import logging
from typing import Optional
from urllib.parse import urljoin

import requests

from config import DEFAULT_USER_AGENT
from document_view import DocumentView
from errors import NotFoundError, UpstreamFetchError

logger = logging.getLogger(__name__)

IMPRESSUM_KEYWORDS = ('impressum', 'imprint')


class PageFetcher:
    """GET mit festem User-Agent und Timeout, ohne Retries"""

    def __init__(self, user_agent: str = DEFAULT_USER_AGENT, timeout: float = 8.0,
                 session: Optional[requests.Session] = None):
        self.headers = {
            'User-Agent': user_agent,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
            'Accept-Language': 'de-DE,de;q=0.9,en-US;q=0.8,en;q=0.7',
        }
        self.timeout = timeout

        # Session für Connection Pooling
        self.session = session or requests.Session()
        self.session.headers.update(self.headers)

    def fetch(self, url: str, label: str = 'URL') -> str:
        """
        Lädt eine Seite und gibt das HTML zurück

        Raises:
            UpstreamFetchError: Status außerhalb 2xx
            requests.RequestException: Verbindungsfehler, Timeout
        """
        response = self.session.get(url, timeout=self.timeout)

        if not 200 <= response.status_code < 300:
            logger.warning(f"⚠️ {url} antwortet mit HTTP {response.status_code}")
            raise UpstreamFetchError(
                response.status_code,
                f"Failed to fetch {label}: HTTP {response.status_code}",
            )

        # Fix Encoding: requests rät bei fehlendem Charset Latin-1 statt UTF-8
        if response.encoding and response.encoding.lower() in ('iso-8859-1', 'latin-1', 'latin1'):
            response.encoding = response.apparent_encoding or 'utf-8'

        return response.text


class ImpressumLocator:
    """Findet die absolute Impressum-URL einer Website (ein Hop, erster Treffer)"""

    def __init__(self, fetcher: PageFetcher):
        self.fetcher = fetcher

    def locate(self, base_url: str) -> str:
        """
        Lädt base_url und löst den ersten Impressum/Imprint-Link auf

        Raises:
            UpstreamFetchError: Startseite nicht 2xx
            NotFoundError: kein passender Link oder Link ohne href
        """
        logger.info(f"🔍 Lade Startseite: {base_url}")
        html = self.fetcher.fetch(base_url, label='URL')
        return self.find_impressum_url(html, base_url)

    def find_impressum_url(self, html: str, base_url: str) -> str:
        doc = DocumentView(html)

        matches = [link for link in doc.select_all('a') if self._is_impressum_link(doc, link)]
        if not matches:
            raise NotFoundError('Could not find Impressum/Imprint link')

        href = doc.attr(matches[0], 'href')
        if not href or not href.strip():
            raise NotFoundError('Found Impressum link but href is empty')

        impressum_url = urljoin(base_url, href.strip())
        logger.info(f"✅ Impressum gefunden: {impressum_url}")
        return impressum_url

    def _is_impressum_link(self, doc: DocumentView, link) -> bool:
        text = doc.text(link).lower()
        href = (doc.attr(link, 'href') or '').lower()
        return any(keyword in text or keyword in href for keyword in IMPRESSUM_KEYWORDS)
