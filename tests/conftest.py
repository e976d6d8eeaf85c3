"""
Pytest configuration and shared fixtures for the Impressum service tests.
"""
from unittest.mock import MagicMock

import pytest

from impressum_extractor import ImpressumExtractor
from impressum_locator import PageFetcher

SCENARIO_A_HTML = """
<html>
<body>
  <h1>Impressum</h1>
  <p>
    Firma: Testfirma GmbH<br>
    Teststraße 1<br>
    10115 Berlin<br>
    Deutschland
  </p>
  <p>
    Tel: +49 30 123456789<br>
    E-Mail: <a href="mailto:contact@testfirma.de">contact@testfirma.de</a>
  </p>
  <p>
    Geschäftsführer: Max Muster
  </p>
</body>
</html>
"""

SCENARIO_B_HTML = """
<html>
<head>
  <script type="application/ld+json">
    {"@context": "https://schema.org", "@type": "Organization", "name": "tantum IT GmbH"}
  </script>
</head>
<body>
  <h1>Impressum</h1>
  <p>
    <strong>tantum IT GmbH</strong><br>
    Musterweg 5<br>
    12345 Musterstadt
  </p>
  <p><b>Vertreten durch:</b> Anna Beispiel</p>
</body>
</html>
"""

HOMEPAGE_HTML = """
<html>
<body>
  <nav><a href="/">Start</a> <a href="/produkte">Produkte</a></nav>
  <footer>
    <a href="/datenschutz">Datenschutz</a>
    <a href="/impressum">Impressum</a>
  </footer>
</body>
</html>
"""


class FakeClock:
    """Manually advanced clock for rate limiter tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_response(status_code: int = 200, text: str = "", encoding: str = "utf-8"):
    """Mock requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.encoding = encoding
    response.apparent_encoding = "utf-8"
    return response


def make_session(pages: dict):
    """
    Mock requests.Session serving pages by URL.

    pages maps URL -> (status_code, html); unknown URLs answer 404.
    """
    session = MagicMock()

    def get(url, timeout=None):
        status_code, html = pages.get(url, (404, ""))
        return make_response(status_code, html)

    session.get.side_effect = get
    return session


@pytest.fixture
def extractor():
    return ImpressumExtractor()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def site_session():
    """Homepage with an Impressum link plus the Scenario A Impressum page."""
    return make_session({
        "https://www.testfirma.de": (200, HOMEPAGE_HTML),
        "https://www.testfirma.de/impressum": (200, SCENARIO_A_HTML),
    })


@pytest.fixture
def site_fetcher(site_session):
    return PageFetcher(timeout=5.0, session=site_session)
