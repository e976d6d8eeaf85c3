"""
Fehlerklassen des Impressum-Service

Jede Klasse kennt ihren HTTP-Status, die Übersetzung in eine JSON-Antwort
passiert zentral in app.py.
"""
from typing import Optional


class ImpressumError(Exception):
    """Basisklasse aller erwarteten Fehler"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputError(ImpressumError):
    """Fehlende oder ungültige URL im Request"""
    status_code = 400


class NotFoundError(ImpressumError):
    """Kein Impressum-Link gefunden bzw. Link ohne href"""
    status_code = 404


class RateLimitError(ImpressumError):
    status_code = 429


class UpstreamFetchError(ImpressumError):
    """Externe Seite hat mit einem Nicht-2xx-Status geantwortet"""
    status_code = 502

    def __init__(self, upstream_status: int, message: Optional[str] = None):
        super().__init__(message or f"Upstream fetch failed: HTTP {upstream_status}")
        self.upstream_status = upstream_status
