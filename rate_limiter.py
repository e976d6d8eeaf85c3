"""
Fixed-Window Rate Limiting pro Client

Jeder Client-Key (erste IP aus X-Forwarded-For) bekommt ein Fenster mit
Zähler. Läuft das Fenster ab, beginnt ein neues mit Zähler 0. Abgelaufene
Fenster werden beim nächsten Durchlauf weggeräumt. Der Zustand
lebt nur im Prozess, ein Neustart setzt alle Zähler zurück.

Hinweis: X-Forwarded-For ist vom Client fälschbar, hinter NAT teilen sich
viele Nutzer einen Key.
"""
import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict, Mapping, Optional

UNKNOWN_CLIENT = 'unknown'


@dataclass
class RateWindow:
    count: int
    reset_time: float


class RateLimiterStore:
    """
    Zähler pro Client-Key in festen Zeitfenstern.

    Args:
        limit: erlaubte Requests pro Fenster
        window_seconds: Länge des Fensters
        clock: Zeitquelle in Sekunden (für Tests austauschbar)

    Example:
        >>> limiter = RateLimiterStore(limit=10, window_seconds=60)
        >>> limiter.hit('203.0.113.7')
        True
    """

    def __init__(self, limit: int = 10, window_seconds: float = 60.0,
                 clock: Optional[Callable[[], float]] = None):
        if limit <= 0:
            raise ValueError(f"limit must be > 0, got {limit}")
        if window_seconds <= 0:
            raise ValueError(f"window_seconds must be > 0, got {window_seconds}")

        self.limit = limit
        self.window_seconds = window_seconds
        self.clock = clock or time.monotonic
        self._windows: Dict[str, RateWindow] = {}
        self._next_sweep = float('-inf')
        self._lock = Lock()

    def hit(self, key: str) -> bool:
        """
        Zählt einen Request. False wenn das Limit im offenen Fenster erreicht
        ist, der Zähler wird dann nicht weiter erhöht.
        """
        with self._lock:
            now = self.clock()
            if now >= self._next_sweep:
                self._sweep(now)

            window = self._windows.get(key)
            if window is None:
                window = RateWindow(count=0, reset_time=now + self.window_seconds)

            if now > window.reset_time:
                window.count = 0
                window.reset_time = now + self.window_seconds

            if window.count >= self.limit:
                return False

            window.count += 1
            self._windows[key] = window
            return True

    def _sweep(self, now: float) -> None:
        # Abgelaufene Fenster entfernen, höchstens einmal pro Fensterlänge
        expired = [key for key, window in self._windows.items() if window.reset_time < now]
        for key in expired:
            del self._windows[key]
        self._next_sweep = now + self.window_seconds

    # Hooks für Tests und Betrieb (Zustand ansehen, alles zurücksetzen)

    def get_window(self, key: str) -> Optional[RateWindow]:
        """Aktuelles Fenster eines Keys, None wenn keins oder schon weggeräumt"""
        with self._lock:
            return self._windows.get(key)

    def reset(self) -> None:
        """Alle Fenster verwerfen"""
        with self._lock:
            self._windows.clear()
            self._next_sweep = float('-inf')


def client_key(headers: Mapping[str, str]) -> str:
    """Erste Adresse aus X-Forwarded-For, sonst Platzhalter"""
    forwarded = headers.get('X-Forwarded-For') or ''
    first = forwarded.split(',')[0].strip()
    return first or UNKNOWN_CLIENT
