"""
Konfiguration des Impressum-Service (Umgebungsvariablen / .env)
"""
import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_USER_AGENT = 'Mozilla/5.0 (compatible; ImpressumBot/1.0; +https://example.com)'


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, '').strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, '').strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


@dataclass
class Settings:
    rate_limit: int = 10
    rate_window_seconds: float = 60.0
    fetch_timeout: float = 8.0
    user_agent: str = DEFAULT_USER_AGENT
    log_level: str = 'INFO'
    port: int = 8080
    debug: bool = False

    @classmethod
    def from_env(cls) -> 'Settings':
        """Liest Settings aus os.environ, vorher wird eine vorhandene .env geladen"""
        load_dotenv()
        return cls(
            rate_limit=_env_int('RATE_LIMIT', 10),
            rate_window_seconds=_env_float('RATE_WINDOW_SECONDS', 60.0),
            fetch_timeout=_env_float('FETCH_TIMEOUT', 8.0),
            user_agent=os.environ.get('SCRAPER_USER_AGENT', '').strip() or DEFAULT_USER_AGENT,
            log_level=os.environ.get('LOG_LEVEL', 'INFO').upper(),
            port=_env_int('PORT', 8080),
            debug=os.environ.get('FLASK_DEBUG', 'false').lower() == 'true',
        )
