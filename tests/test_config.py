"""
Tests for Settings.from_env().
"""
import pytest

import config
from config import DEFAULT_USER_AGENT, Settings

ENV_VARS = [
    "RATE_LIMIT", "RATE_WINDOW_SECONDS", "FETCH_TIMEOUT", "SCRAPER_USER_AGENT",
    "LOG_LEVEL", "PORT", "FLASK_DEBUG",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # keine .env aus dem Arbeitsverzeichnis
    monkeypatch.setattr(config, "load_dotenv", lambda *args, **kwargs: False)


class TestSettings:

    def test_defaults(self):
        settings = Settings.from_env()
        assert settings == Settings()
        assert settings.rate_limit == 10
        assert settings.rate_window_seconds == 60.0
        assert settings.fetch_timeout == 8.0
        assert settings.user_agent == DEFAULT_USER_AGENT
        assert settings.port == 8080
        assert settings.debug is False

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("RATE_LIMIT", "25")
        monkeypatch.setenv("RATE_WINDOW_SECONDS", "30")
        monkeypatch.setenv("FETCH_TIMEOUT", "2.5")
        monkeypatch.setenv("SCRAPER_USER_AGENT", "TestBot/2.0")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("PORT", "5000")
        monkeypatch.setenv("FLASK_DEBUG", "True")

        settings = Settings.from_env()
        assert settings.rate_limit == 25
        assert settings.rate_window_seconds == 30.0
        assert settings.fetch_timeout == 2.5
        assert settings.user_agent == "TestBot/2.0"
        assert settings.log_level == "DEBUG"
        assert settings.port == 5000
        assert settings.debug is True

    def test_invalid_number_names_variable(self, monkeypatch):
        monkeypatch.setenv("RATE_LIMIT", "zehn")
        with pytest.raises(ValueError, match="RATE_LIMIT"):
            Settings.from_env()
