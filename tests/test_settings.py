"""
Environment-driven configuration.
"""

import importlib

import pytest

# The package re-exports a `settings` instance under the same name as the module
settings_module = importlib.import_module("prediktor.config.settings")


@pytest.fixture
def reload_settings(monkeypatch):
    """Re-evaluate the settings module under a patched environment."""
    def _reload(**env):
        for name, value in env.items():
            if value is None:
                monkeypatch.delenv(name, raising=False)
            else:
                monkeypatch.setenv(name, value)
        return importlib.reload(settings_module).settings

    yield _reload
    monkeypatch.undo()
    importlib.reload(settings_module)


class TestSettings:
    def test_defaults(self, reload_settings):
        settings = reload_settings(GEMINI_MODEL=None, DEFAULT_CURRENCY=None, API_PORT=None)
        assert settings.GEMINI_MODEL == "gemini-2.5-pro"
        assert settings.DEFAULT_CURRENCY == "FCFA"
        assert settings.API_PORT == 8000

    def test_values_come_from_environment(self, reload_settings):
        settings = reload_settings(
            APP_VERSION="2.1.0",
            GEMINI_TEMPERATURE="0.4",
            GEMINI_TOP_K="20",
            GEMINI_TOP_P="0.8",
            GEMINI_MAX_OUTPUT_TOKENS="2048",
            REQUEST_TIMEOUT="15",
            DEFAULT_COUNTRY="Senegal",
            DEFAULT_CURRENCY="XOF",
            DEFAULT_COMPANY_NAME="Acme",
            API_HOST="127.0.0.1",
            API_PORT="9000",
            DASHBOARD_PORT="9501",
            DEBUG="yes",
        )
        assert settings.APP_VERSION == "2.1.0"
        assert settings.GEMINI_TEMPERATURE == 0.4
        assert settings.GEMINI_TOP_K == 20
        assert settings.GEMINI_TOP_P == 0.8
        assert settings.GEMINI_MAX_OUTPUT_TOKENS == 2048
        assert settings.REQUEST_TIMEOUT == 15.0
        assert settings.DEFAULT_COUNTRY == "Senegal"
        assert settings.DEFAULT_CURRENCY == "XOF"
        assert settings.DEFAULT_COMPANY_NAME == "Acme"
        assert settings.API_HOST == "127.0.0.1"
        assert settings.API_PORT == 9000
        assert settings.DASHBOARD_PORT == 9501
        assert settings.DEBUG is True
