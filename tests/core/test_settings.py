"""Tests for joinery.core.settings module.

Covers:
- JoinerySettings defaults
- JOINERY_-prefixed environment overrides
- log_level validation
- configure_from_settings wiring into structlog
"""

import pytest
import structlog
from pydantic import ValidationError

from joinery.core.settings import JoinerySettings, configure_from_settings, get_settings


class TestJoinerySettingsDefaults:
    def test_defaults(self):
        s = JoinerySettings()
        assert s.log_level == "INFO"
        assert s.log_json is None
        assert s.service_name == "joinery"


class TestJoinerySettingsEnvOverride:
    def test_log_level_from_env(self, monkeypatch):
        monkeypatch.setenv("JOINERY_LOG_LEVEL", "debug")
        assert JoinerySettings().log_level == "DEBUG"

    def test_log_json_from_env(self, monkeypatch):
        monkeypatch.setenv("JOINERY_LOG_JSON", "true")
        assert JoinerySettings().log_json is True

    def test_unprefixed_env_ignored(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        assert JoinerySettings().log_level == "INFO"

    def test_invalid_level(self):
        with pytest.raises(ValidationError):
            JoinerySettings(log_level="LOUD")


class TestConfigureFromSettings:
    def test_get_settings_cached(self):
        get_settings.cache_clear()
        assert get_settings() is get_settings()

    def test_configures_structlog(self):
        settings = JoinerySettings(log_level="WARNING", log_json=True, service_name="sync-worker")
        assert configure_from_settings(settings) is settings
        assert structlog.is_configured()
