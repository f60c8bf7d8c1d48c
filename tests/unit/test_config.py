"""
Unit tests for configuration loading (BridgeSettings).

Environment variables are set with monkeypatch; `_env_file=None` keeps a
stray .env in the working directory out of the picture.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from railbridge.config import DEFAULT_REDACT_KEYS, BridgeSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "RAILBRIDGE_ENVIRONMENT",
        "RAILBRIDGE_LOG_LEVEL",
        "RAILBRIDGE_LOG_JSON",
        "RAILBRIDGE_LOG_REDACT_KEYS",
        "RAILBRIDGE_INTERNAL_ERROR_MESSAGE",
    ):
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_defaults_to_production(self):
        settings = BridgeSettings(_env_file=None)
        assert settings.environment == "production"
        assert settings.is_production

    def test_logging_defaults(self):
        settings = BridgeSettings(_env_file=None)
        assert settings.log_level == "INFO"
        assert settings.log_json is True
        assert settings.log_redact_keys == list(DEFAULT_REDACT_KEYS)
        assert settings.internal_error_message == "Internal server error"


class TestEnvironmentVariables:
    def test_environment_from_env(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("RAILBRIDGE_ENVIRONMENT", "development")
        settings = BridgeSettings(_env_file=None)
        assert settings.environment == "development"
        assert not settings.is_production

    def test_environment_is_normalized(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("RAILBRIDGE_ENVIRONMENT", " Test ")
        assert BridgeSettings(_env_file=None).environment == "test"

    def test_unknown_environment_rejected(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("RAILBRIDGE_ENVIRONMENT", "staging")
        with pytest.raises(ValidationError):
            BridgeSettings(_env_file=None)

    def test_log_level_is_upper_cased(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("RAILBRIDGE_LOG_LEVEL", "debug")
        assert BridgeSettings(_env_file=None).log_level == "DEBUG"

    def test_unknown_log_level_rejected(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("RAILBRIDGE_LOG_LEVEL", "LOUD")
        with pytest.raises(ValidationError, match="Unknown log level"):
            BridgeSettings(_env_file=None)

    def test_redact_keys_from_json(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("RAILBRIDGE_LOG_REDACT_KEYS", '["ssn", "pin"]')
        assert BridgeSettings(_env_file=None).log_redact_keys == ["ssn", "pin"]

    def test_empty_internal_message_rejected(self):
        with pytest.raises(ValidationError):
            BridgeSettings(_env_file=None, internal_error_message="")
