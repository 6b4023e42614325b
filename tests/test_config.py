"""
Tests for environment-specific settings.
"""
import pytest
from pydantic import ValidationError

from sprint_backlog.config import DevelopmentConfig, ProductionConfig, TestingConfig, get_settings


class TestSecretKey:

    def test_production_requires_secret_key(self, monkeypatch):
        monkeypatch.delenv("SECRET_KEY", raising=False)

        with pytest.raises(ValidationError):
            ProductionConfig(_env_file=None)

    def test_production_reads_secret_key_from_environment(self, monkeypatch):
        monkeypatch.setenv("SECRET_KEY", "from-the-environment")

        assert ProductionConfig(_env_file=None).secret_key == "from-the-environment"

    def test_development_and_testing_have_local_keys(self, monkeypatch):
        monkeypatch.delenv("SECRET_KEY", raising=False)

        assert DevelopmentConfig(_env_file=None).secret_key == "dev-secret-key"
        assert TestingConfig(_env_file=None).secret_key == "test-secret-key"


def test_get_settings_picks_environment(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "testing")

    assert isinstance(get_settings(), TestingConfig)
