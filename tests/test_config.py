"""
RestGate — Settings Tests
===========================

What:  Tests for environment parsing, validation and immutability of Settings.
"""

import pytest
from pydantic import ValidationError

from restgate.config import Environment, Settings


@pytest.fixture
def clean_env(monkeypatch):
    """Remove the test-suite overrides so defaults apply."""
    for name in ("ENVIRONMENT", "ENV", "LOG_LEVEL", "PORT", "API_PREFIX", "CORS_ORIGINS"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestEnvironment:

    def test_default_is_development(self, clean_env):
        settings = Settings(_env_file=None)
        assert settings.environment is Environment.DEVELOPMENT
        assert settings.is_development

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("dev", Environment.DEVELOPMENT),
            ("development", Environment.DEVELOPMENT),
            ("prod", Environment.PRODUCTION),
            ("PRODUCTION", Environment.PRODUCTION),
            ("test", Environment.TEST),
        ],
    )
    def test_read_from_environment_variable(self, clean_env, value, expected):
        clean_env.setenv("ENVIRONMENT", value)
        assert Settings(_env_file=None).environment is expected

    def test_short_variable_name(self, clean_env):
        clean_env.setenv("ENV", "prod")
        assert Settings(_env_file=None).is_production

    def test_invalid_environment_rejected(self, clean_env):
        with pytest.raises(ValidationError, match="Invalid environment"):
            Settings(_env_file=None, environment="staging")

    def test_mode_flags_are_exclusive(self):
        settings = Settings(_env_file=None, environment=Environment.TEST)
        assert (settings.is_development, settings.is_production, settings.is_test) == (False, False, True)


class TestServerSettings:

    def test_port_from_environment(self, clean_env):
        clean_env.setenv("PORT", "8080")
        assert Settings(_env_file=None).port == 8080

    def test_port_range(self, clean_env):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, port=70000)

    def test_log_level_uppercased(self, clean_env):
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self, clean_env):
        with pytest.raises(ValidationError, match="Invalid log_level"):
            Settings(_env_file=None, log_level="chatty")


class TestRoutingSettings:

    @pytest.mark.parametrize("value", ["/api", "api", "/api/", " api/ "])
    def test_api_prefix_normalized(self, clean_env, value):
        assert Settings(_env_file=None, api_prefix=value).api_prefix == "/api"

    def test_empty_prefix_rejected(self, clean_env):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, api_prefix="/")

    def test_cors_origins_list(self, clean_env):
        settings = Settings(_env_file=None, cors_origins="https://a.example, ,https://b.example")
        assert settings.cors_origins_list == ["https://a.example", "https://b.example"]

    def test_cors_default_allows_any_origin(self, clean_env):
        assert Settings(_env_file=None).cors_origins_list == ["*"]


class TestImmutability:

    def test_assignment_rejected(self):
        settings = Settings(_env_file=None, environment=Environment.TEST)
        with pytest.raises(ValidationError):
            settings.port = 1234
