"""
Settings loading and startup validation
"""
import pytest
from pydantic import ValidationError

from sitefront.config import SitefrontSettings, get_settings, reload_settings, validate_routing
from sitefront.exceptions import ConfigurationError


@pytest.fixture
def fresh_settings():
    reload_settings()
    yield
    reload_settings()


def test_environment_overrides(monkeypatch, fresh_settings):
    monkeypatch.setenv("API_BASE_URL", "https://api.example.com/api/")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("CONTENT_SOURCE", "markdown")

    settings = get_settings()
    assert settings.api_base_url == "https://api.example.com/api"
    assert settings.log_level == "DEBUG"
    assert settings.content_source == "markdown"
    assert settings.content_directory.is_absolute()


def test_settings_are_cached_until_reloaded(monkeypatch, fresh_settings):
    first = get_settings()
    assert get_settings() is first
    monkeypatch.setenv("APP_NAME", "Renamed")
    reload_settings()
    assert get_settings().app_name == "Renamed"


def test_invalid_values_are_rejected():
    with pytest.raises(ValidationError):
        SitefrontSettings(log_level="LOUD")
    with pytest.raises(ValidationError):
        SitefrontSettings(domain_check_ttl=0)
    with pytest.raises(ValidationError):
        SitefrontSettings(content_source="ftp")


def test_routing_validation():
    settings = SitefrontSettings()
    assert validate_routing(settings) is settings

    with pytest.raises(ConfigurationError) as exc:
        validate_routing(SitefrontSettings(api_prefix="/"))
    assert exc.value.details["setting"] == "api_prefix"

    with pytest.raises(ConfigurationError):
        validate_routing(SitefrontSettings(api_prefix="api"))

    with pytest.raises(ConfigurationError):
        validate_routing(SitefrontSettings(admin_prefixes=["admin"]))

    with pytest.raises(ConfigurationError):
        validate_routing(SitefrontSettings(admin_prefixes=["/_sitefront/api/v1"]))
