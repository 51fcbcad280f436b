"""Tests for settings resolution and the session secret policy."""

from __future__ import annotations

import logging

import pytest

from managepetro.config import (
    DEFAULT_API_BASE_URL,
    DEVELOPMENT_SESSION_SECRET,
    ConfigurationError,
    load_settings,
    normalize_api_base_url,
)
from managepetro.web import create_app


def test_production_without_secret_is_a_startup_failure():
    with pytest.raises(ConfigurationError, match="MANAGEPETRO_SESSION_SECRET"):
        load_settings({"MANAGEPETRO_ENV": "production"})


def test_development_falls_back_to_insecure_secret():
    settings = load_settings({})

    assert settings.session_secret == DEVELOPMENT_SESSION_SECRET
    assert settings.using_development_secret is True
    assert settings.api_base_url == DEFAULT_API_BASE_URL
    assert settings.login_path == "/api/login"
    assert settings.session_secure is False


def test_production_with_secret_defaults_to_secure_cookies():
    settings = load_settings(
        {"MANAGEPETRO_ENV": "production", "MANAGEPETRO_SESSION_SECRET": "s3cret"}
    )

    assert settings.is_production
    assert settings.session_secret == "s3cret"
    assert settings.session_secure is True
    assert settings.using_development_secret is False


def test_api_base_url_prefers_server_variable_and_strips_api_suffix():
    settings = load_settings(
        {
            "API_BASE_URL": "https://orders.example.com/api/",
            "NEXT_PUBLIC_API_BASE_URL": "https://public.example.com",
        }
    )
    assert settings.api_base_url == "https://orders.example.com"

    fallback = load_settings({"NEXT_PUBLIC_API_BASE_URL": "https://public.example.com/api"})
    assert fallback.api_base_url == "https://public.example.com"


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, DEFAULT_API_BASE_URL),
        ("", DEFAULT_API_BASE_URL),
        ("http://localhost:8000/api", "http://localhost:8000"),
        ("https://api.example.com/", "https://api.example.com"),
    ],
)
def test_normalize_api_base_url(raw, expected):
    assert normalize_api_base_url(raw) == expected


def test_yaml_file_values_are_overridden_by_environment(tmp_path):
    config_file = tmp_path / "dashboard.yaml"
    config_file.write_text(
        "api_base_url: https://yaml.example.com\n"
        "login_path: api/auth/login\n"
        "session_max_age: 3600\n"
        "api_timeout: 5\n",
        encoding="utf-8",
    )

    settings = load_settings(
        {"MANAGEPETRO_API_TIMEOUT": "none"},
        config_path=config_file,
    )

    assert settings.api_base_url == "https://yaml.example.com"
    assert settings.login_path == "/api/auth/login"
    assert settings.session_max_age == 3600
    assert settings.api_timeout is None


def test_missing_config_file_is_reported(tmp_path):
    with pytest.raises(ConfigurationError, match="does not exist"):
        load_settings({}, config_path=tmp_path / "missing.yaml")


def test_invalid_numeric_setting_names_the_variable():
    with pytest.raises(ConfigurationError, match="MANAGEPETRO_SESSION_MAX_AGE"):
        load_settings({"MANAGEPETRO_SESSION_MAX_AGE": "forever"})


def test_describe_never_exposes_the_secret():
    settings = load_settings({"MANAGEPETRO_SESSION_SECRET": "do-not-print"})
    assert "do-not-print" not in str(settings.describe())


def test_create_app_warns_when_using_development_secret(caplog):
    with caplog.at_level(logging.WARNING, logger="managepetro.web"):
        create_app(settings=load_settings({}))

    assert "insecure development secret" in caplog.text


def test_trusted_proxies_default_to_loopback():
    settings = load_settings({})
    assert settings.trusted_proxies == ("127.0.0.1",)
    assert settings.describe()["trusted_proxies"] == "127.0.0.1"


def test_trusted_proxies_from_environment_and_yaml(tmp_path):
    config_file = tmp_path / "dashboard.yaml"
    config_file.write_text("trusted_proxies:\n  - 10.0.0.1\n  - 10.0.0.2\n", encoding="utf-8")

    from_file = load_settings({}, config_path=config_file)
    from_env = load_settings(
        {"MANAGEPETRO_TRUSTED_PROXIES": " 192.168.1.5, ,172.16.0.1 "},
        config_path=config_file,
    )

    assert from_file.trusted_proxies == ("10.0.0.1", "10.0.0.2")
    assert from_env.trusted_proxies == ("192.168.1.5", "172.16.0.1")
