"""Configuration management for the ManagePetro dashboard."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

import yaml


DEFAULT_API_BASE_URL = "http://localhost:8000"
DEFAULT_LOGIN_PATH = "/api/login"
DEFAULT_SESSION_MAX_AGE = 60 * 60 * 24 * 7
DEFAULT_API_TIMEOUT = 30.0
DEFAULT_TRUSTED_PROXIES: Tuple[str, ...] = ("127.0.0.1",)

# Used only outside production so local runs work without extra setup.
DEVELOPMENT_SESSION_SECRET = "managepetro-dev-secret"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ConfigurationError(RuntimeError):
    """Raised when the dashboard cannot start with the supplied settings."""


@dataclass(frozen=True)
class Settings:
    """Resolved runtime settings for the web dashboard."""

    api_base_url: str
    session_secret: str
    environment: str = "development"
    login_path: str = DEFAULT_LOGIN_PATH
    session_secure: bool = False
    session_max_age: int = DEFAULT_SESSION_MAX_AGE
    api_timeout: Optional[float] = DEFAULT_API_TIMEOUT
    trusted_proxies: Tuple[str, ...] = DEFAULT_TRUSTED_PROXIES
    using_development_secret: bool = False

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def describe(self) -> Dict[str, object]:
        """Return a printable summary that never includes the secret."""
        return {
            "environment": self.environment,
            "api_base_url": self.api_base_url,
            "login_path": self.login_path,
            "session_secure": self.session_secure,
            "session_max_age": self.session_max_age,
            "api_timeout": self.api_timeout,
            "trusted_proxies": ", ".join(self.trusted_proxies),
            "session_secret": "<development fallback>" if self.using_development_secret else "<configured>",
        }


def normalize_api_base_url(value: Optional[str]) -> str:
    """Return the API origin without a trailing slash or ``/api`` suffix."""

    cleaned = (value or "").strip().rstrip("/")
    if not cleaned:
        return DEFAULT_API_BASE_URL
    if cleaned.endswith("/api"):
        cleaned = cleaned[: -len("/api")]
    return cleaned or DEFAULT_API_BASE_URL


def _normalize_path(value: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        return DEFAULT_LOGIN_PATH
    if not cleaned.startswith("/"):
        cleaned = "/" + cleaned
    return cleaned


def _parse_flag(name: str, value: object, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean flag, got {value!r}")


def _parse_int(name: str, value: object, default: int) -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    try:
        parsed = int(str(value).strip())
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from exc
    if parsed <= 0:
        raise ConfigurationError(f"{name} must be positive, got {parsed}")
    return parsed


def _parse_timeout(name: str, value: object, default: Optional[float]) -> Optional[float]:
    if value is None:
        return default
    text = str(value).strip().lower()
    if text in {"", "default"}:
        return default
    if text in {"0", "none", "off"}:
        return None
    try:
        parsed = float(text)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number of seconds, got {value!r}") from exc
    if parsed < 0:
        raise ConfigurationError(f"{name} must not be negative, got {parsed}")
    return parsed


def _parse_hosts(value: object) -> Tuple[str, ...]:
    if value is None:
        return DEFAULT_TRUSTED_PROXIES
    if isinstance(value, (list, tuple)):
        items = [str(item) for item in value]
    else:
        items = str(value).split(",")
    hosts = tuple(item.strip() for item in items if item.strip())
    return hosts or DEFAULT_TRUSTED_PROXIES


def load_config_file(config_path: Path) -> Dict[str, object]:
    """Load dashboard settings from a YAML file."""
    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Configuration file {config_path} must contain a mapping")
    return raw


def resolve_config_path(env_value: Optional[str]) -> Optional[Path]:
    """Resolve the optional YAML configuration file path."""
    if not env_value:
        return None
    return Path(env_value).expanduser().resolve(strict=False)


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    *,
    config_path: Optional[Path] = None,
) -> Settings:
    """Build :class:`Settings` from a YAML file (optional) and the environment.

    Environment variables win over file values. A missing session secret is
    fatal in production and falls back to a fixed development secret otherwise.
    """

    env = os.environ if environ is None else environ

    if config_path is None:
        config_path = resolve_config_path(env.get("MANAGEPETRO_CONFIG"))

    file_values: Dict[str, object] = {}
    if config_path is not None:
        if not config_path.exists():
            raise ConfigurationError(f"Configuration file {config_path} does not exist")
        file_values = load_config_file(config_path)

    def _value(env_names: tuple[str, ...], file_key: str) -> object:
        for name in env_names:
            candidate = env.get(name)
            if candidate is not None and str(candidate).strip():
                return candidate
        return file_values.get(file_key)

    environment = str(_value(("MANAGEPETRO_ENV",), "environment") or "development").strip().lower()

    api_base_url = normalize_api_base_url(
        _value(("API_BASE_URL", "NEXT_PUBLIC_API_BASE_URL"), "api_base_url")  # type: ignore[arg-type]
    )

    secret = _value(("MANAGEPETRO_SESSION_SECRET", "SESSION_SECRET"), "session_secret")
    using_development_secret = False
    if not secret:
        if environment == "production":
            raise ConfigurationError(
                "MANAGEPETRO_SESSION_SECRET must be configured when MANAGEPETRO_ENV=production"
            )
        secret = DEVELOPMENT_SESSION_SECRET
        using_development_secret = True

    login_path = _normalize_path(str(_value(("MANAGEPETRO_LOGIN_PATH",), "login_path") or DEFAULT_LOGIN_PATH))

    return Settings(
        api_base_url=api_base_url,
        session_secret=str(secret),
        environment=environment,
        login_path=login_path,
        session_secure=_parse_flag(
            "MANAGEPETRO_SESSION_SECURE",
            _value(("MANAGEPETRO_SESSION_SECURE",), "session_secure"),
            environment == "production",
        ),
        session_max_age=_parse_int(
            "MANAGEPETRO_SESSION_MAX_AGE",
            _value(("MANAGEPETRO_SESSION_MAX_AGE",), "session_max_age"),
            DEFAULT_SESSION_MAX_AGE,
        ),
        api_timeout=_parse_timeout(
            "MANAGEPETRO_API_TIMEOUT",
            _value(("MANAGEPETRO_API_TIMEOUT",), "api_timeout"),
            DEFAULT_API_TIMEOUT,
        ),
        trusted_proxies=_parse_hosts(_value(("MANAGEPETRO_TRUSTED_PROXIES",), "trusted_proxies")),
        using_development_secret=using_development_secret,
    )


__all__ = [
    "ConfigurationError",
    "DEFAULT_API_BASE_URL",
    "DEFAULT_LOGIN_PATH",
    "DEFAULT_TRUSTED_PROXIES",
    "DEVELOPMENT_SESSION_SECRET",
    "Settings",
    "load_config_file",
    "load_settings",
    "normalize_api_base_url",
    "resolve_config_path",
]
