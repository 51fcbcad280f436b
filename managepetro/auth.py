"""Exchange dashboard credentials for an API bearer token."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import httpx

from .config import Settings
from .models import Company, SessionUser


logger = logging.getLogger("managepetro.auth")


def _normalize_base_url(base_url: str) -> str:
    cleaned = (base_url or "").strip()
    if not cleaned:
        raise ValueError("Authentication API base URL must not be empty")
    return cleaned.rstrip("/")


def extract_token(payload: Mapping[str, Any]) -> Optional[str]:
    """Return the bearer token from a login response, preferring ``token``."""

    for key in ("token", "access_token"):
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def identity_from_payload(payload: Mapping[str, Any], email: str, token: str) -> SessionUser:
    """Build the session identity from whichever user shape the API returned."""

    api_user = payload.get("user")
    if not isinstance(api_user, dict):
        return SessionUser(id=email, email=email, name=email, access_token=token)

    user_email = _text(api_user.get("email")) or email
    first_name = _text(api_user.get("firstName"))
    last_name = _text(api_user.get("lastName"))

    if first_name and last_name:
        name = f"{first_name} {last_name}"
    else:
        name = _text(api_user.get("name")) or _text(api_user.get("fullName")) or user_email

    company = None
    company_data = api_user.get("company")
    if isinstance(company_data, dict):
        company = Company(id=company_data.get("id"), name=_text(company_data.get("name")))

    user_id = api_user.get("id")
    return SessionUser(
        id=str(user_id) if user_id is not None else user_email,
        email=user_email,
        name=name,
        access_token=token,
        first_name=first_name,
        last_name=last_name,
        company=company,
    )


class AuthenticationClient:
    """Credentials provider backed by the ManagePetro login endpoint."""

    def __init__(
        self,
        base_url: str,
        *,
        login_path: str = "/api/login",
        timeout: Optional[float] = 30.0,
    ) -> None:
        self._base_url = _normalize_base_url(base_url)
        if not login_path.startswith("/"):
            login_path = "/" + login_path
        self._login_url = f"{self._base_url}{login_path}"
        self._timeout = timeout

    @property
    def login_url(self) -> str:
        return self._login_url

    def authenticate(self, email: str, password: str) -> Optional[SessionUser]:
        """Return the signed-in identity, or ``None`` when sign-in fails.

        Wrong credentials, transport errors and malformed responses all
        collapse to ``None``; no partial identity is ever returned.
        """

        if not email or not email.strip() or not password:
            return None

        try:
            response = httpx.post(
                self._login_url,
                json={"email": email, "password": password},
                headers={"Content-Type": "application/json", "Accept": "application/json"},
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            logger.warning("Authentication API unreachable at %s: %s", self._login_url, exc)
            return None

        if not response.is_success:
            logger.info("Sign-in rejected for %s (status %s)", email, response.status_code)
            return None

        try:
            payload = response.json()
        except ValueError:
            logger.warning("Authentication API returned a non-JSON response")
            return None

        if not isinstance(payload, dict):
            logger.warning("Authentication API returned an unexpected payload")
            return None

        token = extract_token(payload)
        if token is None:
            logger.warning("Authentication API response did not include a token")
            return None

        user = identity_from_payload(payload, email, token)
        logger.info("Signed in %s", user.email)
        return user


def authenticate(settings: Settings, email: str, password: str) -> Optional[SessionUser]:
    client = AuthenticationClient(
        settings.api_base_url,
        login_path=settings.login_path,
        timeout=settings.api_timeout,
    )
    return client.authenticate(email, password)


__all__ = [
    "AuthenticationClient",
    "authenticate",
    "extract_token",
    "identity_from_payload",
]
