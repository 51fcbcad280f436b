"""Shared fixtures: a fake ManagePetro API patched over ``httpx.get``/``httpx.post``."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
from urllib.parse import urlsplit

import httpx
import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from managepetro.config import Settings
from managepetro.web import create_app


API_BASE_URL = "https://api.example.com"
EMAIL = "a@b.com"
PASSWORD = "x"
TOKEN = "abc"

Handler = Union[httpx.Response, Callable[..., httpx.Response]]


class FakeAPI:
    """Records outbound calls and answers them from per-route handlers."""

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Handler] = {}
        self.calls: List[Dict[str, Any]] = []

    def on(self, method: str, path: str, handler: Handler) -> None:
        self.routes[(method.upper(), path)] = handler

    def calls_to(self, method: str, path: str) -> List[Dict[str, Any]]:
        return [call for call in self.calls if call["method"] == method and call["path"] == path]

    def _dispatch(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        path = urlsplit(url).path
        self.calls.append({"method": method, "url": url, "path": path, **kwargs})
        handler = self.routes.get((method, path))
        if handler is None:
            raise AssertionError(f"Unexpected {method} {url}")
        if isinstance(handler, httpx.Response):
            return handler
        return handler(**kwargs)

    def get(self, url, params=None, headers=None, timeout=None):
        return self._dispatch("GET", url, params=params, headers=headers, timeout=timeout)

    def post(self, url, json=None, headers=None, timeout=None):  # noqa: A002
        return self._dispatch("POST", url, json=json, headers=headers, timeout=timeout)


@pytest.fixture
def fake_api(monkeypatch) -> FakeAPI:
    api = FakeAPI()
    monkeypatch.setattr(httpx, "get", api.get)
    monkeypatch.setattr(httpx, "post", api.post)
    return api


@pytest.fixture
def settings() -> Settings:
    return Settings(api_base_url=API_BASE_URL, session_secret="tests-secret-key")


@pytest.fixture
def client(settings) -> TestClient:
    with TestClient(create_app(settings=settings)) as test_client:
        yield test_client


def login_response(user: Optional[Dict[str, Any]] = None, token: str = TOKEN) -> httpx.Response:
    payload: Dict[str, Any] = {"token": token}
    if user is not None:
        payload["user"] = user
    return httpx.Response(200, json=payload)


@pytest.fixture
def signed_in_client(client, fake_api) -> TestClient:
    fake_api.on(
        "POST",
        "/api/login",
        login_response(
            {
                "id": 1,
                "email": EMAIL,
                "firstName": "A",
                "lastName": "B",
                "company": {"id": 3, "name": "Acme Fuels"},
            }
        ),
    )
    response = client.post(
        "/login",
        data={"email": EMAIL, "password": PASSWORD},
        follow_redirects=False,
    )
    assert response.status_code == 303
    return client
