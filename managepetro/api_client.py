"""HTTP client for the ManagePetro order directory API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from .models import ClientRecord, OrderPage
from .pagination import build_pagination
from .resources import collection_view, parse_clients, parse_orders


logger = logging.getLogger("managepetro.api_client")

ACCEPT_HEADER = "application/ld+json, application/json;q=0.9, */*;q=0.8"
CLIENTS_PAGE_SIZE = 50
NEW_ORDER_STATUS = "scheduled"


class APIError(Exception):
    """Raised when the order directory API cannot fulfil a request."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthorizationError(APIError):
    """Raised when the API rejects the bearer token (missing or expired)."""


@dataclass
class _ClientConfig:
    base_url: str
    access_token: str
    timeout: Optional[float]


def _normalize_base_url(base_url: str) -> str:
    cleaned = (base_url or "").strip()
    if not cleaned:
        raise ValueError("API base URL must not be empty")
    return cleaned.rstrip("/")


def _build_endpoint(base_url: str, path: str) -> str:
    if not path.startswith("/"):
        path = "/" + path
    return f"{base_url}{path}"


def _error_text(response: httpx.Response) -> str:
    return response.text


class OrderDirectoryClient:
    """Fetch and create orders on behalf of a signed-in user."""

    def __init__(
        self,
        base_url: str,
        access_token: str,
        *,
        timeout: Optional[float] = 30.0,
    ) -> None:
        self._config = _ClientConfig(
            base_url=_normalize_base_url(base_url),
            access_token=(access_token or "").strip(),
            timeout=timeout,
        )
        if not self._config.access_token:
            raise ValueError("An access token is required to call the order directory API")

    def _headers(self, *, json_body: bool = False) -> Dict[str, str]:
        headers = {
            "Accept": ACCEPT_HEADER,
            "Authorization": f"Bearer {self._config.access_token}",
        }
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    def _get(self, path: str, params: Dict[str, Any], *, what: str) -> object:
        url = _build_endpoint(self._config.base_url, path)
        try:
            response = httpx.get(
                url,
                params=params,
                headers=self._headers(),
                timeout=self._config.timeout,
            )
        except httpx.HTTPError as exc:
            logger.warning("Request to %s failed: %s", url, exc)
            raise APIError(f"Unable to reach the order service: {exc}") from exc

        if response.status_code == 401:
            raise AuthorizationError(
                "Your session has expired. Please sign in again.",
                status_code=401,
            )
        if not response.is_success:
            logger.info("GET %s returned status %s", url, response.status_code)
            raise APIError(
                f"Failed to load {what} ({response.status_code}).",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise APIError(
                f"The order service returned an invalid {what} response.",
                status_code=response.status_code,
            ) from exc

    def list_orders(self, page: int = 1) -> OrderPage:
        """Return one page of orders; the first page is requested without a ``page`` parameter."""

        page = page if page > 1 else 1
        params: Dict[str, Any] = {}
        if page > 1:
            params["page"] = page

        payload = self._get("/api/orders", params, what="orders")
        orders, total = parse_orders(payload)
        pagination = build_pagination(collection_view(payload), page)
        return OrderPage(items=tuple(orders), total_count=total, pagination=pagination)

    def list_clients(self) -> List[ClientRecord]:
        payload = self._get(
            "/api/clients",
            {"itemsPerPage": CLIENTS_PAGE_SIZE},
            what="clients",
        )
        return parse_clients(payload)

    def create_order(
        self,
        *,
        client: str,
        fuel_amount: str,
        delivery_address: str,
        notes: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Submit a new order and return the created resource.

        On failure the raised :class:`APIError` carries the response body text
        verbatim so it can be shown to the user.
        """

        payload: Dict[str, Any] = {
            "client": client,
            "fuelAmount": str(fuel_amount),
            "deliveryAddress": delivery_address,
            "status": NEW_ORDER_STATUS,
        }
        if notes:
            payload["notes"] = notes

        url = _build_endpoint(self._config.base_url, "/api/orders")
        try:
            response = httpx.post(
                url,
                json=payload,
                headers=self._headers(json_body=True),
                timeout=self._config.timeout,
            )
        except httpx.HTTPError as exc:
            logger.warning("Request to %s failed: %s", url, exc)
            raise APIError(f"Unable to reach the order service: {exc}") from exc

        if not response.is_success:
            message = _error_text(response) or f"Failed to create order ({response.status_code})"
            logger.info("Order creation rejected with status %s", response.status_code)
            if response.status_code == 401:
                raise AuthorizationError(message, status_code=401)
            raise APIError(message, status_code=response.status_code)

        try:
            created = response.json()
        except ValueError:
            created = {}
        if not isinstance(created, dict):
            created = {}
        logger.info("Created order %s", created.get("id", "<unknown>"))
        return created


__all__ = [
    "ACCEPT_HEADER",
    "APIError",
    "AuthorizationError",
    "CLIENTS_PAGE_SIZE",
    "NEW_ORDER_STATUS",
    "OrderDirectoryClient",
]
