"""Translate ManagePetro API payloads into the dashboard's internal models.

The upstream API has shipped several response shapes (JSON-LD ``hydra:``
prefixed keys, plain JSON keys, IRIs instead of ids). Everything that branches
on those differences lives here so the routes only see :mod:`.models` types.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .models import ClientOption, ClientRecord, Order


CLIENT_IRI_PREFIX = "/api/clients"

_STATUS_VARIANTS = {
    "delivered": "success",
    "pending": "warning",
    "scheduled": "info",
    "cancelled": "danger",
    "canceled": "danger",
}


def _first_present(payload: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return None


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def collection_members(payload: object) -> List[Dict[str, Any]]:
    """Return the member array of a collection, accepting ``hydra:member``."""

    if not isinstance(payload, dict):
        return []
    members = _first_present(payload, "member", "hydra:member")
    if not isinstance(members, list):
        return []
    return [item for item in members if isinstance(item, dict)]


def collection_total(payload: object, default: int) -> int:
    if not isinstance(payload, dict):
        return default
    total = _first_present(payload, "totalItems", "hydra:totalItems")
    try:
        return int(total)
    except (TypeError, ValueError):
        return default


def collection_view(payload: object) -> Optional[Dict[str, Any]]:
    if not isinstance(payload, dict):
        return None
    view = _first_present(payload, "view", "hydra:view")
    if not isinstance(view, dict):
        return None
    # JSON-LD views prefix the navigation keys as well.
    return {
        key: _first_present(view, key, f"hydra:{key}")
        for key in ("first", "last", "next", "previous")
    }


def iri_identifier(iri: object) -> Optional[str]:
    """Return the trailing path segment of an IRI such as ``/api/clients/7``."""

    if not isinstance(iri, str):
        return None
    segment = iri.split("?", 1)[0].rstrip("/").rsplit("/", 1)[-1]
    return segment or None


def parse_order(data: Mapping[str, Any]) -> Order:
    iri = _optional_text(data.get("@id"))
    order_id = data.get("id")
    if order_id is None:
        order_id = iri_identifier(iri)
    return Order(
        id=order_id,
        iri=iri,
        fuel_amount=str(data.get("fuelAmount") or ""),
        delivery_address=str(data.get("deliveryAddress") or ""),
        status=str(data.get("status") or "unknown"),
        notes=_optional_text(data.get("notes")),
        created_at=_optional_text(data.get("createdAt")),
        delivered_at=_optional_text(data.get("deliveredAt")),
    )


def parse_orders(payload: object) -> Tuple[List[Order], int]:
    """Return the orders and total count from an orders collection payload."""

    orders = [parse_order(item) for item in collection_members(payload)]
    return orders, collection_total(payload, len(orders))


def parse_client(data: Mapping[str, Any]) -> ClientRecord:
    raw_iri = _optional_text(data.get("@id"))
    explicit_id = data.get("id")
    if explicit_id is not None and str(explicit_id).strip():
        client_id = str(explicit_id).strip()
    else:
        client_id = iri_identifier(raw_iri) or ""

    iri = raw_iri or f"{CLIENT_IRI_PREFIX}/{client_id}"
    name = _optional_text(_first_present(data, "name", "fullName", "company"))
    return ClientRecord(
        id=client_id,
        iri=iri,
        name=name,
        email=_optional_text(data.get("email")),
    )


def parse_clients(payload: object) -> List[ClientRecord]:
    return [parse_client(item) for item in collection_members(payload)]


def client_option(client: ClientRecord) -> ClientOption:
    label = client.name or client.email or f"Client #{client.id}"
    return ClientOption(iri=client.iri, label=label)


def status_variant(status: Optional[str]) -> str:
    """Map an order status onto the badge variant used by the templates."""

    if not status:
        return "neutral"
    return _STATUS_VARIANTS.get(status.strip().lower(), "neutral")


def format_date(value: Optional[str]) -> str:
    if not value:
        return "—"
    text = value.strip()
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return text
    return parsed.date().isoformat()


__all__ = [
    "CLIENT_IRI_PREFIX",
    "client_option",
    "collection_members",
    "collection_total",
    "collection_view",
    "format_date",
    "iri_identifier",
    "parse_client",
    "parse_clients",
    "parse_order",
    "parse_orders",
    "status_variant",
]
