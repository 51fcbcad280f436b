"""Domain models for data sourced from the ManagePetro API."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class Company:
    """Company the signed-in user belongs to."""

    id: Any
    name: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True)
class SessionUser:
    """Identity bundle established at login and carried in the signed session."""

    id: str
    email: str
    name: str
    access_token: str = field(repr=False)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company: Optional[Company] = None

    def to_session(self) -> Dict[str, Any]:
        """Serialise into the JSON-safe mapping stored in the session cookie."""

        payload: Dict[str, Any] = {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "company": self.company.to_dict() if self.company else None,
            "accessToken": self.access_token,
        }
        return payload

    @staticmethod
    def from_session(data: object) -> Optional["SessionUser"]:
        """Rebuild a :class:`SessionUser` from session data, or ``None`` if invalid."""

        if not isinstance(data, dict):
            return None
        token = data.get("accessToken")
        if not isinstance(token, str) or not token:
            return None
        user_id = data.get("id")
        email = data.get("email")
        name = data.get("name")
        if user_id is None or not isinstance(email, str) or not isinstance(name, str):
            return None

        company_data = data.get("company")
        company = None
        if isinstance(company_data, dict):
            company = Company(id=company_data.get("id"), name=company_data.get("name"))

        return SessionUser(
            id=str(user_id),
            email=email,
            name=name,
            access_token=token,
            first_name=data.get("firstName"),
            last_name=data.get("lastName"),
            company=company,
        )


@dataclass(frozen=True)
class Order:
    """Read-only projection of an order returned by the API."""

    id: Any
    iri: Optional[str]
    fuel_amount: str
    delivery_address: str
    status: str
    created_at: Optional[str]
    notes: Optional[str] = None
    delivered_at: Optional[str] = None


@dataclass(frozen=True)
class ClientRecord:
    """Client reference used when composing a new order."""

    id: str
    iri: str
    name: Optional[str] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class ClientOption:
    """Entry in the client dropdown of the new-order form."""

    iri: str
    label: str


@dataclass(frozen=True)
class Pagination:
    """Navigation state derived from a paginated collection view."""

    page: int
    first_page: int
    last_page: int
    prev_page: Optional[int]
    next_page: Optional[int]

    @property
    def has_previous(self) -> bool:
        return self.prev_page is not None

    @property
    def has_next(self) -> bool:
        return self.next_page is not None


@dataclass(frozen=True)
class OrderPage:
    """One page of orders together with its totals and pagination."""

    items: Tuple[Order, ...]
    total_count: int
    pagination: Pagination


__all__ = [
    "ClientOption",
    "ClientRecord",
    "Company",
    "Order",
    "OrderPage",
    "Pagination",
    "SessionUser",
]
