"""Pagination helpers for hypermedia collection views."""

from __future__ import annotations

from typing import Mapping, Optional
from urllib.parse import parse_qs, urlsplit

from .models import Pagination


def _parse_page_value(values: list[str]) -> Optional[int]:
    if not values:
        return None
    try:
        page = int(values[0].strip())
    except ValueError:
        return None
    if page < 1:
        return None
    return page


def _has_link(link: object) -> bool:
    return isinstance(link, str) and bool(link.strip())


def page_from_link(link: object) -> Optional[int]:
    """Return the ``page`` query parameter of a pagination link, if any.

    Links may be absolute URLs or relative IRIs such as ``/api/orders?page=2``.
    """

    if not _has_link(link):
        return None

    text = str(link).strip()
    try:
        query = urlsplit(text).query
    except ValueError:
        index = text.find("?")
        if index == -1:
            return None
        query = text[index + 1 :].split("#", 1)[0]

    return _parse_page_value(parse_qs(query).get("page", []))


def build_pagination(view: Optional[Mapping[str, object]], page: int) -> Pagination:
    """Compute navigation for ``page`` from the collection's ``view`` links.

    Explicit ``previous``/``next`` links win; otherwise neighbours are derived
    arithmetically within ``[first_page, last_page]``.
    """

    links: Mapping[str, object] = view if isinstance(view, Mapping) else {}

    first_page = page_from_link(links.get("first")) or 1
    last_page = page_from_link(links.get("last")) or first_page

    # A link that is present but unparseable disables that direction.
    prev_link = links.get("previous")
    if _has_link(prev_link):
        prev_page = page_from_link(prev_link)
    else:
        prev_page = min(page - 1, last_page) if page > first_page else None

    next_link = links.get("next")
    if _has_link(next_link):
        next_page = page_from_link(next_link)
    else:
        next_page = page + 1 if first_page <= page + 1 <= last_page else None

    return Pagination(
        page=page,
        first_page=first_page,
        last_page=last_page,
        prev_page=prev_page,
        next_page=next_page,
    )


__all__ = ["build_pagination", "page_from_link"]
