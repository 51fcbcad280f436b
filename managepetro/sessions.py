"""Signed-cookie session handling for the dashboard.

The session payload itself is signed by Starlette's ``SessionMiddleware``;
these helpers only read and write the identity bundle inside it. There is no
server-side session store and reading a session never touches the network.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, MutableMapping, Optional

from .models import SessionUser


logger = logging.getLogger("managepetro.sessions")

SESSION_COOKIE_NAME = "managepetro_session"
SESSION_USER_KEY = "user"
FLASH_KEY = "flash_messages"


def store_session_user(session: MutableMapping[str, Any], user: SessionUser) -> None:
    """Start a fresh session for ``user``."""

    session.clear()
    session[SESSION_USER_KEY] = user.to_session()


def read_session_user(session: MutableMapping[str, Any]) -> Optional[SessionUser]:
    """Return the identity established at login, or ``None`` if unauthenticated."""

    raw = session.get(SESSION_USER_KEY)
    if raw is None:
        return None
    user = SessionUser.from_session(raw)
    if user is None:
        logger.info("Discarding malformed session payload")
        session.pop(SESSION_USER_KEY, None)
    return user


def clear_session(session: MutableMapping[str, Any]) -> None:
    session.clear()


def invalidate_session(session: MutableMapping[str, Any], message: str) -> None:
    """Drop the identity after the API rejected its token, keeping a notice."""

    session.clear()
    flash(session, message, category="error")


def flash(session: MutableMapping[str, Any], message: str, *, category: str = "info") -> None:
    messages = session.get(FLASH_KEY)
    if not isinstance(messages, list):
        messages = []
    messages.append({"message": message, "category": category})
    session[FLASH_KEY] = messages


def consume_flash(session: MutableMapping[str, Any]) -> List[Dict[str, str]]:
    messages = session.pop(FLASH_KEY, [])
    if isinstance(messages, list):
        return messages
    return []


__all__ = [
    "FLASH_KEY",
    "SESSION_COOKIE_NAME",
    "SESSION_USER_KEY",
    "clear_session",
    "consume_flash",
    "flash",
    "invalidate_session",
    "read_session_user",
    "store_session_user",
]
