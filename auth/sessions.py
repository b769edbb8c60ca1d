"""
auth/sessions.py -- The SessionStore contract and its cookie-session adapter.

Session persistence is not implemented here. Starlette's SessionMiddleware
owns the cookie: it decodes and verifies the itsdangerous-signed payload into
request.session (a plain dict) before the request reaches the pipeline, and
re-encodes it on the way out. Expiry is the cookie max_age.

SessionStore only knows where the identity key lives inside that mapping, so
IdentityResolver never touches cookie names or session layout directly.

Layer rule: no imports from api/, content/, or store/.
"""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any, Protocol, runtime_checkable

Session = MutableMapping[str, Any]

IDENTITY_KEY = "user_id"


@runtime_checkable
class SessionStore(Protocol):
    def get_identity_key(self, session: Session | None) -> Any | None: ...

    def clear_identity_key(self, session: Session | None) -> None: ...

    def set_identity_key(self, session: Session, key: Any) -> None: ...


class CookieSessionStore:
    """SessionStore over the dict Starlette's SessionMiddleware exposes.

    Usage:
        sessions = CookieSessionStore()
        sessions.set_identity_key(request.session, user.id)   # login
        sessions.get_identity_key(request.session)            # -> user.id
        sessions.clear_identity_key(request.session)          # logout / stale
    """

    def __init__(self, key: str = IDENTITY_KEY) -> None:
        self.key = key

    def get_identity_key(self, session: Session | None) -> Any | None:
        if not session:
            return None
        return session.get(self.key)

    def clear_identity_key(self, session: Session | None) -> None:
        if session is not None:
            session.pop(self.key, None)

    def set_identity_key(self, session: Session, key: Any) -> None:
        """Bind key to the session, dropping anything left from a previous login."""
        session.clear()
        session[self.key] = key
