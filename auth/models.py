"""
auth/models.py -- Domain dataclass for the User entity.

Pattern: Data class (pure data container, zero logic). UserModel in
auth/users.py does the work; this module owns domain shape only.

Layer rule: no imports from api/, content/, or store/.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class User:
    """A registered identity.

    id is assigned by the DataStore on insert and is opaque to every layer
    above the adapter. email is stored normalized (trimmed, lower-cased).

    password_hash is a salted one-way hash produced by the configured
    PasswordHasher. It is excluded from repr() so a User can be logged or
    shown in a traceback without leaking the hash.
    """

    name: str
    email: str
    password_hash: str = field(repr=False)
    id: int | None = None
    created_at: str | None = None
