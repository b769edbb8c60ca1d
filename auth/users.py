"""
auth/users.py -- UserModel: creation, lookup, and credential checks for users.

Pattern: Model over an injected DataStore. UserModel owns the User invariants
(normalized email, hashed password, non-empty name) and translates between
store records and the User dataclass. It never sees a request, a response,
or an HTTP status code.

Security:
  Plaintext passwords are hashed before they reach the store and are never
  logged. authenticate() runs a hash verification even when the email is
  unknown, against a dummy hash made with the same hasher, so response time
  does not reveal whether an account exists.

  Email uniqueness is enforced by the store (UNIQUE index). create() lets
  the adapter's DuplicateError propagate instead of pre-checking, which
  would race with concurrent registrations.

Layer rule: no imports from api/ or content/. Depends on store/base.py for
the DataStore Protocol only, never on a concrete adapter.
"""

from __future__ import annotations

import logging
import re
import secrets
from datetime import datetime, timezone
from functools import cached_property
from typing import Any

from auth.hashing import BCRYPT_MAX_BYTES, BcryptHasher, PasswordHasher
from auth.models import User
from core.errors import NotFoundError, ValidationError
from store.base import DataStore

logger = logging.getLogger("commentboard.auth")

_COLLECTION = "users"

_MAX_NAME_LENGTH = 100
_MAX_EMAIL_LENGTH = 255
# Deliberately permissive: one "@", no whitespace, a dot in the domain part.
# Deliverability is not this layer's concern.
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserModel:
    """Owns User records.

    Usage:
        users = UserModel(SQLDataStore(url), BcryptHasher(rounds=12))
        alice = users.create("alice", "alice@x.com", "pw123")
        users.authenticate("alice@x.com", "pw123")   # -> alice
        users.change_password(alice.id, "pw456")     # -> True
    """

    def __init__(self, store: DataStore, hasher: PasswordHasher | None = None) -> None:
        self._store = store
        self._hasher = hasher or BcryptHasher()

    @cached_property
    def _dummy_hash(self) -> str:
        # Computed on first use so its cost matches the configured hasher.
        return self._hasher.hash(secrets.token_hex(16))

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_name(name: Any) -> str:
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Name must not be empty.")
        name = name.strip()
        if len(name) > _MAX_NAME_LENGTH:
            raise ValidationError(f"Name must be at most {_MAX_NAME_LENGTH} characters.")
        return name

    @staticmethod
    def _validate_email(email: Any) -> str:
        if not isinstance(email, str) or not email.strip():
            raise ValidationError("Email must not be empty.")
        email = normalize_email(email)
        if len(email) > _MAX_EMAIL_LENGTH or not _EMAIL_RE.match(email):
            raise ValidationError("Email address is malformed.")
        return email

    @staticmethod
    def _validate_password(password: Any) -> str:
        if not isinstance(password, str) or not password:
            raise ValidationError("Password must not be empty.")
        if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValidationError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes.")
        return password

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def create(self, name: str, email: str, password: str) -> User:
        """Hash the password and persist a new user.

        Raises ValidationError on empty or malformed input, DuplicateError if
        the email is already registered, PersistenceError on store failure.
        """
        user = User(
            name=self._validate_name(name),
            email=self._validate_email(email),
            password_hash=self._hasher.hash(self._validate_password(password)),
            created_at=_now_iso(),
        )
        user.id = self._store.save(
            _COLLECTION,
            {
                "name": user.name,
                "email": user.email,
                "password_hash": user.password_hash,
                "created_at": user.created_at,
            },
        )
        logger.info("User created (id=%s, email=%s)", user.id, user.email)
        return user

    def get(self, user_id: Any) -> User:
        """Return the user with the given id. Raises NotFoundError on a miss."""
        if user_id is None:
            raise NotFoundError("User id is required.")
        rows = self._store.fetch(_COLLECTION, {"id": user_id})
        if not rows:
            raise NotFoundError(f"No user with id {user_id!r}.")
        return _record_to_user(rows[0])

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by email (case-insensitive). Returns None if not found."""
        if not isinstance(email, str) or not email.strip():
            return None
        rows = self._store.fetch(_COLLECTION, {"email": normalize_email(email)})
        return _record_to_user(rows[0]) if rows else None

    def authenticate(self, email: str, password: str) -> User | None:
        """Return the user whose credentials match, or None.

        A miss is a normal outcome, not an error: unknown email, wrong
        password, and malformed input all return None. The hash check runs in
        every branch so all three take comparable time.
        """
        user = self.get_by_email(email)
        if not isinstance(password, str):
            password = ""
        if user is None:
            self._hasher.verify(password, self._dummy_hash)
            return None
        if not self._hasher.verify(password, user.password_hash):
            return None
        if self._hasher.needs_rehash(user.password_hash):
            user.password_hash = self._hasher.hash(password)
            self._store.update(_COLLECTION, {"id": user.id}, {"password_hash": user.password_hash})
            logger.info("Password hash upgraded for user %s", user.id)
        return user

    def change_password(self, user_id: Any, new_password: str) -> bool:
        """Replace the stored hash. Returns True if a record was updated.

        Raises NotFoundError if user_id does not exist, ValidationError on an
        empty or over-long password, PersistenceError on store failure.
        """
        new_password = self._validate_password(new_password)
        self.get(user_id)
        new_hash = self._hasher.hash(new_password)
        affected = self._store.update(_COLLECTION, {"id": user_id}, {"password_hash": new_hash})
        if affected:
            logger.info("Password changed for user %s", user_id)
        return affected > 0


# ---------------------------------------------------------------------------
# Record mapper
# ---------------------------------------------------------------------------


def _record_to_user(record: dict) -> User:
    return User(
        id=record["id"],
        name=record["name"],
        email=record["email"],
        password_hash=record["password_hash"],
        created_at=record.get("created_at"),
    )
