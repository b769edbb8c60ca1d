"""
auth/hashing.py -- Pluggable password hashing strategies.

Pattern: Strategy. UserModel depends on the PasswordHasher Protocol and is
handed a concrete hasher at construction. Changing the algorithm or cost
factor never changes a model call signature; needs_rehash() lets UserModel
upgrade stored hashes on the next successful login.

Passwords: bcrypt, used directly (no passlib wrapper). bcrypt generates and
embeds a random salt per hash, and its cost factor makes brute-force
expensive. checkpw() compares in constant time.

bcrypt only looks at the first 72 bytes of input. Older releases truncate
longer input silently, newer ones raise ValueError. UserModel rejects such
passwords up front with ValidationError, and verify() never matches one, so
a stored 72-byte password plus any suffix cannot log in.

Layer rule: no imports from api/, content/, or store/.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import bcrypt

BCRYPT_MAX_BYTES = 72


@runtime_checkable
class PasswordHasher(Protocol):
    def hash(self, plain: str) -> str: ...

    def verify(self, plain: str, hashed: str) -> bool: ...

    def needs_rehash(self, hashed: str) -> bool: ...


class BcryptHasher:
    """bcrypt with a configurable cost factor (4-31, default 12)."""

    def __init__(self, rounds: int = 12) -> None:
        if not 4 <= rounds <= 31:
            raise ValueError("bcrypt rounds must be between 4 and 31.")
        self.rounds = rounds

    def hash(self, plain: str) -> str:
        """Return a salted bcrypt hash of the given plaintext password."""
        return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plain: str, hashed: str) -> bool:
        """Return True if the plaintext password matches the bcrypt hash.

        Input longer than BCRYPT_MAX_BYTES is a mismatch. The hash check still
        runs on the truncated prefix so rejection takes the usual time.
        """
        try:
            secret = plain.encode("utf-8")
            matched = bcrypt.checkpw(secret[:BCRYPT_MAX_BYTES], hashed.encode("utf-8"))
        except (ValueError, TypeError, AttributeError):
            return False
        return matched and len(secret) <= BCRYPT_MAX_BYTES

    def needs_rehash(self, hashed: str) -> bool:
        """Return True if hashed was produced with a different cost factor.

        Modular crypt format: $2b$<cost>$<22-char salt><31-char digest>.
        Anything that does not parse is due for replacement.
        """
        parts = hashed.split("$")
        if len(parts) != 4 or not parts[2].isdigit():
            return True
        return int(parts[2]) != self.rounds
