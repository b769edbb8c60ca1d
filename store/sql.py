"""
store/sql.py -- SQLAlchemy Core implementation of the DataStore contract.

Pattern: Adapter. SQLDataStore translates the collection/record/query
vocabulary of store/base.py into SQLAlchemy Core statements against a fixed
schema. Models never see SQL, rows, or driver exceptions.

Security:
  All queries use bound parameters. No f-strings in SQL. Collection and
  column names are resolved against the declared Table objects, so a name
  that is not part of the schema can never reach the database.

  UNIQUE(email) on users is the single place email uniqueness is enforced.
  A violation surfaces as DuplicateError; UserModel does not pre-check.

DB URL: core.config.Settings.database_url (SQLite file by default).
Swapping SQLite for PostgreSQL is a connection string change.

Layer rule: imports only core/ and third-party libraries.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, and_, create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from core.errors import DuplicateError, PersistenceError
from store.base import Query, Record

logger = logging.getLogger("commentboard.store")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False),
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
)

_comments = Table(
    "comments",
    metadata,
    # author_ref is deliberately not a foreign key: comments store an opaque
    # reference and never join against users.
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("author_ref", String(255), nullable=False, index=True),
    Column("text", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers are not blocked during writes.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _is_unique_violation(exc: IntegrityError) -> bool:
    # SQLite: "UNIQUE constraint failed: users.email"
    # PostgreSQL: "duplicate key value violates unique constraint ..."
    message = str(exc.orig).lower()
    return "unique" in message or "duplicate" in message


# ---------------------------------------------------------------------------
# Adapter
# ---------------------------------------------------------------------------


class SQLDataStore:
    """DataStore backed by a SQLAlchemy engine.

    Usage:
        store = SQLDataStore("sqlite:///:memory:")
        user_id = store.save("users", {"name": "alice", ...})
        rows = store.fetch("users", {"email": "alice@x.com"})
        store.update("users", {"id": user_id}, {"password_hash": "..."})
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        metadata.create_all(self.engine)

    def _table(self, collection: str) -> Table:
        table = metadata.tables.get(collection)
        if table is None:
            raise PersistenceError(f"Unknown collection: {collection!r}")
        return table

    @staticmethod
    def _where(table: Table, query: Query):
        clauses = []
        for name, value in query.items():
            if name not in table.c:
                raise PersistenceError(f"Unknown field {name!r} on {table.name!r}")
            clauses.append(table.c[name] == value)
        return and_(*clauses) if clauses else None

    # ------------------------------------------------------------------
    # DataStore contract
    # ------------------------------------------------------------------

    def save(self, collection: str, record: Mapping[str, Any]) -> Any:
        """Insert record and return the primary key the database assigned.

        Raises DuplicateError on a UNIQUE violation, PersistenceError on any
        other failure.
        """
        table = self._table(collection)
        try:
            with self.engine.connect() as conn:
                result = conn.execute(table.insert().values(**dict(record)))
                conn.commit()
                return result.inserted_primary_key[0]
        except IntegrityError as exc:
            if _is_unique_violation(exc):
                raise DuplicateError(f"Duplicate record in {collection!r}") from exc
            raise PersistenceError(f"Integrity error writing {collection!r}") from exc
        except SQLAlchemyError as exc:
            logger.error("Insert into %s failed: %s", collection, exc.__class__.__name__)
            raise PersistenceError(f"Could not save to {collection!r}") from exc

    def fetch(self, collection: str, query: Query, order_by: str | None = None) -> list[Record]:
        """Return matching rows as dicts, ordered by order_by or primary key."""
        table = self._table(collection)
        stmt = table.select()
        where = self._where(table, query)
        if where is not None:
            stmt = stmt.where(where)
        order_col = order_by or "id"
        if order_col not in table.c:
            raise PersistenceError(f"Unknown field {order_col!r} on {table.name!r}")
        stmt = stmt.order_by(table.c[order_col], table.c.id)
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).fetchall()
        except SQLAlchemyError as exc:
            logger.error("Select from %s failed: %s", collection, exc.__class__.__name__)
            raise PersistenceError(f"Could not fetch from {collection!r}") from exc
        return [dict(row._mapping) for row in rows]

    def update(self, collection: str, query: Query, patch: Mapping[str, Any]) -> int:
        """Apply patch to matching rows. Returns the number of rows affected."""
        table = self._table(collection)
        for name in patch:
            if name not in table.c:
                raise PersistenceError(f"Unknown field {name!r} on {table.name!r}")
        stmt = table.update().values(**dict(patch))
        where = self._where(table, query)
        if where is not None:
            stmt = stmt.where(where)
        try:
            with self.engine.connect() as conn:
                result = conn.execute(stmt)
                conn.commit()
        except IntegrityError as exc:
            if _is_unique_violation(exc):
                raise DuplicateError(f"Duplicate record in {collection!r}") from exc
            raise PersistenceError(f"Integrity error writing {collection!r}") from exc
        except SQLAlchemyError as exc:
            logger.error("Update of %s failed: %s", collection, exc.__class__.__name__)
            raise PersistenceError(f"Could not update {collection!r}") from exc
        return result.rowcount

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def ping(self) -> bool:
        """Return True if the database answers a trivial query. Used by /health."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.warning("Database ping failed", exc_info=True)
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()
