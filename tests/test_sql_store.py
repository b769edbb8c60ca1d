"""Unit tests for store/sql.py -- the SQLAlchemy DataStore adapter.

Covers:
- save/fetch/update contract on both collections
- UNIQUE(email) surfaces as DuplicateError
- unknown collections and fields are refused before reaching SQL
- driver failures surface as PersistenceError
"""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from core.errors import DuplicateError, PersistenceError
from store.base import DataStore

_DRIVER_DOWN = OperationalError("SELECT 1", {}, Exception("database is gone"))

_USER = {"name": "alice", "email": "alice@x.com", "password_hash": "h", "created_at": "2024-01-01T00:00:00+00:00"}


class TestContract:
    def test_satisfies_protocol(self, store):
        assert isinstance(store, DataStore)

    def test_save_returns_id_and_fetch_finds_it(self, store):
        user_id = store.save("users", _USER)
        [row] = store.fetch("users", {"id": user_id})
        assert row["email"] == "alice@x.com"

    def test_fetch_empty_query_returns_all_in_insert_order(self, store):
        ids = [
            store.save("comments", {"author_ref": "1", "text": f"t{i}", "created_at": "2024-01-01"}) for i in range(3)
        ]
        assert [r["id"] for r in store.fetch("comments", {})] == ids

    def test_fetch_no_match_returns_empty_list(self, store):
        assert store.fetch("users", {"email": "nobody@x.com"}) == []

    def test_fetch_multiple_conditions(self, store):
        store.save("comments", {"author_ref": "1", "text": "a", "created_at": "t"})
        wanted = store.save("comments", {"author_ref": "1", "text": "b", "created_at": "t"})
        rows = store.fetch("comments", {"author_ref": "1", "text": "b"})
        assert [r["id"] for r in rows] == [wanted]

    def test_update_returns_affected_count(self, store):
        user_id = store.save("users", _USER)
        assert store.update("users", {"id": user_id}, {"password_hash": "h2"}) == 1
        assert store.update("users", {"id": user_id + 1}, {"password_hash": "h3"}) == 0
        assert store.fetch("users", {"id": user_id})[0]["password_hash"] == "h2"


class TestErrors:
    def test_duplicate_email(self, store):
        store.save("users", _USER)
        with pytest.raises(DuplicateError):
            store.save("users", {**_USER, "name": "other"})

    def test_not_null_violation_is_persistence_error(self, store):
        with pytest.raises(PersistenceError) as exc_info:
            store.save("users", {"name": "alice", "email": "a@x.com", "created_at": "t"})
        assert not isinstance(exc_info.value, DuplicateError)

    def test_unknown_collection(self, store):
        with pytest.raises(PersistenceError):
            store.fetch("widgets", {})

    def test_unknown_field(self, store):
        with pytest.raises(PersistenceError):
            store.fetch("users", {"is_admin": 1})
        with pytest.raises(PersistenceError):
            store.update("users", {}, {"is_admin": 1})

    def test_driver_failure_is_persistence_error(self, store):
        with patch.object(type(store.engine), "connect", side_effect=_DRIVER_DOWN):
            with pytest.raises(PersistenceError):
                store.fetch("users", {})

    def test_ping(self, store):
        assert store.ping() is True
        with patch.object(type(store.engine), "connect", side_effect=_DRIVER_DOWN):
            assert store.ping() is False
