"""Unit tests for content/comments.py -- ContentModel.

Covers:
- create -> get round trip keeps text and author_ref
- all() / all_by_author() return creation order
- author references are opaque (no user record required)
- validation of text and author_ref
"""

from datetime import datetime, timezone

import pytest

from content.comments import ContentModel
from core.errors import NotFoundError, ValidationError


class TestCreateAndGet:
    def test_get_returns_created_comment(self, comments):
        created = comments.create("1", "hello")
        fetched = comments.get(created.id)
        assert fetched == created
        assert fetched.text == "hello"
        assert fetched.author_ref == "1"

    def test_author_ref_is_opaque(self, comments):
        # No user with this reference exists anywhere; the model does not care.
        created = comments.create("ghost-author", "boo")
        assert comments.get(created.id).author_ref == "ghost-author"

    def test_non_string_author_ref_stored_as_string(self, comments):
        created = comments.create(7, "seven")
        assert created.author_ref == "7"
        assert [c.id for c in comments.all_by_author(7)] == [created.id]

    def test_text_kept_verbatim(self, comments):
        created = comments.create("1", "  padded text \n")
        assert comments.get(created.id).text == "  padded text \n"

    def test_timestamp_from_clock(self, store):
        fixed = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        model = ContentModel(store, clock=lambda: fixed)
        created = model.create("1", "hi")
        assert created.created_at == fixed.isoformat()

    def test_get_missing_raises_not_found(self, comments):
        with pytest.raises(NotFoundError):
            comments.get(12345)


class TestListing:
    def test_all_in_creation_order(self, comments):
        ids = [comments.create(str(i % 2), f"c{i}").id for i in range(5)]
        assert [c.id for c in comments.all()] == ids

    def test_all_empty(self, comments):
        assert comments.all() == []

    def test_all_by_author_is_exact_subset(self, comments):
        a1 = comments.create("alice", "a1")
        comments.create("bob", "b1")
        a2 = comments.create("alice", "a2")
        comments.create("alice2", "not alice")
        result = comments.all_by_author("alice")
        assert [c.id for c in result] == [a1.id, a2.id]
        assert all(c.author_ref == "alice" for c in result)

    def test_all_by_unknown_author_is_empty(self, comments):
        comments.create("alice", "a1")
        assert comments.all_by_author("nobody") == []

    def test_all_by_empty_author_is_empty(self, comments):
        comments.create("alice", "a1")
        assert comments.all_by_author("") == []
        assert comments.all_by_author(None) == []


class TestValidation:
    @pytest.mark.parametrize("text", ["", "   ", "\n\t", None])
    def test_empty_text_rejected(self, comments, text):
        with pytest.raises(ValidationError):
            comments.create("1", text)

    @pytest.mark.parametrize("author_ref", ["", "  ", None, "x" * 256])
    def test_bad_author_ref_rejected(self, comments, author_ref):
        with pytest.raises(ValidationError):
            comments.create(author_ref, "hello")

    def test_text_length_limit(self, store):
        model = ContentModel(store, max_length=10)
        model.create("1", "x" * 10)
        with pytest.raises(ValidationError):
            model.create("1", "x" * 11)

    def test_rejected_comment_not_persisted(self, comments):
        with pytest.raises(ValidationError):
            comments.create("1", "")
        assert comments.all() == []
