"""
content/comments.py -- ContentModel: create and list comments.

Pattern: Model over an injected DataStore, same shape as auth/users.py but
with no knowledge of it. An author is an opaque string key; listing by
author is an equality filter on that key, nothing more.

Ordering: every listing is in creation order (store-assigned id ascending).

Usage:
    comments = ContentModel(SQLDataStore(url))
    c = comments.create("1", "hello")
    comments.get(c.id)            # -> same Comment
    comments.all_by_author("1")   # -> [c]
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from content.models import Comment
from core.errors import NotFoundError, ValidationError
from store.base import DataStore

logger = logging.getLogger("commentboard.content")

_COLLECTION = "comments"
_DEFAULT_MAX_LENGTH = 5000
_MAX_AUTHOR_REF_LENGTH = 255


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ContentModel:
    def __init__(
        self,
        store: DataStore,
        clock: Callable[[], datetime] = _utcnow,
        max_length: int = _DEFAULT_MAX_LENGTH,
    ) -> None:
        self._store = store
        self._clock = clock
        self.max_length = max_length

    def create(self, author_ref: Any, text: str) -> Comment:
        """Stamp the current time and persist a new comment.

        Raises ValidationError if text is empty, whitespace-only, or longer
        than max_length, or if author_ref is empty.
        """
        author_ref = _normalize_ref(author_ref)
        if not isinstance(text, str) or not text.strip():
            raise ValidationError("Comment text must not be empty.")
        if len(text) > self.max_length:
            raise ValidationError(f"Comment text must be at most {self.max_length} characters.")
        comment = Comment(author_ref=author_ref, text=text, created_at=self._clock().isoformat())
        comment.id = self._store.save(
            _COLLECTION,
            {"author_ref": comment.author_ref, "text": comment.text, "created_at": comment.created_at},
        )
        logger.debug("Comment %s created by %s", comment.id, comment.author_ref)
        return comment

    def get(self, comment_id: Any) -> Comment:
        """Return one comment. Raises NotFoundError on a miss."""
        rows = self._store.fetch(_COLLECTION, {"id": comment_id})
        if not rows:
            raise NotFoundError(f"No comment with id {comment_id!r}.")
        return _record_to_comment(rows[0])

    def all(self) -> list[Comment]:
        return [_record_to_comment(r) for r in self._store.fetch(_COLLECTION, {})]

    def all_by_author(self, author_ref: Any) -> list[Comment]:
        """Return the comments whose author_ref equals author_ref, oldest first.

        An empty reference matches nothing rather than raising: listing is a
        read and an unknown author simply has no comments.
        """
        if author_ref is None or not str(author_ref).strip():
            return []
        rows = self._store.fetch(_COLLECTION, {"author_ref": str(author_ref).strip()})
        return [_record_to_comment(r) for r in rows]


def _normalize_ref(author_ref: Any) -> str:
    if author_ref is None or not str(author_ref).strip():
        raise ValidationError("Author reference must not be empty.")
    author_ref = str(author_ref).strip()
    if len(author_ref) > _MAX_AUTHOR_REF_LENGTH:
        raise ValidationError(f"Author reference must be at most {_MAX_AUTHOR_REF_LENGTH} characters.")
    return author_ref


def _record_to_comment(record: dict) -> Comment:
    return Comment(
        id=record["id"],
        author_ref=record["author_ref"],
        text=record["text"],
        created_at=record["created_at"],
    )
