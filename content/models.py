"""
content/models.py -- Domain dataclass for the Comment entity.

Pure data container. ContentModel in content/comments.py owns the rules.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Comment:
    """A piece of user-submitted text.

    author_ref is whatever the caller passed in, stored as a string. It is
    not checked against any user record.

    id is None before the record is written to the store.
    """

    author_ref: str
    text: str
    created_at: str  # ISO 8601 UTC, stamped by ContentModel.create
    id: int | None = None
