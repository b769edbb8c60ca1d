"""
api/routes/v1/comments.py -- Comment REST endpoints.

Routes:
  GET  /api/v1/comments                 -- list all comments, optional ?author= filter (public)
  GET  /api/v1/comments/{comment_id}    -- one comment (public)
  POST /api/v1/comments                 -- create a comment as the current user (requires auth)
  GET  /api/v1/users/{user_id}/comments -- comments by one author (public)

Authorship: the author reference written on POST is always the resolved
identity's id. The request body cannot name an author.

ContentModel errors are not caught here: NotFoundError and ValidationError
reach the handlers in api/main.py and become 404 and 422.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from api.models import CommentCreate, CommentResponse
from auth.dependencies import get_current_user
from auth.models import User
from content.comments import ContentModel

# Auth policy:
# - GET  /api/v1/comments:                  public
# - GET  /api/v1/comments/{comment_id}:     public
# - POST /api/v1/comments:                  requires auth (get_current_user)
# - GET  /api/v1/users/{user_id}/comments:  public
router = APIRouter()


@router.get("/comments", response_model=list[CommentResponse])
def list_comments(
    request: Request,
    author: Optional[str] = Query(default=None, max_length=255),
) -> list[CommentResponse]:
    """List comments in creation order, optionally filtered by author reference."""
    comments: ContentModel = request.app.state.comments
    found = comments.all() if author is None else comments.all_by_author(author)
    return [CommentResponse.from_comment(c) for c in found]


@router.get("/comments/{comment_id}", response_model=CommentResponse)
def get_comment(request: Request, comment_id: int) -> CommentResponse:
    comments: ContentModel = request.app.state.comments
    return CommentResponse.from_comment(comments.get(comment_id))


@router.post("/comments", response_model=CommentResponse, status_code=201)
def create_comment(
    request: Request,
    body: CommentCreate,
    current_user: User = Depends(get_current_user),
) -> CommentResponse:
    """Post a comment authored by the current user."""
    comments: ContentModel = request.app.state.comments
    return CommentResponse.from_comment(comments.create(current_user.id, body.text))


@router.get("/users/{user_id}/comments", response_model=list[CommentResponse])
def list_user_comments(request: Request, user_id: int) -> list[CommentResponse]:
    """Comments by one user. An unknown user id yields an empty list, not 404."""
    comments: ContentModel = request.app.state.comments
    return [CommentResponse.from_comment(c) for c in comments.all_by_author(user_id)]
