"""
API request and response models for CommentBoard REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
content/models.py, which own the internal domain representation. Route
handlers map between the two.

Field limits here are a first line of defence for request size only. The
authoritative input rules live in UserModel and ContentModel, which raise
ValidationError (mapped to 422 in api/main.py).
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import User
from content.models import Comment

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/v1/auth/register."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=255)
    # Not stripped by the model config: whitespace is significant in passwords.
    password: str = Field(min_length=1, max_length=255, json_schema_extra={"format": "password"})


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/auth/login."""

    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=255)


class PasswordChangeRequest(BaseModel):
    """Request body for POST /api/v1/auth/password."""

    current_password: str = Field(min_length=1, max_length=255)
    new_password: str = Field(min_length=1, max_length=255)


class CommentCreate(BaseModel):
    """Request body for POST /api/v1/comments."""

    text: str = Field(min_length=1, max_length=20000)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Public view of a User. The password hash never leaves the server."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    email: str
    created_at: str

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(id=user.id, name=user.name, email=user.email, created_at=user.created_at or "")


class CommentResponse(BaseModel):
    """One comment as returned by the comment endpoints."""

    model_config = ConfigDict(frozen=True)

    id: int
    author_ref: str
    text: str
    created_at: str

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentResponse":
        """Factory Method: the domain -> transport mapping lives beside the output model."""
        return cls(
            id=comment.id,
            author_ref=comment.author_ref,
            text=comment.text,
            created_at=comment.created_at,
        )


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
