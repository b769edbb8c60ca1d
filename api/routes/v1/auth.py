"""
api/routes/v1/auth.py -- Registration, login, and session endpoints.

Routes:
  POST /api/v1/auth/register   -- create account, start a session (public)
  POST /api/v1/auth/login      -- password login, start a session (public, rate limited)
  POST /api/v1/auth/logout     -- end the session (public)
  GET  /api/v1/auth/me         -- current user (requires auth)
  POST /api/v1/auth/password   -- change own password (requires auth)

Sessions: login writes only the user id into the signed session cookie via
app.state.sessions. Every later request is resolved back to a User by
IdentityMiddleware, so a deleted account stops working on its next request.

Security:
  Login is rate-limited per client IP (LOGIN_RATE_LIMIT, default 10/minute).
  UserModel.authenticate() provides timing equalization -- use it, never
  inline get_by_email() + verify().
  Cache-Control: no-store on credential responses.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import JSONResponse

from api.limiter import limiter, login_rate_limit
from api.models import LoginRequest, PasswordChangeRequest, RegisterRequest, UserResponse
from auth.dependencies import get_current_user
from auth.models import User
from auth.sessions import SessionStore
from auth.users import UserModel

# Auth policy:
# - POST /api/v1/auth/register:  public
# - POST /api/v1/auth/login:     public -- login endpoint must be unauthenticated
# - POST /api/v1/auth/logout:    public -- clearing a session needs no prior auth
# - GET  /api/v1/auth/me:        requires auth (get_current_user)
# - POST /api/v1/auth/password:  requires auth (get_current_user)
router = APIRouter()


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post("/auth/register", response_model=UserResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> JSONResponse:
    """Create an account and log it in.

    A taken email (DuplicateError) surfaces as 409 and input that passes the
    request model but fails UserModel validation as 422, both through the
    model error handler in api/main.py.
    """
    users: UserModel = request.app.state.users
    sessions: SessionStore = request.app.state.sessions
    user = users.create(body.name, body.email, body.password)

    sessions.set_identity_key(request.session, user.id)
    resp = JSONResponse(status_code=201, content=UserResponse.from_user(user).model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/login", response_model=UserResponse)
@limiter.limit(login_rate_limit)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password; bind the user to the session.

    Returns the same generic error for unknown email and wrong password
    ("bad_credentials") so the response does not reveal which accounts exist.
    A failed login also drops any identity the session carried.
    """
    users: UserModel = request.app.state.users
    sessions: SessionStore = request.app.state.sessions
    user = users.authenticate(body.email, body.password)
    if user is None:
        sessions.clear_identity_key(request.session)
        resp = JSONResponse(
            status_code=401,
            content={"error": {"code": "bad_credentials", "message": "Invalid email or password."}},
        )
        resp.headers["Cache-Control"] = "no-store"
        return resp

    sessions.set_identity_key(request.session, user.id)
    resp = JSONResponse(status_code=200, content=UserResponse.from_user(user).model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/logout")
async def logout(request: Request) -> JSONResponse:
    """Clear the session. Starlette sends an expiring cookie once it is empty."""
    sessions: SessionStore = request.app.state.sessions
    sessions.clear_identity_key(request.session)
    request.session.clear()
    return JSONResponse(content={"message": "Logged out."})


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/auth/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)) -> UserResponse:
    """Return the currently authenticated user."""
    return UserResponse.from_user(current_user)


@router.post("/auth/password", status_code=204)
def change_password(
    request: Request,
    body: PasswordChangeRequest,
    current_user: User = Depends(get_current_user),
) -> Response:
    """Change the caller's password after re-checking the current one.

    Re-verification stops a hijacked session from locking the owner out.
    """
    users: UserModel = request.app.state.users
    if users.authenticate(current_user.email, body.current_password) is None:
        raise HTTPException(
            status_code=400,
            detail={"code": "bad_credentials", "message": "Current password is incorrect."},
        )
    users.change_password(current_user.id, body.new_password)
    return Response(status_code=204)
