"""
auth/dependencies.py -- FastAPI binding for the identity pipeline.

IdentityMiddleware runs IdentityResolver on every request, protected or not,
so any handler can ask "who is calling" via try_get_current_user(). The
resulting RequestContext is stored on request.state.context.

get_current_user() is the AccessGate for protected routes. Using it as a
dependency means the gate runs after the middleware (resolution) and before
the route body (handler), which is the only order that is safe.

  try_get_current_user() -- soft variant, returns None when anonymous.
  get_current_user()     -- runs AccessGate, raises HTTP 401 on UNAUTHORIZED.

Middleware order (outermost first): SessionMiddleware must wrap
IdentityMiddleware, otherwise request.session is not populated yet and every
request resolves as anonymous.

Layer rule: no imports from api/ or content/.
  This module may import from fastapi/starlette because it is the
  transport-facing edge of the auth package.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from auth.models import User
from auth.pipeline import UNAUTHORIZED, AccessGate, IdentityResolver, RequestContext

logger = logging.getLogger("commentboard.auth")

_gate = AccessGate()


class IdentityMiddleware(BaseHTTPMiddleware):
    """Build a fresh RequestContext and run IdentityResolver before routing.

    The resolver is read from app.state.identity_resolver on each request so
    the lifespan (or a test) decides which UserModel and SessionStore back it.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        resolver: IdentityResolver = request.app.state.identity_resolver
        session = request.session if "session" in request.scope else None
        ctx = RequestContext(session=session)

        async def forward(ctx: RequestContext) -> Response:
            request.state.context = ctx
            return await call_next(request)

        return await resolver(ctx, forward)


def _context(request: Request) -> RequestContext | None:
    return getattr(request.state, "context", None)


def try_get_current_user(request: Request) -> User | None:
    """Return the identity resolved for this request, or None.

    Never raises -- callers that need a hard 401 should use get_current_user().
    """
    ctx = _context(request)
    return ctx.identity if ctx is not None else None


async def get_current_user(request: Request) -> User:
    """Require a resolved identity. Raises HTTP 401 otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(user: User = Depends(get_current_user)): ...

    A missing context means IdentityMiddleware never ran for this request.
    That is a wiring bug, and the request is refused rather than guessed at.
    """
    ctx = _context(request)
    if ctx is None:
        logger.error(
            "No identity context on %s %s -- is IdentityMiddleware installed?",
            request.method,
            request.url.path,
        )
        raise _unauthorized()

    async def _identity(ctx: RequestContext) -> User:
        return ctx.identity

    outcome = await _gate(ctx, _identity)
    if outcome is UNAUTHORIZED:
        raise _unauthorized()
    return outcome


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=401,
        detail={"code": "unauthorized", "message": "Authentication required."},
    )
