"""
auth/pipeline.py -- Per-request identity resolution and access gating.

Pattern: Chain of Responsibility. A stage is an async callable
(ctx, call_next) -> result. It either hands the RequestContext on by awaiting
call_next(ctx) exactly once, or halts by returning without calling it.

Stages:
  IdentityResolver -- session identity key -> User, attached to ctx.identity.
                      Never halts. A key that no longer resolves (deleted
                      user, forged id) is cleared from the session and the
                      request proceeds anonymously.
  AccessGate       -- halts with UNAUTHORIZED unless ctx.identity is set.
                      Read-only with respect to the context.

Ordering: Pipeline refuses to build a chain in which an AccessGate is not
preceded by an IdentityResolver. A gate that runs before resolution would
see every request as anonymous at best, and at worst a context populated by
something other than the resolver.

Nothing here knows about HTTP. auth/dependencies.py binds these stages to
FastAPI; tests drive them directly.

Layer rule: no imports from api/ or content/.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, MutableMapping, Sequence
from dataclasses import dataclass
from typing import Any

from starlette.concurrency import run_in_threadpool

from auth.models import User
from auth.sessions import SessionStore
from auth.users import UserModel
from core.errors import NotFoundError

logger = logging.getLogger("commentboard.auth.pipeline")


@dataclass
class RequestContext:
    """State for exactly one request. Created by the transport, dropped with it."""

    session: MutableMapping[str, Any] | None = None
    identity: User | None = None


class Unauthorized:
    """Halt outcome returned by AccessGate. Not an exception: nothing is raised.

    Carries no status code; each transport maps it to its own refusal.
    """

    def __repr__(self) -> str:
        return "UNAUTHORIZED"


UNAUTHORIZED = Unauthorized()

Next = Callable[[RequestContext], Awaitable[Any]]
Stage = Callable[[RequestContext, Next], Awaitable[Any]]


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------


class IdentityResolver:
    """Resolve the session's identity key to a User.

    UserModel.get is blocking I/O, so it runs on Starlette's thread pool; the
    lookup is this stage's only suspension point. NotFoundError is the one
    error handled here. Anything else (e.g. PersistenceError) propagates to
    the caller untouched.
    """

    def __init__(self, users: UserModel, sessions: SessionStore) -> None:
        self.users = users
        self.sessions = sessions

    async def resolve(self, ctx: RequestContext) -> None:
        key = self.sessions.get_identity_key(ctx.session)
        if key is None:
            return
        try:
            ctx.identity = await run_in_threadpool(self.users.get, key)
        except NotFoundError:
            logger.info("Session identity %r no longer resolves; clearing it", key)
            self.sessions.clear_identity_key(ctx.session)
            ctx.identity = None

    async def __call__(self, ctx: RequestContext, call_next: Next) -> Any:
        await self.resolve(ctx)
        return await call_next(ctx)


class AccessGate:
    """Forward only requests that carry a resolved identity."""

    async def __call__(self, ctx: RequestContext, call_next: Next) -> Any:
        if ctx.identity is None:
            return UNAUTHORIZED
        return await call_next(ctx)


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------


def check_stage_order(stages: Sequence[Stage]) -> None:
    """Raise ValueError unless every AccessGate follows an IdentityResolver."""
    resolved = False
    for position, stage in enumerate(stages):
        if isinstance(stage, IdentityResolver):
            resolved = True
        elif isinstance(stage, AccessGate) and not resolved:
            raise ValueError(f"AccessGate at position {position} is not preceded by an IdentityResolver.")


class Pipeline:
    """An ordered chain of stages in front of a handler.

    Usage:
        protected = Pipeline([IdentityResolver(users, sessions), AccessGate()], handler)
        result = await protected.run(RequestContext(session=session))
        if result is UNAUTHORIZED: ...
    """

    def __init__(self, stages: Sequence[Stage], handler: Next) -> None:
        check_stage_order(stages)
        self.stages = tuple(stages)
        self.handler = handler

    async def run(self, ctx: RequestContext) -> Any:
        return await self._dispatch(0, ctx)

    async def _dispatch(self, index: int, ctx: RequestContext) -> Any:
        if index == len(self.stages):
            return await self.handler(ctx)
        return await self.stages[index](ctx, _once(lambda c: self._dispatch(index + 1, c)))


def _once(call_next: Next) -> Next:
    """Wrap call_next so a stage that forwards twice fails loudly."""
    called = False

    async def forward(ctx: RequestContext) -> Any:
        nonlocal called
        if called:
            raise RuntimeError("call_next() invoked more than once by a pipeline stage.")
        called = True
        return await call_next(ctx)

    return forward
