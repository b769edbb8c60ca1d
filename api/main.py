"""
api/main.py -- FastAPI application entry point for CommentBoard.

Run with:  uvicorn asgi:app --reload

Middleware stack (outermost to innermost):
  1. TrustedHostMiddleware -- rejects requests with unexpected Host headers
  2. CORSMiddleware        -- adds CORS headers for allowed browser origins
  3. log_requests          -- one access log line per request
  4. SessionMiddleware     -- decodes / re-signs the session cookie
  5. IdentityMiddleware    -- IdentityResolver: session identity key -> User
  6. SlowAPIMiddleware     -- enforces per-route rate limits from api.limiter

Starlette makes the LAST added middleware the outermost, so the
add_middleware() calls below appear in reverse of this list. The only hard
constraint is 4 before 5: IdentityMiddleware reads request.session.

The AccessGate is not middleware. Protected routes declare
Depends(get_current_user), which runs after 5 and before the route body.

Lifespan builds one SQLDataStore and hands it to both models
(wire_services), then disposes it on shutdown.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.middleware.sessions import SessionMiddleware

from api.limiter import limiter
from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.auth import router as auth_router
from api.routes.v1.comments import router as comments_router
from auth.dependencies import IdentityMiddleware
from auth.hashing import BcryptHasher, PasswordHasher
from auth.pipeline import IdentityResolver
from auth.sessions import CookieSessionStore
from auth.users import UserModel
from content.comments import ContentModel
from core.config import get_settings
from core.errors import DuplicateError, ModelError, NotFoundError, PersistenceError, ValidationError
from store.sql import SQLDataStore

__version__ = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("commentboard.api")

settings = get_settings()


# ---------------------------------------------------------------------------
# Service wiring
# ---------------------------------------------------------------------------


def wire_services(app: FastAPI, datastore: SQLDataStore, hasher: PasswordHasher | None = None) -> None:
    """Attach the store, both models, and the identity resolver to app.state.

    One store handle is shared by both models; nothing reaches it through a
    module global. Tests call this with an in-memory store and a cheap hasher.
    """
    app.state.datastore = datastore
    app.state.users = UserModel(datastore, hasher or BcryptHasher(rounds=settings.bcrypt_rounds))
    app.state.comments = ContentModel(datastore, max_length=settings.max_comment_length)
    app.state.sessions = CookieSessionStore()
    app.state.identity_resolver = IdentityResolver(app.state.users, app.state.sessions)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the store on startup, dispose it on shutdown."""
    logger.info("CommentBoard API starting up")
    wire_services(app, SQLDataStore(settings.database_url))
    logger.info("Store initialized")

    yield

    app.state.datastore.close()
    logger.info("CommentBoard API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="CommentBoard API",
    description="Users, sessions, and comments.",
    version=__version__,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack -- innermost first (see module docstring)
# ---------------------------------------------------------------------------

app.add_middleware(SlowAPIMiddleware)
app.add_middleware(IdentityMiddleware)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.secret_key,
    session_cookie=settings.session_cookie,
    max_age=settings.session_max_age,
    same_site="lax",
    https_only=settings.secure_cookies,
)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
    max_age=3600,
)

app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.allowed_hosts)

# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])
app.include_router(comments_router, prefix="/api/v1", tags=["Comments"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------

# Model error -> (status, code). Checked in order; first isinstance match wins.
_MODEL_ERRORS: tuple[tuple[type[ModelError], int, str], ...] = (
    (ValidationError, 422, "validation_error"),
    (NotFoundError, 404, "not_found"),
    (DuplicateError, 409, "conflict"),
    (PersistenceError, 503, "storage_unavailable"),
)


@app.exception_handler(ModelError)
async def model_error_handler(request: Request, exc: ModelError) -> JSONResponse:
    """Translate model errors into HTTP responses.

    Models never choose status codes; this table is the only place they are
    decided. PersistenceError details stay in the log, not the response.
    """
    for cls, status_code, code in _MODEL_ERRORS:
        if isinstance(exc, cls):
            break
    else:
        status_code, code = 500, "internal_error"

    if isinstance(exc, PersistenceError):
        logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc)
        message = "Storage is temporarily unavailable."
    else:
        message = str(exc)
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=ErrorDetail(code=code, message=message)).model_dump(),
    )


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with a structured error when a rate limit is exceeded."""
    retry_after = int(getattr(exc, "retry_after", 60))
    response = JSONResponse(
        status_code=429,
        content=ErrorResponse(
            error=ErrorDetail(
                code="rate_limited",
                message="Too many requests.",
                detail=str(exc),
            )
        ).model_dump(),
    )
    response.headers["Retry-After"] = str(retry_after)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 with structured error when request body or query params fail validation."""
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(
            error=ErrorDetail(
                code="validation_error",
                message="Request validation failed.",
                detail=str(exc.errors()),
            )
        ).model_dump(),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Return a structured error for FastAPI HTTP exceptions.

    Route handlers raise HTTPException with a dict detail. When detail is
    already a structured dict, use it directly as the error field rather
    than stringifying it.
    """
    if isinstance(exc.detail, dict):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=exc.headers,
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(
                code=f"http_{exc.status_code}",
                message=str(exc.detail),
            )
        ).model_dump(),
        headers=exc.headers,
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The traceback goes to the log only. The client receives a generic message.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(
                code="internal_error",
                message="An unexpected error occurred.",
            )
        ).model_dump(),
    )


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined directly in main.py (not in a router) so it is always reachable
# regardless of router registration state. No rate limit, no auth.
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return API liveness, version, and a database round-trip check."""
    db_ok = request.app.state.datastore.ping()
    return HealthResponse(
        status="healthy" if db_ok else "degraded",
        version=__version__,
        components={"app": "ok", "database": "ok" if db_ok else "error"},
    )
