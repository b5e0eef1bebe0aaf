"""
api/main.py -- FastAPI application entry point for ReqRes Bridge.

Exposes the login proxy and the local user/post CRUD over HTTP.

Run with:      uvicorn asgi:app --reload
               python main.py serve

Middleware stack (outermost to innermost):
  1. log_requests          -- request id, access log line (ERRORED on unhandled)
  2. SlowAPIMiddleware     -- enforces per-route rate limits from api.limiter
  3. CORSMiddleware        -- adds CORS headers for allowed browser origins

add_middleware prepends, so the last registration is the outermost layer.

Response envelope:
  Every response body is {success, message, code, data?}. Route handlers
  build the success envelope themselves (ApiResponse.ok); the exception
  handlers at the bottom of this module build the failure envelope.

Lifespan loads settings once and opens the identity store; both are placed on
app.state and handed to the service functions explicitly by the routes.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.limiter import limiter
from api.models import ApiResponse, HealthResponse
from api.routes.auth import router as auth_router
from api.routes.posts import router as posts_router
from api.routes.stats import router as stats_router
from api.routes.users import router as users_router
from core.config import get_settings
from core.errors import ServiceError
from identity.store import IdentityStore

VERSION = "1.0.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("reqresbridge.api")
http_logger = logging.getLogger("reqresbridge.http")


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application-level resources across the full server lifetime.

    Everything before yield runs on startup; everything after yield runs on
    shutdown.
    """
    # Startup
    logger.info("ReqRes Bridge API starting up")
    settings = get_settings()
    app.state.settings = settings
    app.state.store = IdentityStore(settings.database_url)
    logger.info("Identity store initialized")

    yield

    # Shutdown
    app.state.store.close()
    logger.info("ReqRes Bridge API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="ReqRes Bridge API",
    description="ReqRes login proxy with locally persisted users and posts.",
    version=VERSION,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url=None,
)

# ---------------------------------------------------------------------------
# Middleware stack
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
    expose_headers=["X-Request-Id"],
    max_age=3600,
)

app.add_middleware(SlowAPIMiddleware)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


# ---------------------------------------------------------------------------
# Request logging middleware
#
# Every request gets a UUID, echoed back in the X-Request-Id header and
# stamped on both log lines so a request can be followed through the logs.
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    client = request.client.host if request.client else "unknown"
    http_logger.info(
        "[%s] %s %s - %s - %s",
        request_id,
        request.method,
        request.url.path,
        client,
        request.headers.get("user-agent", ""),
    )
    start = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        ms = (time.perf_counter() - start) * 1000
        http_logger.error(
            "[%s] ERRORED %s %s %.1fms",
            request_id,
            request.method,
            request.url.path,
            ms,
        )
        raise
    ms = (time.perf_counter() - start) * 1000
    http_logger.info(
        "[%s] DONE %s %s %d %.1fms",
        request_id,
        request.method,
        request.url.path,
        response.status_code,
        ms,
    )
    response.headers["X-Request-Id"] = request_id
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, tags=["Auth"])
app.include_router(users_router, tags=["Users"])
app.include_router(posts_router, tags=["Posts"])
app.include_router(stats_router, tags=["Stats"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ApiResponse envelope with success=false so API
# clients can parse errors uniformly.
# ---------------------------------------------------------------------------


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ApiResponse.error(message, status_code).model_dump(exclude_none=True),
    )


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Render a classified domain failure with its own status and message."""
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return _error(exc.status_code, exc.message)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 when a rate limit is exceeded.

    Retry-After tells clients how many seconds to wait before retrying.
    """
    retry_after = int(getattr(exc, "retry_after", 60))
    response = _error(429, "Too many requests.")
    response.headers["Retry-After"] = str(retry_after)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 with the first validation problem as the message."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        where = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{where}: {first.get('msg')}" if where else str(first.get("msg"))
    else:
        message = "Request validation failed."
    return _error(400, message)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap FastAPI/Starlette HTTP exceptions (404 route, 405 method) in the envelope."""
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception is written to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    response = _error(500, "Internal server error")
    # Rendered outside log_requests, so the request id is attached here.
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        response.headers["X-Request-Id"] = request_id
    return response


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined directly in main.py (not in a router) so it is always reachable
# regardless of router registration state. Not rate limited.
# ---------------------------------------------------------------------------


@app.get("/health", tags=["Health"], response_model=ApiResponse[HealthResponse])
def health(request: Request) -> ApiResponse[HealthResponse]:
    """Return API liveness, version and database reachability."""
    try:
        database = "ok" if request.app.state.store.ping() else "error"
    except Exception:  # noqa: BLE001 -- reported as a component status
        logger.warning("Health check database ping failed", exc_info=True)
        database = "error"
    return ApiResponse[HealthResponse].ok(
        HealthResponse(version=VERSION, components={"app": "ok", "database": database})
    )
