"""HTTP middleware and Redis-backed rate limiting."""

import logging
import time
import uuid

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

import redis.asyncio as redis

from campus.config import settings
from campus.core.exceptions import RateLimitExceeded

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60
SLOW_REQUEST_SECONDS = 1.0
UNLIMITED_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})

_redis: redis.Redis | None = None


def get_redis() -> redis.Redis:
    """Shared client; connections are opened lazily by redis-py."""
    global _redis
    if _redis is None:
        _redis = redis.from_url(settings.redis_url, encoding="utf-8", decode_responses=True)
    return _redis


def client_ip(request: Request) -> str:
    # First hop of X-Forwarded-For when behind the campus proxy
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.headers.get("X-Real-IP") or (request.client.host if request.client else "unknown")


async def count_hit(key: str) -> int:
    """Record a hit in the sliding window at ``key``; returns hits already in it."""
    now = time.time()
    async with get_redis().pipeline(transaction=True) as pipe:
        pipe.zremrangebyscore(key, 0, now - WINDOW_SECONDS)
        pipe.zcard(key)
        pipe.zadd(key, {uuid.uuid4().hex: now})
        pipe.expire(key, WINDOW_SECONDS)
        _, seen, _, _ = await pipe.execute()
    return seen


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-IP limit over the whole API. Redis outages let traffic through."""

    def __init__(self, app, requests_per_minute: int | None = None):
        super().__init__(app)
        self.limit = requests_per_minute or settings.rate_limit_per_minute

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in UNLIMITED_PATHS:
            return await call_next(request)

        try:
            seen = await count_hit(f"campus:rate:global:{client_ip(request)}")
        except redis.RedisError as e:
            logger.warning(f"Rate limiter unavailable, letting request through: {e}")
            return await call_next(request)

        remaining = self.limit - seen - 1
        if remaining < 0:
            return JSONResponse(
                status_code=429,
                content={"error": RateLimitExceeded.message},
                headers={"Retry-After": str(WINDOW_SECONDS), "X-RateLimit-Limit": str(self.limit)},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.limit)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()

        response = await call_next(request)

        elapsed = time.perf_counter() - started
        response.headers["X-Request-ID"] = request_id
        line = f"{request.method} {request.url.path} -> {response.status_code} in {elapsed:.3f}s"
        if elapsed > SLOW_REQUEST_SECONDS:
            logger.warning(f"SLOW REQUEST: {line} request_id={request_id}")
        else:
            logger.debug(line)
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "strict-origin-when-cross-origin",
    }

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        response.headers.update(self.HEADERS)
        if not settings.debug:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


class RateLimiter:
    """Route dependency enforcing a tighter limit on one endpoint group.

    Raises:
        RateLimitExceeded: The caller's IP used up its budget for the window
    """

    def __init__(self, scope: str, requests_per_minute: int):
        self.scope = scope
        self.requests_per_minute = requests_per_minute

    async def __call__(self, request: Request) -> None:
        if not settings.rate_limit_enabled:
            return
        try:
            seen = await count_hit(f"campus:rate:{self.scope}:{client_ip(request)}")
        except redis.RedisError as e:
            logger.warning(f"Rate limiter '{self.scope}' unavailable: {e}")
            return
        if seen >= self.requests_per_minute:
            raise RateLimitExceeded()


login_limiter = RateLimiter("login", settings.login_rate_limit_per_minute)
register_limiter = RateLimiter("register", settings.register_rate_limit_per_minute)
booking_limiter = RateLimiter("booking", settings.booking_rate_limit_per_minute)
