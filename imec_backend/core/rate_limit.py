"""
Rate Limiting Module
Per-client sliding window rate limiting for FastAPI endpoints.

Redis is used when REDIS_URL is configured so several workers share one
window; otherwise, or while Redis is unreachable, an in-memory limiter is used.
"""

import logging
import time
from typing import Optional

import redis.asyncio as aioredis
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from imec_backend.core.config import Settings
from imec_backend.core.exceptions import RateLimitError

logger = logging.getLogger(__name__)


# =============================================================================
# Redis Rate Limiter
# =============================================================================


class RedisRateLimiter:
    """
    Redis-based sliding window rate limiter.

    Uses a sorted set to track request timestamps, allowing for
    accurate sliding window rate limiting across distributed workers.
    """

    def __init__(self, redis_url: str):
        self.redis_url = redis_url
        self._redis: Optional[aioredis.Redis] = None

    async def get_redis(self) -> aioredis.Redis:
        """Get or create Redis connection."""
        if self._redis is None:
            self._redis = aioredis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_timeout=2.0,
                socket_connect_timeout=2.0,
            )
        return self._redis

    async def close(self) -> None:
        """Close Redis connection."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    async def is_rate_limited(self, key: str, limit: int, window: int) -> tuple[bool, int, int]:
        """
        Check if a key is rate limited using sliding window.

        Returns:
            Tuple of (is_limited, remaining_requests, retry_after_seconds)
        """
        redis = await self.get_redis()
        now = time.time()
        window_start = now - window

        pipe = redis.pipeline()
        pipe.zremrangebyscore(key, "-inf", window_start)
        pipe.zcard(key)
        pipe.zadd(key, {str(now): now})
        pipe.expire(key, window + 1)
        pipe.zrange(key, 0, 0, withscores=True)
        results = await pipe.execute()

        current_count = results[1]
        oldest_entries = results[4]

        remaining = max(0, limit - current_count - 1)
        is_limited = current_count >= limit

        retry_after = 0
        if is_limited and oldest_entries:
            oldest_timestamp = oldest_entries[0][1]
            retry_after = int(window - (now - oldest_timestamp)) + 1

        return is_limited, remaining, retry_after


# =============================================================================
# In-Memory Rate Limiter
# =============================================================================


class InMemoryRateLimiter:
    """
    Sliding window rate limiter with dict-based storage.

    Only correct for single-process deployments.
    """

    def __init__(self, cleanup_interval: int = 60):
        self._requests: dict[str, list[float]] = {}
        self._last_cleanup = time.time()
        self._cleanup_interval = cleanup_interval

    def _cleanup_if_needed(self, window: int) -> None:
        """Periodically drop keys with no requests inside the window."""
        now = time.time()
        if now - self._last_cleanup < self._cleanup_interval:
            return

        self._last_cleanup = now
        for key in list(self._requests):
            self._requests[key] = [ts for ts in self._requests[key] if now - ts < window]
            if not self._requests[key]:
                del self._requests[key]

    async def is_rate_limited(self, key: str, limit: int, window: int) -> tuple[bool, int, int]:
        """
        Check if a key is rate limited.

        Returns:
            Tuple of (is_limited, remaining_requests, retry_after_seconds)
        """
        self._cleanup_if_needed(window)
        now = time.time()
        window_start = now - window

        timestamps = [ts for ts in self._requests.get(key, []) if ts > window_start]
        self._requests[key] = timestamps

        if len(timestamps) >= limit:
            oldest = min(timestamps)
            retry_after = int(window - (now - oldest)) + 1
            return True, 0, retry_after

        timestamps.append(now)
        return False, max(0, limit - len(timestamps)), 0

    async def close(self) -> None:
        self._requests.clear()


# =============================================================================
# Helper Functions
# =============================================================================


def get_client_ip(request: Request) -> str:
    """Client IP, taking the first hop of X-Forwarded-For when present."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def build_rate_limit_key(ip_address: str) -> str:
    return f"rate_limit:contact:ip_{ip_address}"


class RateLimiter:
    """
    Admission control shared by all routes.

    Created once per application and stored on ``app.state.rate_limiter``.
    """

    def __init__(self, settings: Settings):
        self.enabled = settings.rate_limit_enabled
        self.limit = settings.rate_limit_requests
        self.window = settings.rate_limit_window
        self._redis = RedisRateLimiter(settings.redis_url) if settings.redis_url else None
        self._memory = InMemoryRateLimiter()
        self._redis_available = True

    async def check(self, key: str) -> tuple[bool, int, int]:
        if self._redis is not None:
            try:
                result = await self._redis.is_rate_limited(key, self.limit, self.window)
                if not self._redis_available:
                    logger.info("Redis rate limiting restored")
                self._redis_available = True
                return result
            except Exception as e:
                # Keep enforcing limits locally while Redis is down
                if self._redis_available:
                    logger.warning(f"Redis rate limiting unavailable, using in-memory fallback: {e}")
                    self._redis_available = False
        return await self._memory.is_rate_limited(key, self.limit, self.window)

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.close()
        await self._memory.close()


# =============================================================================
# Rate Limit Dependency
# =============================================================================


async def enforce_rate_limit(request: Request) -> None:
    """
    FastAPI dependency applying the per-client limit.

    Usage:
        router = APIRouter(dependencies=[Depends(enforce_rate_limit)])
    """
    limiter: Optional[RateLimiter] = getattr(request.app.state, "rate_limiter", None)
    if limiter is None or not limiter.enabled:
        return

    key = build_rate_limit_key(get_client_ip(request))
    is_limited, remaining, retry_after = await limiter.check(key)

    reset = int(time.time()) + limiter.window
    request.state.rate_limit_limit = limiter.limit
    request.state.rate_limit_remaining = remaining
    request.state.rate_limit_reset = reset

    if is_limited:
        raise RateLimitError(
            message=f"Too many requests. Please retry after {retry_after} seconds.",
            retry_after=retry_after,
            headers={
                "X-RateLimit-Limit": str(limiter.limit),
                "X-RateLimit-Remaining": "0",
                "X-RateLimit-Reset": str(reset),
            },
        )


# =============================================================================
# Rate Limit Middleware
# =============================================================================


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add rate limit headers to responses.

    The headers are only present when ``enforce_rate_limit`` ran for the request.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)

        if hasattr(request.state, "rate_limit_limit"):
            response.headers["X-RateLimit-Limit"] = str(request.state.rate_limit_limit)
            response.headers["X-RateLimit-Remaining"] = str(getattr(request.state, "rate_limit_remaining", 0))
            response.headers["X-RateLimit-Reset"] = str(getattr(request.state, "rate_limit_reset", 0))

        return response


# =============================================================================
# Exception Handler
# =============================================================================


async def rate_limit_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render 429 responses with a Retry-After header."""
    headers = dict(exc.headers) if exc.headers else {}
    headers.setdefault("Retry-After", "60")

    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={
            "ok": False,
            "error": "rate_limit_exceeded",
            "message": exc.detail,
            "retry_after": int(headers["Retry-After"]),
        },
        headers=headers,
    )
