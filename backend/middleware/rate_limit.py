"""Rate limiting middleware for FastAPI.

Guards the endpoints that spend provider quota or parse uploads: chat
messages, connectivity probes and knowledge extraction. Counts are kept
in memory with a sliding window per client.
"""

import logging
import re
import time
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from responses import ResponseCode, error_dict

logger = logging.getLogger(__name__)

# POST endpoints that call out to a provider or parse files
RATE_LIMITED_PATTERNS = (
    re.compile(r"^/api/conversations/[^/]+/messages$"),
    re.compile(r"^/api/providers/[^/]+/test$"),
    re.compile(r"^/api/knowledge/extract$"),
)


@dataclass
class RateLimitConfig:
    """Configuration for rate limiting."""

    requests_per_minute: int = 20
    requests_per_hour: int = 200
    burst_limit: int = 5  # Max requests in 10 seconds


@dataclass
class RateLimitDecision:
    allowed: bool
    message: str | None
    headers: dict[str, str]


class RateLimiter:
    """In-memory sliding window limiter keyed by caller."""

    def __init__(self, config: RateLimitConfig | None = None) -> None:
        self.config = config or RateLimitConfig()
        self._requests: dict[str, list[float]] = defaultdict(list)

    def client_id(self, request: Request) -> str:
        """Identify the caller by IP address.

        Runs before authentication, so request headers such as the bearer
        token are never trusted as a bucket key.
        """
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return f"ip:{forwarded.split(',')[0].strip()}"

        if request.client:
            return f"ip:{request.client.host}"

        return "unknown"

    def _prune(self, now: float) -> None:
        """Drop timestamps older than the widest window, and empty buckets."""
        hour_ago = now - 3600
        for key in list(self._requests):
            timestamps = [ts for ts in self._requests[key] if ts > hour_ago]
            if timestamps:
                self._requests[key] = timestamps
            else:
                del self._requests[key]

    def __len__(self) -> int:
        return len(self._requests)

    def check(self, client_id: str, now: float | None = None) -> RateLimitDecision:
        """Record a request for `client_id` if it fits every window."""
        now = time.time() if now is None else now

        self._prune(now)
        timestamps = self._requests[client_id]

        windows = (
            (10, self.config.burst_limit, "Too many requests. Please slow down."),
            (60, self.config.requests_per_minute, "Rate limit exceeded. Please wait a moment."),
            (3600, self.config.requests_per_hour, "Hourly rate limit exceeded."),
        )
        for seconds, limit, message in windows:
            in_window = sum(1 for ts in timestamps if ts > now - seconds)
            if in_window >= limit:
                return RateLimitDecision(
                    allowed=False,
                    message=message,
                    headers={
                        "X-RateLimit-Limit": str(limit),
                        "X-RateLimit-Remaining": "0",
                        "Retry-After": str(seconds),
                    },
                )

        minute_requests = sum(1 for ts in timestamps if ts > now - 60)
        timestamps.append(now)

        return RateLimitDecision(
            allowed=True,
            message=None,
            headers={
                "X-RateLimit-Limit": str(self.config.requests_per_minute),
                "X-RateLimit-Remaining": str(
                    self.config.requests_per_minute - minute_requests - 1
                ),
            },
        )


def is_rate_limited(method: str, path: str) -> bool:
    return method == "POST" and any(p.match(path) for p in RATE_LIMITED_PATTERNS)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Middleware to apply rate limiting to provider-facing paths."""

    def __init__(self, app, config: RateLimitConfig | None = None) -> None:
        super().__init__(app)
        self.limiter = RateLimiter(config)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request with rate limiting."""
        if not is_rate_limited(request.method, request.url.path):
            return await call_next(request)

        client_id = self.limiter.client_id(request)
        decision = self.limiter.check(client_id)

        if not decision.allowed:
            logger.warning(
                "Rate limit exceeded for %s on %s", client_id, request.url.path
            )
            response = JSONResponse(
                status_code=429,
                content=error_dict(
                    ResponseCode.LLM_RATE_LIMIT,
                    custom_message=decision.message,
                    request_id=getattr(request.state, "request_id", None),
                ),
            )
            for key, value in decision.headers.items():
                response.headers[key] = value
            return response

        response = await call_next(request)

        for key, value in decision.headers.items():
            response.headers[key] = value

        return response
