"""Per-client-IP rate limiting dependency factory."""

from collections.abc import Callable, Coroutine
from typing import Any, NamedTuple

from fastapi import Request, Response

from content_gateway.auth.rate_limiter import InMemoryRateLimiter
from content_gateway.config import settings
from content_gateway.errors import RateLimitError


class RateLimitPolicy(NamedTuple):
    name: str
    limit: int
    message: str


AUTH_POLICY = RateLimitPolicy(
    "auth",
    settings.auth_rate_limit,
    "Too many authentication attempts, please try again later",
)
API_POLICY = RateLimitPolicy(
    "api",
    settings.api_rate_limit,
    "Too many requests, please try again later",
)

# Global rate limiter instance (single-process; replace with Redis for scaling)
rate_limiter = InMemoryRateLimiter(window_seconds=settings.rate_limit_window_seconds)


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def rate_limited(
    policy: RateLimitPolicy,
) -> Callable[..., Coroutine[Any, Any, None]]:
    """Dependency factory: count the request against ``policy`` for its IP.

    Usage::

        @router.post("/login", dependencies=[Depends(rate_limited(AUTH_POLICY))])
        async def login(...): ...

    Allowed responses carry ``RateLimit-Limit``, ``RateLimit-Remaining`` and
    ``RateLimit-Reset`` headers.

    Raises:
        RateLimitError: budget for the window is exhausted (rendered as 429
            with ``Retry-After``).
    """

    async def _check(request: Request, response: Response) -> None:
        decision = rate_limiter.check(
            f"{policy.name}:{client_ip(request)}", policy.limit
        )
        if not decision.allowed:
            raise RateLimitError(policy.message, retry_after=decision.reset_after)

        response.headers["RateLimit-Limit"] = str(policy.limit)
        response.headers["RateLimit-Remaining"] = str(decision.remaining)
        response.headers["RateLimit-Reset"] = str(decision.reset_after)

    return _check
