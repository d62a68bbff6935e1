"""Request throttling.

Note: ``rate_limited`` lives in ``auth.limits`` and is NOT re-exported here
because importing it reads application settings.
Import directly: ``from content_gateway.auth.limits import rate_limited``.
"""

from content_gateway.auth.rate_limiter import InMemoryRateLimiter, RateLimitDecision

__all__ = ["InMemoryRateLimiter", "RateLimitDecision"]
