"""Per-client request limits for the upload, dashboard and maintenance endpoints.

Routers decorate with ``limiter.limit(limit_for("upload"))``. The limit
string is looked up on every request, so the values loaded from
``datacollections.json`` at startup apply without re-importing the routers.
"""

from typing import Callable

from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from datacollections.config import RateLimitConfig
from datacollections.models.errors import ErrorResponse

limiter = Limiter(key_func=get_remote_address)

_active_limits = RateLimitConfig()


def configure_rate_limits(limits: RateLimitConfig) -> None:
    global _active_limits
    _active_limits = limits


def limit_for(endpoint: str) -> Callable[[], str]:
    """Limit provider for one ``RateLimitConfig`` field."""
    if endpoint not in RateLimitConfig.model_fields:
        raise ValueError(f"No rate limit configured for {endpoint!r}")
    return lambda: getattr(_active_limits, endpoint)


async def rate_limit_exceeded_handler(request, exc: RateLimitExceeded):
    body = ErrorResponse.for_status(429, f"Rate limit exceeded ({exc.detail}). Please try again later.")
    return JSONResponse(status_code=429, content=body.model_dump())


def setup_rate_limiting(app, limits: RateLimitConfig | None = None):
    """Attach the limiter and its 429 handler to ``app``."""
    if limits is not None:
        configure_rate_limits(limits)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    return limiter
