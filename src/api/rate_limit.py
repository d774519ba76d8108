"""Rate limiting configuration for API endpoints.

Provides a shared Limiter instance; route modules apply it per
endpoint:

    from src.api.rate_limit import limiter

    @router.post("/devices/score")
    @limiter.limit("120/minute")
    async def preview_score(request: Request, ...):
        ...
"""

from slowapi import Limiter
from starlette.requests import Request


def _get_real_client_ip(request: Request) -> str:
    """Extract the client IP, respecting X-Forwarded-For from a proxy.

    Args:
        request: Starlette/FastAPI request object.

    Returns:
        Client IP address string.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # X-Forwarded-For: client, proxy1, proxy2
        return forwarded_for.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "127.0.0.1"


limiter = Limiter(
    key_func=_get_real_client_ip,
    default_limits=["60/minute"],
)

# Maximum request body size (bytes); floor layouts are the largest payloads
MAX_REQUEST_BODY_BYTES = 1_048_576  # 1 MB
