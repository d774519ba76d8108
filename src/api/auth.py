"""API key authentication for FastAPI.

The key may be sent as the ``X-API-Key`` header or the ``api_key``
query parameter (EventSource clients cannot set headers).

If no API key is configured:
- Production: authentication fails closed (rejects all requests)
- Development/testing: authentication is disabled for convenience
"""

import secrets
from typing import Annotated

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import APIKeyHeader, APIKeyQuery

# Import module (not function) so monkeypatching in tests works correctly.
import src.settings as _settings_mod

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)
api_key_query = APIKeyQuery(name="api_key", auto_error=False)

# Health/readiness probes are exempt
EXEMPT_ROUTES = {
    "/api/v1/health",
    "/api/v1/ready",
}


async def verify_api_key(
    request: Request,
    header_key: str | None = Security(api_key_header),
    query_key: str | None = Security(api_key_query),
) -> str:
    """Verify the API key.

    Args:
        request: FastAPI request object
        header_key: API key from X-API-Key header
        query_key: API key from api_key query parameter

    Returns:
        "api_key" when authenticated, "" when auth is exempt or disabled

    Raises:
        HTTPException: 401 Unauthorized if authentication fails
    """
    if request.url.path in EXEMPT_ROUTES:
        return ""

    settings = _settings_mod.get_settings()
    configured_key = settings.api_key.get_secret_value()

    if not configured_key:
        if settings.environment == "production":
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Authentication is not configured. Set API_KEY.",
            )
        return ""

    provided_key = header_key or query_key
    if not provided_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required. Provide an API key.",
        )
    if not secrets.compare_digest(provided_key, configured_key):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key.",
        )
    return "api_key"


RequireAPIKey = Annotated[str, Depends(verify_api_key)]
