from functools import lru_cache

import globus_sdk
from cachetools import TTLCache, cached
from fastapi import HTTPException
from structlog import get_logger

from repohub.config import get_settings

logger = get_logger(__name__)


@cached(cache=TTLCache(maxsize=1024, ttl=5 * 60))
def introspect_token(token: str) -> globus_sdk.GlobusHTTPResponse:
    """Introspect a session token with Globus Auth.

    Raises:
        HTTPException: 401 if the token is not active
    """
    client = get_auth_client()
    auth_data = client.oauth2_token_introspect(token, include="identity_set")

    if not auth_data.get("active", False):
        logger.info("Rejected inactive token")
        raise HTTPException(
            status_code=401,
            detail="Credentials not active",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return auth_data


@lru_cache
def get_auth_client() -> globus_sdk.ConfidentialAppAuthClient:
    """Create an AuthClient for the service."""
    settings = get_settings()
    return globus_sdk.ConfidentialAppAuthClient(
        settings.API_CLIENT_ID, settings.API_CLIENT_SECRET
    )
