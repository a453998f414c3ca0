"""Request-scoped dependencies shared by the API routers."""

import secrets
from typing import AsyncGenerator, Optional
from uuid import UUID

from fastapi import Header, HTTPException

from config import settings
from services.sleeper import SleeperClient, TTLCache


async def get_current_user_id(
    x_user_id: Optional[str] = Header(default=None),
) -> UUID:
    """
    Acting user id, supplied by the identity provider in front of the API.
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    try:
        return UUID(x_user_id)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid X-User-Id header")


async def require_service_key(
    x_service_key: Optional[str] = Header(default=None),
) -> None:
    """Guard settlement and admin routes when a service key is configured."""
    expected = settings.settlement_api_key
    if not expected:
        return
    if not x_service_key or not secrets.compare_digest(x_service_key, expected):
        raise HTTPException(status_code=401, detail="Invalid service key")


# Process-wide Sleeper response cache
_sleeper_cache = TTLCache(settings.sleeper.cache_ttl_seconds)


async def get_sleeper_client() -> AsyncGenerator[SleeperClient, None]:
    """Yield a Sleeper client for the duration of a request."""
    async with SleeperClient(settings.sleeper, cache=_sleeper_cache) as client:
        yield client
