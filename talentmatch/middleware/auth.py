"""
API Key Auth Middleware

Roles:
- admin: Platform admin (env var ADMIN_API_KEY)
- member: Staffing team member (any key listed in env var API_KEYS)

Every /api route requires a key in the X-API-Key header.
"""
import hmac
from typing import Optional
from fastapi import HTTPException, Security, status
from fastapi.security import APIKeyHeader
from talentmatch.config import settings

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def get_master_key() -> Optional[str]:
    """ADMIN_API_KEY; the "dev-key" fallback is honoured only in DEBUG mode."""
    if settings.ADMIN_API_KEY:
        return settings.ADMIN_API_KEY
    return "dev-key" if settings.DEBUG else None


def _matches(candidate: str, expected: str) -> bool:
    return hmac.compare_digest(candidate.encode(), expected.encode())


async def verify_key(api_key: Optional[str] = Security(api_key_header)) -> dict:
    """
    Verify API key and return caller context.

    Returns dict with: role, name
    """
    if not api_key:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "API key required")

    master_key = get_master_key()
    if master_key and _matches(api_key, master_key):
        return {"role": "admin", "name": "Admin"}

    if any(_matches(api_key, key) for key in settings.API_KEYS):
        return {"role": "member", "name": "Staffing Team"}

    raise HTTPException(status.HTTP_403_FORBIDDEN, "Invalid API key")


async def verify_admin(api_key: Optional[str] = Security(api_key_header)) -> dict:
    """Admin key only."""
    master_key = get_master_key()
    if not api_key or not master_key or not _matches(api_key, master_key):
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Admin access required")
    return {"role": "admin", "name": "Admin"}


# Aliases used by the routers
verify_api_key = verify_key
verify_admin_key = verify_admin
