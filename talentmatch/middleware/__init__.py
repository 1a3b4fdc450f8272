"""
Middleware modules for authentication
"""

from talentmatch.middleware.auth import (
    verify_api_key,
    verify_admin_key,
    api_key_header,
)

__all__ = [
    "verify_api_key",
    "verify_admin_key",
    "api_key_header",
]
