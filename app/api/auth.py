"""
Admin authentication dependencies.
"""
import secrets

from fastapi import HTTPException, Security
from fastapi.security import APIKeyHeader

from app.core.config import settings

API_KEY_HEADER = "X-Admin-API-Key"

api_key_header = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


def get_admin_auth(api_key: str | None = Security(api_key_header)) -> bool:
    """
    Verify admin API key from header.

    Without ADMIN_API_KEY configured the admin endpoints are open (dev only);
    in production a missing key is a server misconfiguration.

    Raises:
        HTTPException: 401 missing key, 403 wrong key, 500 production without a key
    """
    if not settings.admin_api_key:
        if settings.app_env == "production":
            raise HTTPException(status_code=500, detail="ADMIN_API_KEY is not configured.")
        return True

    if not api_key:
        raise HTTPException(
            status_code=401,
            detail="Missing API key. Provide X-Admin-API-Key header.",
        )

    if not secrets.compare_digest(api_key, settings.admin_api_key):
        raise HTTPException(status_code=403, detail="Invalid API key.")

    return True
