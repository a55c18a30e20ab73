import secrets

from fastapi import Header, HTTPException
from .config import settings


def require_api_key(x_api_key: str | None = Header(default=None, alias="X-API-Key")):
    # No key configured -> open (local use)
    if not settings.api_key:
        return
    if x_api_key is None or not secrets.compare_digest(x_api_key, settings.api_key):
        raise HTTPException(status_code=401, detail="Invalid API key")
