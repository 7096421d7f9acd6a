import logging
import secrets

from fastapi import Header, HTTPException, Request

from app.config import settings

logger = logging.getLogger(__name__)


async def verify_api_key(request: Request, x_api_key: str = Header(default="")) -> None:
    """Require the configured key in ``X-API-Key``; no-op when none is set."""
    if not settings.api_key:
        return
    if not secrets.compare_digest(x_api_key.encode(), settings.api_key.encode()):
        logger.info("Rejected %s %s: bad API key", request.method, request.url.path)
        raise HTTPException(status_code=403, detail="Invalid or missing API key")
