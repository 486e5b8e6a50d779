# -*- coding:utf-8 -*-
# ZipCheck - ZIP entry listing engine

"""
ZipCheck Daemon Authentication Module

API key authentication for the REST endpoints (X-API-Key header).
"""

import hmac
import logging
from typing import Optional

from fastapi import Header, HTTPException, status

from .config import get_config

logger = logging.getLogger(__name__)


def verify_api_key(provided_key: Optional[str]) -> bool:
    """Verify an API key against the configured key.

    Uses constant-time comparison to prevent timing attacks.

    Args:
        provided_key: The API key to verify

    Returns:
        True if valid, False otherwise
    """
    config = get_config()

    if not config.require_auth:
        return True

    if not config.api_key:
        logger.warning("Authentication required but no API key configured")
        return False

    if not provided_key:
        return False

    return hmac.compare_digest(config.api_key.encode("utf-8"), provided_key.encode("utf-8"))


async def require_api_key(
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
) -> Optional[str]:
    """FastAPI dependency to verify API key from header.

    Raises:
        HTTPException: If authentication fails
    """
    if not get_config().require_auth:
        return None

    if not verify_api_key(x_api_key):
        logger.warning("API authentication failed")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    return x_api_key
