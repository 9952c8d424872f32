"""Shared-secret API key check for the destructive routes."""

from __future__ import annotations

import logging
import secrets
from typing import Optional

from fastapi import Header, Request

from ..errors import Unauthorized

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-API-Key"


def require_api_key(
    request: Request,
    x_api_key: Optional[str] = Header(default=None, alias=API_KEY_HEADER),
) -> None:
    """Reject the request unless ``X-API-Key`` matches the configured token.

    An unset or empty server token rejects every key.
    """

    if x_api_key is None:
        raise Unauthorized(
            "API Key Missing",
            f"API Key is missing. Please provide a valid API key in the {API_KEY_HEADER} header.",
            requiredHeader=API_KEY_HEADER,
        )
    expected = request.app.state.settings.api_token or ""
    if not expected or not secrets.compare_digest(x_api_key.encode(), expected.encode()):
        raise Unauthorized(
            "Invalid API Key",
            "Invalid API Key. Access denied.",
            requiredHeader=API_KEY_HEADER,
        )
    logger.debug("API key accepted for %s %s", request.method, request.url.path)


__all__ = ["API_KEY_HEADER", "require_api_key"]
