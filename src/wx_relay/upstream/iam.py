"""IAM API-key -> bearer token exchange."""
from __future__ import annotations
import logging

import httpx

from wx_relay.common.config import RelaySettings
from wx_relay.errors import ConfigurationError, UpstreamError

LOGGER = logging.getLogger("wxrelay.upstream.iam")

GRANT_TYPE = "urn:ibm:params:oauth:grant-type:apikey"
FAILURE_PREFIX = "IAM token request failed"

def exchange_token(api_key: str | None, settings: RelaySettings) -> str:
    """
    Exchange an API key for an IAM access token.

    Args:
        api_key: Key supplied by the caller; the server-held key wins when set.
        settings: Relay settings.

    Returns:
        The bearer access token.
    """
    key = settings.watson_api_key or api_key
    if not key:
        raise ConfigurationError("No API key configured or supplied")
    LOGGER.debug("Token exchange using %s key", "server" if settings.watson_api_key else "client")

    try:
        with httpx.Client(timeout=settings.timeout) as client:
            r = client.post(
                settings.iam_url,
                headers={"Accept": "application/json"},
                data={"grant_type": GRANT_TYPE, "apikey": key},
            )
    except Exception as e:
        LOGGER.error("IAM request failed: %s", e)
        raise UpstreamError(FAILURE_PREFIX, None, str(e)) from e

    if r.status_code >= 400:
        raise UpstreamError(FAILURE_PREFIX, r.status_code)
    try:
        body = r.json()
    except ValueError:
        body = None
    token = body.get("access_token") if isinstance(body, dict) else None
    if not token:
        raise UpstreamError(FAILURE_PREFIX, r.status_code, "missing access_token")
    return token
