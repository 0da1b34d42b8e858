"""watsonx.ai chat endpoint wrapper and response-envelope extraction."""
from __future__ import annotations
import logging
import time
from typing import Any

import httpx

from wx_relay.common.config import RelaySettings
from wx_relay.errors import UnexpectedResponseError, UpstreamError

LOGGER = logging.getLogger("wxrelay.upstream.watsonx")

CHAT_PATH = "/ml/v1/text/chat"
FAILURE_PREFIX = "watsonx error"

def chat_url(endpoint: str, settings: RelaySettings) -> str:
    return f"{endpoint.rstrip('/')}{CHAT_PATH}?version={settings.api_version}"

def chat(
    endpoint: str,
    access_token: str,
    messages: list[dict[str, str]],
    parameters: dict[str, Any],
    settings: RelaySettings,
) -> dict[str, Any]:
    """
    Send a chat request and return the decoded response envelope.

    Raises:
        UpstreamError: on transport failure or a non-success status.
    """
    payload = {
        "messages": messages,
        "parameters": parameters,
        "model_id": settings.model_id,
        "project_id": settings.project_id,
    }
    headers = {"Authorization": f"Bearer {access_token}"}

    start = time.time()
    try:
        with httpx.Client(timeout=settings.timeout) as client:
            r = client.post(chat_url(endpoint, settings), headers=headers, json=payload)
    except Exception as e:
        LOGGER.error("watsonx request failed: %s", e)
        raise UpstreamError(FAILURE_PREFIX, None, str(e)) from e

    if r.status_code >= 400:
        raise UpstreamError(FAILURE_PREFIX, r.status_code, r.text)
    LOGGER.debug("watsonx responded in %sms", int((time.time() - start) * 1000))
    try:
        return r.json()
    except ValueError as e:
        raise UnexpectedResponseError("watsonx returned a non-JSON body") from e

def _first(items: Any) -> Any:
    if isinstance(items, list) and items:
        return items[0]
    return None

def extract_text(envelope: Any, strict: bool = False) -> str:
    """
    Pull the generated text out of a chat, legacy or generic envelope.

    Args:
        envelope: Decoded response body.
        strict: Raise instead of returning "" when no known shape matches.
    """
    if isinstance(envelope, dict):
        choice = _first(envelope.get("choices"))
        if isinstance(choice, dict) and isinstance(choice.get("message"), dict):
            return str(choice["message"].get("content") or "")

        result = _first(envelope.get("results"))
        if isinstance(result, dict) and result.get("generated_text"):
            return str(result["generated_text"])

        if envelope.get("output") is not None:
            return str(envelope["output"])

    if strict:
        raise UnexpectedResponseError()
    return ""
