"""Best-effort forwarding of client analytics events to GA4."""
from __future__ import annotations
import logging
from typing import Any

import httpx

from wx_relay.common.config import RelaySettings

LOGGER = logging.getLogger("wxrelay.analytics")

GA4_URL = "https://www.google-analytics.com/mp/collect"

def _timestamp_micros(ts: Any) -> str | None:
    """Client sends epoch millis, GA4 wants micros; anything unparseable is dropped."""
    if not ts or isinstance(ts, bool):
        return None
    try:
        return str(int(float(ts) * 1000))
    except (TypeError, ValueError, OverflowError):
        return None

def build_payload(event: Any, anon_id: Any, props: Any, ts: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "client_id": str(anon_id) if anon_id else "anon",
        "events": [{"name": str(event) if event else "event", "params": props if isinstance(props, dict) else {}}],
    }
    micros = _timestamp_micros(ts)
    if micros is not None:
        payload["timestamp_micros"] = micros
    return payload

def forward_event(
    event: Any,
    anon_id: Any,
    props: Any,
    ts: Any,
    settings: RelaySettings,
) -> bool:
    """
    Forward one event. Never raises.

    Returns:
        True if GA4 accepted the event, False otherwise (including dev mode).
    """
    if not settings.analytics_enabled:
        LOGGER.info("(dev) event %s anon=%s props=%s ts=%s", event, anon_id, props, ts)
        return False

    params = {"measurement_id": settings.ga4_measurement_id, "api_secret": settings.ga4_api_secret}
    try:
        with httpx.Client(timeout=settings.timeout) as client:
            r = client.post(GA4_URL, params=params, json=build_payload(event, anon_id, props, ts))
    except Exception as e:
        LOGGER.warning("Analytics forward failed: %s", e)
        return False

    if r.status_code >= 400:
        LOGGER.warning("GA4 responded with status %s", r.status_code)
        return False
    LOGGER.info("Sent event %r to GA4", event)
    return True
