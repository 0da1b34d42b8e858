"""Exceptions raised by the relay and mapped to ``{"error": ...}`` responses."""
from __future__ import annotations


class RelayError(Exception):
    """Base error carrying the HTTP status reported to the caller."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class ConfigurationError(RelayError):
    status_code = 400


class UpstreamError(RelayError):
    """Non-success status (or transport failure) from IAM or watsonx.ai."""

    status_code = 502

    def __init__(self, prefix: str, upstream_status: int | None, detail: str = "") -> None:
        self.upstream_status = upstream_status
        status = upstream_status if upstream_status is not None else "unreachable"
        message = f"{prefix}: {status}"
        if detail:
            message = f"{message} {detail}"
        super().__init__(message)


class UnexpectedResponseError(RelayError):
    status_code = 500

    def __init__(self, message: str = "Unexpected response structure from watsonx.ai") -> None:
        super().__init__(message)
