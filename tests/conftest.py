from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest


class FakeResponse:
    def __init__(self, json_data: Any = None, status_code: int = 200, text: str = "") -> None:
        self._json = json_data
        self.status_code = status_code
        self.text = text

    def json(self) -> Any:
        if self._json is None:
            raise ValueError("no JSON body")
        return self._json


class FakeHttp:
    """Stands in for httpx.Client and records every POST."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.responder: Callable[[str, dict[str, Any]], FakeResponse] = lambda url, kw: FakeResponse({})

    def respond_with(self, json_data: Any = None, status_code: int = 200, text: str = "") -> None:
        self.responder = lambda url, kw: FakeResponse(json_data, status_code, text)

    def fail_with(self, exc: Exception) -> None:
        def _raise(url: str, kw: dict[str, Any]) -> FakeResponse:
            raise exc
        self.responder = _raise

    def client(self, timeout: float | int | None = None, **_: Any) -> "_FakeClient":
        return _FakeClient(self)


class _FakeClient:
    def __init__(self, http: FakeHttp) -> None:
        self._http = http

    def __enter__(self) -> "_FakeClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        return None

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        self._http.calls.append({"url": url, **kwargs})
        return self._http.responder(url, kwargs)


RELAY_ENV_VARS = (
    "RELAY_CONFIG", "WATSON_API_KEY", "PROJECT_ID", "MODEL_ID", "IAM_URL", "API_VERSION",
    "WATSONX_API_VERSION", "TIMEOUT", "UPSTREAM_TIMEOUT", "GA4_MEASUREMENT_ID", "GA4_API_SECRET",
    "CORS_ORIGINS", "LOG_LEVEL", "LIST_TEMPLATE_PATH", "TABLE_TEMPLATE_PATH",
    "LIST_PARAMETERS", "TABLE_PARAMETERS",
)


@pytest.fixture(autouse=True)
def _clean_relay_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in RELAY_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def fake_http(monkeypatch: pytest.MonkeyPatch) -> FakeHttp:
    http = FakeHttp()
    monkeypatch.setattr(httpx, "Client", http.client)
    return http


def chat_envelope(content: str) -> dict[str, Any]:
    return {"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}
