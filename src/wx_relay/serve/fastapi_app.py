"""FastAPI relay in front of watsonx.ai.

Endpoints:
- GET  /health
- POST /token          { "apiKey"?: "..." }
- POST /generate       { "endpoint", "accessToken", "prompt", "count" }
- POST /generateTable  { "endpoint", "accessToken", "prompt", "rows", "cols" }
- POST /analytics      { "event", "anonId", "props", "ts" }
"""
from __future__ import annotations
import logging
from typing import Any

from fastapi import APIRouter, Body, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from wx_relay.common.config import RelaySettings, load_settings, log_settings_summary
from wx_relay.common.logging_setup import setup_logging
from wx_relay.common.templates import (
    LIST_SYSTEM,
    LIST_TEMPLATE,
    TABLE_SYSTEM,
    TABLE_TEMPLATE,
    chat_messages,
    load_template,
    render_prompt,
)
from wx_relay.errors import RelayError
from wx_relay.normalize.lists import normalize_to_list, resize_list
from wx_relay.normalize.tables import normalize_table
from wx_relay.upstream import analytics, iam, watsonx

LOGGER = logging.getLogger("wxrelay.app")

class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

class TokenIn(_Body):
    api_key: str | None = Field(default=None, alias="apiKey")

class TokenOut(BaseModel):
    access_token: str

class GenerateIn(_Body):
    endpoint: str
    access_token: str = Field(alias="accessToken")
    prompt: str
    count: int = Field(ge=0)

class GenerateOut(BaseModel):
    data: list[str]

class GenerateTableIn(_Body):
    endpoint: str
    access_token: str = Field(alias="accessToken")
    prompt: str
    rows: int = Field(ge=0)
    cols: int = Field(ge=0)

class GenerateTableOut(BaseModel):
    headers: list[str]
    rows: list[list[str]]

router = APIRouter()

def _settings(request: Request) -> RelaySettings:
    return request.app.state.settings

def _template(path: str | None, default: str) -> str:
    return load_template(path) if path else default

@router.get("/health")
def health(request: Request) -> dict[str, str]:
    return {"status": "ok", "model": _settings(request).model_id}

@router.post("/token", response_model=TokenOut)
def token(body: TokenIn, request: Request) -> TokenOut:
    return TokenOut(access_token=iam.exchange_token(body.api_key, _settings(request)))

@router.post("/generate", response_model=GenerateOut)
def generate(body: GenerateIn, request: Request) -> GenerateOut:
    settings = _settings(request)
    template = _template(settings.list_template_path, LIST_TEMPLATE)
    user_prompt = render_prompt(template, count=body.count, prompt=body.prompt)

    envelope = watsonx.chat(
        body.endpoint,
        body.access_token,
        chat_messages(LIST_SYSTEM, user_prompt),
        settings.list_parameters,
        settings,
    )
    text = watsonx.extract_text(envelope, strict=False)
    LOGGER.debug("Extracted list text: %s", text)

    values = normalize_to_list(text)
    if len(values) < body.count:
        LOGGER.debug("Model returned %s of %s values; cycling", len(values), body.count)
    return GenerateOut(data=resize_list(values, body.count))

@router.post("/generateTable", response_model=GenerateTableOut)
def generate_table(body: GenerateTableIn, request: Request) -> GenerateTableOut:
    settings = _settings(request)
    template = _template(settings.table_template_path, TABLE_TEMPLATE)
    user_prompt = render_prompt(template, rows=body.rows, cols=body.cols, prompt=body.prompt)
    LOGGER.debug("Table prompt sent to watsonx:\n%s", user_prompt)

    envelope = watsonx.chat(
        body.endpoint,
        body.access_token,
        chat_messages(TABLE_SYSTEM, user_prompt),
        settings.table_parameters,
        settings,
    )
    text = watsonx.extract_text(envelope, strict=True)
    LOGGER.debug("Extracted table text: %s", text)

    table = normalize_table(text, body.prompt, body.rows, body.cols)
    return GenerateTableOut(headers=table.headers, rows=table.rows)

@router.post("/analytics", status_code=204)
def track(request: Request, body: Any = Body(default=None)) -> Response:
    # any JSON body is acknowledged; field types are coerced in build_payload
    data = body if isinstance(body, dict) else {}
    analytics.forward_event(
        data.get("event"), data.get("anonId"), data.get("props"), data.get("ts"), _settings(request)
    )
    return Response(status_code=204)

def _validate_templates(settings: RelaySettings) -> None:
    """Warn at startup when a configured template file is unreadable or lacks {{prompt}}."""
    for path in (settings.list_template_path, settings.table_template_path):
        if not path:
            continue
        try:
            if "{{prompt}}" not in load_template(path):
                LOGGER.warning("Prompt template %s has no {{prompt}} placeholder", path)
        except OSError as e:
            LOGGER.warning("Failed to read prompt template %s: %s", path, e)

async def _relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    LOGGER.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})

async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception("%s %s crashed", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": str(exc) or exc.__class__.__name__})

def create_app(settings: RelaySettings | None = None) -> FastAPI:
    """
    Build the relay application.

    Args:
        settings: Explicit settings; loaded from config file and env when omitted.
    """
    settings = settings or load_settings()
    setup_logging(settings.log_level)
    log_settings_summary(settings)
    _validate_templates(settings)

    app = FastAPI(title="wx-relay")
    app.state.settings = settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RelayError, _relay_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
    app.include_router(router)
    return app

app = create_app()
