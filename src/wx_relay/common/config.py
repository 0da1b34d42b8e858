"""Relay configuration using pydantic-settings.

Sources, highest priority first: explicit init kwargs, environment variables,
``.env``, the YAML file named by ``RELAY_CONFIG`` (default configs/relay.yaml).
Secrets (WATSON_API_KEY, GA4_API_SECRET) belong in the environment only.
"""
from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

LOGGER = logging.getLogger("wxrelay.config")

DEFAULT_CONFIG_PATH = "configs/relay.yaml"

DEFAULT_LIST_PARAMETERS: dict[str, Any] = {
    "decoding_method": "sample",
    "temperature": 0.85,
    "top_p": 0.9,
    "top_k": 50,
    "repetition_penalty": 1.1,
    "max_new_tokens": 128,
}

DEFAULT_TABLE_PARAMETERS: dict[str, Any] = {
    "decoding_method": "sample",
    "temperature": 0.8,
    "top_p": 0.9,
    "top_k": 50,
    "repetition_penalty": 1.05,
    "max_new_tokens": 256,
}

def config_path() -> str:
    return os.environ.get("RELAY_CONFIG", DEFAULT_CONFIG_PATH)

class RelaySettings(BaseSettings):
    """Process-wide settings, built once at startup and passed explicitly."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- watsonx.ai ---
    watson_api_key: str = ""
    project_id: str = ""
    model_id: str = "ibm/granite-3-3-8b-instruct"
    iam_url: str = "https://iam.cloud.ibm.com/identity/token"
    api_version: str = Field(
        default="2023-05-29",
        validation_alias=AliasChoices("api_version", "watsonx_api_version"),
    )
    timeout: float = Field(
        default=120.0,
        validation_alias=AliasChoices("timeout", "upstream_timeout"),
    )

    # --- GA4 analytics ---
    ga4_measurement_id: str = ""
    ga4_api_secret: str = ""

    # --- HTTP surface ---
    # comma-separated, read through cors_origins_list
    cors_origins: str = "*"
    log_level: str = "INFO"

    # --- prompts ---
    list_template_path: str | None = None
    table_template_path: str | None = None
    list_parameters: dict[str, Any] = Field(default_factory=lambda: dict(DEFAULT_LIST_PARAMETERS))
    table_parameters: dict[str, Any] = Field(default_factory=lambda: dict(DEFAULT_TABLE_PARAMETERS))

    @field_validator("list_parameters", mode="before")
    @classmethod
    def _merge_list_defaults(cls, v: dict[str, Any] | None) -> dict[str, Any]:
        return {**DEFAULT_LIST_PARAMETERS, **(v or {})}

    @field_validator("table_parameters", mode="before")
    @classmethod
    def _merge_table_defaults(cls, v: dict[str, Any] | None) -> dict[str, Any]:
        return {**DEFAULT_TABLE_PARAMETERS, **(v or {})}

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        yaml_settings = YamlConfigSettingsSource(settings_cls, yaml_file=config_path())
        return init_settings, env_settings, dotenv_settings, yaml_settings, file_secret_settings

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def analytics_enabled(self) -> bool:
        return bool(self.ga4_measurement_id and self.ga4_api_secret)


def load_settings() -> RelaySettings:
    """
    Build settings from the environment and the YAML config file.

    A missing default config file is not an error; a missing file named
    explicitly through ``RELAY_CONFIG`` is.
    """
    path = config_path()
    if "RELAY_CONFIG" in os.environ and not Path(path).exists():
        raise FileNotFoundError(f"Relay config not found at {path}")
    return RelaySettings()

def log_settings_summary(settings: RelaySettings) -> None:
    """Log which credentials are present without revealing them."""
    LOGGER.info("WATSON_API_KEY configured: %s", bool(settings.watson_api_key))
    LOGGER.info("PROJECT_ID configured: %s", bool(settings.project_id))
    LOGGER.info("Model: %s", settings.model_id)
    LOGGER.info(
        "GA4 analytics: %s",
        "configured" if settings.analytics_enabled else "not configured (dev mode)",
    )
