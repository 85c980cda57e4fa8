# src/screener_api/infrastructure/external_apis/insightsentry/settings.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Pydantic settings for the InsightSentry (RapidAPI) transport client."""

from __future__ import annotations

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class InsightSentrySettings(BaseSettings):
    """Configuration for the InsightSentry client.

    Environment variables (with ``model_config.env_prefix``):

    * ``INSIGHTSENTRY_BASE_URL``
    * ``INSIGHTSENTRY_HOST``
    * ``INSIGHTSENTRY_TIMEOUT_S``
    * ``INSIGHTSENTRY_MAX_RETRIES``

    The key is shared with other RapidAPI products and read from
    ``RAPIDAPI_KEY``.
    """

    base_url: str = Field(
        "https://insightsentry.p.rapidapi.com",
        description="Base URL for the InsightSentry API.",
    )
    host: str = Field(
        "insightsentry.p.rapidapi.com",
        description="Value of the X-RapidAPI-Host header.",
    )
    api_key: SecretStr | None = Field(
        None,
        description="RapidAPI key.",
        validation_alias=AliasChoices("RAPIDAPI_KEY", "INSIGHTSENTRY_API_KEY"),
    )
    timeout_s: float = Field(
        8.0,
        description="Per-request timeout in seconds for the transport client.",
    )
    max_retries: int = Field(
        2,
        description="Maximum number of retry attempts for retryable failures.",
    )

    model_config: SettingsConfigDict = SettingsConfigDict(
        env_prefix="INSIGHTSENTRY_",
        env_file=".env",
        extra="ignore",
    )

    @property
    def configured(self) -> bool:
        """True when an API key is present."""
        return self.api_key is not None and bool(self.api_key.get_secret_value().strip())
