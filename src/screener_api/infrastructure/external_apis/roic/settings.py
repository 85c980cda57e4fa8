# src/screener_api/infrastructure/external_apis/roic/settings.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Pydantic settings for the ROIC.ai transport client."""

from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class RoicSettings(BaseSettings):
    """Configuration for the ROIC.ai client.

    Environment variables (with ``model_config.env_prefix``):

    * ``ROIC_API_KEY``
    * ``ROIC_BASE_URL``
    * ``ROIC_TIMEOUT_S``
    * ``ROIC_MAX_RETRIES``
    * ``ROIC_LISTING_SUFFIX`` (appended to tickers, ``.NS`` for NSE)
    """

    base_url: str = Field(
        "https://api.roic.ai/v2",
        description="Base URL for the ROIC.ai API.",
    )
    api_key: SecretStr | None = Field(
        None,
        description="ROIC.ai API key.",
    )
    timeout_s: float = Field(
        8.0,
        description="Per-request timeout in seconds for the transport client.",
    )
    max_retries: int = Field(
        1,
        description="Maximum number of retry attempts for retryable failures.",
    )
    listing_suffix: str = Field(
        ".NS",
        description="Suffix that selects the Indian listing of a ticker.",
    )

    model_config: SettingsConfigDict = SettingsConfigDict(
        env_prefix="ROIC_",
        env_file=".env",
        extra="ignore",
    )

    @property
    def configured(self) -> bool:
        """True when an API key is present."""
        return self.api_key is not None and bool(self.api_key.get_secret_value().strip())
