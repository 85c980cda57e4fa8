# src/screener_api/infrastructure/external_apis/alphavantage/settings.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Pydantic settings for the Alpha Vantage transport client."""

from __future__ import annotations

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class AlphaVantageSettings(BaseSettings):
    """Configuration for the Alpha Vantage client.

    Environment variables (with ``model_config.env_prefix``):

    * ``ALPHA_VANTAGE_KEY`` (or ``ALPHA_VANTAGE_API_KEY``)
    * ``ALPHA_VANTAGE_BASE_URL``
    * ``ALPHA_VANTAGE_TIMEOUT_S``
    * ``ALPHA_VANTAGE_MAX_RETRIES``
    * ``ALPHA_VANTAGE_LISTING_SUFFIX`` (``.BSE`` selects the Bombay listing)
    """

    base_url: str = Field(
        "https://www.alphavantage.co",
        description="Base URL for the Alpha Vantage API.",
    )
    api_key: SecretStr | None = Field(
        None,
        validation_alias=AliasChoices("ALPHA_VANTAGE_KEY", "ALPHA_VANTAGE_API_KEY"),
        description="Alpha Vantage API key.",
    )
    timeout_s: float = Field(
        10.0,
        description="Per-request timeout in seconds for the transport client.",
    )
    max_retries: int = Field(
        1,
        description="Maximum number of retry attempts for retryable failures.",
    )
    listing_suffix: str = Field(
        ".BSE",
        description="Suffix that selects the Indian listing of a ticker.",
    )

    model_config: SettingsConfigDict = SettingsConfigDict(
        env_prefix="ALPHA_VANTAGE_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def configured(self) -> bool:
        """True when an API key is present."""
        return self.api_key is not None and bool(self.api_key.get_secret_value().strip())
