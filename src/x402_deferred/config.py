"""Application configuration via pydantic-settings.

Reads from a .env file or environment variables. The deferred-scheme block
is turned into an immutable DeferredSchemeConfig once, when the verifier is
built; nothing reads these values again per request.

Usage:
    from x402_deferred.config import get_settings
    settings = get_settings()
    print(settings.deferred_network)
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from x402_deferred.domain.voucher import (
    DEFAULT_DOMAIN_NAME,
    DEFAULT_DOMAIN_VERSION,
    DeferredSchemeConfig,
)


class Settings(BaseSettings):
    """Central configuration for the deferred-scheme facilitator."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Application ---
    app_env: Literal["development", "staging", "production"] = "development"
    app_debug: bool = True
    app_log_level: str = "DEBUG"
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    cors_allow_origins: list[str] = ["*"]

    # --- Deferred escrow ---
    deferred_network: str = "base-sepolia"
    deferred_escrow_address: str = "0x0000000000000000000000000000000000000000"
    deferred_rpc_url: str | None = None  # overrides the registry default
    deferred_domain_name: str = DEFAULT_DOMAIN_NAME
    deferred_domain_version: str = DEFAULT_DOMAIN_VERSION

    # --- Ledger reads ---
    ledger_request_timeout_seconds: int = 10
    ledger_read_attempts: int = 2

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def deferred_config(self) -> DeferredSchemeConfig:
        """Build the immutable verifier configuration record."""
        return DeferredSchemeConfig(
            network=self.deferred_network,
            escrow_address=self.deferred_escrow_address,
            rpc_url=self.deferred_rpc_url or None,
            domain_name=self.deferred_domain_name,
            domain_version=self.deferred_domain_version,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton of the application settings."""
    return Settings()
