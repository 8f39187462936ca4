"""
Central configuration for quorumvault.

A single typed configuration object read from environment variables
(12-factor style) using pydantic-settings.

Usage:

    from quorumvault.core.settings import get_settings

    settings = get_settings()
    journal = EventJournal.from_settings(settings, wallet_id)
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from quorumvault.protocol.models import MAX_OWNER_COUNT


class WalletSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="QUORUMVAULT_")

    max_owners: int = Field(
        default=MAX_OWNER_COUNT,
        ge=1,
        description="Upper bound on the owner set size accepted at construction.",
    )


class JournalSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="QUORUMVAULT_JOURNAL_")

    path: Optional[str] = Field(
        default=None,
        description="JSONL file mirroring the event journal; in-memory only when unset.",
    )
    sync: bool = Field(
        default=True,
        description="fsync every journal append (disable only for testing).",
    )
    signing_key: Optional[str] = Field(
        default=None,
        description="PEM file holding the Ed25519 journal signing key.",
    )
    require_signing: bool = Field(
        default=False,
        description="Refuse to start a journal without a signing key.",
    )

    @model_validator(mode="after")
    def _require_key_when_signing(self) -> JournalSettings:
        if self.require_signing and not self.signing_key:
            raise ValueError(
                "QUORUMVAULT_JOURNAL_SIGNING_KEY is required when journal signing is required"
            )
        return self


class RuntimeSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="QUORUMVAULT_")

    log_level: str = Field(
        default="INFO",
        description="Root log level (DEBUG/INFO/WARNING/ERROR).",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, v: str) -> str:
        v = (v or "INFO").upper()
        if v == "WARN":
            return "WARNING"
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            return "INFO"
        return v


class QuorumSettings(BaseSettings):
    """
    Root configuration object.

    Aggregates:
      - Wallet
      - Journal
      - Runtime
    """

    model_config = SettingsConfigDict(env_prefix="QUORUMVAULT_")

    wallet: WalletSettings = Field(default_factory=WalletSettings)
    journal: JournalSettings = Field(default_factory=JournalSettings)
    runtime: RuntimeSettings = Field(default_factory=RuntimeSettings)


@lru_cache(maxsize=1)
def get_settings() -> QuorumSettings:
    return QuorumSettings()
