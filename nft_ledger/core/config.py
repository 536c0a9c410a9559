"""Application configuration using Pydantic settings."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """Service configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="NFTL_",
        extra="ignore",
    )

    environment: Literal["local", "test", "staging", "production"] = Field(default="local")
    service_name: str = Field(default="nft-ledger")
    database_url: str = Field(default="sqlite:///./data/nft_ledger.db")
    sql_echo: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=True)
    cors_origins: List[str] | str = Field(default_factory=list)

    # Ledger bootstrap
    admin_principal: str = Field(default="deployer")
    marketplace_principal: str = Field(default="deployer.marketplace")
    default_collection: str = Field(default="deployer.nft-token")
    default_platform_fee_bps: int = Field(default=250, ge=0, le=9000)
    platform_fee_recipient: str | None = Field(default=None)

    # Events engine
    event_topic_arn: str | None = Field(default=None)
    event_source: str = Field(default="nft_ledger")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("cors_origins")
    @classmethod
    def parse_cors_origins(cls, value: str | List[str] | None) -> List[str]:
        if value is None or value == "":
            return []
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("platform_fee_recipient", "event_topic_arn", mode="before")
    @classmethod
    def empty_string_to_none(cls, value: str | None) -> str | None:
        if value == "":
            return None
        return value

    @property
    def fee_recipient(self) -> str:
        return self.platform_fee_recipient or self.admin_principal


@lru_cache
def get_settings() -> LedgerSettings:
    """Return cached application settings instance."""

    return LedgerSettings()
