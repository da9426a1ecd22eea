"""Configuration management for Object Store using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageConfig(BaseSettings):
    """Storage backend configuration."""

    model_config = SettingsConfigDict(env_prefix="OBJECT_STORE_STORAGE_")

    data_dir: str = "./data"
    chunk_size: int = Field(default=64 * 1024, gt=0)
    key_codec: Literal["auto", "identity", "escaped"] = "auto"


class ReplicationConfig(BaseSettings):
    """Best-effort mirroring of written files to a secondary location."""

    model_config = SettingsConfigDict(env_prefix="OBJECT_STORE_REPLICATION_")

    enabled: bool = False
    mirror_dir: str = ""


class ObservabilityConfig(BaseSettings):
    """Observability configuration."""

    model_config = SettingsConfigDict(env_prefix="OBJECT_STORE_OBSERVABILITY_")

    log_level: str = "info"
    log_format: Literal["json", "console"] = "json"
    otlp_endpoint: str = ""
    console_tracing: bool = True
    environment: str = "development"


class Config(BaseSettings):
    """Root configuration for Object Store."""

    model_config = SettingsConfigDict(
        env_prefix="OBJECT_STORE_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    storage: StorageConfig = Field(default_factory=StorageConfig)
    replication: ReplicationConfig = Field(default_factory=ReplicationConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache
def get_config() -> Config:
    """Get cached configuration instance."""
    return Config()
