"""
CertMint — Configuration System

All configuration is Pydantic-validated and loaded from:
1. default.yaml (defaults)
2. Environment variables (overrides)

Every tunable parameter of the registry lives here.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "default.yaml"

# The burn address: never a valid recipient or authority.
DEFAULT_NULL_IDENTITY = "SP000000000000000000002Q6VF78"

# ─── Sub-configs ──────────────────────────────────────────────────


class RegistryConfig(BaseModel):
    max_certs: int = 10_000
    mint_fee: int = 500
    null_identity: str = DEFAULT_NULL_IDENTITY

    @field_validator("max_certs")
    @classmethod
    def _non_negative_capacity(cls, value: int) -> int:
        if value < 0:
            raise ValueError("max_certs must be non-negative")
        return value

    @field_validator("mint_fee")
    @classmethod
    def _non_negative_fee(cls, value: int) -> int:
        if value < 0:
            raise ValueError("mint_fee must be non-negative")
        return value

    @field_validator("null_identity")
    @classmethod
    def _strip_identity(cls, value: str) -> str:
        return value.strip()


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "console"  # "console" | "json"


# ─── Root Configuration ──────────────────────────────────────────


class CertMintConfig(BaseSettings):
    """
    Root configuration. Loads from YAML, overridable by env vars.
    """

    model_config = SettingsConfigDict(
        env_prefix="CERTMINT_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(config_path: str | Path | None = None) -> CertMintConfig:
    """
    Load configuration from YAML file, then apply environment variable overrides.

    With no path, the packaged ``config/default.yaml`` is used when present.
    """
    raw: dict[str, Any] = {}

    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    if path.exists():
        with open(path) as f:
            raw = yaml.safe_load(f) or {}

    overrides: dict[str, Any] = {}
    if max_certs := os.environ.get("CERTMINT_REGISTRY__MAX_CERTS"):
        overrides.setdefault("registry", {})["max_certs"] = int(max_certs)
    if mint_fee := os.environ.get("CERTMINT_REGISTRY__MINT_FEE"):
        overrides.setdefault("registry", {})["mint_fee"] = int(mint_fee)
    if null_identity := os.environ.get("CERTMINT_REGISTRY__NULL_IDENTITY"):
        overrides.setdefault("registry", {})["null_identity"] = null_identity
    if log_level := os.environ.get("CERTMINT_LOG_LEVEL"):
        overrides.setdefault("logging", {})["level"] = log_level
    if log_format := os.environ.get("CERTMINT_LOG_FORMAT"):
        overrides.setdefault("logging", {})["format"] = log_format

    return CertMintConfig(**_deep_merge(raw, overrides))
