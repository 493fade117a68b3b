"""
Unit tests for configuration loading and logging setup.
"""

from __future__ import annotations

import logging

import pytest
import structlog
from pydantic import ValidationError

from certmint.config import (
    DEFAULT_NULL_IDENTITY,
    CertMintConfig,
    LoggingConfig,
    RegistryConfig,
    load_config,
)
from certmint.main import create_registry
from certmint.systems.registry import InMemoryFeeLedger, ManualClock, Ok
from certmint.telemetry import setup_logging

_ENV_VARS = (
    "CERTMINT_REGISTRY__MAX_CERTS",
    "CERTMINT_REGISTRY__MINT_FEE",
    "CERTMINT_REGISTRY__NULL_IDENTITY",
    "CERTMINT_LOG_LEVEL",
    "CERTMINT_LOG_FORMAT",
    "CERTMINT_CONFIG_PATH",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


# ─── Tests: Defaults ──────────────────────────────────────────────


def test_defaults_without_file(tmp_path):
    config = load_config(tmp_path / "missing.yaml")
    assert config.registry.max_certs == 10_000
    assert config.registry.mint_fee == 500
    assert config.registry.null_identity == DEFAULT_NULL_IDENTITY
    assert config.logging.level == "INFO"
    assert config.logging.format == "console"


def test_packaged_defaults_load():
    config = load_config()
    assert isinstance(config, CertMintConfig)
    assert config.registry.max_certs == 10_000
    assert config.registry.mint_fee == 500


# ─── Tests: YAML + Env ────────────────────────────────────────────


def test_yaml_values(tmp_path):
    path = tmp_path / "registry.yaml"
    path.write_text("registry:\n  max_certs: 3\n  mint_fee: 0\nlogging:\n  format: json\n")

    config = load_config(path)
    assert config.registry.max_certs == 3
    assert config.registry.mint_fee == 0
    assert config.registry.null_identity == DEFAULT_NULL_IDENTITY
    assert config.logging.format == "json"


def test_empty_yaml_is_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(path).registry.max_certs == 10_000


def test_env_overrides_yaml(tmp_path, monkeypatch):
    path = tmp_path / "registry.yaml"
    path.write_text("registry:\n  max_certs: 3\n  mint_fee: 100\n")
    monkeypatch.setenv("CERTMINT_REGISTRY__MINT_FEE", "250")
    monkeypatch.setenv("CERTMINT_LOG_LEVEL", "DEBUG")

    config = load_config(path)
    assert config.registry.max_certs == 3
    assert config.registry.mint_fee == 250
    assert config.logging.level == "DEBUG"


# ─── Tests: Validation ────────────────────────────────────────────


def test_negative_values_rejected():
    with pytest.raises(ValidationError):
        RegistryConfig(max_certs=-1)
    with pytest.raises(ValidationError):
        RegistryConfig(mint_fee=-5)


def test_null_identity_is_stripped():
    assert RegistryConfig(null_identity="  SPNULL  ").null_identity == "SPNULL"


def test_negative_fee_in_env_rejected(tmp_path, monkeypatch):
    monkeypatch.setenv("CERTMINT_REGISTRY__MINT_FEE", "-1")
    with pytest.raises(ValidationError):
        load_config(tmp_path / "missing.yaml")


# ─── Tests: Logging ───────────────────────────────────────────────


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


def test_setup_logging_installs_single_handler(restore_logging):
    setup_logging(LoggingConfig(level="warning", format="json"), registry_name="main")

    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)
    assert root.level == logging.WARNING
    assert structlog.contextvars.get_contextvars()["registry"] == "main"


def test_setup_logging_unknown_level_falls_back_to_info(restore_logging):
    setup_logging(LoggingConfig(level="chatty"))
    assert logging.getLogger().level == logging.INFO


# ─── Tests: Bootstrap ─────────────────────────────────────────────


def test_create_registry_applies_config(tmp_path, monkeypatch, restore_logging):
    path = tmp_path / "registry.yaml"
    path.write_text("registry:\n  max_certs: 2\n  mint_fee: 40\nlogging:\n  level: ERROR\n")
    monkeypatch.setenv("CERTMINT_CONFIG_PATH", str(path))

    registry = create_registry(registry_name="main")

    assert registry.max_certs == 2
    assert registry.mint_fee == 40
    assert logging.getLogger().level == logging.ERROR
    assert structlog.contextvars.get_contextvars()["registry"] == "main"


def test_create_registry_uses_given_collaborators(restore_logging):
    clock = ManualClock(7)
    ledger = InMemoryFeeLedger()
    registry = create_registry(CertMintConfig(), clock=clock, fees=ledger)

    assert registry.set_authority("ST2TEST") == Ok(True)
    assert registry.get_cert_count() == 1
    assert registry.max_certs == 10_000
