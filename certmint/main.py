"""
CertMint — Application Bootstrap

Startup sequence for a front end hosting a registry: load configuration,
set up logging, build the engine around the supplied collaborators.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import structlog

from certmint.config import CertMintConfig, load_config
from certmint.systems.registry import CertificateRegistry, InMemoryFeeLedger, ManualClock
from certmint.telemetry.logging import setup_logging

if TYPE_CHECKING:
    from certmint.systems.registry import FeeTransferService, LogicalClock

logger = structlog.get_logger()


def create_registry(
    config: CertMintConfig | None = None,
    clock: LogicalClock | None = None,
    fees: FeeTransferService | None = None,
    registry_name: str = "",
) -> CertificateRegistry:
    """
    Build a ready-to-use registry.

    Without a config, it is loaded from ``CERTMINT_CONFIG_PATH`` (or the
    packaged defaults). Missing collaborators fall back to the in-memory
    reference implementations.
    """
    # ── 1. Load configuration ─────────────────────────────────
    config_path = os.environ.get("CERTMINT_CONFIG_PATH")
    if config is None:
        config = load_config(config_path)

    # ── 2. Set up logging ─────────────────────────────────────
    setup_logging(config.logging, registry_name=registry_name)
    logger.info(
        "certmint_starting",
        max_certs=config.registry.max_certs,
        mint_fee=config.registry.mint_fee,
        config_path=config_path,
    )

    # ── 3. Build the engine ───────────────────────────────────
    return CertificateRegistry.from_config(
        config.registry,
        clock=clock if clock is not None else ManualClock(),
        fees=fees if fees is not None else InMemoryFeeLedger(),
    )
