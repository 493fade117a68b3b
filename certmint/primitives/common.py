"""
CertMint — Common Primitives

Shared base classes and utilities used across the registry.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel
from ulid import ULID


def new_id() -> str:
    """Generate a new ULID string. Time-sortable, globally unique."""
    return str(ULID())


def utc_now() -> datetime:
    """Current UTC time, timezone-aware."""
    return datetime.now(timezone.utc)


# ─── Base Models ──────────────────────────────────────────────────


class CertMintBaseModel(BaseModel):
    """Base model for all CertMint records."""

    model_config = {"populate_by_name": True, "from_attributes": True}
