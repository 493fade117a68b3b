"""
CertMint — Shared primitives.
"""

from certmint.primitives.common import CertMintBaseModel, new_id, utc_now

__all__ = ["CertMintBaseModel", "new_id", "utc_now"]
