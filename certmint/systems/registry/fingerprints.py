"""
CertMint — Fingerprint Index

Maps a 32-byte content fingerprint to the id of the certificate that
claimed it. Keys are the raw bytes; a claim is permanent.
"""

from __future__ import annotations

import structlog

logger = structlog.get_logger("certmint.registry.fingerprints")


class FingerprintIndex:
    """Global uniqueness index over certificate fingerprints."""

    def __init__(self) -> None:
        self._claims: dict[bytes, int] = {}
        self._logger = logger.bind(component="fingerprint_index")

    def contains(self, fingerprint: bytes) -> bool:
        return bytes(fingerprint) in self._claims

    def lookup(self, fingerprint: bytes) -> int | None:
        """Certificate id that claimed ``fingerprint``, if any."""
        return self._claims.get(bytes(fingerprint))

    def register(self, fingerprint: bytes, cert_id: int) -> None:
        """
        Claim ``fingerprint`` for ``cert_id``.

        The engine checks ``contains`` first; a second claim here means the
        caller skipped that check and is rejected outright.
        """
        key = bytes(fingerprint)
        if key in self._claims:
            raise ValueError(
                f"Fingerprint {key.hex()[:16]}... already claimed by "
                f"certificate {self._claims[key]}"
            )
        self._claims[key] = cert_id
        self._logger.debug("fingerprint_registered", cert_id=cert_id)

    def __len__(self) -> int:
        return len(self._claims)

    def __contains__(self, fingerprint: object) -> bool:
        return isinstance(fingerprint, (bytes, bytearray)) and bytes(fingerprint) in self._claims
