"""
CertMint — Record Store

Owns the certificate table, the amendment table and the id counter.

Ids are dense and start at 1. ``insert`` stores a record under the current
counter value without moving it; the engine calls ``advance`` as the last
step of the same mint so a half-finished mint never consumes an id.

Certificates are immutable models. ``amend`` swaps in a copy with the new
score and expiry, so a reader holding the previous object never sees a
partially updated record.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from certmint.systems.registry.types import (
    Amendment,
    Certificate,
    Err,
    ErrorKind,
    Ok,
    Result,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = structlog.get_logger("certmint.registry.store")


class RecordStore:
    """Certificate and amendment tables keyed by numeric id."""

    def __init__(self) -> None:
        self._next_id: int = 1
        self._certificates: dict[int, Certificate] = {}
        self._amendments: dict[int, Amendment] = {}
        self._logger = logger.bind(component="record_store")

    # --- Counter --------------------------------------------------------------

    def next_id(self) -> int:
        """The id the next mint will receive. Does not mutate."""
        return self._next_id

    def advance(self) -> None:
        self._next_id += 1

    @property
    def minted(self) -> int:
        """Number of certificates ever minted."""
        return self._next_id - 1

    # --- Records --------------------------------------------------------------

    def insert(self, record: Certificate) -> None:
        if record.id != self._next_id:
            raise ValueError(
                f"Record id {record.id} does not match the next id {self._next_id}"
            )
        if record.id in self._certificates:
            raise ValueError(f"Certificate {record.id} already stored")
        self._certificates[record.id] = record

    def get(self, cert_id: int) -> Certificate | None:
        return self._certificates.get(cert_id)

    def get_amendment(self, cert_id: int) -> Amendment | None:
        return self._amendments.get(cert_id)

    def amend(
        self,
        cert_id: int,
        update_score: int,
        update_expiry: int,
        updater: str,
        timestamp: int,
    ) -> Result[Certificate]:
        """
        Replace score and expiry of an existing certificate.

        Only the original issuer may amend. The amendment log keeps the
        latest entry per id; earlier amendments are overwritten.
        """
        current = self._certificates.get(cert_id)
        if current is None:
            return Err(ErrorKind.NOT_FOUND)
        if current.issuer != updater:
            return Err(ErrorKind.NOT_AUTHORIZED)

        updated = current.model_copy(
            update={"score": update_score, "expiry_date": update_expiry},
        )
        self._certificates[cert_id] = updated
        self._amendments[cert_id] = Amendment(
            update_score=update_score,
            update_expiry=update_expiry,
            update_timestamp=timestamp,
            updater=updater,
        )
        return Ok(updated)

    # --- Iteration / Restore --------------------------------------------------

    def certificates(self) -> Iterator[Certificate]:
        """Stored certificates in id order."""
        for cert_id in sorted(self._certificates):
            yield self._certificates[cert_id]

    def amendments(self) -> dict[int, Amendment]:
        return dict(self._amendments)

    def restore(
        self,
        next_id: int,
        certificates: list[Certificate],
        amendments: dict[int, Amendment],
    ) -> None:
        """Reload tables from a snapshot. Ids must be dense from 1."""
        ids = sorted(cert.id for cert in certificates)
        if ids != list(range(1, next_id)):
            raise ValueError(
                f"Snapshot certificate ids are not dense from 1 to {next_id - 1}"
            )
        unknown = set(amendments) - set(ids)
        if unknown:
            raise ValueError(f"Amendments reference unknown certificates: {sorted(unknown)}")

        self._next_id = next_id
        self._certificates = {cert.id: cert for cert in certificates}
        self._amendments = dict(amendments)
        self._logger.info("record_store_restored", next_id=next_id)

    def __len__(self) -> int:
        return len(self._certificates)
