"""
CertMint — Registry Engine

The CertificateRegistry is the single owner of registry state. It:
  1. Validates mint requests field by field, in a fixed order.
  2. Enforces global uniqueness of certificate fingerprints.
  3. Blocks minting until an authority identity is configured.
  4. Enforces the certificate capacity.
  5. Charges the mint fee through the external FeeTransferService.
  6. Creates certificates and applies issuer-only amendments.

Mint pipeline (strict order, first failure wins):
  capacity -> field rules 1-14 -> fingerprint uniqueness -> authority
  -> fee transfer -> insert + register fingerprint + advance counter

Update pipeline:
  lookup -> caller is issuer -> score rule -> expiry rule -> amend

Every mutating operation returns ``Ok`` or ``Err`` and is all-or-nothing:
no check can fail after the first write, and the fee transfer is the only
step that can fail after the checks, before any registry write.

Thread-safety: mutating operations are serialised by a single write lock.
Reads take no lock; stored certificates are immutable and replaced whole.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any

import structlog

from certmint.config import DEFAULT_NULL_IDENTITY
from certmint.systems.registry.authority import AuthorizationGate
from certmint.systems.registry.fingerprints import FingerprintIndex
from certmint.systems.registry.ledger import InsufficientFundsError
from certmint.systems.registry.store import RecordStore
from certmint.systems.registry.types import (
    Amendment,
    Certificate,
    Err,
    ErrorKind,
    MintRequest,
    Ok,
    RegistrySnapshot,
    Result,
)
from certmint.systems.registry.validator import validate_amendment, validate_mint_request

if TYPE_CHECKING:
    from certmint.config import RegistryConfig
    from certmint.systems.registry.clock import LogicalClock
    from certmint.systems.registry.ledger import FeeTransferService

logger = structlog.get_logger("certmint.registry.engine")


class CertificateRegistry:
    """
    Certificate issuance and lifecycle registry.

    Construct one per registry instance; there is no module-level state.
    The clock and fee service are external collaborators supplied by the
    front end.
    """

    def __init__(
        self,
        clock: LogicalClock,
        fees: FeeTransferService,
        max_certs: int = 10_000,
        mint_fee: int = 500,
        null_identity: str = DEFAULT_NULL_IDENTITY,
    ) -> None:
        self._clock = clock
        self._fees = fees
        self._max_certs = max_certs
        self._null_identity = null_identity

        self._store = RecordStore()
        self._index = FingerprintIndex()
        self._gate = AuthorizationGate(mint_fee=mint_fee, null_identity=null_identity)

        self._write_lock = threading.RLock()
        self._logger = logger.bind(component="certificate_registry")

    @classmethod
    def from_config(
        cls,
        config: RegistryConfig,
        clock: LogicalClock,
        fees: FeeTransferService,
    ) -> CertificateRegistry:
        return cls(
            clock=clock,
            fees=fees,
            max_certs=config.max_certs,
            mint_fee=config.mint_fee,
            null_identity=config.null_identity,
        )

    # --- Properties -----------------------------------------------------------

    @property
    def authority(self) -> str | None:
        return self._gate.authority

    @property
    def mint_fee(self) -> int:
        return self._gate.mint_fee

    @property
    def max_certs(self) -> int:
        return self._max_certs

    @property
    def stats(self) -> dict[str, Any]:
        return {
            "next_id": self._store.next_id(),
            "minted": self._store.minted,
            "max_certs": self._max_certs,
            "mint_fee": self._gate.mint_fee,
            "authority_configured": self._gate.is_configured(),
            "amendments": len(self._store.amendments()),
        }

    # --- Administration -------------------------------------------------------

    def set_authority(self, identity: str) -> Result[bool]:
        """Designate the authority. Succeeds exactly once per registry."""
        with self._write_lock:
            return self._gate.set_authority(identity)

    def set_fee(self, new_fee: int) -> Result[bool]:
        """Replace the mint fee. Requires a configured authority."""
        with self._write_lock:
            return self._gate.set_fee(new_fee)

    # --- Mint -----------------------------------------------------------------

    def mint(
        self,
        caller: str,
        *,
        recipient: str,
        test_type: str,
        score: int,
        fingerprint: bytes,
        expiry_date: int,
        level: str,
        issuer_name: str,
        recipient_name: str,
        location: str,
        currency: str,
        min_score: int,
        max_score: int,
        language: str,
        category: str,
    ) -> Result[int]:
        """Mint a certificate issued by ``caller``. Returns the new id."""
        request = MintRequest(
            recipient=recipient,
            test_type=test_type,
            score=score,
            fingerprint=fingerprint,
            expiry_date=expiry_date,
            level=level,
            issuer_name=issuer_name,
            recipient_name=recipient_name,
            location=location,
            currency=currency,
            min_score=min_score,
            max_score=max_score,
            language=language,
            category=category,
        )
        return self.submit(caller, request)

    def submit(self, caller: str, request: MintRequest) -> Result[int]:
        """Mint from a prepared request."""
        if not isinstance(caller, str):
            return self._reject_mint(caller, ErrorKind.NOT_AUTHORIZED)

        with self._write_lock:
            height = self._clock.current_height()
            return self._mint(caller, request, height)

    def _mint(self, caller: str, request: MintRequest, height: int) -> Result[int]:
        """
        Run the mint pipeline. Caller holds the write lock.

        Capacity counts minted certificates, not the next id (which starts at
        1): a registry with ``max_certs=N`` accepts exactly N mints, so a
        capacity-1 registry accepts its first mint.
        """
        if self._store.minted >= self._max_certs:
            return self._reject_mint(caller, ErrorKind.CAPACITY_EXCEEDED)

        kind = validate_mint_request(request, height, self._null_identity)
        if kind is not None:
            return self._reject_mint(caller, kind)

        if self._index.contains(request.fingerprint):
            return self._reject_mint(caller, ErrorKind.ALREADY_EXISTS)

        authority = self._gate.authority
        if authority is None:
            return self._reject_mint(caller, ErrorKind.AUTHORITY_NOT_VERIFIED)

        cert_id = self._store.next_id()
        certificate = Certificate(
            id=cert_id,
            issuer=caller,
            recipient=request.recipient,
            test_type=request.test_type,
            score=request.score,
            min_score=request.min_score,
            max_score=request.max_score,
            level=request.level,
            fingerprint=bytes(request.fingerprint),
            issue_date=height,
            expiry_date=request.expiry_date,
            issuer_name=request.issuer_name,
            recipient_name=request.recipient_name,
            location=request.location,
            currency=request.currency,
            language=request.language,
            category=request.category,
            status=True,
        )

        fee = self._gate.mint_fee
        try:
            receipt = self._fees.transfer(fee, caller, authority)
        except InsufficientFundsError:
            return self._reject_mint(caller, ErrorKind.INSUFFICIENT_FUNDS)

        self._store.insert(certificate)
        self._index.register(certificate.fingerprint, cert_id)
        self._store.advance()

        self._logger.info(
            "certificate_minted",
            cert_id=cert_id,
            issuer=caller,
            recipient=request.recipient,
            height=height,
            fee=fee,
            receipt_id=receipt.receipt_id,
        )
        return Ok(cert_id)

    def _reject_mint(self, caller: str, kind: ErrorKind) -> Err:
        self._logger.warning("mint_rejected", caller=caller, kind=kind.value, code=kind.code)
        return Err(kind)

    # --- Update ---------------------------------------------------------------

    def update(
        self,
        caller: str,
        cert_id: int,
        score: int,
        expiry_date: int,
    ) -> Result[bool]:
        """Amend score and expiry. Only the original issuer may do this. No fee."""
        with self._write_lock:
            height = self._clock.current_height()

            current = self._store.get(cert_id)
            if current is None:
                return self._reject_update(caller, cert_id, ErrorKind.NOT_FOUND)
            if current.issuer != caller:
                return self._reject_update(caller, cert_id, ErrorKind.NOT_AUTHORIZED)

            kind = validate_amendment(score, expiry_date, height)
            if kind is not None:
                return self._reject_update(caller, cert_id, kind)

            outcome = self._store.amend(
                cert_id,
                update_score=score,
                update_expiry=expiry_date,
                updater=caller,
                timestamp=height,
            )
            if isinstance(outcome, Err):
                return self._reject_update(caller, cert_id, outcome.kind)

        self._logger.info(
            "certificate_amended",
            cert_id=cert_id,
            updater=caller,
            score=score,
            expiry_date=expiry_date,
            height=height,
        )
        return Ok(True)

    def _reject_update(self, caller: str, cert_id: int, kind: ErrorKind) -> Err:
        self._logger.warning(
            "update_rejected", caller=caller, cert_id=cert_id, kind=kind.value, code=kind.code,
        )
        return Err(kind)

    # --- Reads ----------------------------------------------------------------

    def get_certificate(self, cert_id: int) -> Certificate | None:
        return self._store.get(cert_id)

    def get_amendment(self, cert_id: int) -> Amendment | None:
        """The latest amendment applied to ``cert_id``, if any."""
        return self._store.get_amendment(cert_id)

    def get_cert_count(self) -> int:
        """
        The next id to be assigned, i.e. one more than the number minted.

        Kept as next-id (not a literal count) for compatibility with existing
        clients of the registry.
        """
        return self._store.next_id()

    def check_existence(self, fingerprint: bytes) -> bool:
        return fingerprint in self._index

    # --- Snapshot -------------------------------------------------------------

    def export_state(self) -> RegistrySnapshot:
        """Logical copy of all tables and scalars, taken under the write lock."""
        with self._write_lock:
            return RegistrySnapshot(
                next_id=self._store.next_id(),
                max_certs=self._max_certs,
                mint_fee=self._gate.mint_fee,
                authority=self._gate.authority,
                certificates=list(self._store.certificates()),
                amendments=self._store.amendments(),
            )

    @classmethod
    def from_snapshot(
        cls,
        snapshot: RegistrySnapshot,
        clock: LogicalClock,
        fees: FeeTransferService,
        null_identity: str = DEFAULT_NULL_IDENTITY,
    ) -> CertificateRegistry:
        """Rebuild a registry, including its fingerprint index, from a snapshot."""
        registry = cls(
            clock=clock,
            fees=fees,
            max_certs=snapshot.max_certs,
            mint_fee=snapshot.mint_fee,
            null_identity=null_identity,
        )
        registry._store.restore(snapshot.next_id, snapshot.certificates, snapshot.amendments)
        for certificate in registry._store.certificates():
            registry._index.register(certificate.fingerprint, certificate.id)
        registry._gate.restore(snapshot.authority, snapshot.mint_fee)

        registry._logger.info(
            "registry_restored",
            next_id=snapshot.next_id,
            authority_configured=snapshot.authority is not None,
        )
        return registry
