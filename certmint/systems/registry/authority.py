"""
CertMint — Authorization Gate

Tracks the single designated authority identity. Minting is blocked until
it is set, and the mint fee can only be changed once it is set.

The authority is an explicit two-state value:

  Unconfigured  --set_authority(identity)-->  Configured(identity)

There is no transition out of ``Configured``. First writer wins, for the
life of the registry instance.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from certmint.systems.registry.types import Err, ErrorKind, Ok, Result
from certmint.systems.registry.validator import is_valid_fee, is_valid_identity

logger = structlog.get_logger("certmint.registry.authority")


@dataclass(frozen=True, slots=True)
class Unconfigured:
    """No authority has been designated yet."""


@dataclass(frozen=True, slots=True)
class Configured:
    """The authority identity, fixed for the life of the registry."""

    identity: str


AuthorityState = Unconfigured | Configured

UNCONFIGURED = Unconfigured()


def configure(state: AuthorityState, identity: str, null_identity: str) -> Result[Configured]:
    """The only legal transition: Unconfigured -> Configured(identity)."""
    if not is_valid_identity(identity, null_identity):
        return Err(ErrorKind.INVALID_AUTHORITY_IDENTITY)
    if isinstance(state, Configured):
        return Err(ErrorKind.ALREADY_CONFIGURED)
    return Ok(Configured(identity))


class AuthorizationGate:
    """Holds the authority state and the current mint fee."""

    def __init__(self, mint_fee: int, null_identity: str) -> None:
        self._state: AuthorityState = UNCONFIGURED
        self._mint_fee = mint_fee
        self._null_identity = null_identity
        self._logger = logger.bind(component="authorization_gate")

    @property
    def state(self) -> AuthorityState:
        return self._state

    @property
    def authority(self) -> str | None:
        """The configured authority identity, or None while unconfigured."""
        if isinstance(self._state, Configured):
            return self._state.identity
        return None

    @property
    def mint_fee(self) -> int:
        return self._mint_fee

    def is_configured(self) -> bool:
        return isinstance(self._state, Configured)

    def set_authority(self, identity: str) -> Result[bool]:
        outcome = configure(self._state, identity, self._null_identity)
        if isinstance(outcome, Err):
            self._logger.warning("authority_rejected", kind=outcome.kind.value)
            return outcome

        self._state = outcome.value
        self._logger.info("authority_configured", authority=identity)
        return Ok(True)

    def set_fee(self, new_fee: int) -> Result[bool]:
        if not self.is_configured():
            self._logger.warning(
                "mint_fee_rejected", kind=ErrorKind.AUTHORITY_NOT_VERIFIED.value,
            )
            return Err(ErrorKind.AUTHORITY_NOT_VERIFIED)
        if not is_valid_fee(new_fee):
            self._logger.warning("mint_fee_rejected", kind=ErrorKind.NEGATIVE_FEE.value)
            return Err(ErrorKind.NEGATIVE_FEE)

        old_fee = self._mint_fee
        self._mint_fee = new_fee
        self._logger.info("mint_fee_updated", old_fee=old_fee, new_fee=new_fee)
        return Ok(True)

    def restore(self, authority: str | None, mint_fee: int) -> None:
        """
        Reload state from a snapshot. Used only by the engine's restore path.

        A stored authority must pass the same identity rule as
        ``set_authority``; a snapshot that breaks it raises ValueError.
        """
        if not is_valid_fee(mint_fee):
            raise ValueError(f"Snapshot mint fee is invalid: {mint_fee!r}")

        state: AuthorityState = UNCONFIGURED
        if authority is not None:
            outcome = configure(UNCONFIGURED, authority, self._null_identity)
            if isinstance(outcome, Err):
                raise ValueError(
                    f"Snapshot authority {authority!r} rejected: {outcome.kind.value}"
                )
            state = outcome.value

        self._state = state
        self._mint_fee = mint_fee
