"""
CertMint — Registry Types

Records, enums and the operation outcome type shared by every registry
component.

Outcome model:
  Every mutating registry operation returns ``Ok(value)`` or ``Err(kind)``.
  The two variants never share a field: a success carries a typed value, a
  failure carries exactly one ``ErrorKind``. Callers branch on ``.ok`` or use
  structural pattern matching.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar, Generic, TypeVar

from pydantic import ConfigDict, Field, field_serializer, field_validator

from certmint.primitives.common import CertMintBaseModel, new_id, utc_now

T = TypeVar("T")

FINGERPRINT_LENGTH = 32


# ─── Error Kinds ─────────────────────────────────────────────────


class ErrorKind(enum.StrEnum):
    """Every reason a registry operation can be rejected."""

    INVALID_RECIPIENT = "invalid-recipient"
    INVALID_TEST_TYPE = "invalid-test-type"
    INVALID_SCORE = "invalid-score"
    INVALID_FINGERPRINT = "invalid-fingerprint"
    INVALID_EXPIRY = "invalid-expiry"
    INVALID_LEVEL = "invalid-level"
    INVALID_ISSUER_NAME = "invalid-issuer-name"
    INVALID_RECIPIENT_NAME = "invalid-recipient-name"
    INVALID_LOCATION = "invalid-location"
    INVALID_CURRENCY = "invalid-currency"
    INVALID_MIN_SCORE = "invalid-min-score"
    INVALID_MAX_SCORE = "invalid-max-score"
    INVALID_LANGUAGE = "invalid-language"
    INVALID_CATEGORY = "invalid-category"
    CAPACITY_EXCEEDED = "capacity-exceeded"
    AUTHORITY_NOT_VERIFIED = "authority-not-verified"
    NOT_AUTHORIZED = "not-authorized"
    ALREADY_EXISTS = "already-exists"
    NOT_FOUND = "not-found"
    ALREADY_CONFIGURED = "already-configured"
    NEGATIVE_FEE = "negative-fee"
    INVALID_AUTHORITY_IDENTITY = "invalid-authority-identity"
    INSUFFICIENT_FUNDS = "insufficient-funds"

    @property
    def code(self) -> int:
        """Stable numeric code, compatible with the on-chain error constants."""
        return _ERROR_CODES[self]


_ERROR_CODES: dict[ErrorKind, int] = {
    ErrorKind.INVALID_RECIPIENT: 401,
    ErrorKind.INVALID_TEST_TYPE: 402,
    ErrorKind.INVALID_SCORE: 403,
    ErrorKind.INVALID_FINGERPRINT: 404,
    ErrorKind.INVALID_EXPIRY: 405,
    ErrorKind.INVALID_LEVEL: 406,
    ErrorKind.INVALID_ISSUER_NAME: 407,
    ErrorKind.INVALID_RECIPIENT_NAME: 408,
    ErrorKind.INVALID_LOCATION: 409,
    ErrorKind.INVALID_CURRENCY: 410,
    ErrorKind.NOT_FOUND: 411,
    ErrorKind.NOT_AUTHORIZED: 412,
    ErrorKind.INVALID_AUTHORITY_IDENTITY: 413,
    ErrorKind.INVALID_MIN_SCORE: 414,
    ErrorKind.INVALID_MAX_SCORE: 415,
    ErrorKind.NEGATIVE_FEE: 416,
    ErrorKind.CAPACITY_EXCEEDED: 417,
    ErrorKind.AUTHORITY_NOT_VERIFIED: 418,
    ErrorKind.ALREADY_CONFIGURED: 419,
    ErrorKind.ALREADY_EXISTS: 420,
    ErrorKind.INSUFFICIENT_FUNDS: 421,
    ErrorKind.INVALID_LANGUAGE: 422,
    ErrorKind.INVALID_CATEGORY: 423,
}


# ─── Outcome ─────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome carrying the operation's value."""

    value: T
    ok: ClassVar[bool] = True


@dataclass(frozen=True, slots=True)
class Err:
    """Failed outcome carrying the first violated rule."""

    kind: ErrorKind
    ok: ClassVar[bool] = False

    @property
    def code(self) -> int:
        return self.kind.code


Result = Ok[T] | Err


# ─── Enumerated Fields ───────────────────────────────────────────


class ProficiencyLevel(enum.StrEnum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Currency(enum.StrEnum):
    STX = "STX"
    USD = "USD"
    BTC = "BTC"


# ─── Requests ────────────────────────────────────────────────────


@dataclass(frozen=True)
class MintRequest:
    """
    The caller-supplied fields of a mint, exactly as received.

    Deliberately unvalidated: the Field Validator inspects each value in a
    fixed order so the first violation is reported with its own error kind.
    """

    recipient: str
    test_type: str
    score: int
    fingerprint: bytes
    expiry_date: int
    level: str
    issuer_name: str
    recipient_name: str
    location: str
    currency: str
    min_score: int
    max_score: int
    language: str
    category: str


# ─── Records ─────────────────────────────────────────────────────


class Certificate(CertMintBaseModel):
    """
    An issued credential record.

    Immutable once stored. An amendment replaces the stored model with a
    copy carrying the new score and expiry; every other field is fixed at
    mint time.
    """

    model_config = ConfigDict(frozen=True)

    # -- Identity --
    id: int

    # -- Parties --
    issuer: str
    recipient: str

    # -- Assessment --
    test_type: str
    score: int
    min_score: int
    max_score: int
    level: ProficiencyLevel

    # -- Provenance --
    fingerprint: bytes
    issue_date: int                           # Logical height at mint
    expiry_date: int

    # -- Descriptive metadata --
    issuer_name: str
    recipient_name: str
    location: str
    currency: Currency
    language: str
    category: str

    # -- Status --
    status: bool = True

    @field_validator("fingerprint", mode="before")
    @classmethod
    def _fingerprint_from_hex(cls, value: object) -> object:
        if isinstance(value, str):
            return bytes.fromhex(value)
        return value

    @field_serializer("fingerprint", when_used="json")
    def _fingerprint_to_hex(self, value: bytes) -> str:
        return value.hex()

    def is_expired_at(self, height: int) -> bool:
        """True once ``height`` has reached the expiry height."""
        return height >= self.expiry_date


class Amendment(CertMintBaseModel):
    """The latest score/expiry change applied to a certificate."""

    model_config = ConfigDict(frozen=True)

    update_score: int
    update_expiry: int
    update_timestamp: int                     # Logical height of the update
    updater: str


class FeeTransfer(CertMintBaseModel):
    """Receipt for a mint fee moved from the minting caller to the authority."""

    receipt_id: str = Field(default_factory=new_id)
    amount: int
    payer: str
    payee: str
    recorded_at: datetime = Field(default_factory=utc_now)


class RegistrySnapshot(CertMintBaseModel):
    """
    Logical persisted-state layout: three tables plus four scalars.

    The fingerprint index is not stored separately; it is rebuilt from the
    certificate table on restore.
    """

    next_id: int
    max_certs: int
    mint_fee: int
    authority: str | None = None
    certificates: list[Certificate] = Field(default_factory=list)
    amendments: dict[int, Amendment] = Field(default_factory=dict)
