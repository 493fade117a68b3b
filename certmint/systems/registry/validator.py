"""
CertMint — Field Validator

Pure predicates, one per mint field. No state, no logging.

The engine runs ``MINT_RULES`` in declaration order and reports the first
failure, so the order of that table is part of the public contract: the
same bad request always yields the same error kind.

Note: ``min_score`` and ``max_score`` are range-checked independently.
Neither ``min_score <= max_score`` nor ``min_score <= score <= max_score``
is enforced.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from certmint.systems.registry.types import (
    FINGERPRINT_LENGTH,
    Currency,
    ErrorKind,
    ProficiencyLevel,
)

if TYPE_CHECKING:
    from certmint.systems.registry.types import MintRequest

MIN_SCORE = 0
MAX_SCORE = 100

MAX_TEST_TYPE_LEN = 20
MAX_ISSUER_NAME_LEN = 50
MAX_RECIPIENT_NAME_LEN = 100
MAX_LOCATION_LEN = 50
MAX_LANGUAGE_LEN = 20
MAX_CATEGORY_LEN = 30

_LEVELS = frozenset(level.value for level in ProficiencyLevel)
_CURRENCIES = frozenset(currency.value for currency in Currency)


# ─── Predicates ──────────────────────────────────────────────────


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _bounded_text(value: Any, max_len: int) -> bool:
    return isinstance(value, str) and 0 < len(value) <= max_len


def is_valid_identity(identity: Any, null_identity: str) -> bool:
    return isinstance(identity, str) and identity != null_identity


def is_valid_recipient(recipient: Any, null_identity: str) -> bool:
    return is_valid_identity(recipient, null_identity)


def is_valid_test_type(test_type: Any) -> bool:
    return _bounded_text(test_type, MAX_TEST_TYPE_LEN)


def is_valid_score(score: Any) -> bool:
    return _is_int(score) and MIN_SCORE <= score <= MAX_SCORE


def is_valid_fingerprint(fingerprint: Any) -> bool:
    return isinstance(fingerprint, (bytes, bytearray)) and len(fingerprint) == FINGERPRINT_LENGTH


def is_valid_fee(fee: Any) -> bool:
    return _is_int(fee) and fee >= 0


def is_valid_expiry(expiry_date: Any, height: int) -> bool:
    return _is_int(expiry_date) and expiry_date > height


def is_valid_level(level: Any) -> bool:
    return isinstance(level, str) and level in _LEVELS


def is_valid_issuer_name(name: Any) -> bool:
    return _bounded_text(name, MAX_ISSUER_NAME_LEN)


def is_valid_recipient_name(name: Any) -> bool:
    return _bounded_text(name, MAX_RECIPIENT_NAME_LEN)


def is_valid_location(location: Any) -> bool:
    return _bounded_text(location, MAX_LOCATION_LEN)


def is_valid_currency(currency: Any) -> bool:
    return isinstance(currency, str) and currency in _CURRENCIES


def is_valid_language(language: Any) -> bool:
    return _bounded_text(language, MAX_LANGUAGE_LEN)


def is_valid_category(category: Any) -> bool:
    return _bounded_text(category, MAX_CATEGORY_LEN)


# ─── Rule Table ──────────────────────────────────────────────────

# (error kind, check(request, height, null_identity)), evaluated in order.
MintRule = tuple[ErrorKind, Callable[["MintRequest", int, str], bool]]

MINT_RULES: tuple[MintRule, ...] = (
    (ErrorKind.INVALID_RECIPIENT, lambda r, h, null: is_valid_recipient(r.recipient, null)),
    (ErrorKind.INVALID_TEST_TYPE, lambda r, h, null: is_valid_test_type(r.test_type)),
    (ErrorKind.INVALID_SCORE, lambda r, h, null: is_valid_score(r.score)),
    (ErrorKind.INVALID_FINGERPRINT, lambda r, h, null: is_valid_fingerprint(r.fingerprint)),
    (ErrorKind.INVALID_EXPIRY, lambda r, h, null: is_valid_expiry(r.expiry_date, h)),
    (ErrorKind.INVALID_LEVEL, lambda r, h, null: is_valid_level(r.level)),
    (ErrorKind.INVALID_ISSUER_NAME, lambda r, h, null: is_valid_issuer_name(r.issuer_name)),
    (ErrorKind.INVALID_RECIPIENT_NAME, lambda r, h, null: is_valid_recipient_name(r.recipient_name)),
    (ErrorKind.INVALID_LOCATION, lambda r, h, null: is_valid_location(r.location)),
    (ErrorKind.INVALID_CURRENCY, lambda r, h, null: is_valid_currency(r.currency)),
    (ErrorKind.INVALID_MIN_SCORE, lambda r, h, null: is_valid_score(r.min_score)),
    (ErrorKind.INVALID_MAX_SCORE, lambda r, h, null: is_valid_score(r.max_score)),
    (ErrorKind.INVALID_LANGUAGE, lambda r, h, null: is_valid_language(r.language)),
    (ErrorKind.INVALID_CATEGORY, lambda r, h, null: is_valid_category(r.category)),
)


def validate_mint_request(
    request: MintRequest,
    height: int,
    null_identity: str,
) -> ErrorKind | None:
    """Return the first violated rule's error kind, or None if all pass."""
    for kind, check in MINT_RULES:
        if not check(request, height, null_identity):
            return kind
    return None


def validate_amendment(score: Any, expiry_date: Any, height: int) -> ErrorKind | None:
    """Score rule first, then expiry rule, against the current height."""
    if not is_valid_score(score):
        return ErrorKind.INVALID_SCORE
    if not is_valid_expiry(expiry_date, height):
        return ErrorKind.INVALID_EXPIRY
    return None
