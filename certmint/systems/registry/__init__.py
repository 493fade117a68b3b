"""
CertMint — Certificate Registry

Field validation, fingerprint uniqueness, a set-once authority gate and the
record store, orchestrated by the CertificateRegistry engine.
"""

from certmint.systems.registry.authority import (
    AuthorizationGate,
    Configured,
    Unconfigured,
)
from certmint.systems.registry.clock import LogicalClock, ManualClock
from certmint.systems.registry.engine import CertificateRegistry
from certmint.systems.registry.fingerprints import FingerprintIndex
from certmint.systems.registry.ledger import (
    FeeTransferService,
    InMemoryFeeLedger,
    InsufficientFundsError,
)
from certmint.systems.registry.store import RecordStore
from certmint.systems.registry.types import (
    Amendment,
    Certificate,
    Currency,
    Err,
    ErrorKind,
    FeeTransfer,
    MintRequest,
    Ok,
    ProficiencyLevel,
    RegistrySnapshot,
    Result,
)

__all__ = [
    "Amendment",
    "AuthorizationGate",
    "Certificate",
    "CertificateRegistry",
    "Configured",
    "Currency",
    "Err",
    "ErrorKind",
    "FeeTransfer",
    "FeeTransferService",
    "FingerprintIndex",
    "InMemoryFeeLedger",
    "InsufficientFundsError",
    "LogicalClock",
    "ManualClock",
    "MintRequest",
    "Ok",
    "ProficiencyLevel",
    "RecordStore",
    "RegistrySnapshot",
    "Result",
    "Unconfigured",
]
