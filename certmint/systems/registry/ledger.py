"""
CertMint — Fee Transfer

The registry charges the mint fee by asking a ``FeeTransferService`` to move
funds from the minting caller to the authority. The service is synchronous:
it either completes the transfer and returns a receipt, or raises
``InsufficientFundsError`` and moves nothing. The engine persists none of
its own mutations unless the transfer succeeded.

``InMemoryFeeLedger`` is the reference implementation. With no balances
funded it accepts every transfer and just records it; once ``track_balances``
is on, payers must be funded first.
"""

from __future__ import annotations

from typing import Protocol

import structlog

from certmint.systems.registry.types import FeeTransfer

logger = structlog.get_logger("certmint.registry.ledger")


class InsufficientFundsError(RuntimeError):
    """The payer cannot cover the requested transfer."""

    def __init__(self, payer: str, amount: int, balance: int) -> None:
        self.payer = payer
        self.amount = amount
        self.balance = balance
        super().__init__(
            f"{payer} cannot pay {amount}: balance is {balance}"
        )


class FeeTransferService(Protocol):
    """Moves ``amount`` from ``payer`` to ``payee`` or raises InsufficientFundsError."""

    def transfer(self, amount: int, payer: str, payee: str) -> FeeTransfer:
        ...


class InMemoryFeeLedger:
    """Records every fee transfer; optionally enforces payer balances."""

    def __init__(self, track_balances: bool = False) -> None:
        self._track_balances = track_balances
        self._balances: dict[str, int] = {}
        self._transfers: list[FeeTransfer] = []
        self._logger = logger.bind(component="fee_ledger")

    @property
    def transfers(self) -> list[FeeTransfer]:
        """Completed transfers, oldest first."""
        return list(self._transfers)

    def fund(self, identity: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Cannot fund a negative amount: {amount}")
        self._balances[identity] = self._balances.get(identity, 0) + amount

    def balance_of(self, identity: str) -> int:
        return self._balances.get(identity, 0)

    def transfer(self, amount: int, payer: str, payee: str) -> FeeTransfer:
        if amount < 0:
            raise ValueError(f"Transfer amount must be non-negative, got {amount}")

        if self._track_balances:
            balance = self.balance_of(payer)
            if balance < amount:
                self._logger.warning(
                    "fee_transfer_rejected",
                    payer=payer,
                    amount=amount,
                    balance=balance,
                )
                raise InsufficientFundsError(payer, amount, balance)
            self._balances[payer] = balance - amount
            self._balances[payee] = self.balance_of(payee) + amount

        receipt = FeeTransfer(amount=amount, payer=payer, payee=payee)
        self._transfers.append(receipt)
        self._logger.info(
            "fee_transferred",
            receipt_id=receipt.receipt_id,
            amount=amount,
            payer=payer,
            payee=payee,
        )
        return receipt
