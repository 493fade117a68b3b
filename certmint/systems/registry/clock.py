"""
CertMint — Logical Clock

The registry never advances time itself. It reads the current height from
a ``LogicalClock`` once per operation and compares expiry heights against
that value.
"""

from __future__ import annotations

from typing import Protocol


class LogicalClock(Protocol):
    """Supplies a monotonically non-decreasing integer height."""

    def current_height(self) -> int:
        ...


class ManualClock:
    """
    Clock driven explicitly by its owner.

    Suitable for tests, simulations, and front ends that receive the height
    from an external source (a block header, a sequencer) and push it in.
    """

    def __init__(self, height: int = 0) -> None:
        if height < 0:
            raise ValueError(f"Height must be non-negative, got {height}")
        self._height = height

    def current_height(self) -> int:
        return self._height

    def advance(self, blocks: int = 1) -> int:
        """Move forward by ``blocks`` and return the new height."""
        if blocks < 0:
            raise ValueError(f"Clock cannot move backwards (advance by {blocks})")
        self._height += blocks
        return self._height

    def set_height(self, height: int) -> None:
        if height < self._height:
            raise ValueError(
                f"Clock cannot move backwards from {self._height} to {height}"
            )
        self._height = height
