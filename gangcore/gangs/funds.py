"""
Funds - Collaborator for ordinary gang funds.

Upgrade costs are paid in ordinary funds, which the host economy owns.
The facade only needs deduct/refund; InMemoryFundsLedger is a simple
implementation for tests and standalone tooling.
"""

from __future__ import annotations
from typing import Protocol
import threading

from ..errors import InvalidArgument


class FundsCollaborator(Protocol):
    def deduct(self, gang_id: str, amount: int) -> bool:
        """Take `amount` from the gang bank. False if it cannot pay."""
        ...

    def refund(self, gang_id: str, amount: int) -> None:
        ...


class InMemoryFundsLedger:
    """Gang bank balances held in memory."""

    def __init__(self, balances: dict[str, int] | None = None):
        self._balances: dict[str, int] = dict(balances or {})
        self._lock = threading.Lock()
        self.deductions: list[tuple[str, int]] = []

    def balance(self, gang_id: str) -> int:
        return self._balances.get(gang_id, 0)

    def deposit(self, gang_id: str, amount: int) -> None:
        if amount < 0:
            raise InvalidArgument(f"deposit must be >= 0, got {amount}")
        with self._lock:
            self._balances[gang_id] = self._balances.get(gang_id, 0) + amount

    def deduct(self, gang_id: str, amount: int) -> bool:
        if amount < 0:
            raise InvalidArgument(f"deduction must be >= 0, got {amount}")
        with self._lock:
            current = self._balances.get(gang_id, 0)
            if current < amount:
                return False
            self._balances[gang_id] = current - amount
            self.deductions.append((gang_id, amount))
            return True

    def refund(self, gang_id: str, amount: int) -> None:
        self.deposit(gang_id, amount)
