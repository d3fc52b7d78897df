"""Token ledger seam.

The pool never moves tokens itself. It calls one TokenLedger per asset at
its commit points: debit to pull an amount from an owner into pool custody,
credit to push an amount from pool custody to a recipient.
"""

from __future__ import annotations

import threading
from typing import Protocol

import structlog

logger = structlog.get_logger()


class TokenLedger(Protocol):
    """Protocol for the per-asset token movement capability.

    Implementations may be backed by a chain client, a database, or memory.
    Returning False (or raising) aborts the calling pool operation, which
    then reverses every movement it already made.
    """

    def debit(self, owner: str, amount: int) -> bool:
        """Move amount from owner into pool custody.

        Returns:
            True if the movement happened
        """
        ...

    def credit(self, recipient: str, amount: int) -> bool:
        """Move amount from pool custody to recipient.

        Returns:
            True if the movement happened
        """
        ...


class InMemoryLedger:
    """Dictionary-backed ledger for one asset.

    Holds owner balances plus a custody balance for the pool. Used by tests
    and by the local API server.

    Attributes:
        symbol: Asset symbol, for logging
        custody: Units currently held on behalf of the pool
    """

    def __init__(self, symbol: str, balances: dict[str, int] | None = None) -> None:
        self.symbol = symbol
        self.custody = 0
        self._balances: dict[str, int] = dict(balances or {})
        self._lock = threading.Lock()

    def balance_of(self, owner: str) -> int:
        with self._lock:
            return self._balances.get(owner, 0)

    def mint(self, owner: str, amount: int) -> None:
        """Create new units for owner outside of any pool."""
        if amount < 0:
            raise ValueError(f"Cannot mint a negative amount: {amount}")
        with self._lock:
            self._balances[owner] = self._balances.get(owner, 0) + amount
        logger.debug("ledger_mint", symbol=self.symbol, owner=owner, amount=amount)

    def debit(self, owner: str, amount: int) -> bool:
        with self._lock:
            held = self._balances.get(owner, 0)
            if amount < 0 or held < amount:
                logger.debug(
                    "ledger_debit_rejected",
                    symbol=self.symbol,
                    owner=owner,
                    amount=amount,
                    held=held,
                )
                return False
            self._balances[owner] = held - amount
            self.custody += amount
        return True

    def credit(self, recipient: str, amount: int) -> bool:
        with self._lock:
            if amount < 0 or self.custody < amount:
                logger.debug(
                    "ledger_credit_rejected",
                    symbol=self.symbol,
                    recipient=recipient,
                    amount=amount,
                    custody=self.custody,
                )
                return False
            self.custody -= amount
            self._balances[recipient] = self._balances.get(recipient, 0) + amount
        return True
