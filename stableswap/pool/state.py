"""Mutable pool state and its snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field

from stableswap.constants import N_COINS
from stableswap.safe_int import S

Amounts = tuple[int, int, int]

ZERO_AMOUNTS: Amounts = (0, 0, 0)


@dataclass(frozen=True)
class StateSnapshot:
    """Immutable copy of a PoolState, used for rollback and inspection."""

    balances: Amounts
    total_shares: int
    shares_of: dict[str, int]
    deposited_of: dict[str, Amounts]


@dataclass
class PoolState:
    """Balances, share supply, and per-owner bookkeeping of one pool.

    Only the pool that owns a PoolState mutates it, and only under its lock.

    Attributes:
        balances: Raw units held per asset
        total_shares: Total minted shares (18 decimals)
        shares_of: Share balance per owner
        deposited_of: Best-effort cumulative net deposits per owner and asset
    """

    balances: Amounts = ZERO_AMOUNTS
    total_shares: int = 0
    shares_of: dict[str, int] = field(default_factory=dict)
    deposited_of: dict[str, Amounts] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return self.total_shares == 0

    def shares(self, owner: str) -> int:
        return self.shares_of.get(owner, 0)

    def deposits(self, owner: str) -> Amounts:
        return self.deposited_of.get(owner, ZERO_AMOUNTS)

    def set_balances(self, balances: tuple[int, ...]) -> None:
        """Replace balances, enforcing uint256 bounds on every entry."""
        self.balances = tuple(S(b).to_uint256() for b in balances)  # type: ignore[assignment]

    def mint(self, owner: str, amount: int) -> None:
        self.total_shares = (S(self.total_shares) + amount).to_uint256()
        self.shares_of[owner] = (S(self.shares(owner)) + amount).to_uint256()

    def burn(self, owner: str, amount: int) -> None:
        remaining = (S(self.shares(owner)) - amount).value
        self.total_shares = (S(self.total_shares) - amount).value
        if remaining:
            self.shares_of[owner] = remaining
        else:
            self.shares_of.pop(owner, None)

    def record_deposit(self, owner: str, amounts: tuple[int, ...]) -> None:
        current = self.deposits(owner)
        self.deposited_of[owner] = tuple(  # type: ignore[assignment]
            (S(current[i]) + amounts[i]).to_uint256() for i in range(N_COINS)
        )

    def record_withdrawal(self, owner: str, amounts: tuple[int, ...]) -> None:
        """Reduce tracked deposits, flooring each asset at zero."""
        if owner not in self.deposited_of:
            return
        current = self.deposited_of[owner]
        self.deposited_of[owner] = tuple(  # type: ignore[assignment]
            S(current[i]).saturating_sub(amounts[i]).value for i in range(N_COINS)
        )

    def snapshot(self) -> StateSnapshot:
        return StateSnapshot(
            balances=self.balances,
            total_shares=self.total_shares,
            shares_of=dict(self.shares_of),
            deposited_of=dict(self.deposited_of),
        )

    def restore(self, snapshot: StateSnapshot) -> None:
        self.balances = snapshot.balances
        self.total_shares = snapshot.total_shares
        self.shares_of = dict(snapshot.shares_of)
        self.deposited_of = dict(snapshot.deposited_of)
