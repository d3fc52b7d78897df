"""Notifications emitted after a pool operation commits."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class SwapExecuted:
    actor: str
    from_index: int
    to_index: int
    amount_in: int
    amount_out: int


@dataclass(frozen=True)
class LiquidityAdded:
    """Deposit notification.

    Attributes:
        fees: Imbalance fees per asset, in normalized units
        total_shares: Share supply after the mint
    """

    actor: str
    amounts: tuple[int, ...]
    shares_minted: int
    fees: tuple[int, ...]
    total_shares: int


@dataclass(frozen=True)
class LiquidityRemoved:
    actor: str
    amounts_out: tuple[int, ...]
    shares_burned: int


@dataclass(frozen=True)
class LiquidityRemovedOneToken:
    actor: str
    asset_index: int
    amount_out: int
    shares_burned: int


PoolEvent = SwapExecuted | LiquidityAdded | LiquidityRemoved | LiquidityRemovedOneToken

EventListener = Callable[[PoolEvent], None]
