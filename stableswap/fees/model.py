"""Swap and imbalance fee model."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from stableswap.constants import FEE_DENOMINATOR, N_COINS
from stableswap.errors import InvalidPoolConfig
from stableswap.safe_int import S


@dataclass(frozen=True)
class FeeModel:
    """Fee schedule derived from a single base rate.

    The swap fee is charged on swap output. The liquidity fee is smaller,
    swap_fee * n / (4 * (n - 1)), and is charged only on the imbalanced part
    of a liquidity operation, so a perfectly proportional deposit or
    withdrawal pays nothing.

    Attributes:
        swap_fee: Base rate in parts per FEE_DENOMINATOR (e.g. 400 = 0.04%)
        denominator: Fixed-point denominator of both rates
        liquidity_fee: Derived imbalance fee rate
    """

    swap_fee: int
    denominator: int = FEE_DENOMINATOR
    liquidity_fee: int = field(init=False)

    def __post_init__(self) -> None:
        if isinstance(self.swap_fee, bool) or not isinstance(self.swap_fee, int):
            raise InvalidPoolConfig(f"Swap fee must be an integer, got {self.swap_fee!r}")
        if not 0 <= self.swap_fee < self.denominator:
            raise InvalidPoolConfig(
                f"Swap fee must be in range [0, {self.denominator}), got {self.swap_fee}"
            )
        derived = self.swap_fee * N_COINS // (4 * (N_COINS - 1))
        object.__setattr__(self, "liquidity_fee", derived)

    def swap_fee_amount(self, amount_out: int) -> int:
        """Fee taken from a raw swap output, rounded down."""
        return S(amount_out).mul_div(self.swap_fee, self.denominator).value

    def apply_swap_fee(self, amount_out: int) -> tuple[int, int]:
        """Split a raw swap output into (amount after fee, fee)."""
        fee = self.swap_fee_amount(amount_out)
        return (S(amount_out) - fee).value, fee

    def imbalance_fee(self, difference: int) -> int:
        """Liquidity fee on a single asset's deviation from its ideal balance."""
        return S(difference).mul_div(self.liquidity_fee, self.denominator).value

    def imbalance_fees(self, actual: Sequence[int], ideal: Sequence[int]) -> tuple[int, ...]:
        """Per-asset liquidity fees for |actual - ideal|."""
        return tuple(
            self.imbalance_fee(S(a).abs_diff(b).value)
            for a, b in zip(actual, ideal, strict=True)
        )
