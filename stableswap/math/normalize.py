"""Scaling between raw asset units and normalized 18-decimal balances.

A multiplier folds both the decimal gap (10^(18 - decimals)) and the asset's
fixed exchange-rate constant into one integer, so normalization is a single
multiplication and never rounds.
"""

from __future__ import annotations

from collections.abc import Sequence

from stableswap.constants import N_COINS
from stableswap.errors import InvalidPoolConfig
from stableswap.safe_int import S


def normalize(balances: Sequence[int], multipliers: Sequence[int]) -> tuple[int, ...]:
    """Map raw per-asset balances to normalized balances (xp).

    Args:
        balances: Raw balances, one per asset
        multipliers: Precomputed normalization multipliers, one per asset

    Returns:
        Normalized balances as a tuple of length N_COINS
    """
    if len(balances) != N_COINS or len(multipliers) != N_COINS:
        raise InvalidPoolConfig(
            f"Expected {N_COINS} balances and multipliers, "
            f"got {len(balances)} and {len(multipliers)}"
        )
    return tuple((S(b) * m).value for b, m in zip(balances, multipliers, strict=True))


def normalize_amount(amount: int, multiplier: int) -> int:
    """Normalize a single raw amount."""
    return (S(amount) * multiplier).value


def denormalize_down(value: int, multiplier: int) -> int:
    """Convert a normalized value back to raw units, rounding down.

    Raises:
        InvalidPoolConfig: If multiplier <= 0
    """
    if multiplier <= 0:
        raise InvalidPoolConfig(f"Multiplier must be positive, got {multiplier}")
    return (S(value) // multiplier).value
