"""Pool configuration dataclasses.

Everything here is fixed at pool creation and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from stableswap.constants import (
    DEFAULT_AMPLIFICATION,
    DEFAULT_EURC_RATE,
    DEFAULT_POOL_ID,
    DEFAULT_SWAP_FEE,
    DEFAULT_USDC_RATE,
    EURC_DECIMALS,
    IDRX_DECIMALS,
    N_COINS,
    PRECISION_DECIMALS,
    USDC_DECIMALS,
)
from stableswap.errors import InvalidPoolConfig
from stableswap.fees import FeeModel


@dataclass(frozen=True)
class AssetConfig:
    """One asset held by the pool.

    Attributes:
        symbol: Asset identifier (e.g. "USDC")
        decimals: Native decimal precision, at most 18
        rate: Fixed exchange-rate constant in reference-asset units.
            1 for the reference asset.
    """

    symbol: str
    decimals: int
    rate: int = 1

    def __post_init__(self) -> None:
        if not self.symbol:
            raise InvalidPoolConfig("Asset symbol must not be empty")
        if not 0 <= self.decimals <= PRECISION_DECIMALS:
            raise InvalidPoolConfig(
                f"{self.symbol}: decimals must be in [0, {PRECISION_DECIMALS}], got {self.decimals}"
            )
        if self.rate <= 0:
            raise InvalidPoolConfig(f"{self.symbol}: rate must be positive, got {self.rate}")

    @property
    def multiplier(self) -> int:
        """Factor mapping one raw unit to normalized 18-decimal reference units."""
        return 10 ** (PRECISION_DECIMALS - self.decimals) * self.rate


@dataclass(frozen=True)
class PoolConfig:
    """Immutable pool parameters.

    Attributes:
        pool_id: Identifier used for logging and registry lookup
        assets: Exactly N_COINS assets, in index order
        amplification: Amplification coefficient A
        fees: Fee schedule derived from the base swap fee
        multipliers: Per-asset normalization multipliers (derived)
    """

    pool_id: str
    assets: tuple[AssetConfig, ...]
    amplification: int
    fees: FeeModel
    multipliers: tuple[int, ...] = field(init=False)

    def __post_init__(self) -> None:
        if len(self.assets) != N_COINS:
            raise InvalidPoolConfig(f"Pool needs exactly {N_COINS} assets, got {len(self.assets)}")
        symbols = [a.symbol for a in self.assets]
        if len(set(symbols)) != N_COINS:
            raise InvalidPoolConfig(f"Asset symbols must be unique, got {symbols}")
        if self.amplification < 1:
            raise InvalidPoolConfig(f"Amplification must be >= 1, got {self.amplification}")
        object.__setattr__(self, "assets", tuple(self.assets))
        object.__setattr__(self, "multipliers", tuple(a.multiplier for a in self.assets))

    @classmethod
    def create(
        cls,
        pool_id: str,
        assets: tuple[AssetConfig, ...],
        amplification: int,
        swap_fee: int,
    ) -> PoolConfig:
        """Build a config from a raw swap fee rate."""
        return cls(
            pool_id=pool_id,
            assets=assets,
            amplification=amplification,
            fees=FeeModel(swap_fee),
        )

    @property
    def symbols(self) -> tuple[str, ...]:
        return tuple(a.symbol for a in self.assets)


def default_assets(
    usdc_rate: int = DEFAULT_USDC_RATE,
    eurc_rate: int = DEFAULT_EURC_RATE,
) -> tuple[AssetConfig, AssetConfig, AssetConfig]:
    """The IDRX / USDC / EURC asset set, IDRX as reference."""
    return (
        AssetConfig("IDRX", IDRX_DECIMALS, 1),
        AssetConfig("USDC", USDC_DECIMALS, usdc_rate),
        AssetConfig("EURC", EURC_DECIMALS, eurc_rate),
    )


def default_pool_config(
    pool_id: str = DEFAULT_POOL_ID,
    amplification: int = DEFAULT_AMPLIFICATION,
    swap_fee: int = DEFAULT_SWAP_FEE,
    usdc_rate: int = DEFAULT_USDC_RATE,
    eurc_rate: int = DEFAULT_EURC_RATE,
) -> PoolConfig:
    return PoolConfig.create(
        pool_id=pool_id,
        assets=default_assets(usdc_rate, eurc_rate),
        amplification=amplification,
        swap_fee=swap_fee,
    )
