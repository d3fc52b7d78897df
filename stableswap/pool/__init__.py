"""Pool state, operations, ledger seam, and notifications."""

from .config import AssetConfig, PoolConfig, default_assets, default_pool_config
from .events import (
    EventListener,
    LiquidityAdded,
    LiquidityRemoved,
    LiquidityRemovedOneToken,
    PoolEvent,
    SwapExecuted,
)
from .ledger import InMemoryLedger, TokenLedger
from .pool import AddLiquidityResult, StableSwapPool, SwapResult, WithdrawOneQuote
from .registry import PoolRegistry
from .state import PoolState, StateSnapshot

__all__ = [
    # Configuration
    "AssetConfig",
    "PoolConfig",
    "default_assets",
    "default_pool_config",
    # State
    "PoolState",
    "StateSnapshot",
    # Pool
    "StableSwapPool",
    "SwapResult",
    "AddLiquidityResult",
    "WithdrawOneQuote",
    "PoolRegistry",
    # Ledger
    "TokenLedger",
    "InMemoryLedger",
    # Events
    "EventListener",
    "PoolEvent",
    "SwapExecuted",
    "LiquidityAdded",
    "LiquidityRemoved",
    "LiquidityRemovedOneToken",
]
