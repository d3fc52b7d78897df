"""StableSwap three-asset pool - Python implementation."""

from stableswap.pool import PoolConfig, PoolRegistry, StableSwapPool

__version__ = "0.1.0"
__all__ = ["PoolConfig", "PoolRegistry", "StableSwapPool", "__version__"]
