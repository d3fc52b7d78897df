"""Registry of independent pools.

Each pool serializes its own operations; the registry only guards its
index, so operations on different pools run fully concurrently.
"""

from __future__ import annotations

import threading

import structlog

from stableswap.errors import InvalidPoolConfig, PoolNotFound

from .pool import StableSwapPool

logger = structlog.get_logger()


class PoolRegistry:
    """Pools indexed by pool id."""

    def __init__(self, pools: list[StableSwapPool] | None = None) -> None:
        self._pools: dict[str, StableSwapPool] = {}
        self._lock = threading.Lock()
        for pool in pools or []:
            self.add(pool)

    def add(self, pool: StableSwapPool) -> None:
        """Register a pool.

        Raises:
            InvalidPoolConfig: If a pool with the same id is already registered
        """
        with self._lock:
            if pool.pool_id in self._pools:
                raise InvalidPoolConfig(f"Pool {pool.pool_id} is already registered")
            self._pools[pool.pool_id] = pool
        logger.info("pool_registered", pool_id=pool.pool_id, assets=list(pool.config.symbols))

    def get(self, pool_id: str) -> StableSwapPool:
        """Look up a pool.

        Raises:
            PoolNotFound: If no pool has this id
        """
        with self._lock:
            pool = self._pools.get(pool_id)
        if pool is None:
            raise PoolNotFound(f"Unknown pool: {pool_id}")
        return pool

    @property
    def pool_ids(self) -> list[str]:
        with self._lock:
            return sorted(self._pools)

    def __contains__(self, pool_id: object) -> bool:
        with self._lock:
            return pool_id in self._pools

    def __len__(self) -> int:
        with self._lock:
            return len(self._pools)
