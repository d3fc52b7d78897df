"""Pytest configuration and fixtures."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from stableswap.api.endpoints import get_registry
from stableswap.api.main import app
from stableswap.constants import DEFAULT_POOL_ID
from stableswap.pool import PoolRegistry, StableSwapPool
from tests.helpers import ALICE, BALANCED_AMOUNTS, make_pool


@pytest.fixture
def pool() -> StableSwapPool:
    """Empty default pool (A=100, 0.04% fee) with alice and bob funded."""
    return make_pool()


@pytest.fixture
def seeded_pool(pool: StableSwapPool) -> StableSwapPool:
    """Default pool after alice's balanced genesis deposit."""
    pool.add_liquidity(ALICE, BALANCED_AMOUNTS)
    return pool


@pytest.fixture
def feeless_pool() -> StableSwapPool:
    """Balanced pool with a zero swap fee."""
    pool = make_pool(swap_fee=0)
    pool.add_liquidity(ALICE, BALANCED_AMOUNTS)
    return pool


@pytest.fixture
def api_registry() -> PoolRegistry:
    """Registry holding an empty default-id pool with alice and bob funded."""
    return PoolRegistry([make_pool(pool_id=DEFAULT_POOL_ID)])


@pytest.fixture
def client(api_registry: PoolRegistry) -> Iterator[TestClient]:
    """Create a test client for the API, bound to api_registry."""
    app.dependency_overrides[get_registry] = lambda: api_registry
    yield TestClient(app)
    app.dependency_overrides.clear()
