"""Environment configuration and the default pool registry for the API.

Configuration via environment variables:
- STABLESWAP_HOST: Host to bind to (default: 0.0.0.0)
- STABLESWAP_PORT: Port to bind to (default: 8000)
- STABLESWAP_DEBUG: Enable debug/reload mode (default: false)
- STABLESWAP_AMPLIFICATION: Amplification coefficient A (default: 100)
- STABLESWAP_SWAP_FEE: Swap fee in parts per million (default: 400)
- STABLESWAP_USDC_RATE / STABLESWAP_EURC_RATE: IDRX per USDC / EURC
- STABLESWAP_FAUCET_ENABLED: Expose the in-memory faucet (default: true)
"""

import os

import structlog

from stableswap.constants import (
    DEFAULT_AMPLIFICATION,
    DEFAULT_EURC_RATE,
    DEFAULT_SWAP_FEE,
    DEFAULT_USDC_RATE,
)
from stableswap.pool import InMemoryLedger, PoolRegistry, StableSwapPool, default_pool_config

logger = structlog.get_logger()


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("true", "1", "yes")


HOST = os.environ.get("STABLESWAP_HOST", "0.0.0.0")
PORT = int(os.environ.get("STABLESWAP_PORT", "8000"))
DEBUG = _env_bool("STABLESWAP_DEBUG", "false")
FAUCET_ENABLED = _env_bool("STABLESWAP_FAUCET_ENABLED", "true")

AMPLIFICATION = int(os.environ.get("STABLESWAP_AMPLIFICATION", str(DEFAULT_AMPLIFICATION)))
SWAP_FEE = int(os.environ.get("STABLESWAP_SWAP_FEE", str(DEFAULT_SWAP_FEE)))
USDC_RATE = int(os.environ.get("STABLESWAP_USDC_RATE", str(DEFAULT_USDC_RATE)))
EURC_RATE = int(os.environ.get("STABLESWAP_EURC_RATE", str(DEFAULT_EURC_RATE)))


def create_default_registry() -> PoolRegistry:
    """Create a registry holding the IDRX/USDC/EURC pool on in-memory ledgers."""
    config = default_pool_config(
        amplification=AMPLIFICATION,
        swap_fee=SWAP_FEE,
        usdc_rate=USDC_RATE,
        eurc_rate=EURC_RATE,
    )
    ledgers = [InMemoryLedger(symbol) for symbol in config.symbols]
    logger.info(
        "default_pool_configured",
        pool_id=config.pool_id,
        amplification=config.amplification,
        swap_fee=config.fees.swap_fee,
        multipliers=list(config.multipliers),
    )
    return PoolRegistry([StableSwapPool(config, ledgers)])


registry = create_default_registry()


def get_default_registry() -> PoolRegistry:
    return registry
