"""API endpoints for pool operations.

Pool calls are synchronous and lock the pool; they run in the default
executor so a long Newton solve never blocks the event loop.
"""

import asyncio
from collections.abc import Callable
from functools import partial
from typing import TypeVar

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query

from stableswap.api import settings
from stableswap.models import (
    AddLiquidityRequest,
    AddLiquidityResponse,
    AssetInfo,
    DepositsResponse,
    FaucetRequest,
    FaucetResponse,
    PoolInfo,
    RemoveLiquidityOneTokenRequest,
    RemoveLiquidityOneTokenResponse,
    RemoveLiquidityRequest,
    RemoveLiquidityResponse,
    SwapQuoteResponse,
    SwapRequest,
    SwapResponse,
    VirtualPriceResponse,
    WithdrawQuoteResponse,
)
from stableswap.pool import InMemoryLedger, PoolRegistry, StableSwapPool

logger = structlog.get_logger()

router = APIRouter(prefix="/pools")

T = TypeVar("T")


def get_registry() -> PoolRegistry:
    """Dependency provider for the pool registry.

    Override this in tests to inject a registry:
        app.dependency_overrides[get_registry] = lambda: registry
    """
    return settings.get_default_registry()


async def _run(call: Callable[[], T]) -> T:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, call)


def _pool_info(pool: StableSwapPool) -> PoolInfo:
    config = pool.config
    return PoolInfo(
        pool_id=pool.pool_id,
        assets=[
            AssetInfo(symbol=a.symbol, decimals=a.decimals, rate=a.rate, multiplier=a.multiplier)
            for a in config.assets
        ],
        balances=list(pool.get_balances()),
        total_shares=pool.get_total_shares(),
        virtual_price=pool.get_virtual_price(),
        amplification=config.amplification,
        swap_fee=config.fees.swap_fee,
        liquidity_fee=config.fees.liquidity_fee,
        fee_denominator=config.fees.denominator,
    )


def _deposits(pool: StableSwapPool, owner: str) -> DepositsResponse:
    return DepositsResponse(
        owner=owner,
        amounts=list(pool.get_user_deposits(owner)),
        shares=pool.get_shares(owner),
    )


@router.get("")
async def list_pools(registry: PoolRegistry = Depends(get_registry)) -> list[str]:
    return registry.pool_ids


@router.get("/{pool_id}")
async def pool_info(pool_id: str, registry: PoolRegistry = Depends(get_registry)) -> PoolInfo:
    pool = registry.get(pool_id)
    return await _run(partial(_pool_info, pool))


@router.post("/{pool_id}/swap")
async def swap(
    pool_id: str,
    request: SwapRequest,
    registry: PoolRegistry = Depends(get_registry),
) -> SwapResponse:
    pool = registry.get(pool_id)
    logger.info(
        "received_swap",
        pool_id=pool_id,
        actor=request.actor,
        from_index=request.from_index,
        to_index=request.to_index,
        amount_in=request.amount_in,
    )
    result = await _run(
        partial(
            pool.swap,
            request.actor,
            request.from_index,
            request.to_index,
            request.amount_in,
            request.min_amount_out,
        )
    )
    return SwapResponse(amount_out=result.amount_out, fee=result.fee)


@router.get("/{pool_id}/quote/swap")
async def quote_swap(
    pool_id: str,
    from_index: int = Query(alias="fromIndex"),
    to_index: int = Query(alias="toIndex"),
    amount_in: int = Query(alias="amountIn", ge=0),
    registry: PoolRegistry = Depends(get_registry),
) -> SwapQuoteResponse:
    pool = registry.get(pool_id)
    amount_out = await _run(partial(pool.get_dy, from_index, to_index, amount_in))
    return SwapQuoteResponse(amount_out=amount_out)


@router.post("/{pool_id}/add_liquidity")
async def add_liquidity(
    pool_id: str,
    request: AddLiquidityRequest,
    registry: PoolRegistry = Depends(get_registry),
) -> AddLiquidityResponse:
    pool = registry.get(pool_id)
    logger.info("received_add_liquidity", pool_id=pool_id, actor=request.actor)
    result = await _run(
        partial(pool.add_liquidity, request.actor, request.amounts, request.min_shares)
    )
    return AddLiquidityResponse(
        shares_minted=result.shares,
        fees=[pool.denormalize(k, fee) for k, fee in enumerate(result.fees)],
        total_shares=result.total_shares,
    )


@router.post("/{pool_id}/remove_liquidity")
async def remove_liquidity(
    pool_id: str,
    request: RemoveLiquidityRequest,
    registry: PoolRegistry = Depends(get_registry),
) -> RemoveLiquidityResponse:
    pool = registry.get(pool_id)
    logger.info("received_remove_liquidity", pool_id=pool_id, actor=request.actor)
    amounts_out = await _run(
        partial(pool.remove_liquidity, request.actor, request.shares, request.min_amounts)
    )
    return RemoveLiquidityResponse(amounts_out=list(amounts_out), shares_burned=request.shares)


@router.post("/{pool_id}/remove_liquidity_one_token")
async def remove_liquidity_one_token(
    pool_id: str,
    request: RemoveLiquidityOneTokenRequest,
    registry: PoolRegistry = Depends(get_registry),
) -> RemoveLiquidityOneTokenResponse:
    pool = registry.get(pool_id)
    logger.info(
        "received_remove_liquidity_one_token",
        pool_id=pool_id,
        actor=request.actor,
        asset_index=request.asset_index,
    )
    amount_out = await _run(
        partial(
            pool.remove_liquidity_one_token,
            request.actor,
            request.shares,
            request.asset_index,
            request.min_amount_out,
        )
    )
    return RemoveLiquidityOneTokenResponse(amount_out=amount_out, shares_burned=request.shares)


@router.get("/{pool_id}/withdraw_one_token")
async def calc_withdraw_one_token(
    pool_id: str,
    shares: int = Query(ge=0),
    asset_index: int = Query(alias="assetIndex"),
    registry: PoolRegistry = Depends(get_registry),
) -> WithdrawQuoteResponse:
    pool = registry.get(pool_id)
    quote = await _run(partial(pool.calc_withdraw_one_token, shares, asset_index))
    return WithdrawQuoteResponse(amount_out=quote.amount, fee=quote.fee)


@router.get("/{pool_id}/virtual_price")
async def virtual_price(
    pool_id: str, registry: PoolRegistry = Depends(get_registry)
) -> VirtualPriceResponse:
    pool = registry.get(pool_id)
    price = await _run(pool.get_virtual_price)
    return VirtualPriceResponse(virtual_price=price)


@router.get("/{pool_id}/deposits/{owner}")
async def user_deposits(
    pool_id: str, owner: str, registry: PoolRegistry = Depends(get_registry)
) -> DepositsResponse:
    pool = registry.get(pool_id)
    return await _run(partial(_deposits, pool, owner))


@router.post("/{pool_id}/faucet")
async def faucet(
    pool_id: str,
    request: FaucetRequest,
    registry: PoolRegistry = Depends(get_registry),
) -> FaucetResponse:
    """Mint test balances. Only available for pools on in-memory ledgers."""
    if not settings.FAUCET_ENABLED:
        raise HTTPException(status_code=404, detail="Faucet is disabled")
    pool = registry.get(pool_id)
    ledgers = pool.ledgers
    if not all(isinstance(ledger, InMemoryLedger) for ledger in ledgers):
        raise HTTPException(status_code=400, detail="Pool ledgers do not support minting")

    balances = []
    for ledger, amount in zip(ledgers, request.amounts, strict=True):
        ledger.mint(request.owner, amount)  # type: ignore[union-attr]
        balances.append(ledger.balance_of(request.owner))  # type: ignore[union-attr]
    logger.info("faucet_minted", pool_id=pool_id, owner=request.owner, amounts=request.amounts)
    return FaucetResponse(owner=request.owner, balances=balances)
