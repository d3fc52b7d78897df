"""Pydantic models for the pool API."""

from stableswap.models.requests import (
    AddLiquidityRequest,
    FaucetRequest,
    RemoveLiquidityOneTokenRequest,
    RemoveLiquidityRequest,
    SwapRequest,
)
from stableswap.models.responses import (
    AddLiquidityResponse,
    AssetInfo,
    DepositsResponse,
    ErrorResponse,
    FaucetResponse,
    PoolInfo,
    RemoveLiquidityOneTokenResponse,
    RemoveLiquidityResponse,
    SwapQuoteResponse,
    SwapResponse,
    VirtualPriceResponse,
    WithdrawQuoteResponse,
)

__all__ = [
    # Requests
    "SwapRequest",
    "AddLiquidityRequest",
    "RemoveLiquidityRequest",
    "RemoveLiquidityOneTokenRequest",
    "FaucetRequest",
    # Responses
    "ErrorResponse",
    "AssetInfo",
    "PoolInfo",
    "SwapResponse",
    "SwapQuoteResponse",
    "AddLiquidityResponse",
    "RemoveLiquidityResponse",
    "RemoveLiquidityOneTokenResponse",
    "WithdrawQuoteResponse",
    "VirtualPriceResponse",
    "DepositsResponse",
    "FaucetResponse",
]
