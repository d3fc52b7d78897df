"""Response bodies for the pool API."""

from pydantic import BaseModel, Field

from stableswap.models.types import Uint256


class ErrorResponse(BaseModel):
    """Body of every rejected pool operation."""

    error: str = Field(description="Stable error kind, e.g. SlippageExceeded")
    detail: str


class AssetInfo(BaseModel):
    symbol: str
    decimals: int
    rate: int
    multiplier: Uint256


class PoolInfo(BaseModel):
    """Static parameters plus current balances of a pool."""

    pool_id: str = Field(alias="poolId")
    assets: list[AssetInfo]
    balances: list[Uint256]
    total_shares: Uint256 = Field(alias="totalShares")
    virtual_price: Uint256 = Field(alias="virtualPrice")
    amplification: int
    swap_fee: int = Field(alias="swapFee")
    liquidity_fee: int = Field(alias="liquidityFee")
    fee_denominator: int = Field(alias="feeDenominator")

    model_config = {"populate_by_name": True}


class SwapResponse(BaseModel):
    amount_out: Uint256 = Field(alias="amountOut")
    fee: Uint256

    model_config = {"populate_by_name": True}


class SwapQuoteResponse(BaseModel):
    amount_out: Uint256 = Field(alias="amountOut")

    model_config = {"populate_by_name": True}


class AddLiquidityResponse(BaseModel):
    """Deposit outcome.

    Imbalance fees are reported in raw units of each asset, rounded down.
    """

    shares_minted: Uint256 = Field(alias="sharesMinted")
    fees: list[Uint256]
    total_shares: Uint256 = Field(alias="totalShares")

    model_config = {"populate_by_name": True}


class RemoveLiquidityResponse(BaseModel):
    amounts_out: list[Uint256] = Field(alias="amountsOut")
    shares_burned: Uint256 = Field(alias="sharesBurned")

    model_config = {"populate_by_name": True}


class RemoveLiquidityOneTokenResponse(BaseModel):
    amount_out: Uint256 = Field(alias="amountOut")
    shares_burned: Uint256 = Field(alias="sharesBurned")

    model_config = {"populate_by_name": True}


class WithdrawQuoteResponse(BaseModel):
    amount_out: Uint256 = Field(alias="amountOut")
    fee: Uint256

    model_config = {"populate_by_name": True}


class VirtualPriceResponse(BaseModel):
    virtual_price: Uint256 = Field(alias="virtualPrice")

    model_config = {"populate_by_name": True}


class DepositsResponse(BaseModel):
    owner: str
    amounts: list[Uint256]
    shares: Uint256

    model_config = {"populate_by_name": True}


class FaucetResponse(BaseModel):
    owner: str
    balances: list[Uint256]
