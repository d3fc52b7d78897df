"""Request bodies for the pool API."""

from pydantic import BaseModel, Field

from stableswap.constants import N_COINS
from stableswap.models.types import Owner, Uint256


class SwapRequest(BaseModel):
    """Sell an exact amount of one asset for another."""

    actor: Owner
    from_index: int = Field(alias="fromIndex")
    to_index: int = Field(alias="toIndex")
    amount_in: Uint256 = Field(alias="amountIn")
    min_amount_out: Uint256 = Field(default=0, alias="minAmountOut")

    model_config = {"populate_by_name": True}


class AddLiquidityRequest(BaseModel):
    """Deposit raw amounts of every asset."""

    actor: Owner
    amounts: list[Uint256] = Field(min_length=N_COINS, max_length=N_COINS)
    min_shares: Uint256 = Field(default=0, alias="minShares")

    model_config = {"populate_by_name": True}


class RemoveLiquidityRequest(BaseModel):
    """Burn shares for a proportional slice of every asset."""

    actor: Owner
    shares: Uint256
    min_amounts: list[Uint256] = Field(
        default_factory=lambda: [0] * N_COINS,
        alias="minAmounts",
        min_length=N_COINS,
        max_length=N_COINS,
    )

    model_config = {"populate_by_name": True}


class RemoveLiquidityOneTokenRequest(BaseModel):
    """Burn shares for a single asset."""

    actor: Owner
    shares: Uint256
    asset_index: int = Field(alias="assetIndex")
    min_amount_out: Uint256 = Field(default=0, alias="minAmountOut")

    model_config = {"populate_by_name": True}


class FaucetRequest(BaseModel):
    """Mint test balances on the in-memory ledgers."""

    owner: Owner
    amounts: list[Uint256] = Field(min_length=N_COINS, max_length=N_COINS)
