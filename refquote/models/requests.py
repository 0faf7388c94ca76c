"""Pydantic models for quoting and pool-selection requests.

Field aliases follow the camelCase names agent tool layers already send
(tokenInId, amountInRaw, refContractId...); snake_case names are accepted too.
"""

from pydantic import BaseModel, Field, model_validator

from refquote.models.types import PoolId, RawAmount


class SwapQuoteRequest(BaseModel):
    """Input to quote_swap."""

    network: str | None = Field(default=None, description="mainnet or testnet (default mainnet).")
    token_in: str = Field(alias="tokenInId", min_length=1, description="Symbol or token id to sell.")
    token_out: str = Field(alias="tokenOutId", min_length=1, description="Symbol or token id to buy.")
    amount_in_raw: RawAmount | None = Field(
        default=None,
        alias="amountInRaw",
        description="Input amount in raw token units.",
    )
    amount_in: str | None = Field(
        default=None,
        alias="amountIn",
        description="Input amount in human units, scaled with the token's configured decimals.",
    )
    pool_id: PoolId | None = Field(default=None, alias="poolId")
    slippage_bps: int | None = Field(default=None, alias="slippageBps")
    contract_id: str | None = Field(default=None, alias="refContractId")

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _require_one_amount(self) -> "SwapQuoteRequest":
        if (self.amount_in_raw is None) == (self.amount_in is None):
            raise ValueError("Provide exactly one of amountInRaw or amountIn")
        return self


class PoolPairRequest(BaseModel):
    """Input to select_pool_for_pair."""

    network: str | None = None
    token_a: str = Field(alias="tokenAId", min_length=1)
    token_b: str = Field(alias="tokenBId", min_length=1)
    pool_id: PoolId | None = Field(default=None, alias="poolId")
    max_candidates: int | None = Field(default=None, alias="maxCandidates")
    contract_id: str | None = Field(default=None, alias="refContractId")

    model_config = {"populate_by_name": True}


__all__ = ["SwapQuoteRequest", "PoolPairRequest"]
