"""Pydantic response models for the HTTP surface.

Amounts are serialized as decimal strings so 24-decimal values survive JSON
consumers that parse numbers as doubles.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from refquote.models.pool import Pool
from refquote.models.types import RawAmount
from refquote.routing.types import PoolPairCandidate, PoolPairSelection, SwapQuote


class HopActionModel(BaseModel):
    """One swap action, in the shape the exchange's swap message expects."""

    pool_id: int = Field(alias="poolId")
    token_in_id: str = Field(alias="tokenInId")
    token_out_id: str = Field(alias="tokenOutId")
    amount_in_raw: RawAmount = Field(alias="amountInRaw")
    amount_out_raw: RawAmount = Field(alias="amountOutRaw")

    model_config = {"populate_by_name": True}


class SwapQuoteResponse(BaseModel):
    """Serialized SwapQuote."""

    ref_contract_id: str = Field(alias="refContractId")
    pool_id: int = Field(alias="poolId")
    token_in_id: str = Field(alias="tokenInId")
    token_out_id: str = Field(alias="tokenOutId")
    amount_in_raw: RawAmount = Field(alias="amountInRaw")
    amount_out_raw: RawAmount = Field(alias="amountOutRaw")
    min_amount_out_raw: RawAmount = Field(alias="minAmountOutRaw")
    fee_bps: int = Field(alias="feeBps")
    slippage_bps: int = Field(alias="slippageBps")
    source: str
    actions: list[HopActionModel]

    model_config = {"populate_by_name": True}

    @classmethod
    def from_quote(cls, quote: SwapQuote) -> SwapQuoteResponse:
        return cls(
            ref_contract_id=quote.contract_id,
            pool_id=quote.pool_id,
            token_in_id=quote.token_in_id,
            token_out_id=quote.token_out_id,
            amount_in_raw=str(quote.amount_in_raw),
            amount_out_raw=str(quote.amount_out_raw),
            min_amount_out_raw=str(quote.min_amount_out_raw),
            fee_bps=quote.fee_bps,
            slippage_bps=quote.slippage_bps,
            source=quote.source.value,
            actions=[
                HopActionModel(
                    pool_id=a.pool_id,
                    token_in_id=a.token_in_id,
                    token_out_id=a.token_out_id,
                    amount_in_raw=str(a.amount_in_raw),
                    amount_out_raw=str(a.amount_out_raw),
                )
                for a in quote.actions
            ],
        )


class PoolViewModel(BaseModel):
    """Pool snapshot in the exchange's own field names."""

    id: int
    token_account_ids: list[str]
    amounts: list[RawAmount]
    total_fee: int
    pool_kind: str | None = None

    @classmethod
    def from_pool(cls, pool: Pool) -> PoolViewModel:
        return cls(
            id=pool.id,
            token_account_ids=list(pool.token_ids),
            amounts=[str(r) for r in pool.reserves],
            total_fee=pool.total_fee_bps,
            pool_kind=pool.kind_label,
        )


class PoolPairCandidateModel(BaseModel):
    pool_id: int = Field(alias="poolId")
    pool_kind: str | None = Field(default=None, alias="poolKind")
    token_a_id: str = Field(alias="tokenAId")
    token_b_id: str = Field(alias="tokenBId")
    liquidity_score: RawAmount = Field(alias="liquidityScore")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_candidate(cls, candidate: PoolPairCandidate) -> PoolPairCandidateModel:
        return cls(
            pool_id=candidate.pool_id,
            pool_kind=candidate.pool_kind,
            token_a_id=candidate.token_a_id,
            token_b_id=candidate.token_b_id,
            liquidity_score=str(candidate.liquidity_score),
        )


class PoolPairSelectionResponse(BaseModel):
    """Serialized PoolPairSelection."""

    ref_contract_id: str = Field(alias="refContractId")
    pool_id: int = Field(alias="poolId")
    pool_kind: str | None = Field(default=None, alias="poolKind")
    token_a_id: str = Field(alias="tokenAId")
    token_b_id: str = Field(alias="tokenBId")
    liquidity_score: RawAmount = Field(alias="liquidityScore")
    source: str
    pool: PoolViewModel
    candidates: list[PoolPairCandidateModel]

    model_config = {"populate_by_name": True}

    @classmethod
    def from_selection(cls, selection: PoolPairSelection) -> PoolPairSelectionResponse:
        return cls(
            ref_contract_id=selection.contract_id,
            pool_id=selection.pool_id,
            pool_kind=selection.pool_kind,
            token_a_id=selection.token_a_id,
            token_b_id=selection.token_b_id,
            liquidity_score=str(selection.liquidity_score),
            source=selection.source.value,
            pool=PoolViewModel.from_pool(selection.pool),
            candidates=[PoolPairCandidateModel.from_candidate(c) for c in selection.candidates],
        )


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    code: str
    message: str


__all__ = [
    "HopActionModel",
    "SwapQuoteResponse",
    "PoolViewModel",
    "PoolPairCandidateModel",
    "PoolPairSelectionResponse",
    "ErrorResponse",
]
