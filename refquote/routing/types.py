"""Type definitions for routing module."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from refquote.models.pool import Pool


class QuoteSource(str, Enum):
    """Which route-search strategy produced a quote."""

    EXPLICIT_POOL = "explicitPool"
    BEST_DIRECT_SIMPLE_POOL = "bestDirectSimplePool"
    BEST_DIRECT_POOL = "bestDirectPool"
    BEST_TWO_HOP_ROUTE = "bestTwoHopPoolRoute"


class SelectionSource(str, Enum):
    """How a pool was chosen for a liquidity operation."""

    EXPLICIT_POOL = "explicitPool"
    BEST_LIQUIDITY_POOL = "bestLiquidityPool"


@dataclass
class HopAction:
    """One leg of a swap: a single pool, one token in, one token out."""

    pool_id: int
    token_in_id: str
    token_out_id: str
    # First hop: the full request input. Later hops: the previous hop's output.
    amount_in_raw: int
    amount_out_raw: int


@dataclass
class SwapQuote:
    """Result of route search."""

    contract_id: str
    pool_id: int  # First hop pool
    token_in_id: str
    token_out_id: str
    amount_in_raw: int
    amount_out_raw: int
    min_amount_out_raw: int
    fee_bps: int  # Summed over hops
    source: QuoteSource
    actions: list[HopAction]
    slippage_bps: int

    @property
    def pool_ids(self) -> list[int]:
        return [action.pool_id for action in self.actions]


@dataclass
class PoolPairCandidate:
    """A pool able to serve a token pair, with its liquidity depth."""

    pool_id: int
    pool_kind: str | None
    token_a_id: str
    token_b_id: str
    liquidity_score: int  # reserve(a) * reserve(b)


@dataclass
class PoolPairSelection:
    """Chosen pool for add/remove liquidity, plus the ranking it won."""

    contract_id: str
    pool_id: int
    pool_kind: str | None
    token_a_id: str
    token_b_id: str
    liquidity_score: int
    source: SelectionSource
    pool: Pool
    candidates: list[PoolPairCandidate] = field(default_factory=list)


__all__ = [
    "QuoteSource",
    "SelectionSource",
    "HopAction",
    "SwapQuote",
    "PoolPairCandidate",
    "PoolPairSelection",
]
