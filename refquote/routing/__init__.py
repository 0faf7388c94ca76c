"""Route search and pool selection."""

from refquote.routing.fanout import Deadline, TaskOutcome, run_bounded
from refquote.routing.pair_selector import PoolPairSelector
from refquote.routing.router import SwapRouter
from refquote.routing.types import (
    HopAction,
    PoolPairCandidate,
    PoolPairSelection,
    QuoteSource,
    SelectionSource,
    SwapQuote,
)

__all__ = [
    "Deadline",
    "HopAction",
    "PoolPairCandidate",
    "PoolPairSelection",
    "PoolPairSelector",
    "QuoteSource",
    "SelectionSource",
    "SwapQuote",
    "SwapRouter",
    "TaskOutcome",
    "run_bounded",
]
