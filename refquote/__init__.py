"""Route quoting and pool selection for Ref-style constant-product exchanges."""

from refquote.config import HopFailurePolicy, RefConfig, RetrySettings
from refquote.errors import RefQuoteError
from refquote.models.requests import PoolPairRequest, SwapQuoteRequest
from refquote.routing.types import PoolPairSelection, QuoteSource, SwapQuote
from refquote.service import RefQuoteService

__version__ = "0.1.0"

__all__ = [
    "HopFailurePolicy",
    "PoolPairRequest",
    "PoolPairSelection",
    "QuoteSource",
    "RefConfig",
    "RefQuoteError",
    "RefQuoteService",
    "RetrySettings",
    "SwapQuote",
    "SwapQuoteRequest",
]
