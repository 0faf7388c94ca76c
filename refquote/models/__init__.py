"""Data models for pools and quoting requests."""

from refquote.models.pool import (
    InvalidPoolRecord,
    Pool,
    PoolKind,
    RawPoolRecord,
    normalize_pool_record,
    parse_fee_bps,
)
from refquote.models.requests import PoolPairRequest, SwapQuoteRequest
from refquote.models.types import (
    DEFAULT_NETWORK,
    NearNetwork,
    is_account_like_token_id,
    normalize_symbol_key,
    normalize_token_id,
    parse_network,
)

__all__ = [
    "DEFAULT_NETWORK",
    "InvalidPoolRecord",
    "NearNetwork",
    "Pool",
    "PoolKind",
    "PoolPairRequest",
    "RawPoolRecord",
    "SwapQuoteRequest",
    "is_account_like_token_id",
    "normalize_pool_record",
    "normalize_symbol_key",
    "normalize_token_id",
    "parse_fee_bps",
    "parse_network",
]
