"""Error taxonomy for quoting and pool selection.

Every failure surfaced by the engine is a RefQuoteError subclass carrying a
stable machine-readable ``code``. Only RpcTransientError is ever the product
of a retry loop; everything else is raised on first occurrence.
"""

from __future__ import annotations

from typing import ClassVar


class RefQuoteError(Exception):
    """Base error for quoting operations."""

    code: ClassVar[str] = "ref_quote_error"


class InvalidInput(RefQuoteError, ValueError):
    """Caller supplied a malformed parameter (slippage, pool id, network...)."""

    code = "invalid_input"


class InvalidAmount(InvalidInput):
    """Malformed, zero or negative numeric amount."""

    code = "invalid_amount"


class UnknownSymbol(RefQuoteError):
    """No token id is configured for a symbol on the requested network."""

    code = "unknown_symbol"

    def __init__(self, symbol: str, network: str) -> None:
        super().__init__(
            f"Unknown token symbol: {symbol} on {network}. "
            "Provide the token contract id directly or configure a symbol mapping."
        )
        self.symbol = symbol
        self.network = network


class PoolNotFound(RefQuoteError):
    """The exchange returned nothing usable for a pool id."""

    code = "pool_not_found"

    def __init__(self, pool_id: int, contract_id: str, reason: str | None = None) -> None:
        message = f"Pool {pool_id} not found on {contract_id}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.pool_id = pool_id
        self.contract_id = contract_id


class PoolPairMismatch(RefQuoteError):
    """An explicitly requested pool does not hold the requested token pair."""

    code = "pool_pair_mismatch"


class NoRouteFound(RefQuoteError):
    """Exhaustive route search produced no route with positive output."""

    code = "no_route_found"


class NoPoolForPair(RefQuoteError):
    """No pool holds both tokens of the requested pair."""

    code = "no_pool_for_pair"


class QuoteTimeout(RefQuoteError):
    """The request-scoped deadline expired before the search completed."""

    code = "quote_timeout"


class RpcError(RefQuoteError):
    """Remote call failed with an error that retrying will not fix."""

    code = "rpc_error"


class InvalidRpcResponse(RpcError):
    """Remote call succeeded but returned a payload of the wrong shape."""

    code = "invalid_rpc_response"


class RpcTransientError(RpcError):
    """Transient backend fault that persisted through every retry attempt."""

    code = "rpc_transient"

    def __init__(self, endpoint: str, attempts: int, last_error: BaseException) -> None:
        super().__init__(
            f"RPC call to {endpoint} failed after {attempts} attempt(s): {last_error}"
        )
        self.endpoint = endpoint
        self.attempts = attempts
        self.last_error = last_error


__all__ = [
    "RefQuoteError",
    "InvalidInput",
    "InvalidAmount",
    "UnknownSymbol",
    "PoolNotFound",
    "PoolPairMismatch",
    "NoRouteFound",
    "NoPoolForPair",
    "QuoteTimeout",
    "RpcError",
    "InvalidRpcResponse",
    "RpcTransientError",
]
