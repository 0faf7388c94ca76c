"""RPC access to exchange contracts."""

from refquote.rpc.client import ExchangeClient, NearExchangeClient, decode_call_result, encode_call_args
from refquote.rpc.retry import RetryPolicy, is_transient_rpc_error

__all__ = [
    "ExchangeClient",
    "NearExchangeClient",
    "RetryPolicy",
    "decode_call_result",
    "encode_call_args",
    "is_transient_rpc_error",
]
