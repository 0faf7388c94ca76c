"""Exchange view-method clients.

ExchangeClient is the seam between the quoting engine and the chain: the
repository lists and fetches pools through it, and the router asks it for
authoritative swap returns. NearExchangeClient talks NEAR JSON-RPC over httpx;
tests use an in-memory implementation.
"""

from __future__ import annotations

import base64
import json
from typing import Any, Protocol

import httpx
import structlog

from refquote.errors import InvalidRpcResponse, RpcError
from refquote.rpc.retry import is_transient_rpc_error

logger = structlog.get_logger()


class ExchangeClient(Protocol):
    """Read-only view calls against an exchange contract."""

    @property
    def endpoint(self) -> str:
        """Backend identifier used to annotate errors."""
        ...

    def list_pools(self, contract_id: str, from_index: int, limit: int) -> list[Any]:
        """Raw pool records [from_index, from_index + limit)."""
        ...

    def get_pool(self, contract_id: str, pool_id: int) -> Any | None:
        """Raw record of a single pool, None if the contract returns null."""
        ...

    def get_return(
        self,
        contract_id: str,
        pool_id: int,
        token_in: str,
        token_out: str,
        amount_in: int,
    ) -> str:
        """Exact output the contract would produce, as a decimal string."""
        ...


def encode_call_args(args: dict[str, Any]) -> str:
    """Base64 JSON encoding for call_function args."""
    return base64.b64encode(json.dumps(args, separators=(",", ":")).encode("utf-8")).decode("ascii")


def decode_call_result(payload: Any) -> Any:
    """Decode a call_function result (JSON serialized as a byte array).

    Raises:
        InvalidRpcResponse: If the payload is not a byte array holding JSON
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("result"), list):
        raise InvalidRpcResponse("Invalid call_function result payload")
    try:
        text = bytes(payload["result"]).decode("utf-8")
    except (ValueError, TypeError) as err:
        raise InvalidRpcResponse("call_function result is not a UTF-8 byte array") from err
    if not text.strip():
        raise InvalidRpcResponse("call_function returned empty payload")
    try:
        return json.loads(text)
    except json.JSONDecodeError as err:
        raise InvalidRpcResponse(f"call_function returned invalid JSON: {err}") from err


class NearExchangeClient:
    """NEAR JSON-RPC client for Ref-style exchange view methods.

    Endpoints are tried in order: a transient failure moves on to the next
    URL, any other failure is raised immediately. Retrying the whole call is
    left to RetryPolicy.
    """

    def __init__(
        self,
        rpc_urls: list[str],
        timeout_seconds: float = 10.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            rpc_urls: One or more JSON-RPC URLs, preferred first
            timeout_seconds: Per-request HTTP timeout
            http_client: Optional preconfigured httpx client (e.g. with a mock transport)
        """
        urls = [u.strip() for u in rpc_urls if u and u.strip()]
        if not urls:
            raise ValueError("At least one NEAR RPC URL is required")
        self._urls = urls
        self._http = http_client or httpx.Client(timeout=timeout_seconds)
        self._owns_http = http_client is None

    @property
    def endpoint(self) -> str:
        return self._urls[0] if len(self._urls) == 1 else ",".join(self._urls)

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> NearExchangeClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _post(self, url: str, body: dict[str, Any]) -> Any:
        response = self._http.post(url, json=body)
        if response.status_code != 200:
            raise RpcError(
                f"NEAR RPC request failed ({response.status_code} {response.reason_phrase})"
            )
        try:
            data = response.json()
        except ValueError as err:
            raise InvalidRpcResponse("Invalid NEAR RPC response payload") from err
        if not isinstance(data, dict):
            raise InvalidRpcResponse("Invalid NEAR RPC response payload")
        error = data.get("error")
        if error:
            code = error.get("code") if isinstance(error, dict) else None
            message = error.get("message") if isinstance(error, dict) else str(error)
            suffix = f" ({code})" if isinstance(code, int) else ""
            raise RpcError(f"NEAR RPC error{suffix}: {message or 'Unknown NEAR RPC error'}")
        if "result" not in data:
            raise InvalidRpcResponse("NEAR RPC response missing result")
        return data["result"]

    def call(self, method: str, params: dict[str, Any]) -> Any:
        """Send one JSON-RPC request, failing over across endpoints."""
        body = {"jsonrpc": "2.0", "id": "refquote", "method": method, "params": params}
        for url in self._urls[:-1]:
            try:
                return self._post(url, body)
            except Exception as e:
                if not is_transient_rpc_error(e):
                    raise
                logger.debug("near_rpc_endpoint_failed", url=url, method=method, error=str(e))
        # The last endpoint's error goes to the retry wrapper unchanged
        return self._post(self._urls[-1], body)

    def view(self, contract_id: str, method_name: str, args: dict[str, Any]) -> Any:
        """Call a contract view method at final finality and decode its JSON result."""
        result = self.call(
            "query",
            {
                "request_type": "call_function",
                "account_id": contract_id,
                "method_name": method_name,
                "args_base64": encode_call_args(args),
                "finality": "final",
            },
        )
        return decode_call_result(result)

    def list_pools(self, contract_id: str, from_index: int, limit: int) -> list[Any]:
        chunk = self.view(contract_id, "get_pools", {"from_index": from_index, "limit": limit})
        if chunk is None:
            return []
        if not isinstance(chunk, list):
            raise InvalidRpcResponse(f"get_pools returned {type(chunk).__name__}, expected list")
        return chunk

    def get_pool(self, contract_id: str, pool_id: int) -> Any | None:
        return self.view(contract_id, "get_pool", {"pool_id": pool_id})

    def get_return(
        self,
        contract_id: str,
        pool_id: int,
        token_in: str,
        token_out: str,
        amount_in: int,
    ) -> str:
        result = self.view(
            contract_id,
            "get_return",
            {
                "pool_id": pool_id,
                "token_in": token_in,
                "amount_in": str(amount_in),
                "token_out": token_out,
            },
        )
        if isinstance(result, int) and not isinstance(result, bool):
            return str(result)
        if not isinstance(result, str):
            raise InvalidRpcResponse(f"get_return returned {type(result).__name__}, expected string")
        return result


__all__ = [
    "ExchangeClient",
    "NearExchangeClient",
    "decode_call_result",
    "encode_call_args",
]
