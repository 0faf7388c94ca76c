"""Tests for the NEAR JSON-RPC exchange client, over httpx.MockTransport."""

import base64
import json
from collections.abc import Callable

import httpx
import pytest

from refquote.errors import InvalidRpcResponse, RpcError
from refquote.rpc import NearExchangeClient, decode_call_result, encode_call_args
from tests.helpers import MAINNET_CONTRACT, USDT, WNEAR

Handler = Callable[[httpx.Request], httpx.Response]


def call_result(value: object) -> dict:
    """JSON-RPC success body carrying a call_function result."""
    payload = list(json.dumps(value).encode("utf-8"))
    return {"jsonrpc": "2.0", "id": "refquote", "result": {"result": payload, "logs": []}}


def make_client(handler: Handler, urls: list[str] | None = None) -> NearExchangeClient:
    http = httpx.Client(transport=httpx.MockTransport(handler))
    return NearExchangeClient(urls or ["https://rpc.one"], http_client=http)


def decoded_args(request: httpx.Request) -> dict:
    body = json.loads(request.content)
    return json.loads(base64.b64decode(body["params"]["args_base64"]))


class TestCallEncoding:
    def test_round_trip_args(self) -> None:
        encoded = encode_call_args({"pool_id": 3})
        assert json.loads(base64.b64decode(encoded)) == {"pool_id": 3}

    def test_decode_result(self) -> None:
        assert decode_call_result(call_result("42")["result"]) == "42"

    @pytest.mark.parametrize(
        "payload",
        [None, {}, {"result": "abc"}, {"result": []}, {"result": list(b"   ")}, {"result": list(b"{")}],
    )
    def test_decode_invalid(self, payload: object) -> None:
        with pytest.raises(InvalidRpcResponse):
            decode_call_result(payload)


class TestViewCalls:
    """View methods are sent as call_function queries at final finality."""

    def test_get_pools_request_shape(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=call_result([{"id": 0}]))

        with make_client(handler) as client:
            assert client.list_pools(MAINNET_CONTRACT, 200, 100) == [{"id": 0}]

        body = json.loads(seen[0].content)
        assert body["method"] == "query"
        params = body["params"]
        assert params["request_type"] == "call_function"
        assert params["account_id"] == MAINNET_CONTRACT
        assert params["method_name"] == "get_pools"
        assert params["finality"] == "final"
        assert decoded_args(seen[0]) == {"from_index": 200, "limit": 100}

    def test_get_return_sends_amount_as_string(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=call_result("19743"))

        client = make_client(handler)
        assert client.get_return(MAINNET_CONTRACT, 7, WNEAR, USDT, 10**24) == "19743"
        assert decoded_args(seen[0]) == {
            "pool_id": 7,
            "token_in": WNEAR,
            "amount_in": str(10**24),
            "token_out": USDT,
        }

    def test_get_pool_null(self) -> None:
        client = make_client(lambda request: httpx.Response(200, json=call_result(None)))
        assert client.get_pool(MAINNET_CONTRACT, 99) is None

    def test_get_pools_wrong_shape(self) -> None:
        client = make_client(lambda request: httpx.Response(200, json=call_result({"id": 0})))
        with pytest.raises(InvalidRpcResponse):
            client.list_pools(MAINNET_CONTRACT, 0, 10)


class TestErrors:
    def test_http_status(self) -> None:
        client = make_client(lambda request: httpx.Response(503))
        with pytest.raises(RpcError, match=r"NEAR RPC request failed \(503 Service Unavailable\)"):
            client.get_pool(MAINNET_CONTRACT, 1)

    def test_json_rpc_error(self) -> None:
        body = {"jsonrpc": "2.0", "id": "refquote", "error": {"code": -32000, "message": "Server error"}}
        client = make_client(lambda request: httpx.Response(200, json=body))
        with pytest.raises(RpcError, match=r"NEAR RPC error \(-32000\): Server error"):
            client.get_pool(MAINNET_CONTRACT, 1)

    def test_non_json_body(self) -> None:
        client = make_client(lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(InvalidRpcResponse):
            client.get_pool(MAINNET_CONTRACT, 1)

    def test_requires_url(self) -> None:
        with pytest.raises(ValueError):
            NearExchangeClient([" "])


class TestFailover:
    """Transient failures move on to the next endpoint."""

    def test_second_endpoint_used(self) -> None:
        hosts: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            hosts.append(request.url.host)
            if request.url.host == "rpc.one":
                return httpx.Response(429)
            return httpx.Response(200, json=call_result("5"))

        client = make_client(handler, ["https://rpc.one", "https://rpc.two"])
        assert client.get_return(MAINNET_CONTRACT, 1, WNEAR, USDT, 1) == "5"
        assert hosts == ["rpc.one", "rpc.two"]

    def test_non_transient_error_stops_failover(self) -> None:
        hosts: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            hosts.append(request.url.host)
            return httpx.Response(404)

        client = make_client(handler, ["https://rpc.one", "https://rpc.two"])
        with pytest.raises(RpcError, match="404"):
            client.get_pool(MAINNET_CONTRACT, 1)
        assert hosts == ["rpc.one"]

    def test_all_endpoints_failing(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler, ["https://rpc.one", "https://rpc.two"])
        with pytest.raises(httpx.ConnectError):
            client.get_pool(MAINNET_CONTRACT, 1)
        assert client.endpoint == "https://rpc.one,https://rpc.two"
