"""Tests for the HTTP endpoints.

The service dependency is overridden with one backed by FakeExchangeClient,
so no network access happens.
"""

from collections.abc import Callable, Iterator

import pytest
from fastapi.testclient import TestClient

from refquote import __version__, errors
from refquote.api.endpoints import STATUS_BY_CODE, get_service
from refquote.api.main import app
from refquote.config import RefConfig
from refquote.errors import RpcError
from refquote.service import RefQuoteService
from tests.helpers import ETH, MAINNET_CONTRACT, USDT, WNEAR, FakeExchangeClient


@pytest.fixture
def client(
    make_service: Callable[..., RefQuoteService],
    fake_client: FakeExchangeClient,
) -> Iterator[TestClient]:
    service = make_service(fake_client)
    app.dependency_overrides[get_service] = lambda: service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def expected_out(amount_in: int) -> int:
    after_fee = amount_in * 9970 // 10000
    return after_fee * 5 * 10**12 // (10**30 + after_fee)


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "version": __version__}


class TestQuoteEndpoint:
    def test_quote(self, client: TestClient) -> None:
        response = client.post(
            "/mainnet/quote",
            json={"tokenInId": "NEAR", "tokenOutId": "USDT", "amountInRaw": str(10**24)},
        )
        assert response.status_code == 200
        body = response.json()
        out = expected_out(10**24)
        assert body["refContractId"] == MAINNET_CONTRACT
        assert body["poolId"] == 0
        assert body["tokenInId"] == WNEAR
        assert body["tokenOutId"] == USDT
        assert body["amountOutRaw"] == str(out)
        assert body["minAmountOutRaw"] == str(out * 9950 // 10000)
        assert body["feeBps"] == 30
        assert body["slippageBps"] == 50
        assert body["source"] == "bestDirectSimplePool"
        assert body["actions"] == [
            {
                "poolId": 0,
                "tokenInId": WNEAR,
                "tokenOutId": USDT,
                "amountInRaw": str(10**24),
                "amountOutRaw": str(out),
            }
        ]

    def test_human_amount(self, client: TestClient) -> None:
        response = client.post(
            "/mainnet/quote",
            json={"tokenInId": "NEAR", "tokenOutId": "USDT", "amountIn": "1"},
        )
        assert response.status_code == 200
        assert response.json()["amountInRaw"] == str(10**24)

    def test_missing_amount_is_schema_error(self, client: TestClient) -> None:
        response = client.post("/mainnet/quote", json={"tokenInId": "NEAR", "tokenOutId": "USDT"})
        assert response.status_code == 422

    def test_unknown_symbol(self, client: TestClient) -> None:
        response = client.post(
            "/mainnet/quote",
            json={"tokenInId": "NOPE", "tokenOutId": "USDT", "amountInRaw": "100"},
        )
        assert response.status_code == 400
        assert response.json()["code"] == "unknown_symbol"

    def test_unknown_network(self, client: TestClient) -> None:
        response = client.post(
            "/devnet/quote",
            json={"tokenInId": "NEAR", "tokenOutId": "USDT", "amountInRaw": "100"},
        )
        assert response.status_code == 400
        assert response.json()["code"] == "invalid_input"

    def test_no_route(self, client: TestClient) -> None:
        response = client.post(
            "/mainnet/quote",
            json={"tokenInId": "NEAR", "tokenOutId": ETH, "amountInRaw": "100"},
        )
        assert response.status_code == 404
        assert response.json()["code"] == "no_route_found"

    def test_transient_rpc_failure(self, client: TestClient, fake_client: FakeExchangeClient) -> None:
        fake_client.list_pools_errors = [RpcError("503 Service Unavailable") for _ in range(3)]
        response = client.post(
            "/mainnet/quote",
            json={"tokenInId": "NEAR", "tokenOutId": "USDT", "amountInRaw": "100"},
        )
        assert response.status_code == 503
        assert response.json()["code"] == "rpc_transient"

    def test_unexpected_error(self, client: TestClient, fake_client: FakeExchangeClient) -> None:
        fake_client.list_pools_errors = [RuntimeError("boom")]
        response = client.post(
            "/mainnet/quote",
            json={"tokenInId": "NEAR", "tokenOutId": "USDT", "amountInRaw": "100"},
        )
        assert response.status_code == 500
        assert response.json() == {"code": "internal_error", "message": "Unexpected error"}


class TestPoolPairEndpoint:
    def test_pool_pair(self, client: TestClient) -> None:
        response = client.post("/mainnet/pool-pair", json={"tokenAId": "NEAR", "tokenBId": "USDT"})
        assert response.status_code == 200
        body = response.json()
        assert body["poolId"] == 0
        assert body["source"] == "bestLiquidityPool"
        assert body["liquidityScore"] == str(10**30 * 5 * 10**12)
        assert body["pool"]["token_account_ids"] == [WNEAR, USDT]
        assert [c["poolId"] for c in body["candidates"]] == [0]

    def test_no_pool(self, client: TestClient) -> None:
        response = client.post("/mainnet/pool-pair", json={"tokenAId": "NEAR", "tokenBId": ETH})
        assert response.status_code == 404
        assert response.json()["code"] == "no_pool_for_pair"


class TestPoolsEndpoint:
    def test_pools(self, client: TestClient) -> None:
        response = client.get("/mainnet/pools")
        assert response.status_code == 200
        assert response.json() == [
            {
                "id": 0,
                "token_account_ids": [WNEAR, USDT],
                "amounts": [str(10**30), str(5 * 10**12)],
                "total_fee": 30,
                "pool_kind": "SIMPLE_POOL",
            }
        ]


class TestStatusMapping:
    def test_every_error_code_mapped(self) -> None:
        codes = {
            cls.code
            for cls in vars(errors).values()
            if isinstance(cls, type)
            and issubclass(cls, errors.RefQuoteError)
            and cls is not errors.RefQuoteError
        }
        assert codes <= set(STATUS_BY_CODE)


class TestTimeouts:
    def test_timeout_without_deadline(
        self,
        make_service: Callable[..., RefQuoteService],
        fake_client: FakeExchangeClient,
    ) -> None:
        service = make_service(fake_client, RefConfig(quote_timeout_seconds=None))
        fake_client.list_pools_errors = [TimeoutError()]
        app.dependency_overrides[get_service] = lambda: service
        try:
            response = TestClient(app).post(
                "/mainnet/quote",
                json={"tokenInId": "NEAR", "tokenOutId": "USDT", "amountInRaw": "100"},
            )
        finally:
            app.dependency_overrides.clear()
        assert response.status_code == 504
        assert response.json() == {
            "code": "quote_timeout",
            "message": "quote_swap exceeded its time limit",
        }
