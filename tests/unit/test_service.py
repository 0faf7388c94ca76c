"""Tests for the service facade."""

from collections.abc import Callable

import pytest

from refquote.config import RefConfig
from refquote.errors import InvalidAmount, InvalidInput
from refquote.models import NearNetwork, PoolPairRequest, SwapQuoteRequest
from refquote.routing.types import QuoteSource, SelectionSource
from refquote.rpc.client import NearExchangeClient
from refquote.service import RefQuoteService
from tests.helpers import TESTNET_CONTRACT, USDT, WNEAR, WNEAR_TESTNET, FakeExchangeClient, make_raw_pool

MakeService = Callable[..., RefQuoteService]


class TestQuoteSwap:
    def test_raw_amount(self, make_service: MakeService, fake_client: FakeExchangeClient) -> None:
        request = SwapQuoteRequest.model_validate(
            {"tokenInId": "NEAR", "tokenOutId": "USDT", "amountInRaw": str(10**24)}
        )
        quote = make_service(fake_client).quote_swap(request)
        assert quote.source == QuoteSource.BEST_DIRECT_SIMPLE_POOL
        assert quote.amount_in_raw == 10**24
        assert quote.token_in_id == WNEAR

    def test_human_amount_scaled(self, make_service: MakeService, fake_client: FakeExchangeClient) -> None:
        request = SwapQuoteRequest(token_in="NEAR", token_out="USDT", amount_in="1.5")
        quote = make_service(fake_client).quote_swap(request)
        assert quote.amount_in_raw == 15 * 10**23

    def test_human_amount_unknown_decimals(self, make_service: MakeService) -> None:
        request = SwapQuoteRequest(token_in="foo.near", token_out="USDT", amount_in="1")
        with pytest.raises(InvalidInput, match="amountInRaw"):
            make_service(FakeExchangeClient()).quote_swap(request)

    def test_human_amount_too_precise(self, make_service: MakeService, fake_client: FakeExchangeClient) -> None:
        request = SwapQuoteRequest(token_in="USDT", token_out="NEAR", amount_in="0.0000001")
        with pytest.raises(InvalidAmount):
            make_service(fake_client).quote_swap(request)

    def test_testnet_contract(self, make_service: MakeService) -> None:
        client = FakeExchangeClient([make_raw_pool(0, [WNEAR_TESTNET, "usdt.fakes.near"], [10**30, 10**12])])
        request = SwapQuoteRequest(
            network="testnet", token_in="NEAR", token_out="USDT", amount_in_raw="1000000000"
        )
        quote = make_service(client).quote_swap(request)
        assert quote.contract_id == TESTNET_CONTRACT
        assert quote.token_out_id == "usdt.fakes.near"

    def test_default_network_from_config(self, make_service: MakeService) -> None:
        client = FakeExchangeClient([make_raw_pool(0, [WNEAR_TESTNET, "usdt.fakes.near"], [10**30, 10**12])])
        config = RefConfig(default_network=NearNetwork.TESTNET)
        request = SwapQuoteRequest(token_in="NEAR", token_out="USDT", amount_in_raw="1000000000")
        assert make_service(client, config).quote_swap(request).contract_id == TESTNET_CONTRACT


class TestSelectPoolForPair:
    def test_selection(self, make_service: MakeService, fake_client: FakeExchangeClient) -> None:
        request = PoolPairRequest(token_a="NEAR", token_b="USDT")
        selection = make_service(fake_client).select_pool_for_pair(request)
        assert selection.pool_id == 0
        assert selection.source == SelectionSource.BEST_LIQUIDITY_POOL
        assert {selection.token_a_id, selection.token_b_id} == {WNEAR, USDT}


class TestFetchPools:
    def test_fetch(self, make_service: MakeService, fake_client: FakeExchangeClient) -> None:
        pools = make_service(fake_client).fetch_pools("mainnet")
        assert [p.id for p in pools] == [0]


class TestClients:
    def test_near_clients_built_from_config(self) -> None:
        config = RefConfig().with_overrides(rpc_urls={"mainnet": ["https://a.example", "https://b.example"]})
        service = RefQuoteService(config)
        try:
            client = service.router(NearNetwork.MAINNET).client
            assert isinstance(client, NearExchangeClient)
            assert client.endpoint == "https://a.example,https://b.example"
        finally:
            service.close()
