"""Entry points for quoting swaps and selecting liquidity pools.

RefQuoteService wires a config and one exchange client per network into the
repository, resolver, router and pool-pair selector. It is what the HTTP
layer (and any other tool layer) calls.
"""

from __future__ import annotations

import structlog

from refquote.amounts import scale_decimal_to_atomic
from refquote.config import RefConfig
from refquote.errors import InvalidInput
from refquote.models.pool import Pool
from refquote.models.requests import PoolPairRequest, SwapQuoteRequest
from refquote.models.types import NearNetwork
from refquote.pools.repository import PoolRepository
from refquote.routing.pair_selector import PoolPairSelector
from refquote.routing.router import SwapRouter
from refquote.routing.types import PoolPairSelection, SwapQuote
from refquote.rpc.client import ExchangeClient, NearExchangeClient
from refquote.rpc.retry import RetryPolicy
from refquote.tokens.resolver import TokenResolver, coerce_network

logger = structlog.get_logger()


class RefQuoteService:
    """Swap quoting and pool selection over one or more networks."""

    def __init__(
        self,
        config: RefConfig | None = None,
        client: ExchangeClient | None = None,
        retry: RetryPolicy | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            config: Engine configuration; defaults to built-in network settings
            client: Exchange client used for every network. When omitted, one
                NearExchangeClient is created per network from config.rpc_urls.
            retry: Retry policy; defaults to config.retry
        """
        self.config = config if config is not None else RefConfig()
        self.retry = retry if retry is not None else RetryPolicy.from_settings(self.config.retry)
        self.resolver = TokenResolver(self.config)
        self._owned_clients: list[NearExchangeClient] = []
        self._clients: dict[NearNetwork, ExchangeClient] = {}

        for network in NearNetwork:
            if client is not None:
                self._clients[network] = client
                continue
            urls = self.config.rpc_endpoints(network)
            if urls:
                near_client = NearExchangeClient(urls, timeout_seconds=self.config.rpc_timeout_seconds)
                self._owned_clients.append(near_client)
                self._clients[network] = near_client

    def close(self) -> None:
        for client in self._owned_clients:
            client.close()

    def _client(self, network: NearNetwork) -> ExchangeClient:
        try:
            return self._clients[network]
        except KeyError:
            raise InvalidInput(f"No RPC endpoint configured for {network.value}") from None

    def repository(self, network: NearNetwork) -> PoolRepository:
        return PoolRepository(
            self._client(network),
            retry=self.retry,
            page_size=self.config.page_size,
            max_pages=self.config.max_pages,
        )

    def router(self, network: NearNetwork) -> SwapRouter:
        return SwapRouter(
            self.repository(network),
            self.resolver,
            self._client(network),
            retry=self.retry,
            config=self.config,
        )

    def selector(self, network: NearNetwork) -> PoolPairSelector:
        return PoolPairSelector(self.repository(network), self.resolver, config=self.config)

    def resolve_amount_in(self, network: NearNetwork, request: SwapQuoteRequest) -> str | int:
        """Raw input amount, scaling a human amount by the token's configured decimals."""
        if request.amount_in_raw is not None:
            return request.amount_in_raw
        human_amount = request.amount_in or ""
        decimals = self.resolver.decimals_hint(network, request.token_in)
        if decimals is None:
            raise InvalidInput(
                f"Decimals for {request.token_in.strip()} on {network.value} are not configured; "
                "provide amountInRaw instead"
            )
        return scale_decimal_to_atomic(human_amount, decimals, "amountIn")

    def quote_swap(self, request: SwapQuoteRequest) -> SwapQuote:
        """Quote an exact-input swap; see SwapRouter.quote_swap."""
        network = coerce_network(request.network or self.config.default_network)
        amount_in = self.resolve_amount_in(network, request)
        return self.router(network).quote_swap(
            network,
            request.token_in,
            request.token_out,
            amount_in,
            pool_id=request.pool_id,
            slippage_bps=request.slippage_bps,
            contract_id=request.contract_id,
        )

    def select_pool_for_pair(self, request: PoolPairRequest) -> PoolPairSelection:
        """Pick a pool for a liquidity operation; see PoolPairSelector."""
        network = coerce_network(request.network or self.config.default_network)
        return self.selector(network).find_best_pool_for_pair(
            network,
            request.token_a,
            request.token_b,
            pool_id=request.pool_id,
            max_candidates=request.max_candidates,
            contract_id=request.contract_id,
        )

    def fetch_pools(
        self,
        network: str | NearNetwork | None = None,
        contract_id: str | None = None,
    ) -> list[Pool]:
        """Every pool on the network's exchange contract."""
        net = coerce_network(network or self.config.default_network)
        contract = self.config.contract_id(net, contract_id)
        pools = self.repository(net).fetch_pools(contract)
        logger.debug("service_pools_listed", network=net.value, pools=len(pools))
        return pools


__all__ = ["RefQuoteService"]
