"""Pytest configuration and fixtures."""

from collections.abc import Callable

import pytest

from refquote.config import RefConfig
from refquote.pools.repository import PoolRepository
from refquote.routing.pair_selector import PoolPairSelector
from refquote.routing.router import SwapRouter
from refquote.rpc.retry import RetryPolicy
from refquote.service import RefQuoteService
from refquote.tokens.resolver import TokenResolver
from tests.helpers import USDT, WNEAR, FakeExchangeClient, make_raw_pool


class SleepRecorder:
    """Stands in for time.sleep and records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def retry(sleeper: SleepRecorder) -> RetryPolicy:
    """Default retry policy that never actually sleeps."""
    return RetryPolicy(sleep=sleeper)


@pytest.fixture
def config() -> RefConfig:
    return RefConfig()


@pytest.fixture
def resolver(config: RefConfig) -> TokenResolver:
    return TokenResolver(config)


@pytest.fixture
def fake_client() -> FakeExchangeClient:
    """Exchange with a single WNEAR/USDT simple pool."""
    return FakeExchangeClient([make_raw_pool(0, [WNEAR, USDT], [10**30, 5 * 10**12])])


@pytest.fixture
def make_router(
    retry: RetryPolicy,
) -> Callable[..., SwapRouter]:
    """Build a SwapRouter over a fake client, optionally with a custom config."""

    def _make(client: FakeExchangeClient, config: RefConfig | None = None) -> SwapRouter:
        cfg = config or RefConfig()
        repository = PoolRepository(client, retry=retry)
        return SwapRouter(repository, TokenResolver(cfg), client, retry=retry, config=cfg)

    return _make


@pytest.fixture
def make_selector(retry: RetryPolicy) -> Callable[..., PoolPairSelector]:
    def _make(client: FakeExchangeClient, config: RefConfig | None = None) -> PoolPairSelector:
        cfg = config or RefConfig()
        return PoolPairSelector(PoolRepository(client, retry=retry), TokenResolver(cfg), config=cfg)

    return _make


@pytest.fixture
def make_service(retry: RetryPolicy) -> Callable[..., RefQuoteService]:
    def _make(client: FakeExchangeClient, config: RefConfig | None = None) -> RefQuoteService:
        return RefQuoteService(config or RefConfig(), client=client, retry=retry)

    return _make
