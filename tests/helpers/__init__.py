"""Test helpers module for shared test utilities.

- constants: Token ids and contract ids
- factories: Pool factory functions
- fake_client: In-memory ExchangeClient
"""

from tests.helpers.constants import (
    AURORA,
    ETH,
    MAINNET_CONTRACT,
    REF,
    TESTNET_CONTRACT,
    USDC,
    USDC_FAKE,
    USDC_NATIVE,
    USDT,
    WNEAR,
    WNEAR_TESTNET,
)
from tests.helpers.factories import make_pool, make_raw_pool
from tests.helpers.fake_client import FakeExchangeClient

__all__ = [
    # Constants
    "WNEAR",
    "USDT",
    "USDC",
    "USDC_NATIVE",
    "USDC_FAKE",
    "AURORA",
    "REF",
    "ETH",
    "WNEAR_TESTNET",
    "MAINNET_CONTRACT",
    "TESTNET_CONTRACT",
    # Factories
    "make_pool",
    "make_raw_pool",
    # Fakes
    "FakeExchangeClient",
]
