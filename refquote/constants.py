"""Exchange constants and built-in network defaults.

Centralizes fee arithmetic parameters, search limits and the default
contract ids / symbol tables that RefConfig layers caller overrides on top of.
"""

# Fees and slippage are expressed in basis points of this divisor
FEE_DIVISOR = 10_000

DEFAULT_SLIPPAGE_BPS = 50
MAX_SLIPPAGE_BPS = 5_000

# Pool listing pagination (get_pools from_index/limit)
DEFAULT_POOL_PAGE_SIZE = 200
MAX_POOL_PAGE_SIZE = 300
# Runaway-loop guard: 40 pages * 300 = 12k pools
MAX_POOL_PAGES = 40

DEFAULT_POOL_PAIR_CANDIDATES = 3
MAX_POOL_PAIR_CANDIDATES = 10

# Retry wrapper
DEFAULT_RETRY_ATTEMPTS = 3
MAX_RETRY_ATTEMPTS = 4
RETRY_BASE_DELAY_SECONDS = 0.15

# Fan-out of authoritative quotes
DEFAULT_MAX_CONCURRENCY = 4
MAX_CONCURRENCY = 8

SIMPLE_POOL_KIND = "SIMPLE_POOL"


def _validate_token_id(name: str, token_id: str) -> str:
    """Validate a built-in token id at import time to catch typos early."""
    if "." not in token_id or token_id != token_id.lower():
        raise ValueError(f"Invalid {name} token id: {token_id} (must be a lower-case account id)")
    return token_id


WRAP_NEAR = _validate_token_id("WRAP_NEAR", "wrap.near")
WRAP_TESTNET = _validate_token_id("WRAP_TESTNET", "wrap.testnet")
USDT_MAINNET = _validate_token_id("USDT_MAINNET", "usdt.tether-token.near")
USDC_MAINNET = _validate_token_id(
    "USDC_MAINNET", "a0b86991c6218b36c1d19d4a2e9eb0ce3606eb48.factory.bridge.near"
)
USDC_TETHER_MAINNET = _validate_token_id("USDC_TETHER_MAINNET", "usdc.tether-token.near")
USDC_FAKES = _validate_token_id("USDC_FAKES", "usdc.fakes.near")
USDT_FAKES = _validate_token_id("USDT_FAKES", "usdt.fakes.near")
USDT_TESTNET = _validate_token_id("USDT_TESTNET", "usdt.tether-token.testnet")

DEFAULT_CONTRACT_IDS: dict[str, str] = {
    "mainnet": "v2.ref-finance.near",
    "testnet": "ref-finance-101.testnet",
}

DEFAULT_RPC_URLS: dict[str, list[str]] = {
    "mainnet": ["https://rpc.mainnet.near.org"],
    "testnet": ["https://rpc.testnet.near.org"],
}

# Symbol -> candidate token ids, most likely first
DEFAULT_TOKEN_MAP: dict[str, dict[str, list[str]]] = {
    "mainnet": {
        "NEAR": [WRAP_NEAR],
        "WNEAR": [WRAP_NEAR],
        "USDT": [USDT_MAINNET],
        "USDC": [USDC_MAINNET, USDC_TETHER_MAINNET, USDC_FAKES],
    },
    "testnet": {
        "NEAR": [WRAP_TESTNET],
        "WNEAR": [WRAP_TESTNET],
        "USDT": [USDT_FAKES, USDT_TESTNET],
        "USDC": [USDC_FAKES],
    },
}

DEFAULT_TOKEN_DECIMALS: dict[str, dict[str, int]] = {
    "mainnet": {
        "NEAR": 24,
        "WNEAR": 24,
        WRAP_NEAR: 24,
        "USDT": 6,
        USDT_MAINNET: 6,
        "USDC": 6,
        USDC_TETHER_MAINNET: 6,
        USDC_FAKES: 6,
        USDC_MAINNET: 6,
    },
    "testnet": {
        "NEAR": 24,
        "WNEAR": 24,
        WRAP_TESTNET: 24,
        "USDT": 6,
        USDT_FAKES: 6,
        USDT_TESTNET: 6,
        "USDC": 6,
        USDC_FAKES: 6,
    },
}
