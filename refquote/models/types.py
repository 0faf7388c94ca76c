"""Shared type definitions for request and response models."""

from enum import Enum
from typing import Annotated, Any

from pydantic import BeforeValidator, Field


class NearNetwork(str, Enum):
    """Networks the exchange is deployed on."""

    MAINNET = "mainnet"
    TESTNET = "testnet"


DEFAULT_NETWORK = NearNetwork.MAINNET

# Aliases some callers use for mainnet
_NETWORK_ALIASES = {"mainnet-beta": NearNetwork.MAINNET}


def parse_network(value: str | NearNetwork | None) -> NearNetwork:
    """Parse a network name, defaulting to mainnet when omitted.

    Raises:
        ValueError: If the name is not a known network
    """
    if value is None:
        return DEFAULT_NETWORK
    if isinstance(value, NearNetwork):
        return value
    normalized = value.strip().lower()
    if not normalized:
        return DEFAULT_NETWORK
    if normalized in _NETWORK_ALIASES:
        return _NETWORK_ALIASES[normalized]
    try:
        return NearNetwork(normalized)
    except ValueError as err:
        valid = ", ".join(n.value for n in NearNetwork)
        raise ValueError(f"Unknown network '{value}' (expected one of: {valid})") from err


def is_account_like_token_id(value: str) -> bool:
    """Token contracts are NEAR accounts, which always contain a '.'."""
    return "." in value


def normalize_token_id(token_id: str) -> str:
    """Normalize an on-chain token id (account ids are case-insensitive)."""
    return token_id.strip().lower()


def normalize_symbol_key(value: str) -> str:
    """Lookup key for symbol/id tables: ids lower-cased, symbols upper-cased."""
    normalized = value.strip()
    if not normalized:
        return ""
    return normalized.lower() if is_account_like_token_id(normalized) else normalized.upper()


def validate_unsigned_string(value: Any) -> str:
    """Validate an unsigned integer given as int or digit string.

    Returns:
        The value as a decimal string

    Raises:
        ValueError: If value is negative, fractional or not numeric
    """
    if isinstance(value, bool):
        raise ValueError("Amount must be an integer string, got bool")
    if isinstance(value, int):
        if value < 0:
            raise ValueError(f"Amount cannot be negative: {value}")
        return str(value)
    if not isinstance(value, str):
        raise ValueError(f"Amount must be string or int, got {type(value).__name__}")
    normalized = value.strip()
    if not normalized.isascii() or not normalized.isdigit():
        raise ValueError(f"Amount must be an unsigned integer string: '{value}'")
    return normalized


# Unsigned integer as decimal string (raw token units)
RawAmount = Annotated[
    str,
    BeforeValidator(validate_unsigned_string),
    Field(description="Unsigned integer amount in raw token units, as decimal string"),
]

# Pool ids are u64 indexes into the exchange's pool list
PoolId = Annotated[int, Field(ge=0, le=2**64 - 1)]
