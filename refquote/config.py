"""Explicit configuration for the quoting engine.

RefConfig is built once and passed into the resolver, repository and router.
Built-in network defaults sit underneath caller overrides; nothing in the
engine reads environment variables (see refquote.api.settings for that).
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from refquote.constants import (
    DEFAULT_CONTRACT_IDS,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_POOL_PAGE_SIZE,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_RPC_URLS,
    DEFAULT_SLIPPAGE_BPS,
    DEFAULT_TOKEN_DECIMALS,
    DEFAULT_TOKEN_MAP,
    MAX_CONCURRENCY,
    MAX_POOL_PAGE_SIZE,
    MAX_POOL_PAGES,
    MAX_RETRY_ATTEMPTS,
    MAX_SLIPPAGE_BPS,
    RETRY_BASE_DELAY_SECONDS,
)
from refquote.models.types import NearNetwork, normalize_symbol_key, parse_network


class HopFailurePolicy(str, Enum):
    """What to do when an authoritative quote for one candidate keeps failing.

    FAIL_OPEN skips the candidate once the retry wrapper gives up and keeps
    searching; STRICT aborts the whole quote with the RPC error.
    """

    FAIL_OPEN = "fail_open"
    STRICT = "strict"


class RetrySettings(BaseModel):
    """Retry wrapper parameters."""

    max_attempts: int = Field(default=DEFAULT_RETRY_ATTEMPTS, ge=1, le=MAX_RETRY_ATTEMPTS)
    base_delay_seconds: float = Field(default=RETRY_BASE_DELAY_SECONDS, ge=0)

    model_config = {"frozen": True}


class RefConfig(BaseModel):
    """Per-deployment configuration.

    Maps are keyed by network name ("mainnet", "testnet"). Token maps are
    keyed by upper-case symbol; decimals maps by symbol or lower-case id.
    """

    default_network: NearNetwork = NearNetwork.MAINNET
    contract_ids: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_CONTRACT_IDS))
    token_map: dict[str, dict[str, list[str]]] = Field(
        default_factory=lambda: _copy_nested(DEFAULT_TOKEN_MAP)
    )
    token_decimals: dict[str, dict[str, int]] = Field(
        default_factory=lambda: _copy_nested(DEFAULT_TOKEN_DECIMALS)
    )
    rpc_urls: dict[str, list[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_RPC_URLS.items()}
    )

    page_size: int = Field(default=DEFAULT_POOL_PAGE_SIZE, ge=1, le=MAX_POOL_PAGE_SIZE)
    max_pages: int = Field(default=MAX_POOL_PAGES, ge=1, le=MAX_POOL_PAGES)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    max_concurrency: int = Field(default=DEFAULT_MAX_CONCURRENCY, ge=1, le=MAX_CONCURRENCY)
    hop_failure_policy: HopFailurePolicy = HopFailurePolicy.FAIL_OPEN
    default_slippage_bps: int = Field(default=DEFAULT_SLIPPAGE_BPS, ge=0, le=MAX_SLIPPAGE_BPS)
    # Whole route search, None disables the deadline
    quote_timeout_seconds: float | None = Field(default=20.0, gt=0)
    # Single HTTP request
    rpc_timeout_seconds: float = Field(default=10.0, gt=0)

    model_config = {"frozen": True}

    # Constructor maps are layered over the built-in defaults

    @field_validator("contract_ids", mode="after")
    @classmethod
    def _layer_contract_ids(cls, value: dict[str, str]) -> dict[str, str]:
        return {**DEFAULT_CONTRACT_IDS, **_clean_str_map(value)}

    @field_validator("rpc_urls", mode="after")
    @classmethod
    def _layer_rpc_urls(cls, value: dict[str, list[str]]) -> dict[str, list[str]]:
        return _layer_url_lists({k: list(v) for k, v in DEFAULT_RPC_URLS.items()}, value)

    @field_validator("token_map", mode="before")
    @classmethod
    def _layer_token_map(cls, value: Any) -> Any:
        if not isinstance(value, dict) or not all(isinstance(t, dict) for t in value.values()):
            return value
        return _layer_token_maps(DEFAULT_TOKEN_MAP, value)

    @field_validator("token_decimals", mode="after")
    @classmethod
    def _layer_token_decimals(
        cls, value: dict[str, dict[str, int]]
    ) -> dict[str, dict[str, int]]:
        return _layer_decimals(DEFAULT_TOKEN_DECIMALS, value)

    def with_overrides(
        self,
        *,
        contract_ids: dict[str, str] | None = None,
        token_map: dict[str, dict[str, list[str] | str]] | None = None,
        token_decimals: dict[str, dict[str, int]] | None = None,
        rpc_urls: dict[str, list[str]] | None = None,
        **fields: Any,
    ) -> RefConfig:
        """Return a copy with caller maps layered over this config's maps.

        Symbol entries from the override replace same-key entries; all other
        entries are kept. Scalar fields (page_size, retry, ...) are replaced.
        """
        update: dict[str, Any] = dict(fields)
        if contract_ids:
            update["contract_ids"] = {**self.contract_ids, **_clean_str_map(contract_ids)}
        if token_map:
            update["token_map"] = _layer_token_maps(self.token_map, token_map)
        if token_decimals:
            update["token_decimals"] = _layer_decimals(self.token_decimals, token_decimals)
        if rpc_urls:
            update["rpc_urls"] = _layer_url_lists(self.rpc_urls, rpc_urls)
        return RefConfig.model_validate({**self.model_dump(), **update})

    def contract_id(self, network: NearNetwork, override: str | None = None) -> str:
        """Exchange contract for a network; an explicit override always wins."""
        if override and override.strip():
            return override.strip()
        return self.contract_ids[network.value]

    def symbol_table(self, network: NearNetwork) -> dict[str, list[str]]:
        return self.token_map.get(network.value, {})

    def decimals_table(self, network: NearNetwork) -> dict[str, int]:
        return self.token_decimals.get(network.value, {})

    def rpc_endpoints(self, network: NearNetwork) -> list[str]:
        return self.rpc_urls.get(network.value, [])


def _copy_nested(value: dict[str, dict[str, Any]]) -> dict[str, dict[str, Any]]:
    return {
        network: {k: list(v) if isinstance(v, list) else v for k, v in table.items()}
        for network, table in value.items()
    }


def _clean_str_map(value: dict[str, str]) -> dict[str, str]:
    return {parse_network(k).value: v.strip() for k, v in value.items() if v and v.strip()}


def _layer_url_lists(
    base: dict[str, list[str]],
    override: dict[str, list[str]],
) -> dict[str, list[str]]:
    merged = {network: list(urls) for network, urls in base.items()}
    for network_name, urls in override.items():
        cleaned = [u.strip() for u in urls if u.strip()]
        if cleaned:
            merged[parse_network(network_name).value] = cleaned
    return merged


def _layer_token_maps(
    base: dict[str, dict[str, list[str]]],
    override: dict[str, dict[str, list[str] | str]],
) -> dict[str, dict[str, list[str]]]:
    merged = _copy_nested(base)
    for network_name, table in override.items():
        network = parse_network(network_name).value
        target = merged.setdefault(network, {})
        for raw_key, raw_value in table.items():
            key = normalize_symbol_key(raw_key)
            if not key:
                continue
            values = [raw_value] if isinstance(raw_value, str) else list(raw_value)
            cleaned = [v.strip() for v in values if isinstance(v, str) and v.strip()]
            if cleaned:
                target[key] = cleaned
    return merged


def _layer_decimals(
    base: dict[str, dict[str, int]],
    override: dict[str, dict[str, int]],
) -> dict[str, dict[str, int]]:
    merged = _copy_nested(base)
    for network_name, table in override.items():
        network = parse_network(network_name).value
        target = merged.setdefault(network, {})
        for raw_key, decimals in table.items():
            key = normalize_symbol_key(raw_key)
            if not key or isinstance(decimals, bool) or not isinstance(decimals, int):
                continue
            if 0 <= decimals <= 255:
                target[key] = decimals
    return merged


__all__ = ["HopFailurePolicy", "RefConfig", "RetrySettings"]
