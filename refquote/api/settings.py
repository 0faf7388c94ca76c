"""Build a RefConfig from environment variables.

Only the HTTP app reads the environment; library callers pass RefConfig
explicitly. Precedence per network, highest first:

- contract: NEAR_REF_<NETWORK>_CONTRACT_ID, NEAR_REF_CONTRACT_ID
- RPC: NEAR_<NETWORK>_RPC_URLS, NEAR_RPC_URLS, NEAR_<NETWORK>_RPC_URL, NEAR_RPC_URL
- tokens: NEAR_REF_TOKEN_MAP_<NETWORK> over NEAR_REF_TOKEN_MAP (JSON objects)
- decimals: NEAR_REF_TOKEN_DECIMALS_<NETWORK> over NEAR_REF_TOKEN_DECIMALS

Built-in defaults sit underneath all of them.
"""

from __future__ import annotations

import json
import os
import re
from collections.abc import Mapping
from typing import Any

import structlog

from refquote.config import HopFailurePolicy, RefConfig
from refquote.models.types import NearNetwork

logger = structlog.get_logger()

_URL_LIST_SPLIT_RE = re.compile(r"[\n,;]")


def parse_rpc_url_list(value: str | None) -> list[str]:
    """Split a comma, semicolon or newline separated URL list."""
    if not value:
        return []
    return [entry.strip() for entry in _URL_LIST_SPLIT_RE.split(value) if entry.strip()]


def _parse_json_object(name: str, value: str | None) -> dict[str, Any]:
    if not value or not value.strip():
        return {}
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as e:
        logger.warning("config_env_parse_failed", variable=name, error=str(e))
        return {}
    if not isinstance(parsed, dict):
        logger.warning("config_env_parse_failed", variable=name, error="expected a JSON object")
        return {}
    return parsed


def parse_token_map_env(name: str, value: str | None) -> dict[str, list[str] | str]:
    """Symbol -> id or list of ids; malformed entries are skipped."""
    result: dict[str, list[str] | str] = {}
    for key, raw in _parse_json_object(name, value).items():
        if isinstance(raw, str) and raw.strip():
            result[key] = raw.strip()
        elif isinstance(raw, list):
            ids = [v.strip() for v in raw if isinstance(v, str) and v.strip()]
            if ids:
                result[key] = ids
    return result


def parse_token_decimals_env(name: str, value: str | None) -> dict[str, int]:
    """Symbol or id -> decimals in 0..255; numeric strings are accepted."""
    result: dict[str, int] = {}
    for key, raw in _parse_json_object(name, value).items():
        if isinstance(raw, bool):
            continue
        if isinstance(raw, int):
            decimals = raw
        elif isinstance(raw, float) and raw.is_integer():
            decimals = int(raw)
        elif isinstance(raw, str) and raw.strip().isdigit():
            decimals = int(raw.strip())
        else:
            continue
        if 0 <= decimals <= 255:
            result[key] = decimals
    return result


def load_config(environ: Mapping[str, str] | None = None) -> RefConfig:
    """Layer environment overrides over the built-in defaults."""
    env = os.environ if environ is None else environ

    contract_ids: dict[str, str] = {}
    rpc_urls: dict[str, list[str]] = {}
    token_map: dict[str, dict[str, list[str] | str]] = {}
    token_decimals: dict[str, dict[str, int]] = {}

    for network in NearNetwork:
        upper = network.value.upper()

        contract = env.get(f"NEAR_REF_{upper}_CONTRACT_ID", "").strip() or env.get(
            "NEAR_REF_CONTRACT_ID", ""
        ).strip()
        if contract:
            contract_ids[network.value] = contract

        urls = (
            parse_rpc_url_list(env.get(f"NEAR_{upper}_RPC_URLS"))
            or parse_rpc_url_list(env.get("NEAR_RPC_URLS"))
            or parse_rpc_url_list(env.get(f"NEAR_{upper}_RPC_URL"))
            or parse_rpc_url_list(env.get("NEAR_RPC_URL"))
        )
        if urls:
            rpc_urls[network.value] = urls

        network_map_var = f"NEAR_REF_TOKEN_MAP_{upper}"
        token_map[network.value] = {
            **parse_token_map_env("NEAR_REF_TOKEN_MAP", env.get("NEAR_REF_TOKEN_MAP")),
            **parse_token_map_env(network_map_var, env.get(network_map_var)),
        }
        decimals_var = f"NEAR_REF_TOKEN_DECIMALS_{upper}"
        token_decimals[network.value] = {
            **parse_token_decimals_env(
                "NEAR_REF_TOKEN_DECIMALS", env.get("NEAR_REF_TOKEN_DECIMALS")
            ),
            **parse_token_decimals_env(decimals_var, env.get(decimals_var)),
        }

    fields: dict[str, Any] = {}
    policy = env.get("REFQUOTE_HOP_FAILURE_POLICY", "").strip().lower()
    if policy:
        try:
            fields["hop_failure_policy"] = HopFailurePolicy(policy)
        except ValueError:
            logger.warning(
                "config_env_parse_failed", variable="REFQUOTE_HOP_FAILURE_POLICY", value=policy
            )

    return RefConfig().with_overrides(
        contract_ids=contract_ids,
        rpc_urls=rpc_urls,
        token_map={k: v for k, v in token_map.items() if v},
        token_decimals={k: v for k, v in token_decimals.items() if v},
        **fields,
    )


__all__ = [
    "load_config",
    "parse_rpc_url_list",
    "parse_token_decimals_env",
    "parse_token_map_env",
]
