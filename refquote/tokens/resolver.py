"""Symbol and token-id resolution.

Callers may name tokens by symbol ("NEAR", "usdc") or by contract id
("wrap.near"). A symbol can map to several ids (bridged and native USDC
both trade), so resolution yields an ordered candidate list that route
search then narrows to what the exchange actually lists.
"""

from __future__ import annotations

from collections.abc import Collection

from refquote.config import RefConfig
from refquote.errors import InvalidInput, UnknownSymbol
from refquote.models.types import (
    NearNetwork,
    is_account_like_token_id,
    normalize_symbol_key,
    normalize_token_id,
    parse_network,
)


def coerce_network(network: str | NearNetwork | None) -> NearNetwork:
    """parse_network with the engine's error type.

    Raises:
        InvalidInput: If the network name is unknown
    """
    try:
        return parse_network(network)
    except ValueError as e:
        raise InvalidInput(str(e)) from e


def _dedupe(values: list[str]) -> list[str]:
    seen: set[str] = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


class TokenResolver:
    """Resolves token inputs against a RefConfig's symbol tables."""

    def __init__(self, config: RefConfig | None = None) -> None:
        self.config = config if config is not None else RefConfig()

    def resolve(
        self,
        network: str | NearNetwork | None,
        token_input: str,
        pool_token_ids: Collection[str] | None = None,
    ) -> list[str]:
        """Resolve a symbol or token id to candidate ids, most likely first.

        Args:
            network: Network whose symbol table applies
            token_input: Symbol or on-chain token id
            pool_token_ids: If given, candidates are narrowed to these ids;
                a narrowing that leaves nothing is ignored

        Returns:
            Non-empty list of lower-case token ids

        Raises:
            InvalidInput: On blank input or an unknown network
            UnknownSymbol: If a symbol has no configured mapping
        """
        net = coerce_network(network)
        if not isinstance(token_input, str) or not token_input.strip():
            raise InvalidInput("token must be a non-empty symbol or token id")
        normalized = token_input.strip()

        if is_account_like_token_id(normalized):
            candidates = [normalize_token_id(normalized)]
        else:
            symbol = normalized.upper()
            mapped = self.config.symbol_table(net).get(symbol)
            if not mapped:
                raise UnknownSymbol(symbol, net.value)
            candidates = _dedupe([normalize_token_id(t) for t in mapped if t.strip()])
            if not candidates:
                raise UnknownSymbol(symbol, net.value)

        if pool_token_ids is None:
            return candidates
        narrowed = [c for c in candidates if c in pool_token_ids]
        return narrowed or candidates

    def decimals_hint(self, network: str | NearNetwork | None, token_input: str) -> int | None:
        """Configured decimals for a symbol or token id, None if unknown."""
        net = coerce_network(network)
        key = normalize_symbol_key(token_input) if isinstance(token_input, str) else ""
        if not key:
            return None
        return self.config.decimals_table(net).get(key)


__all__ = ["TokenResolver", "coerce_network"]
