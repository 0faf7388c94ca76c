"""Pool selection for liquidity operations.

Adding or removing liquidity needs one pool holding both tokens. The deepest
pool wins, measured by the product of the two reserves.
"""

from __future__ import annotations

import math

import structlog

from refquote.config import RefConfig
from refquote.constants import DEFAULT_POOL_PAIR_CANDIDATES, MAX_POOL_PAIR_CANDIDATES
from refquote.errors import InvalidInput, NoPoolForPair, PoolPairMismatch
from refquote.models.pool import Pool
from refquote.models.types import NearNetwork
from refquote.pools.index import PoolIndex
from refquote.pools.repository import PoolRepository, validate_pool_id
from refquote.routing.types import PoolPairCandidate, PoolPairSelection, SelectionSource
from refquote.safe_int import S
from refquote.tokens.resolver import TokenResolver, coerce_network

logger = structlog.get_logger()


def parse_max_candidates(max_candidates: int | float | None) -> int:
    """Default 3; must be positive; floored and capped at 10.

    Raises:
        InvalidInput: On non-positive or non-finite values
    """
    if max_candidates is None:
        return DEFAULT_POOL_PAIR_CANDIDATES
    if isinstance(max_candidates, bool) or not isinstance(max_candidates, int | float):
        raise InvalidInput("maxCandidates must be a positive number")
    if not math.isfinite(max_candidates) or max_candidates <= 0:
        raise InvalidInput("maxCandidates must be a positive number")
    return max(1, min(MAX_POOL_PAIR_CANDIDATES, math.floor(max_candidates)))


def liquidity_score(pool: Pool, token_a: str, token_b: str) -> int | None:
    """reserve(a) * reserve(b), or None if the pool lacks either token."""
    reserve_a = pool.reserve_of(token_a)
    reserve_b = pool.reserve_of(token_b)
    if reserve_a is None or reserve_b is None:
        return None
    return (S(reserve_a) * S(reserve_b)).to_uint256()


def best_pair_in_pool(
    pool: Pool,
    token_a_candidates: list[str],
    token_b_candidates: list[str],
) -> PoolPairCandidate | None:
    """Deepest (a, b) pairing the pool supports; earlier candidates win ties."""
    best: PoolPairCandidate | None = None
    for token_a in token_a_candidates:
        if not pool.has_token(token_a):
            continue
        for token_b in token_b_candidates:
            if token_a == token_b:
                continue
            score = liquidity_score(pool, token_a, token_b)
            if score is None:
                continue
            if best is None or score > best.liquidity_score:
                best = PoolPairCandidate(
                    pool_id=pool.id,
                    pool_kind=pool.kind_label,
                    token_a_id=token_a,
                    token_b_id=token_b,
                    liquidity_score=score,
                )
    return best


class PoolPairSelector:
    """Chooses a pool for a token pair by liquidity depth."""

    def __init__(
        self,
        repository: PoolRepository,
        resolver: TokenResolver,
        config: RefConfig | None = None,
    ) -> None:
        self.repository = repository
        self.resolver = resolver
        self.config = config if config is not None else RefConfig()

    def find_best_pool_for_pair(
        self,
        network: str | NearNetwork | None,
        token_a: str,
        token_b: str,
        pool_id: int | None = None,
        max_candidates: int | None = None,
        contract_id: str | None = None,
    ) -> PoolPairSelection:
        """Pick the pool for a liquidity operation on (token_a, token_b).

        Args:
            network: "mainnet" (default) or "testnet"
            token_a: Symbol or token id
            token_b: Symbol or token id
            pool_id: Use this pool, checking that it holds the pair
            max_candidates: How many ranked pools to report (default 3, max 10)
            contract_id: Exchange contract override

        Raises:
            InvalidInput: Malformed pool id, max_candidates, network or token
            UnknownSymbol: A symbol has no configured token ids
            PoolNotFound: The explicit pool does not exist
            PoolPairMismatch: The explicit pool does not hold the pair
            NoPoolForPair: No pool holds both tokens
        """
        net = coerce_network(network)
        limit = parse_max_candidates(max_candidates)
        if pool_id is not None:
            validate_pool_id(pool_id)
        contract = self.config.contract_id(net, contract_id)

        if pool_id is not None:
            pool = self.repository.fetch_pool_by_id(contract, pool_id)
            a_candidates = self.resolver.resolve(net, token_a, pool.token_ids)
            b_candidates = self.resolver.resolve(net, token_b, pool.token_ids)
            pair = best_pair_in_pool(pool, a_candidates, b_candidates)
            if pair is None:
                raise PoolPairMismatch(
                    f"Pool {pool_id} does not support token pair {token_a.strip()} / {token_b.strip()}"
                )
            return self._selection(contract, pool, pair, [pair], SelectionSource.EXPLICIT_POOL)

        index = PoolIndex(self.repository.fetch_pools(contract))
        universe = index.token_ids()
        a_candidates = self.resolver.resolve(net, token_a, universe)
        b_candidates = self.resolver.resolve(net, token_b, universe)

        ranked: list[tuple[PoolPairCandidate, Pool]] = []
        for pool in index:
            pair = best_pair_in_pool(pool, a_candidates, b_candidates)
            if pair is not None:
                ranked.append((pair, pool))
        if not ranked:
            raise NoPoolForPair(
                f"No pool found for token pair {token_a.strip()} / {token_b.strip()} on {contract}"
            )
        ranked.sort(key=lambda entry: (-entry[0].liquidity_score, entry[0].pool_id))

        winner, pool = ranked[0]
        logger.info(
            "pool_pair_selected",
            network=net.value,
            contract_id=contract,
            pool_id=winner.pool_id,
            candidates=len(ranked),
        )
        return self._selection(
            contract,
            pool,
            winner,
            [pair for pair, _ in ranked[:limit]],
            SelectionSource.BEST_LIQUIDITY_POOL,
        )

    @staticmethod
    def _selection(
        contract_id: str,
        pool: Pool,
        pair: PoolPairCandidate,
        candidates: list[PoolPairCandidate],
        source: SelectionSource,
    ) -> PoolPairSelection:
        return PoolPairSelection(
            contract_id=contract_id,
            pool_id=pool.id,
            pool_kind=pool.kind_label,
            token_a_id=pair.token_a_id,
            token_b_id=pair.token_b_id,
            liquidity_score=pair.liquidity_score,
            source=source,
            pool=pool,
            candidates=candidates,
        )


__all__ = [
    "PoolPairSelector",
    "best_pair_in_pool",
    "liquidity_score",
    "parse_max_candidates",
]
