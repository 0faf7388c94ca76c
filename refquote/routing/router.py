"""Swap route search.

Strategies are tried in a fixed order and the first that yields a positive
output wins:

1. explicitPool: the caller named a pool, quote it on-chain.
2. bestDirectSimplePool: estimate every constant-product pool locally.
3. bestDirectPool: quote every pool holding both tokens on-chain.
4. bestTwoHopPoolRoute: quote token_in -> middle -> token_out through two
   different pools on-chain.

Local estimates only ever rank simple pools; any pool that needs the
contract's own pricing is quoted through get_return.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial

import structlog

from refquote.amm.constant_product import (
    ConstantProductAMM,
    apply_slippage,
    constant_product,
    validate_slippage_bps,
)
from refquote.amounts import format_atomic_amount, parse_positive_amount
from refquote.config import HopFailurePolicy, RefConfig
from refquote.errors import (
    InvalidRpcResponse,
    NoRouteFound,
    PoolPairMismatch,
    QuoteTimeout,
    RpcError,
)
from refquote.models.pool import Pool
from refquote.models.types import NearNetwork
from refquote.pools.index import PoolIndex
from refquote.pools.repository import PoolRepository, validate_pool_id
from refquote.routing.fanout import Deadline, TaskOutcome, run_bounded
from refquote.routing.types import HopAction, QuoteSource, SwapQuote
from refquote.rpc.client import ExchangeClient
from refquote.rpc.retry import RetryPolicy
from refquote.tokens.resolver import TokenResolver, coerce_network

logger = structlog.get_logger()


def parse_return_amount(raw: object) -> int:
    """Parse a get_return result; an empty result counts as 0.

    Raises:
        InvalidRpcResponse: If the contract returned something other than digits
    """
    if raw is None or raw == "":
        return 0
    if isinstance(raw, int) and not isinstance(raw, bool) and raw >= 0:
        return raw
    if isinstance(raw, str) and raw.strip().isascii() and raw.strip().isdigit():
        return int(raw.strip())
    raise InvalidRpcResponse(f"get_return returned a non-integer amount: {raw!r}")


@dataclass
class RouteCandidate:
    """A priced route, one or two hops."""

    first_pool: Pool
    token_in_id: str
    token_out_id: str
    amount_out: int
    # (index in token_in candidates, index in token_out candidates)
    priority: tuple[int, int]
    token_mid_id: str | None = None
    second_pool: Pool | None = None
    amount_mid: int | None = None

    def rank_key(self) -> tuple[int, int, str, int, tuple[int, int]]:
        """Smallest key wins: highest output, then lowest ids, then priority."""
        return (
            -self.amount_out,
            self.first_pool.id,
            self.token_mid_id or "",
            self.second_pool.id if self.second_pool is not None else -1,
            self.priority,
        )

    @property
    def fee_bps(self) -> int:
        fee = self.first_pool.total_fee_bps
        if self.second_pool is not None:
            fee += self.second_pool.total_fee_bps
        return fee


def pick_best(candidates: list[RouteCandidate]) -> RouteCandidate | None:
    positive = [c for c in candidates if c.amount_out > 0]
    if not positive:
        return None
    return min(positive, key=RouteCandidate.rank_key)


@dataclass
class _FailureTracker:
    """Applies the hop failure policy to fanned-out quote outcomes."""

    policy: HopFailurePolicy
    last_error: RpcError | None = None
    skipped: int = 0

    def accept(self, outcome: TaskOutcome[int], **context: object) -> int | None:
        error = outcome.error
        if error is None:
            return outcome.value
        if isinstance(error, QuoteTimeout) or not isinstance(error, RpcError):
            raise error
        if self.policy == HopFailurePolicy.STRICT:
            raise error
        self.last_error = error
        self.skipped += 1
        logger.warning("hop_quote_skipped", error=str(error), **context)
        return None


class SwapRouter:
    """Finds the best swap route for a token pair on one exchange contract."""

    def __init__(
        self,
        repository: PoolRepository,
        resolver: TokenResolver,
        client: ExchangeClient,
        retry: RetryPolicy | None = None,
        config: RefConfig | None = None,
        amm: ConstantProductAMM | None = None,
    ) -> None:
        self.repository = repository
        self.resolver = resolver
        self.client = client
        self.retry = retry if retry is not None else RetryPolicy()
        self.config = config if config is not None else RefConfig()
        self.amm = amm if amm is not None else constant_product

    def quote_swap(
        self,
        network: str | NearNetwork | None,
        token_in: str,
        token_out: str,
        amount_in_raw: str | int,
        pool_id: int | None = None,
        slippage_bps: int | None = None,
        contract_id: str | None = None,
    ) -> SwapQuote:
        """Quote an exact-input swap.

        Args:
            network: "mainnet" (default) or "testnet"
            token_in: Symbol or token id to sell
            token_out: Symbol or token id to buy
            amount_in_raw: Positive integer amount in raw units
            pool_id: Restrict the quote to this pool
            slippage_bps: Tolerance for min_amount_out_raw (default from config)
            contract_id: Exchange contract override

        Returns:
            SwapQuote with a positive output

        Raises:
            InvalidInput: Malformed amount, slippage, pool id, network or token
            UnknownSymbol: A symbol has no configured token ids
            PoolNotFound: The explicit pool does not exist
            PoolPairMismatch: The explicit pool does not hold the pair
            NoRouteFound: No strategy produced a positive output
            QuoteTimeout: The search outran quote_timeout_seconds
            RpcError: A remote call failed (see HopFailurePolicy)
        """
        net = coerce_network(network)
        amount_in = parse_positive_amount(amount_in_raw, "amountInRaw")
        slippage = validate_slippage_bps(
            self.config.default_slippage_bps if slippage_bps is None else slippage_bps
        )
        if pool_id is not None:
            validate_pool_id(pool_id)
        contract = self.config.contract_id(net, contract_id)
        deadline = Deadline(self.config.quote_timeout_seconds)

        if pool_id is not None:
            quote = self._quote_explicit_pool(
                net, contract, token_in, token_out, amount_in, pool_id, slippage, deadline
            )
        else:
            quote = self._search(net, contract, token_in, token_out, amount_in, slippage, deadline)

        logger.info(
            "route_selected",
            network=net.value,
            contract_id=contract,
            source=quote.source.value,
            pool_ids=quote.pool_ids,
            amount_in=str(quote.amount_in_raw),
            amount_out=str(quote.amount_out_raw),
            amount_in_human=self._human_amount(net, quote.token_in_id, quote.amount_in_raw),
            amount_out_human=self._human_amount(net, quote.token_out_id, quote.amount_out_raw),
        )
        return quote

    def _human_amount(self, network: NearNetwork, token_id: str, raw_amount: int) -> str | None:
        """Display amount for logs, None when the token's decimals are not configured."""
        decimals = self.resolver.decimals_hint(network, token_id)
        if decimals is None:
            return None
        return format_atomic_amount(raw_amount, decimals)

    def _get_return(
        self,
        contract_id: str,
        pool_id: int,
        token_in: str,
        token_out: str,
        amount_in: int,
        deadline: Deadline,
    ) -> int:
        deadline.check("get_return")
        raw = self.retry.call(
            self.client.get_return,
            contract_id,
            pool_id,
            token_in,
            token_out,
            amount_in,
            endpoint=self.client.endpoint,
            operation="get_return",
        )
        return parse_return_amount(raw)

    def _quote_explicit_pool(
        self,
        network: NearNetwork,
        contract_id: str,
        token_in: str,
        token_out: str,
        amount_in: int,
        pool_id: int,
        slippage_bps: int,
        deadline: Deadline,
    ) -> SwapQuote:
        deadline.check("get_pool")
        pool = self.repository.fetch_pool_by_id(contract_id, pool_id)
        tin_candidates = self.resolver.resolve(network, token_in, pool.token_ids)
        tout_candidates = self.resolver.resolve(network, token_out, pool.token_ids)

        pair = next(
            (
                (tin, tout)
                for tin in tin_candidates
                for tout in tout_candidates
                if tin != tout and pool.has_token(tin) and pool.has_token(tout)
            ),
            None,
        )
        if pair is None:
            raise PoolPairMismatch(
                f"Pool {pool_id} does not support token pair {token_in.strip()} -> {token_out.strip()}"
            )
        tin, tout = pair

        amount_out = self._get_return(contract_id, pool.id, tin, tout, amount_in, deadline)
        if amount_out <= 0:
            raise NoRouteFound(f"Pool {pool_id} returned no output for {tin} -> {tout}")

        return self._build_quote(
            contract_id,
            RouteCandidate(
                first_pool=pool,
                token_in_id=tin,
                token_out_id=tout,
                amount_out=amount_out,
                priority=(0, 0),
            ),
            amount_in,
            slippage_bps,
            QuoteSource.EXPLICIT_POOL,
        )

    def _search(
        self,
        network: NearNetwork,
        contract_id: str,
        token_in: str,
        token_out: str,
        amount_in: int,
        slippage_bps: int,
        deadline: Deadline,
    ) -> SwapQuote:
        deadline.check("get_pools")
        index = PoolIndex(self.repository.fetch_pools(contract_id))
        universe = index.token_ids()
        tin_candidates = self.resolver.resolve(network, token_in, universe)
        tout_candidates = self.resolver.resolve(network, token_out, universe)
        failures = _FailureTracker(self.config.hop_failure_policy)

        direct = self._direct_pairs(index, tin_candidates, tout_candidates)

        best = self._best_direct_simple(direct, amount_in)
        if best is not None:
            return self._build_quote(
                contract_id, best, amount_in, slippage_bps, QuoteSource.BEST_DIRECT_SIMPLE_POOL
            )

        best = self._best_direct_quoted(contract_id, direct, amount_in, deadline, failures)
        if best is not None:
            return self._build_quote(
                contract_id, best, amount_in, slippage_bps, QuoteSource.BEST_DIRECT_POOL
            )

        best = self._best_two_hop(
            contract_id, index, tin_candidates, tout_candidates, amount_in, deadline, failures
        )
        if best is not None:
            return self._build_quote(
                contract_id, best, amount_in, slippage_bps, QuoteSource.BEST_TWO_HOP_ROUTE
            )

        if failures.last_error is not None:
            raise failures.last_error
        raise NoRouteFound(
            f"No route found for {token_in.strip()} -> {token_out.strip()} on {contract_id}"
        )

    def _direct_pairs(
        self,
        index: PoolIndex,
        tin_candidates: list[str],
        tout_candidates: list[str],
    ) -> list[tuple[Pool, str, str, tuple[int, int]]]:
        """Every (pool, token_in, token_out) combination a single pool can serve."""
        pairs = []
        for pool in index:
            for i, tin in enumerate(tin_candidates):
                if not pool.has_token(tin):
                    continue
                for j, tout in enumerate(tout_candidates):
                    if tin == tout or not pool.has_token(tout):
                        continue
                    pairs.append((pool, tin, tout, (i, j)))
        return pairs

    def _best_direct_simple(
        self,
        pairs: list[tuple[Pool, str, str, tuple[int, int]]],
        amount_in: int,
    ) -> RouteCandidate | None:
        candidates = [
            RouteCandidate(
                first_pool=pool,
                token_in_id=tin,
                token_out_id=tout,
                amount_out=self.amm.estimate(pool, tin, tout, amount_in),
                priority=priority,
            )
            for pool, tin, tout, priority in pairs
            if pool.is_simple
        ]
        return pick_best(candidates)

    def _best_direct_quoted(
        self,
        contract_id: str,
        pairs: list[tuple[Pool, str, str, tuple[int, int]]],
        amount_in: int,
        deadline: Deadline,
        failures: _FailureTracker,
    ) -> RouteCandidate | None:
        tasks = [
            partial(self._get_return, contract_id, pool.id, tin, tout, amount_in, deadline)
            for pool, tin, tout, _ in pairs
        ]
        outcomes = run_bounded(tasks, self.config.max_concurrency)

        candidates = []
        for (pool, tin, tout, priority), outcome in zip(pairs, outcomes):
            amount_out = failures.accept(outcome, pool_id=pool.id, token_in=tin, token_out=tout)
            if amount_out:
                candidates.append(
                    RouteCandidate(
                        first_pool=pool,
                        token_in_id=tin,
                        token_out_id=tout,
                        amount_out=amount_out,
                        priority=priority,
                    )
                )
        return pick_best(candidates)

    def _best_two_hop(
        self,
        contract_id: str,
        index: PoolIndex,
        tin_candidates: list[str],
        tout_candidates: list[str],
        amount_in: int,
        deadline: Deadline,
        failures: _FailureTracker,
    ) -> RouteCandidate | None:
        # First hops, kept only when some other pool connects the middle to an output
        first_hops: list[tuple[Pool, str, str, int, list[tuple[Pool, str, int]]]] = []
        for i, tin in enumerate(tin_candidates):
            for first_pool in index.pools_with_token(tin):
                for mid in first_pool.token_ids:
                    if mid == tin:
                        continue
                    seconds = [
                        (second_pool, tout, j)
                        for second_pool in index.pools_with_token(mid)
                        if second_pool.id != first_pool.id
                        for j, tout in enumerate(tout_candidates)
                        if tout not in (mid, tin) and second_pool.has_token(tout)
                    ]
                    if seconds:
                        first_hops.append((first_pool, tin, mid, i, seconds))

        first_outcomes = run_bounded(
            [
                partial(self._get_return, contract_id, pool.id, tin, mid, amount_in, deadline)
                for pool, tin, mid, _, _ in first_hops
            ],
            self.config.max_concurrency,
        )

        second_hops: list[tuple[Pool, str, str, int, Pool, str, tuple[int, int]]] = []
        for (first_pool, tin, mid, i, seconds), outcome in zip(first_hops, first_outcomes):
            amount_mid = failures.accept(
                outcome, pool_id=first_pool.id, token_in=tin, token_out=mid, hop=1
            )
            if not amount_mid:
                continue
            for second_pool, tout, j in seconds:
                second_hops.append((first_pool, tin, mid, amount_mid, second_pool, tout, (i, j)))

        second_outcomes = run_bounded(
            [
                partial(self._get_return, contract_id, second.id, mid, tout, amount_mid, deadline)
                for _, _, mid, amount_mid, second, tout, _ in second_hops
            ],
            self.config.max_concurrency,
        )

        candidates = []
        for hop, outcome in zip(second_hops, second_outcomes):
            first_pool, tin, mid, amount_mid, second_pool, tout, priority = hop
            amount_out = failures.accept(
                outcome, pool_id=second_pool.id, token_in=mid, token_out=tout, hop=2
            )
            if amount_out:
                candidates.append(
                    RouteCandidate(
                        first_pool=first_pool,
                        token_in_id=tin,
                        token_out_id=tout,
                        amount_out=amount_out,
                        priority=priority,
                        token_mid_id=mid,
                        second_pool=second_pool,
                        amount_mid=amount_mid,
                    )
                )
        return pick_best(candidates)

    def _build_quote(
        self,
        contract_id: str,
        route: RouteCandidate,
        amount_in: int,
        slippage_bps: int,
        source: QuoteSource,
    ) -> SwapQuote:
        mid, second_pool, amount_mid = route.token_mid_id, route.second_pool, route.amount_mid
        if mid is None or second_pool is None or amount_mid is None:
            actions = [
                HopAction(
                    pool_id=route.first_pool.id,
                    token_in_id=route.token_in_id,
                    token_out_id=route.token_out_id,
                    amount_in_raw=amount_in,
                    amount_out_raw=route.amount_out,
                )
            ]
        else:
            actions = [
                HopAction(
                    pool_id=route.first_pool.id,
                    token_in_id=route.token_in_id,
                    token_out_id=mid,
                    amount_in_raw=amount_in,
                    amount_out_raw=amount_mid,
                ),
                HopAction(
                    pool_id=second_pool.id,
                    token_in_id=mid,
                    token_out_id=route.token_out_id,
                    amount_in_raw=amount_mid,
                    amount_out_raw=route.amount_out,
                ),
            ]

        return SwapQuote(
            contract_id=contract_id,
            pool_id=route.first_pool.id,
            token_in_id=route.token_in_id,
            token_out_id=route.token_out_id,
            amount_in_raw=amount_in,
            amount_out_raw=route.amount_out,
            min_amount_out_raw=apply_slippage(route.amount_out, slippage_bps),
            fee_bps=route.fee_bps,
            source=source,
            actions=actions,
            slippage_bps=slippage_bps,
        )


__all__ = ["RouteCandidate", "SwapRouter", "parse_return_amount", "pick_best"]
