"""Pool fetching from the exchange contract.

The exchange exposes its pools as an index-addressed list. PoolRepository
pages through get_pools and normalizes every record; it never caches, so
each call sees current reserves.
"""

from __future__ import annotations

import structlog

from refquote.constants import DEFAULT_POOL_PAGE_SIZE, MAX_POOL_PAGE_SIZE, MAX_POOL_PAGES
from refquote.errors import InvalidInput, PoolNotFound
from refquote.models.pool import InvalidPoolRecord, Pool, normalize_pool_record
from refquote.rpc.client import ExchangeClient
from refquote.rpc.retry import RetryPolicy

logger = structlog.get_logger()


def clamp_page_size(page_size: int | None) -> int:
    if page_size is None:
        return DEFAULT_POOL_PAGE_SIZE
    return max(1, min(MAX_POOL_PAGE_SIZE, int(page_size)))


def validate_pool_id(pool_id: int) -> int:
    """Pool ids are non-negative integers.

    Raises:
        InvalidInput: On negative, boolean or non-integer ids
    """
    if isinstance(pool_id, bool) or not isinstance(pool_id, int) or pool_id < 0:
        raise InvalidInput(f"poolId must be a non-negative integer, got {pool_id!r}")
    return pool_id


class PoolRepository:
    """Reads pool snapshots through an ExchangeClient."""

    def __init__(
        self,
        client: ExchangeClient,
        retry: RetryPolicy | None = None,
        page_size: int = DEFAULT_POOL_PAGE_SIZE,
        max_pages: int = MAX_POOL_PAGES,
    ) -> None:
        self.client = client
        self.retry = retry if retry is not None else RetryPolicy()
        self.page_size = clamp_page_size(page_size)
        self.max_pages = max(1, min(MAX_POOL_PAGES, max_pages))

    def fetch_pools(self, contract_id: str, page_size: int | None = None) -> list[Pool]:
        """Fetch every pool, page by page.

        Paging stops at the first empty or short page, or after max_pages
        pages. Records that cannot be normalized are dropped.

        Args:
            contract_id: Exchange contract account id
            page_size: Override for this call, clamped to 1..300

        Returns:
            Pools in exchange index order
        """
        limit = clamp_page_size(page_size) if page_size is not None else self.page_size
        pools: list[Pool] = []
        dropped = 0
        from_index = 0
        pages = 0

        while pages < self.max_pages:
            chunk = self.retry.call(
                self.client.list_pools,
                contract_id,
                from_index,
                limit,
                endpoint=self.client.endpoint,
                operation="get_pools",
            )
            pages += 1
            if not chunk:
                break

            for offset, raw in enumerate(chunk):
                try:
                    pools.append(normalize_pool_record(raw, fallback_id=from_index + offset))
                except InvalidPoolRecord as e:
                    dropped += 1
                    logger.debug(
                        "pool_record_dropped",
                        contract_id=contract_id,
                        index=from_index + offset,
                        reason=str(e),
                    )

            if len(chunk) < limit:
                break
            from_index += len(chunk)

        logger.debug(
            "pools_fetched",
            contract_id=contract_id,
            pools=len(pools),
            dropped=dropped,
            pages=pages,
        )
        return pools

    def fetch_pool_by_id(self, contract_id: str, pool_id: int) -> Pool:
        """Fetch and normalize a single pool.

        Raises:
            InvalidInput: If pool_id is not a non-negative integer
            PoolNotFound: If the exchange returns nothing usable
        """
        validate_pool_id(pool_id)
        raw = self.retry.call(
            self.client.get_pool,
            contract_id,
            pool_id,
            endpoint=self.client.endpoint,
            operation="get_pool",
        )
        if raw is None:
            raise PoolNotFound(pool_id, contract_id)
        try:
            return normalize_pool_record(raw, fallback_id=pool_id)
        except InvalidPoolRecord as e:
            raise PoolNotFound(pool_id, contract_id, reason=str(e)) from e


__all__ = ["PoolRepository", "clamp_page_size", "validate_pool_id"]
