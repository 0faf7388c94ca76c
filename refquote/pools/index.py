"""Token lookups over a pool snapshot."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from refquote.models.pool import Pool


class PoolIndex:
    """Pools of one fetch, indexed by the tokens they hold.

    Pools are kept in the order they were added; every lookup returns pools
    in ascending id order so iteration is deterministic.
    """

    def __init__(self, pools: Iterable[Pool] | None = None) -> None:
        self._pools: dict[int, Pool] = {}
        self._by_token: dict[str, list[Pool]] = {}
        if pools:
            for pool in pools:
                self.add_pool(pool)

    def add_pool(self, pool: Pool) -> None:
        """Add a pool; a pool with the same id replaces the earlier one."""
        if pool.id in self._pools:
            self._remove(pool.id)
        self._pools[pool.id] = pool
        for token_id in set(pool.token_ids):
            bucket = self._by_token.setdefault(token_id, [])
            bucket.append(pool)
            bucket.sort(key=lambda p: p.id)

    def _remove(self, pool_id: int) -> None:
        old = self._pools.pop(pool_id)
        for token_id in set(old.token_ids):
            self._by_token[token_id] = [p for p in self._by_token[token_id] if p.id != pool_id]

    def pools_with_token(self, token_id: str) -> list[Pool]:
        return list(self._by_token.get(token_id, ()))

    def token_ids(self) -> set[str]:
        """Every token held by at least one pool."""
        return {t for t, pools in self._by_token.items() if pools}

    def __len__(self) -> int:
        return len(self._pools)

    def __iter__(self) -> Iterator[Pool]:
        return iter(sorted(self._pools.values(), key=lambda p: p.id))


__all__ = ["PoolIndex"]
