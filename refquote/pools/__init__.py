"""Pool fetching and lookup."""

from refquote.pools.index import PoolIndex
from refquote.pools.repository import PoolRepository, clamp_page_size, validate_pool_id

__all__ = ["PoolIndex", "PoolRepository", "clamp_page_size", "validate_pool_id"]
