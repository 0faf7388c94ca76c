"""Factory functions for creating test pools.

Usage:
    from tests.helpers import make_pool, make_raw_pool

    pool = make_pool(7, [WNEAR, USDT], [1_000_000, 2_000_000], fee_bps=30)
"""

from typing import Any

from refquote.models.pool import Pool, normalize_pool_record


def make_raw_pool(
    pool_id: int | None,
    token_ids: list[str],
    amounts: list[int | str],
    fee_bps: int = 30,
    pool_kind: str | None = "SIMPLE_POOL",
    **extra: Any,
) -> dict[str, Any]:
    """Create a pool record shaped like the exchange's get_pools output.

    Args:
        pool_id: Pool id, or None to omit the field
        token_ids: token_account_ids
        amounts: Reserves; ints are rendered as decimal strings
        fee_bps: total_fee
        pool_kind: pool_kind, or None to omit the field
        **extra: Additional raw fields (e.g. shares_total_supply)

    Returns:
        Raw record dict
    """
    record: dict[str, Any] = {
        "token_account_ids": list(token_ids),
        "amounts": [str(a) if isinstance(a, int) else a for a in amounts],
        "total_fee": fee_bps,
    }
    if pool_id is not None:
        record["id"] = pool_id
    if pool_kind is not None:
        record["pool_kind"] = pool_kind
    record.update(extra)
    return record


def make_pool(
    pool_id: int,
    token_ids: list[str],
    reserves: list[int],
    fee_bps: int = 30,
    pool_kind: str | None = "SIMPLE_POOL",
) -> Pool:
    """Create a normalized Pool through the same path real records take."""
    return normalize_pool_record(
        make_raw_pool(pool_id, token_ids, reserves, fee_bps=fee_bps, pool_kind=pool_kind)
    )
