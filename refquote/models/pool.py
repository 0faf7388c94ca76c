"""Pool entity and normalization of raw exchange pool records.

Raw records come straight from the exchange's JSON view methods and are
loosely shaped. RawPoolRecord names every field variant we accept; the
normalizer then either produces a fully consistent Pool or rejects the
record outright. It never drops individual entries from the parallel
token/amount lists, since that would misalign reserves with tokens.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, ValidationError

from refquote.constants import FEE_DIVISOR, SIMPLE_POOL_KIND
from refquote.models.types import normalize_token_id

_DIGITS_RE = re.compile(r"[0-9]+")


class PoolKind(str, Enum):
    """Pricing model of a pool, as far as local estimation is concerned."""

    SIMPLE = "simple"  # Constant product, estimable locally
    OTHER = "other"  # Stable/rated/etc: only the contract can quote it


@dataclass(frozen=True)
class Pool:
    """Snapshot of one on-chain liquidity pool."""

    id: int
    token_ids: tuple[str, ...]
    reserves: tuple[int, ...]
    # Total fee in basis points (30 = 0.3%)
    total_fee_bps: int
    kind: PoolKind = PoolKind.SIMPLE
    # Raw pool_kind label reported by the exchange, if any
    kind_label: str | None = None

    def __post_init__(self) -> None:
        if len(self.token_ids) < 2:
            raise ValueError(f"Pool {self.id} must hold at least 2 tokens")
        if len(self.token_ids) != len(self.reserves):
            raise ValueError(
                f"Pool {self.id} has {len(self.token_ids)} tokens but {len(self.reserves)} reserves"
            )
        if any(r < 0 for r in self.reserves):
            raise ValueError(f"Pool {self.id} has a negative reserve")
        if not 0 <= self.total_fee_bps <= FEE_DIVISOR:
            raise ValueError(f"Pool {self.id} fee {self.total_fee_bps} outside 0..{FEE_DIVISOR}")

    @property
    def is_simple(self) -> bool:
        return self.kind == PoolKind.SIMPLE

    def has_token(self, token_id: str) -> bool:
        return token_id in self.token_ids

    def index_of(self, token_id: str) -> int | None:
        try:
            return self.token_ids.index(token_id)
        except ValueError:
            return None

    def reserve_of(self, token_id: str) -> int | None:
        """Reserve held for a token, or None if the pool does not hold it."""
        index = self.index_of(token_id)
        if index is None:
            return None
        return self.reserves[index]


class RawPoolRecord(BaseModel):
    """Pool record as returned by get_pools / get_pool.

    Field names vary between exchange versions and indexers; each attribute
    lists the names it is read from, first match wins.
    """

    id: Any = Field(default=None, validation_alias=AliasChoices("id", "pool_id"))
    token_ids: Any = Field(
        default=None,
        validation_alias=AliasChoices("token_account_ids", "tokens", "token_ids"),
    )
    amounts: Any = Field(default=None, validation_alias=AliasChoices("amounts", "reserves"))
    total_fee: Any = Field(default=None, validation_alias=AliasChoices("total_fee", "fee"))
    pool_kind: Any = Field(default=None, validation_alias=AliasChoices("pool_kind", "kind"))

    model_config = {"extra": "ignore"}


class InvalidPoolRecord(ValueError):
    """A raw pool record cannot be normalized into a Pool."""


def _parse_pool_id(raw_id: Any, fallback_id: int | None) -> int:
    if isinstance(raw_id, int) and not isinstance(raw_id, bool) and raw_id >= 0:
        return raw_id
    if isinstance(raw_id, str) and _DIGITS_RE.fullmatch(raw_id.strip()):
        return int(raw_id.strip())
    if raw_id is None and fallback_id is not None:
        return fallback_id
    raise InvalidPoolRecord(f"invalid pool id: {raw_id!r}")


def _parse_token_ids(raw: Any) -> tuple[str, ...]:
    if not isinstance(raw, list):
        raise InvalidPoolRecord("token ids must be a list")
    token_ids = []
    for entry in raw:
        if not isinstance(entry, str) or not entry.strip():
            raise InvalidPoolRecord(f"invalid token id entry: {entry!r}")
        token_ids.append(normalize_token_id(entry))
    return tuple(token_ids)


def _parse_reserves(raw: Any) -> tuple[int, ...]:
    if not isinstance(raw, list):
        raise InvalidPoolRecord("amounts must be a list")
    reserves = []
    for entry in raw:
        if isinstance(entry, int) and not isinstance(entry, bool) and entry >= 0:
            reserves.append(entry)
        elif isinstance(entry, str) and _DIGITS_RE.fullmatch(entry.strip()):
            reserves.append(int(entry.strip()))
        else:
            raise InvalidPoolRecord(f"invalid amount entry: {entry!r}")
    return tuple(reserves)


def parse_fee_bps(raw_fee: Any) -> int:
    """Floor a raw fee to whole bps and clamp it to 0..10000.

    Missing or non-numeric fees count as 0.
    """
    if isinstance(raw_fee, bool) or raw_fee is None:
        return 0
    if isinstance(raw_fee, int):
        fee = raw_fee
    elif isinstance(raw_fee, float) and math.isfinite(raw_fee):
        fee = math.floor(raw_fee)
    elif isinstance(raw_fee, str) and _DIGITS_RE.fullmatch(raw_fee.strip()):
        fee = int(raw_fee.strip())
    else:
        return 0
    return max(0, min(FEE_DIVISOR, fee))


def _parse_kind(raw_kind: Any) -> tuple[PoolKind, str | None]:
    if not isinstance(raw_kind, str) or not raw_kind.strip():
        return PoolKind.SIMPLE, None
    label = raw_kind.strip()
    kind = PoolKind.SIMPLE if label == SIMPLE_POOL_KIND else PoolKind.OTHER
    return kind, label


def normalize_pool_record(raw: Any, fallback_id: int | None = None) -> Pool:
    """Normalize a raw pool record into a Pool.

    Args:
        raw: Decoded JSON object from the exchange
        fallback_id: Id to use when the record carries none (its list position)

    Returns:
        Consistent Pool snapshot

    Raises:
        InvalidPoolRecord: If the record is structurally invalid
    """
    if not isinstance(raw, dict):
        raise InvalidPoolRecord(f"pool record must be an object, got {type(raw).__name__}")
    try:
        record = RawPoolRecord.model_validate(raw)
    except ValidationError as err:
        raise InvalidPoolRecord(str(err)) from err

    pool_id = _parse_pool_id(record.id, fallback_id)
    token_ids = _parse_token_ids(record.token_ids)
    reserves = _parse_reserves(record.amounts)
    if len(token_ids) < 2:
        raise InvalidPoolRecord(f"pool {pool_id} holds fewer than 2 tokens")
    if len(token_ids) != len(reserves):
        raise InvalidPoolRecord(
            f"pool {pool_id} has {len(token_ids)} tokens but {len(reserves)} amounts"
        )
    kind, label = _parse_kind(record.pool_kind)

    return Pool(
        id=pool_id,
        token_ids=token_ids,
        reserves=reserves,
        total_fee_bps=parse_fee_bps(record.total_fee),
        kind=kind,
        kind_label=label,
    )


__all__ = [
    "Pool",
    "PoolKind",
    "RawPoolRecord",
    "InvalidPoolRecord",
    "normalize_pool_record",
    "parse_fee_bps",
]
