"""In-memory ExchangeClient for tests.

Usage:
    client = FakeExchangeClient([make_raw_pool(0, [WNEAR, USDT], [10**24, 10**6])])
    client.set_return(0, WNEAR, USDT, "123")           # fixed quote
    client.set_return(0, WNEAR, USDT, RpcError("503"))  # always fails
    client.set_return(0, WNEAR, USDT, [RpcError("503"), "123"])  # fails once
"""

import threading
from typing import Any

from refquote.amm import estimate_constant_product_output
from refquote.errors import RpcError
from refquote.models.pool import normalize_pool_record

ScriptedReturn = str | int | Exception | list[Any]


class FakeExchangeClient:
    """Serves raw pool records and get_return quotes from memory.

    Unscripted get_return calls are answered with the constant-product
    estimate of the pool, so non-simple pools still quote sensibly.
    All calls are recorded in ``calls`` as (method, args) tuples.
    """

    def __init__(
        self,
        pools: list[dict[str, Any]] | None = None,
        endpoint: str = "fake://exchange",
    ) -> None:
        self.endpoint = endpoint
        self.pools = list(pools or [])
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.list_pools_errors: list[Exception] = []
        self.get_pool_errors: list[Exception] = []
        self._returns: dict[tuple[int, str, str], ScriptedReturn] = {}
        self._lock = threading.Lock()

    def set_return(
        self, pool_id: int, token_in: str, token_out: str, scripted: ScriptedReturn
    ) -> None:
        self._returns[(pool_id, token_in, token_out)] = scripted

    def calls_to(self, method: str) -> list[tuple[Any, ...]]:
        return [args for name, args in self.calls if name == method]

    def _record(self, method: str, *args: Any) -> None:
        with self._lock:
            self.calls.append((method, args))

    def _raw_pool(self, pool_id: int) -> dict[str, Any] | None:
        for index, raw in enumerate(self.pools):
            raw_id = raw.get("id", index) if isinstance(raw, dict) else index
            if raw_id == pool_id:
                return raw
        return None

    def list_pools(self, contract_id: str, from_index: int, limit: int) -> list[Any]:
        self._record("list_pools", contract_id, from_index, limit)
        if self.list_pools_errors:
            raise self.list_pools_errors.pop(0)
        return self.pools[from_index : from_index + limit]

    def get_pool(self, contract_id: str, pool_id: int) -> Any | None:
        self._record("get_pool", contract_id, pool_id)
        if self.get_pool_errors:
            raise self.get_pool_errors.pop(0)
        return self._raw_pool(pool_id)

    def get_return(
        self,
        contract_id: str,
        pool_id: int,
        token_in: str,
        token_out: str,
        amount_in: int,
    ) -> str:
        self._record("get_return", contract_id, pool_id, token_in, token_out, amount_in)
        key = (pool_id, token_in, token_out)
        if key in self._returns:
            scripted = self._returns[key]
            if isinstance(scripted, list):
                with self._lock:
                    scripted = scripted.pop(0) if len(scripted) > 1 else scripted[0]
            if isinstance(scripted, Exception):
                raise scripted
            return str(scripted)

        raw = self._raw_pool(pool_id)
        if raw is None:
            raise RpcError(f"Smart contract panicked: pool {pool_id} not found")
        pool = normalize_pool_record(raw, fallback_id=pool_id)
        return str(estimate_constant_product_output(pool, token_in, token_out, amount_in))
