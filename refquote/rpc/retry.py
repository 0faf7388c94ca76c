"""Bounded retry for outbound RPC calls.

Public RPC endpoints rate-limit aggressively and drop connections under load,
so every network call goes through RetryPolicy.call. Only transient faults
are retried; anything else propagates on the first attempt.
"""

from __future__ import annotations

import re
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeVar

import httpx
import structlog

from refquote.config import RetrySettings
from refquote.constants import DEFAULT_RETRY_ATTEMPTS, MAX_RETRY_ATTEMPTS, RETRY_BASE_DELAY_SECONDS
from refquote.errors import InvalidRpcResponse, RpcTransientError

logger = structlog.get_logger()

T = TypeVar("T")

# HTTP statuses only where the client puts them: leading, "(503 ...)" or "status 503"
_TRANSIENT_STATUS_RE = re.compile(r"(?:^|\(|\bstatus:?\s*|\bhttp\s*)(429|5\d\d)\b")

_TRANSIENT_MARKERS = (
    "too many requests",
    "rate limit",
    "fetch failed",
    "timeout",
    "timed out",
    "bad gateway",
    "service unavailable",
)


def is_transient_rpc_error(error: BaseException) -> bool:
    """Classify an error as a transient backend/network fault.

    Transport-level httpx failures (connect errors, read timeouts) are always
    transient. Otherwise the message is inspected for rate limiting, fetch
    failures, timeouts and 5xx statuses.
    """
    if isinstance(error, RpcTransientError):
        return True
    if isinstance(error, httpx.TimeoutException | httpx.TransportError):
        return True
    if isinstance(error, InvalidRpcResponse):
        return False
    text = str(error).lower()
    if _TRANSIENT_STATUS_RE.search(text):
        return True
    return any(marker in text for marker in _TRANSIENT_MARKERS)


def clamp_attempts(max_attempts: int | None) -> int:
    if max_attempts is None:
        return DEFAULT_RETRY_ATTEMPTS
    return max(1, min(MAX_RETRY_ATTEMPTS, int(max_attempts)))


@dataclass
class RetryPolicy:
    """Linear-backoff retry: the n-th retry waits base_delay * n seconds."""

    max_attempts: int = DEFAULT_RETRY_ATTEMPTS
    base_delay_seconds: float = RETRY_BASE_DELAY_SECONDS
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    def __post_init__(self) -> None:
        self.max_attempts = clamp_attempts(self.max_attempts)

    @classmethod
    def from_settings(cls, settings: RetrySettings) -> RetryPolicy:
        return cls(
            max_attempts=settings.max_attempts,
            base_delay_seconds=settings.base_delay_seconds,
        )

    def call(
        self,
        fn: Callable[..., T],
        *args: object,
        endpoint: str,
        operation: str = "rpc_call",
        **kwargs: object,
    ) -> T:
        """Invoke fn, retrying transient failures.

        Args:
            fn: The network call
            endpoint: Backend name used in logs and the final error
            operation: Short label for logs (e.g. "get_pools")

        Returns:
            Whatever fn returns

        Raises:
            RpcTransientError: If every attempt failed transiently
            Exception: The first non-transient error, unchanged
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                return fn(*args, **kwargs)
            except Exception as e:
                if not is_transient_rpc_error(e):
                    raise
                if attempt >= self.max_attempts:
                    raise RpcTransientError(endpoint, attempt, e) from e
                delay = self.base_delay_seconds * attempt
                logger.warning(
                    "rpc_retry",
                    endpoint=endpoint,
                    operation=operation,
                    attempt=attempt,
                    max_attempts=self.max_attempts,
                    delay_seconds=delay,
                    error=str(e),
                )
                self.sleep(delay)
        # max_attempts >= 1, the loop always returns or raises
        raise AssertionError("unreachable")


__all__ = ["RetryPolicy", "clamp_attempts", "is_transient_rpc_error"]
