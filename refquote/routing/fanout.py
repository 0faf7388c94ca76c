"""Bounded fan-out of independent exchange calls.

Route search issues one authoritative quote per candidate pool. Those calls
are independent, so they run on a small thread pool. Outcomes come back in
submission order whatever order the calls finish in, which keeps route
selection deterministic.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from refquote.constants import DEFAULT_MAX_CONCURRENCY, MAX_CONCURRENCY
from refquote.errors import QuoteTimeout

T = TypeVar("T")


@dataclass
class Deadline:
    """Request-scoped time budget; None means unbounded."""

    timeout_seconds: float | None
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)
    started_at: float = field(init=False)

    def __post_init__(self) -> None:
        self.started_at = self.clock()

    def remaining(self) -> float | None:
        if self.timeout_seconds is None:
            return None
        return self.timeout_seconds - (self.clock() - self.started_at)

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def check(self, operation: str = "quote") -> None:
        """Raise QuoteTimeout if the budget is spent."""
        if self.expired:
            raise QuoteTimeout(
                f"{operation} exceeded the {self.timeout_seconds:g}s quote deadline"
            )


@dataclass
class TaskOutcome(Generic[T]):
    """Result or error of one fanned-out call."""

    value: T | None = None
    error: Exception | None = None


def clamp_concurrency(max_concurrency: int | None) -> int:
    if max_concurrency is None:
        return DEFAULT_MAX_CONCURRENCY
    return max(1, min(MAX_CONCURRENCY, int(max_concurrency)))


def run_bounded(
    tasks: Sequence[Callable[[], T]],
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
) -> list[TaskOutcome[T]]:
    """Run tasks with at most max_concurrency in flight.

    Errors are captured per task rather than raised, so the caller decides
    whether one failure aborts the batch.

    Returns:
        One outcome per task, in the order tasks were given
    """
    if not tasks:
        return []
    workers = min(len(tasks), clamp_concurrency(max_concurrency))

    if workers == 1:
        outcomes: list[TaskOutcome[T]] = []
        for task in tasks:
            try:
                outcomes.append(TaskOutcome(value=task()))
            except Exception as e:
                outcomes.append(TaskOutcome(error=e))
        return outcomes

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="refquote") as executor:
        futures = [executor.submit(task) for task in tasks]
        outcomes = []
        for future in futures:
            try:
                outcomes.append(TaskOutcome(value=future.result()))
            except Exception as e:
                outcomes.append(TaskOutcome(error=e))
    return outcomes


__all__ = ["Deadline", "TaskOutcome", "clamp_concurrency", "run_bounded"]
