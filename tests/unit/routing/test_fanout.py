"""Tests for bounded fan-out and request deadlines."""

import threading
import time

import pytest

from refquote.errors import QuoteTimeout
from refquote.routing.fanout import Deadline, clamp_concurrency, run_bounded


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


class TestDeadline:
    def test_remaining_and_expiry(self) -> None:
        clock = FakeClock()
        deadline = Deadline(5.0, clock=clock)
        assert deadline.remaining() == 5.0
        clock.now += 4
        deadline.check()
        clock.now += 1
        assert deadline.expired
        with pytest.raises(QuoteTimeout, match="get_return exceeded the 5s"):
            deadline.check("get_return")

    def test_unbounded(self) -> None:
        clock = FakeClock()
        deadline = Deadline(None, clock=clock)
        clock.now += 10**6
        assert deadline.remaining() is None
        assert not deadline.expired
        deadline.check()


class TestRunBounded:
    """Outcomes come back in submission order, errors captured per task."""

    def test_empty(self) -> None:
        assert run_bounded([]) == []

    def test_submission_order(self) -> None:
        def task(value: int, delay: float):
            def run() -> int:
                time.sleep(delay)
                return value

            return run

        outcomes = run_bounded([task(1, 0.05), task(2, 0.0), task(3, 0.02)], max_concurrency=3)
        assert [o.value for o in outcomes] == [1, 2, 3]

    def test_errors_captured(self) -> None:
        def boom() -> int:
            raise RuntimeError("boom")

        outcomes = run_bounded([lambda: 1, boom, lambda: 3], max_concurrency=2)
        assert [o.error is None for o in outcomes] == [True, False, True]
        assert str(outcomes[1].error) == "boom"
        assert outcomes[2].value == 3

    def test_sequential_when_single_worker(self) -> None:
        seen: list[str] = []

        def task() -> str:
            seen.append(threading.current_thread().name)
            return "x"

        run_bounded([task, task], max_concurrency=1)
        assert seen == [threading.current_thread().name] * 2

    def test_concurrency_bound(self) -> None:
        active = 0
        peak = 0
        lock = threading.Lock()

        def task() -> None:
            nonlocal active, peak
            with lock:
                active += 1
                peak = max(peak, active)
            time.sleep(0.01)
            with lock:
                active -= 1

        run_bounded([task] * 12, max_concurrency=3)
        assert peak <= 3


class TestClampConcurrency:
    @pytest.mark.parametrize(("value", "expected"), [(None, 4), (0, 1), (5, 5), (64, 8)])
    def test_clamp(self, value: int | None, expected: int) -> None:
        assert clamp_concurrency(value) == expected
