"""Unit tests for the in-memory LRU window rate limiter."""

import threading

import pytest

from app.adapters.rate_limit.in_memory import InMemoryLRUWindowRateLimiter


def test_admits_exactly_limit_requests_per_window(fake_time) -> None:
    limiter = InMemoryLRUWindowRateLimiter(capacity=10, window_ms=60000, clock=fake_time)

    results = [limiter.check("k", 3) for _ in range(4)]

    assert [r.allowed for r in results] == [True, True, True, False]


def test_remaining_counts_down_and_is_zero_when_rejected(fake_time) -> None:
    limiter = InMemoryLRUWindowRateLimiter(clock=fake_time)

    remaining = [limiter.check("k", 2).remaining for _ in range(4)]

    assert remaining == [1, 0, 0, 0]


def test_reports_configured_limit(fake_time) -> None:
    limiter = InMemoryLRUWindowRateLimiter(clock=fake_time)

    assert limiter.check("k", 7).limit == 7
    blocked = [limiter.check("k", 1) for _ in range(2)][-1]
    assert blocked.limit == 1
    assert blocked.remaining == 0


def test_rejected_result_suggests_retry_after(fake_time) -> None:
    limiter = InMemoryLRUWindowRateLimiter(window_ms=10000, clock=fake_time)

    limiter.check("k", 1)
    fake_time.advance(4)
    blocked = limiter.check("k", 1)

    assert blocked.allowed is False
    assert blocked.retry_after_seconds == 6


def test_token_is_new_again_after_window(fake_time) -> None:
    limiter = InMemoryLRUWindowRateLimiter(window_ms=10000, clock=fake_time)

    assert limiter.check("k", 1).allowed is True
    assert limiter.check("k", 1).allowed is False

    fake_time.advance(10.5)

    result = limiter.check("k", 1)
    assert result.allowed is True
    assert limiter.count_for("k") == 1


def test_window_is_fixed_from_first_request(fake_time) -> None:
    limiter = InMemoryLRUWindowRateLimiter(window_ms=10000, clock=fake_time)

    limiter.check("k", 5)
    fake_time.advance(6)
    limiter.check("k", 5)
    fake_time.advance(6)

    # Later requests did not extend the first request's window
    assert limiter.count_for("k") == 0
    assert limiter.check("k", 5).remaining == 4


def test_isolated_by_token(fake_time) -> None:
    limiter = InMemoryLRUWindowRateLimiter(clock=fake_time)

    assert limiter.check("k1", 1).allowed is True
    assert limiter.check("k1", 1).allowed is False

    assert limiter.check("k2", 1).allowed is True


def test_capacity_overflow_evicts_least_recently_used(fake_time) -> None:
    limiter = InMemoryLRUWindowRateLimiter(capacity=2, clock=fake_time)

    limiter.check("a", 1)
    limiter.check("b", 1)
    limiter.check("c", 1)

    assert limiter.tracked_tokens() == 2
    assert limiter.count_for("b") == 1
    assert limiter.count_for("c") == 1
    # "a" was forgotten, so it starts fresh
    assert limiter.check("a", 1).allowed is True


def test_recent_use_protects_token_from_eviction(fake_time) -> None:
    limiter = InMemoryLRUWindowRateLimiter(capacity=2, clock=fake_time)

    limiter.check("a", 5)
    limiter.check("b", 5)
    limiter.check("a", 5)
    limiter.check("c", 5)

    assert limiter.count_for("a") == 2
    assert limiter.count_for("b") == 0


def test_count_for_does_not_change_eviction_order(fake_time) -> None:
    limiter = InMemoryLRUWindowRateLimiter(capacity=2, clock=fake_time)

    limiter.check("a", 5)
    limiter.check("b", 5)
    assert limiter.count_for("a") == 1
    limiter.check("c", 5)

    # Reading "a" did not promote it, so it is still the one evicted
    assert limiter.count_for("a") == 0
    assert limiter.count_for("b") == 1
    assert limiter.count_for("c") == 1


def test_concurrent_checks_do_not_lose_updates() -> None:
    limiter = InMemoryLRUWindowRateLimiter(capacity=10, window_ms=60000)
    threads_count = 64
    barrier = threading.Barrier(threads_count)

    def _worker() -> None:
        barrier.wait()
        limiter.check("shared", 1000)

    threads = [threading.Thread(target=_worker) for _ in range(threads_count)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert limiter.count_for("shared") == threads_count


def test_concurrent_checks_admit_exactly_limit() -> None:
    limiter = InMemoryLRUWindowRateLimiter()
    admitted: list[bool] = []
    lock = threading.Lock()

    def _worker() -> None:
        allowed = limiter.check("shared", 10).allowed
        with lock:
            admitted.append(allowed)

    threads = [threading.Thread(target=_worker) for _ in range(40)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert admitted.count(True) == 10


@pytest.mark.parametrize(
    "kwargs",
    [
        {"capacity": 0, "window_ms": 60000},
        {"capacity": 1, "window_ms": 0},
    ],
)
def test_invalid_constructor_args(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        InMemoryLRUWindowRateLimiter(**kwargs)


def test_invalid_check_args_leave_state_untouched() -> None:
    limiter = InMemoryLRUWindowRateLimiter()

    with pytest.raises(ValueError):
        limiter.check("", 1)

    with pytest.raises(ValueError):
        limiter.check("k", 0)

    assert limiter.tracked_tokens() == 0
