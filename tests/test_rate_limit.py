from __future__ import annotations

import threading

from starlette.requests import Request

from app.rate_limit import RateLimiter, client_address


def _request(headers: dict, client=("10.0.0.9", 5555)) -> Request:
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/chat",
        "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
        "client": client,
    }
    return Request(scope)


def test_quota_within_window(clock) -> None:
    limiter = RateLimiter(limit=3, window_seconds=60, clock=clock)

    assert all(limiter.hit("1.1.1.1").allowed for _ in range(3))
    decision = limiter.hit("1.1.1.1")

    assert not decision.allowed
    assert decision.retry_after == 60


def test_keys_are_independent(clock) -> None:
    limiter = RateLimiter(limit=1, window_seconds=60, clock=clock)

    assert limiter.hit("a").allowed
    assert limiter.hit("b").allowed
    assert not limiter.hit("a").allowed


def test_window_resets_after_expiry(clock) -> None:
    limiter = RateLimiter(limit=1, window_seconds=60, clock=clock)
    assert limiter.hit("a").allowed
    clock.advance(30)
    decision = limiter.hit("a")
    assert not decision.allowed
    assert decision.retry_after == 30

    clock.advance(31)
    assert limiter.hit("a").allowed


def test_sweep_removes_only_expired_entries(clock) -> None:
    limiter = RateLimiter(limit=5, window_seconds=60, clock=clock)
    limiter.hit("old")
    clock.advance(45)
    limiter.hit("fresh")
    clock.advance(20)

    assert limiter.sweep() == 1
    assert len(limiter) == 1
    # the remaining entry keeps its count
    for _ in range(4):
        limiter.hit("fresh")
    assert not limiter.hit("fresh").allowed


def test_concurrent_hits_never_exceed_quota() -> None:
    limiter = RateLimiter(limit=10, window_seconds=60)
    start = threading.Barrier(200)
    results = []
    results_lock = threading.Lock()

    def worker() -> None:
        start.wait()
        decision = limiter.hit("k")
        with results_lock:
            results.append(decision.allowed)

    threads = [threading.Thread(target=worker) for _ in range(200)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)

    assert len(results) == 200
    assert results.count(True) == 10


def test_client_address_uses_peer_by_default() -> None:
    request = _request({"X-Forwarded-For": "203.0.113.5", "X-Real-IP": "198.51.100.7"})
    assert client_address(request) == "10.0.0.9"
    assert client_address(_request({}, client=None)) == "unknown"


def test_client_address_prefers_forwarded_for_behind_trusted_proxy() -> None:
    request = _request({"X-Forwarded-For": "203.0.113.5, 10.0.0.1", "X-Real-IP": "198.51.100.7"})
    assert client_address(request, trust_forwarded=True) == "203.0.113.5"


def test_client_address_falls_back_to_real_ip_then_peer() -> None:
    assert client_address(_request({"X-Real-IP": "198.51.100.7"}), trust_forwarded=True) == "198.51.100.7"
    assert client_address(_request({}), trust_forwarded=True) == "10.0.0.9"
    assert client_address(_request({}, client=None), trust_forwarded=True) == "unknown"
