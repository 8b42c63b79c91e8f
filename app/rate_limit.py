"""In-memory, single-process rate limiter keyed by client address."""

from __future__ import annotations

import asyncio
import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict

from fastapi import Request


logger = logging.getLogger(__name__)


@dataclass
class RateLimitEntry:
    count: int
    expires_at: float


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    retry_after: int = 0


class RateLimiter:
    def __init__(
        self,
        limit: int = 10,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._entries: Dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> RateLimitDecision:
        """Count one request for `key` and say whether it is within quota."""

        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or now > entry.expires_at:
                self._entries[key] = RateLimitEntry(count=1, expires_at=now + self.window_seconds)
                return RateLimitDecision(allowed=True)

            if entry.count >= self.limit:
                retry_after = max(1, math.ceil(entry.expires_at - now))
                return RateLimitDecision(allowed=False, retry_after=retry_after)

            entry.count += 1
            return RateLimitDecision(allowed=True)

    def sweep(self) -> int:
        """Drop expired entries and return how many were removed."""

        now = self._clock()
        removed = 0
        with self._lock:
            expired = [key for key, entry in self._entries.items() if now > entry.expires_at]
            for key in expired:
                entry = self._entries.get(key)
                if entry is not None and now > entry.expires_at:
                    del self._entries[key]
                    removed += 1
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


async def run_sweeper(limiter: RateLimiter, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        removed = limiter.sweep()
        if removed:
            logger.info("Rate limiter sweep removed %s expired entries", removed)


def client_address(request: Request, trust_forwarded: bool = False) -> str:
    """Key for the limiter. Proxy headers count only behind a trusted proxy."""

    if not trust_forwarded:
        return _peer_address(request)
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return _peer_address(request)


def _peer_address(request: Request) -> str:
    if request.client and request.client.host:
        return request.client.host
    return "unknown"
