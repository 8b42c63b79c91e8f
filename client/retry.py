"""Exponential backoff with jitter for calls to the chat service."""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, TypeVar

import httpx


T = TypeVar("T")


def is_transient_error(error: BaseException) -> bool:
    """Network, timeout and connection failures; never 4xx answers."""

    return isinstance(error, (httpx.TransportError, TimeoutError, ConnectionError))


def is_retryable_error(error: BaseException) -> bool:
    if is_transient_error(error):
        return True
    return getattr(error, "status_code", None) == 429


@dataclass
class RetryPolicy:
    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 10.0
    jitter: float = 0.3
    should_retry: Callable[[BaseException], bool] = is_transient_error
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)
    rand: Callable[[], float] = field(default=random.random, repr=False)

    def delay_for(self, attempt: int) -> float:
        exponential = self.base_delay * (2 ** attempt)
        return min(exponential + self.rand() * self.jitter * exponential, self.max_delay)

    def call(self, fn: Callable[[], T]) -> T:
        last_error: Optional[BaseException] = None
        for attempt in range(self.max_attempts):
            try:
                return fn()
            except Exception as exc:
                last_error = exc
                if attempt == self.max_attempts - 1 or not self.should_retry(exc):
                    raise
                self.sleep(self.delay_for(attempt))
        raise RuntimeError("RetryPolicy.max_attempts must be at least 1") from last_error
