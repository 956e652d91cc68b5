from __future__ import annotations

import time
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, Tuple

RateKey = Tuple[int, str]


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    retry_after: float


class RateLimiter:
    def __init__(
        self,
        max_calls: int,
        period_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_calls < 1:
            raise ValueError("max_calls must be at least 1.")
        self.max_calls = max_calls
        self.period_seconds = period_seconds
        self._clock = clock
        self._calls: Dict[RateKey, Deque[float]] = defaultdict(deque)

    def allow(self, user_id: int, action: str) -> RateLimitResult:
        now = self._clock()
        window = self._calls[(user_id, action)]
        while window and now - window[0] >= self.period_seconds:
            window.popleft()
        if len(window) >= self.max_calls:
            return RateLimitResult(False, max(self.period_seconds - (now - window[0]), 0.0))
        window.append(now)
        return RateLimitResult(True, 0.0)


rate_limiter = RateLimiter(max_calls=5, period_seconds=10)
