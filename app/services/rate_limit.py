"""
app/services/rate_limit.py

Rate limiting por token bucket.

Há dois buckets compartilhados por todas as requisições: um para requisições
autenticadas e outro para anônimas. O reabastecimento é contínuo
(capacity tokens a cada `period` segundos, distribuídos proporcionalmente ao
tempo decorrido). Bucket vazio gera rejeição imediata, nunca espera.
"""

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_seconds: int
    retry_after: int = 0


class TokenBucket:
    def __init__(
        self,
        capacity: int,
        period_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if capacity <= 0 or period_seconds <= 0:
            raise ValueError("capacity and period_seconds must be positive")
        self.capacity = capacity
        self.period_seconds = period_seconds
        self._clock = clock
        self._tokens = float(capacity)
        self._updated_at = clock()
        self._lock = threading.Lock()

    @property
    def refill_rate(self) -> float:
        """Tokens por segundo."""
        return self.capacity / self.period_seconds

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._updated_at)
        self._tokens = min(self.capacity, self._tokens + elapsed * self.refill_rate)
        self._updated_at = now

    def try_consume(self, tokens: int = 1) -> bool:
        with self._lock:
            self._refill()
            if self._tokens >= tokens:
                self._tokens -= tokens
                return True
            return False

    @property
    def available_tokens(self) -> int:
        with self._lock:
            self._refill()
            return int(self._tokens)

    def seconds_until_available(self, tokens: int = 1) -> int:
        with self._lock:
            self._refill()
            missing = tokens - self._tokens
        if missing <= 0:
            return 0
        return math.ceil(missing / self.refill_rate)


class RateLimiter:
    """
    Par de buckets (autenticado / anônimo). Criado em `create_app()` a partir
    das settings e guardado em `app.state.rate_limiter`.
    """

    def __init__(
        self,
        authenticated_limit: int,
        unauthenticated_limit: int,
        period_seconds: int = 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.period_seconds = period_seconds
        self.authenticated = TokenBucket(authenticated_limit, period_seconds, clock)
        self.unauthenticated = TokenBucket(unauthenticated_limit, period_seconds, clock)

    def check(self, authenticated: bool) -> RateLimitDecision:
        bucket = self.authenticated if authenticated else self.unauthenticated
        allowed = bucket.try_consume(1)
        return RateLimitDecision(
            allowed=allowed,
            limit=bucket.capacity,
            remaining=bucket.available_tokens,
            reset_seconds=int(self.period_seconds),
            retry_after=0 if allowed else bucket.seconds_until_available(1),
        )
