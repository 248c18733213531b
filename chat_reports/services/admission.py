"""In-memory admission control: progressive slow-down and fixed-window rate limits.

Counting is done by ``limits`` on a ``MemoryStorage``: state is per process
and is not shared between server instances. Each stage owns its own storage
keyed by client identity (IP address), so the slow-down counter, the general
limiter and the strict limiter count independently of one another. A key's
window opens at its first hit.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Callable, Optional

from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from chat_reports.utils.logger import get_logger

if TYPE_CHECKING:
    from chat_reports.config import Settings

log = get_logger(__name__)

# Must tick with the time source ``limits.storage.memory`` uses for expiry
Clock = Callable[[], float]


class Outcome(StrEnum):
    ALLOWED = "allowed"
    DELAYED = "delayed"
    REJECTED = "rejected"


@dataclass(frozen=True, slots=True)
class AdmissionDecision:
    outcome: Outcome
    count: int
    reset_after: float  # seconds until the window for this key ends
    delay: float = 0.0  # seconds, only for DELAYED
    limit: Optional[int] = None  # None for the slow-down stage

    @property
    def allowed(self) -> bool:
        return self.outcome is not Outcome.REJECTED

    @property
    def remaining(self) -> int:
        if self.limit is None:
            return 0
        return max(self.limit - self.count, 0)


class _WindowStage:
    """A ``limits`` fixed-window item on a private in-memory storage."""

    def __init__(self, namespace: str, window_seconds: int, amount: int, clock: Clock) -> None:
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.storage = MemoryStorage()
        self.strategy = FixedWindowRateLimiter(self.storage)
        self.item = RateLimitItemPerSecond(max(amount, 1), window_seconds, namespace=namespace)
        self._clock = clock

    @property
    def window_seconds(self) -> int:
        return self.item.get_expiry()

    def count(self, identity: str) -> int:
        return self.storage.get(self.item.key_for(identity))

    def reset_after(self, expires_at: float) -> float:
        return max(expires_at - self._clock(), 0.0)

    def reset(self) -> None:
        self.storage.reset()


class SlowDown(_WindowStage):
    """
    Progressive delay: once a client exceeds ``delay_after`` requests in the
    window, each further request is held for ``count * delay_ms``.

    Never rejects.
    """

    def __init__(
        self,
        window_seconds: int,
        delay_after: int,
        delay_ms: int,
        max_delay_ms: Optional[int] = None,
        clock: Clock = time.time,
    ) -> None:
        super().__init__("SLOWDOWN", window_seconds, delay_after, clock)
        self.delay_after = delay_after
        self.delay_ms = delay_ms
        self.max_delay_ms = max_delay_ms

    def check(self, identity: str) -> AdmissionDecision:
        key = self.item.key_for(identity)
        count = self.storage.incr(key, self.item.get_expiry())
        reset_after = self.reset_after(self.storage.get_expiry(key))
        if count <= self.delay_after or self.delay_ms <= 0:
            return AdmissionDecision(Outcome.ALLOWED, count, reset_after)

        delay_ms = count * self.delay_ms
        if self.max_delay_ms is not None:
            delay_ms = min(delay_ms, self.max_delay_ms)
        log.info("request slowed down", client_ip=identity, hits=count, delay_ms=delay_ms)
        return AdmissionDecision(Outcome.DELAYED, count, reset_after, delay=delay_ms / 1000)


class RateLimiter(_WindowStage):
    """Fixed-window limiter: the (limit + 1)th hit in a window is rejected."""

    def __init__(
        self,
        name: str,
        window_seconds: int,
        limit: int,
        message: str,
        clock: Clock = time.time,
    ) -> None:
        super().__init__(name.upper(), window_seconds, limit, clock)
        self.name = name
        self.limit = limit
        self.message = message

    @property
    def retry_after_text(self) -> str:
        return describe_window(self.window_seconds)

    def check(self, identity: str) -> AdmissionDecision:
        allowed = self.strategy.hit(self.item, identity)
        stats = self.strategy.get_window_stats(self.item, identity)
        count = self.count(identity)
        reset_after = self.reset_after(stats.reset_time)
        if not allowed:
            log.warning(
                "rate limit exceeded",
                limiter=self.name,
                client_ip=identity,
                hits=count,
                limit=self.limit,
            )
            return AdmissionDecision(Outcome.REJECTED, count, reset_after, limit=self.limit)
        return AdmissionDecision(Outcome.ALLOWED, count, reset_after, limit=self.limit)

    def headers(self, decision: AdmissionDecision) -> dict[str, str]:
        """Standard ``RateLimit-*`` headers describing ``decision``."""
        reset = str(math.ceil(decision.reset_after))
        headers = {
            "RateLimit-Policy": f"{self.limit};w={self.window_seconds}",
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(decision.remaining),
            "RateLimit-Reset": reset,
        }
        if not decision.allowed:
            headers["Retry-After"] = reset
        return headers


class AdmissionController:
    """The three admission stages, owned by the application (``app.state.admission``)."""

    def __init__(
        self,
        slow_down: SlowDown,
        general: RateLimiter,
        strict: RateLimiter,
        trust_proxy: bool = False,
    ) -> None:
        self.slow_down = slow_down
        self.general = general
        self.strict = strict
        self.trust_proxy = trust_proxy

    def identify(self, request: Request) -> str:
        return get_client_ip(request, trust_proxy=self.trust_proxy)

    @classmethod
    def from_settings(cls, settings: Settings, clock: Clock = time.time) -> AdmissionController:
        window = settings.rate_limit_window_seconds
        return cls(
            slow_down=SlowDown(
                window_seconds=window,
                delay_after=settings.slow_down_after,
                delay_ms=settings.slow_down_delay_ms,
                max_delay_ms=settings.slow_down_max_delay_ms,
                clock=clock,
            ),
            general=RateLimiter(
                name="general",
                window_seconds=window,
                limit=settings.general_rate_limit,
                message="Too many requests from this IP, please try again later.",
                clock=clock,
            ),
            strict=RateLimiter(
                name="strict",
                window_seconds=window,
                limit=settings.strict_rate_limit,
                message="Too many requests to this endpoint, please try again later.",
                clock=clock,
            ),
            trust_proxy=settings.trust_proxy,
        )

    def reset(self) -> None:
        for stage in (self.slow_down, self.general, self.strict):
            stage.reset()


def describe_window(seconds: float) -> str:
    """Render a window length in words, e.g. 900 -> ``"15 minutes"``."""
    seconds = int(seconds)
    for unit, size in (("hour", 3600), ("minute", 60)):
        if seconds >= size and seconds % size == 0:
            amount = seconds // size
            return f"{amount} {unit}" + ("s" if amount != 1 else "")
    return f"{seconds} second" + ("s" if seconds != 1 else "")


def get_client_ip(request: Request, trust_proxy: bool = False) -> str:
    """Client identity used as the rate-limit key."""
    if trust_proxy:
        forwarded = request.headers.get("x-forwarded-for", "")
        if forwarded:
            return forwarded.split(",")[0].strip()
    return get_remote_address(request)
