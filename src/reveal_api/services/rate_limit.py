"""Sliding-window rate limiting per anonymous actor and action class."""

from __future__ import annotations

import enum
import logging
import math
import secrets
import time
from collections import deque
from collections.abc import Callable, Mapping
from functools import lru_cache
from threading import Lock
from typing import Any

import redis

from reveal_api.core.errors import InternalError
from reveal_api.core.settings import settings
from reveal_api.services.identity import actor_tag
from reveal_api.services.locks import KeyedLockTable

logger = logging.getLogger(__name__)


class ActionClass(str, enum.Enum):
    """Budgeted kinds of mutating actions."""

    VOTE = "vote"
    FLAG = "flag"
    COMMENT_CREATE = "comment-create"
    POST_CREATE = "post-create"


Budgets = Mapping[str, tuple[int, int]]


class RateLimiter:
    """Common budget bookkeeping for the limiter backends.

    ``check`` is the only counting operation: an allowed check records exactly
    one action, a denied check records nothing.
    """

    def __init__(self, budgets: Budgets, clock: Callable[[], float] = time.time) -> None:
        unknown = set(budgets) - {action.value for action in ActionClass}
        if unknown:
            raise ValueError(f"Unknown action classes: {sorted(unknown)}")
        self._budgets = {key: (int(limit), float(window)) for key, (limit, window) in budgets.items()}
        self._clock = clock

    def budget(self, action: ActionClass | str) -> tuple[int, float]:
        """Return ``(max_actions, window_seconds)`` for an action class."""
        key = ActionClass(action).value
        try:
            return self._budgets[key]
        except KeyError as err:
            raise ValueError(f"No budget configured for {key}") from err

    def check(self, actor_id: bytes, action: ActionClass | str) -> bool:
        raise NotImplementedError

    def retry_after(self, actor_id: bytes, action: ActionClass | str) -> float:
        raise NotImplementedError

    def reset(self) -> None:
        raise NotImplementedError


class InMemoryRateLimiter(RateLimiter):
    """Process-local sliding window log.

    Each (actor, action) window is guarded by a lock stripe, so checks for
    unrelated actors do not serialize on one global lock. Idle windows are
    swept from ``check`` at most once per ``sweep_interval`` seconds, which
    defaults to the longest configured window.
    """

    def __init__(
        self,
        budgets: Budgets,
        clock: Callable[[], float] = time.time,
        *,
        stripes: int = 64,
        sweep_interval: float | None = None,
    ) -> None:
        super().__init__(budgets, clock)
        self._locks = KeyedLockTable(stripes)
        self._windows: dict[tuple[bytes, str], deque[float]] = {}
        if sweep_interval is None:
            sweep_interval = max((span for _, span in self._budgets.values()), default=0.0)
        self._sweep_interval = sweep_interval
        self._sweep_lock = Lock()
        self._next_sweep = clock() + sweep_interval

    def _prune(self, window: deque[float], now: float, span: float) -> None:
        cutoff = now - span
        while window and window[0] <= cutoff:
            window.popleft()

    def check(self, actor_id: bytes, action: ActionClass | str) -> bool:
        limit, span = self.budget(action)
        key = (actor_id, ActionClass(action).value)
        with self._locks.hold(key):
            now = self._clock()
            window = self._windows.setdefault(key, deque())
            self._prune(window, now, span)
            allowed = len(window) < limit
            if allowed:
                window.append(now)
        # Outside the stripe lock: the sweep takes stripe locks itself.
        self._maybe_sweep(now)
        return allowed

    def _maybe_sweep(self, now: float) -> None:
        if now < self._next_sweep or not self._sweep_lock.acquire(blocking=False):
            return
        try:
            self._next_sweep = now + self._sweep_interval
            dropped = self.purge_expired()
        finally:
            self._sweep_lock.release()
        if dropped:
            logger.debug("Swept %d idle rate windows", dropped)

    def retry_after(self, actor_id: bytes, action: ActionClass | str) -> float:
        limit, span = self.budget(action)
        key = (actor_id, ActionClass(action).value)
        with self._locks.hold(key):
            window = self._windows.get(key)
            if not window:
                return 0.0
            now = self._clock()
            self._prune(window, now, span)
            if not window:
                self._windows.pop(key, None)
                return 0.0
            if len(window) < limit:
                return 0.0
            return max(0.0, window[0] + span - now)

    def active_windows(self) -> int:
        """Return the number of windows currently tracked."""
        return len(self._windows)

    def purge_expired(self) -> int:
        """Drop windows whose entries have all expired; return how many were dropped."""
        dropped = 0
        for key in list(self._windows):
            _, span = self.budget(key[1])
            with self._locks.hold(key):
                window = self._windows.get(key)
                if window is None:
                    continue
                self._prune(window, self._clock(), span)
                if not window:
                    del self._windows[key]
                    dropped += 1
        return dropped

    def reset(self) -> None:
        self._windows.clear()


# Prune, count and record in one round trip so that concurrent checks from the
# same actor cannot both observe a free slot.
_SLIDING_WINDOW_LUA = """
local key = KEYS[1]
local now = tonumber(ARGV[1])
local window = tonumber(ARGV[2])
local limit = tonumber(ARGV[3])
redis.call('ZREMRANGEBYSCORE', key, '-inf', now - window)
if redis.call('ZCARD', key) >= limit then
  return 0
end
redis.call('ZADD', key, now, ARGV[4])
redis.call('EXPIRE', key, math.ceil(window))
return 1
"""


class RedisRateLimiter(RateLimiter):
    """Sliding window log shared across processes through Redis sorted sets."""

    key_prefix = "ratelimit"

    def __init__(
        self,
        client: Any,
        budgets: Budgets,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(budgets, clock)
        self._redis = client
        self._script = client.register_script(_SLIDING_WINDOW_LUA)

    def _key(self, actor_id: bytes, action: ActionClass | str) -> str:
        return f"{self.key_prefix}:{ActionClass(action).value}:{actor_id.hex()}"

    def check(self, actor_id: bytes, action: ActionClass | str) -> bool:
        limit, span = self.budget(action)
        now = self._clock()
        member = f"{now:.6f}:{secrets.token_hex(4)}"
        try:
            allowed = self._script(
                keys=[self._key(actor_id, action)],
                args=[now, span, limit, member],
            )
        except redis.RedisError as err:
            logger.exception(
                "Rate limit check failed for actor %s action %s",
                actor_tag(actor_id),
                ActionClass(action).value,
            )
            raise InternalError() from err
        return bool(int(allowed))

    def retry_after(self, actor_id: bytes, action: ActionClass | str) -> float:
        limit, span = self.budget(action)
        key = self._key(actor_id, action)
        now = self._clock()
        try:
            self._redis.zremrangebyscore(key, "-inf", now - span)
            if self._redis.zcard(key) < limit:
                return 0.0
            oldest = self._redis.zrange(key, 0, 0, withscores=True)
        except redis.RedisError as err:
            logger.exception("Rate limit lookup failed for actor %s", actor_tag(actor_id))
            raise InternalError() from err
        if not oldest:
            return 0.0
        return max(0.0, float(oldest[0][1]) + span - now)

    def reset(self) -> None:
        for key in self._redis.scan_iter(match=f"{self.key_prefix}:*"):
            self._redis.delete(key)


def build_rate_limiter(backend: str | None = None) -> RateLimiter:
    """Create a limiter for the configured backend."""
    backend = (backend or settings.rate_limit_backend).lower()
    budgets = settings.rate_limit_budgets
    if backend == "redis":
        client = redis.Redis.from_url(settings.redis_url)
        return RedisRateLimiter(client, budgets)
    if backend == "memory":
        return InMemoryRateLimiter(budgets, stripes=settings.ledger_lock_stripes)
    raise ValueError(f"Unsupported rate limit backend: {backend}")


@lru_cache(maxsize=1)
def get_rate_limiter() -> RateLimiter:
    """Return the process-wide rate limiter."""
    limiter = build_rate_limiter()
    logger.info("Rate limiter backend: %s", type(limiter).__name__)
    return limiter


def retry_after_seconds(value: float) -> int:
    """Round a retry delay up to whole seconds for the Retry-After header."""
    return max(1, math.ceil(value))
