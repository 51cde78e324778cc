"""
attempts.py — Fixed-window login attempt limiter
================================================
Counts password attempts per client identity inside a fixed window
(default: 5 attempts per 15 minutes). Once the budget is spent every
further attempt is rejected until the window deadline passes; the next
attempt after that opens a fresh window.

Each record has its own lock, so two requests from the same client can
never double-count, while requests from different clients only share
the table lock for the lookup itself.

The table lives in process memory. Several instances behind a load
balancer each keep their own counters, which multiplies the effective
attempt budget by the instance count. Coordinating them needs a shared
external store and is deliberately not attempted here.
"""
from __future__ import annotations

import logging
import math
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from threading import Lock
from typing import Callable

logger = logging.getLogger("gate.ratelimit")

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_WINDOW_SECONDS = 15 * 60
DEFAULT_MAX_ENTRIES = 10_000


@dataclass
class RateLimitDecision:
    allowed: bool
    remaining_attempts: int
    reset_in_seconds: int


@dataclass
class _AttemptRecord:
    count: int
    window_reset_at: float
    lock: Lock = field(default_factory=Lock, repr=False, compare=False)


class LoginAttemptLimiter:
    """Per-identity fixed-window attempt counter with a bounded table."""

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._records: OrderedDict[str, _AttemptRecord] = OrderedDict()
        self._table_lock = Lock()

    def __len__(self) -> int:
        with self._table_lock:
            return len(self._records)

    def check(self, identity: str) -> RateLimitDecision:
        """Permit-and-count one attempt for ``identity``, or reject it."""
        record = self._get_or_create(identity)

        with record.lock:
            now = self._clock()
            if now > record.window_reset_at:
                record.count = 0
                record.window_reset_at = now + self.window_seconds
            elif record.count >= self.max_attempts:
                reset_in = _ceil_seconds(record.window_reset_at - now)
                logger.warning(
                    "Login attempts exhausted for %s; window resets in %ss",
                    identity, reset_in,
                )
                return RateLimitDecision(
                    allowed=False,
                    remaining_attempts=0,
                    reset_in_seconds=reset_in,
                )

            record.count += 1
            return RateLimitDecision(
                allowed=True,
                remaining_attempts=max(0, self.max_attempts - record.count),
                reset_in_seconds=_ceil_seconds(record.window_reset_at - now),
            )

    def reset(self, identity: str) -> None:
        with self._table_lock:
            self._records.pop(identity, None)

    def clear(self) -> None:
        with self._table_lock:
            self._records.clear()

    # -- table maintenance -------------------------------------------------

    def _get_or_create(self, identity: str) -> _AttemptRecord:
        with self._table_lock:
            record = self._records.get(identity)
            if record is not None:
                self._records.move_to_end(identity)
                return record

            if len(self._records) >= self.max_entries:
                self._evict(self._clock())

            # Starts empty; the first check counts itself under the record lock.
            record = _AttemptRecord(count=0, window_reset_at=self._clock() + self.window_seconds)
            self._records[identity] = record
            return record

    def _evict(self, now: float) -> None:
        # Caller holds the table lock.
        expired = [key for key, rec in self._records.items() if now > rec.window_reset_at]
        for key in expired:
            del self._records[key]
        while len(self._records) >= self.max_entries:
            evicted, _ = self._records.popitem(last=False)
            logger.info("Attempt table full; evicted least recently seen client %s", evicted)
        if expired:
            logger.debug("Swept %d expired attempt records", len(expired))


def _ceil_seconds(delta: float) -> int:
    return max(0, math.ceil(delta))
