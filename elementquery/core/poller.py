# elementquery/core/poller.py
from __future__ import annotations

"""Retry policies and the shared poll clock
--------------------------------------------
A RetryPolicy says how long to keep trying and at what cadence. A Poller holds
the per-invocation loop state (start time, attempt count) and answers the two
questions every poll loop asks after a failed attempt: stop now, or sleep and
try again (and for how long).
"""

from dataclasses import dataclass
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from elementquery.utils.logger import get_logger
from elementquery.utils.timing import async_sleep_ms, now_ms

log = get_logger(__name__)


@dataclass(frozen=True)
class PollOptions:
    """Normalized view of a policy: optional timeout, optional interval, minimum tries."""
    timeout_ms: Optional[int]
    interval_ms: Optional[int]
    min_tries: int


# ---------- Policies ----------

class RetryPolicy(BaseModel):
    """Base class for all polling policies. Instances are immutable."""

    model_config = ConfigDict(frozen=True)

    def options(self) -> PollOptions:
        raise NotImplementedError

    def describe(self) -> str:
        return self.__class__.__name__


class Immediate(RetryPolicy):
    """No polling, single attempt."""

    kind: Literal["immediate"] = "immediate"

    def options(self) -> PollOptions:
        return PollOptions(timeout_ms=None, interval_ms=None, min_tries=0)


class Deadline(RetryPolicy):
    """
    Poll until `timeout_ms` has elapsed since the first attempt started.

    `interval_ms` is the minimum time between the starts of two attempts; an
    attempt that overran its slot is followed immediately by the next one.
    """

    kind: Literal["deadline"] = "deadline"
    timeout_ms: int = Field(..., ge=0)
    interval_ms: int = Field(..., ge=0)

    def options(self) -> PollOptions:
        return PollOptions(timeout_ms=self.timeout_ms, interval_ms=self.interval_ms, min_tries=0)

    def describe(self) -> str:
        return f"Deadline({self.timeout_ms} ms every {self.interval_ms} ms)"


class MaxAttempts(RetryPolicy):
    """
    Poll once every interval until exactly `max_tries` attempts were made,
    regardless of how long they take.
    """

    kind: Literal["max_attempts"] = "max_attempts"
    max_tries: int = Field(..., ge=1)
    interval_ms: int = Field(..., ge=0)

    def options(self) -> PollOptions:
        return PollOptions(timeout_ms=None, interval_ms=self.interval_ms, min_tries=self.max_tries)

    def describe(self) -> str:
        return f"MaxAttempts({self.max_tries} every {self.interval_ms} ms)"


class DeadlineWithMinAttempts(RetryPolicy):
    """
    Poll until the timeout elapsed *and* at least `min_tries` attempts ran,
    whichever comes last.
    """

    kind: Literal["deadline_min_attempts"] = "deadline_min_attempts"
    timeout_ms: int = Field(..., ge=0)
    interval_ms: int = Field(..., ge=0)
    min_tries: int = Field(..., ge=0)

    def options(self) -> PollOptions:
        return PollOptions(timeout_ms=self.timeout_ms, interval_ms=self.interval_ms, min_tries=self.min_tries)

    def describe(self) -> str:
        return f"DeadlineWithMinAttempts({self.timeout_ms} ms every {self.interval_ms} ms, min {self.min_tries})"


# ---------- Poll clock ----------

class Poller:
    """
    Loop state for one poll run.

    Usage:
        poller = Poller(policy)
        while True:
            poller.next_attempt()
            ...            # try; return on success
            if poller.exhausted():
                ...        # give up
            await poller.pace()
    """

    def __init__(self, policy: RetryPolicy):
        self.policy = policy
        self.options = policy.options()
        self.tries = 0
        self.start_ms = now_ms()

    def next_attempt(self) -> int:
        self.tries += 1
        return self.tries

    def elapsed_ms(self) -> int:
        return max(0, now_ms() - self.start_ms)

    def deadline_reached(self) -> bool:
        """True once a time-bounded policy has used its timeout and minimum tries."""
        timeout = self.options.timeout_ms
        if timeout is None:
            return False
        return self.elapsed_ms() >= timeout and self.tries >= self.options.min_tries

    def exhausted(self) -> bool:
        """True when the policy allows no further attempts."""
        if self.options.timeout_ms is None:
            return self.tries >= self.options.min_tries
        return self.deadline_reached()

    async def pace(self) -> None:
        """Sleep until the next attempt is due (interval * tries after start)."""
        interval = self.options.interval_ms
        if interval is None:
            return
        # Next attempt is due no earlier than this long after the first one started
        due = interval * self.tries
        elapsed = self.elapsed_ms()
        if elapsed < due:
            log.debug(f"Attempt {self.tries} failed; next attempt in {due - elapsed} ms")
            await async_sleep_ms(due - elapsed)
