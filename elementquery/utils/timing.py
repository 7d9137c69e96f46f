# elementquery/utils/timing.py
from __future__ import annotations

import asyncio
import functools
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

from elementquery.utils.logger import get_logger

F = TypeVar("F", bound=Callable[..., Any])


# ---------------- Monotonic time helpers ----------------

def now_ms() -> int:
    """Monotonic time in milliseconds."""
    return time.monotonic_ns() // 1_000_000


async def async_sleep_ms(ms: int) -> None:
    """Async sleep for `ms` milliseconds."""
    if ms <= 0:
        return
    await asyncio.sleep(ms / 1000.0)


# ---------------- Stopwatch ----------------

@dataclass
class Stopwatch:
    """Simple stopwatch usable as a context manager."""
    start_ms: Optional[int] = None

    def start(self) -> "Stopwatch":
        self.start_ms = now_ms()
        return self

    def elapsed_ms(self) -> int:
        if self.start_ms is None:
            return 0
        return max(0, now_ms() - self.start_ms)

    def __enter__(self) -> "Stopwatch":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        return None


# ---------------- measure decorator ----------------

def _humanize(ms: int) -> str:
    return f"{ms} ms" if ms < 1000 else f"{ms/1000:.3f} s"


def measure(label: str = "", level: str = "INFO") -> Callable[[F], F]:
    """
    Decorator to log the execution time of a function or coroutine function.
    Example:
        @measure("query.first", level="DEBUG")
        async def first(self): ...
    """
    level = level.upper()
    log = get_logger(__name__)
    log_fn = getattr(log, level.lower(), log.info)

    def decorator(func: F) -> F:
        name = label or func.__name__

        if asyncio.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                with Stopwatch() as sw:
                    try:
                        return await func(*args, **kwargs)
                    finally:
                        log_fn(f"{name} took {_humanize(sw.elapsed_ms())}")
            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with Stopwatch() as sw:
                try:
                    return func(*args, **kwargs)
                finally:
                    log_fn(f"{name} took {_humanize(sw.elapsed_ms())}")
        return wrapper  # type: ignore[return-value]

    return decorator
