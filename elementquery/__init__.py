"""
elementquery
------------
Resilient element queries and waits for browser automation sessions:
fallback selectors with filter chains, polled under a retry policy.
"""

from elementquery.core.errors import (
    ElementQueryError,
    NoSuchElementError,
    RemoteError,
    SelectorNotFound,
    WaitTimeout,
)
from elementquery.core.poller import (
    Deadline,
    DeadlineWithMinAttempts,
    Immediate,
    MaxAttempts,
    RetryPolicy,
)
from elementquery.selectors import By, ElementFilter, FunctionFilter, StringMatch
from elementquery.core.query import ElementQuery, Queryable
from elementquery.core.waiter import ElementWaitCondition, ElementWaiter, Waitable
from elementquery.remote.playwright import PlaywrightElement, PlaywrightSession, launch_session

__version__ = "0.7.0"

__all__ = [
    "ElementQueryError",
    "NoSuchElementError",
    "RemoteError",
    "SelectorNotFound",
    "WaitTimeout",
    "Deadline",
    "DeadlineWithMinAttempts",
    "Immediate",
    "MaxAttempts",
    "RetryPolicy",
    "By",
    "ElementFilter",
    "FunctionFilter",
    "StringMatch",
    "ElementQuery",
    "Queryable",
    "ElementWaitCondition",
    "ElementWaiter",
    "Waitable",
    "PlaywrightElement",
    "PlaywrightSession",
    "launch_session",
]
