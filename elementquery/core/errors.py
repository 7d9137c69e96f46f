# elementquery/core/errors.py
from __future__ import annotations

"""Error taxonomy
----------------
Remote errors come from the session adapter; the engine only distinguishes
"zero matches" (NoSuchElementError) from everything else. Engine outcomes
(SelectorNotFound, WaitTimeout) are ordinary, recoverable results.
"""

from typing import Sequence


class RemoteError(RuntimeError):
    """A failure reported by the remote session (transport, protocol, bad criterion)."""


class NoSuchElementError(RemoteError):
    """The remote lookup completed but matched nothing."""


class ElementQueryError(RuntimeError):
    """Base class for outcomes produced by the poll engine itself."""


class SelectorNotFound(ElementQueryError, LookupError):
    """No selector of a query matched before its retry policy ran out."""

    def __init__(self, selectors: Sequence[object]):
        self.selectors = list(selectors)
        super().__init__(f"Element(s) not found using selectors: {selector_summary(self.selectors)}")


class WaitTimeout(ElementQueryError, TimeoutError):
    """A wait condition was not met before its retry policy ran out."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


def selector_summary(criteria: Sequence[object]) -> str:
    """Comma-separated list of the criteria used, e.g. ``[css=#a,id=b]``."""
    return "[" + ",".join(str(c) for c in criteria) + "]"
