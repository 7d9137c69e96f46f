"""
Core package for elementquery.
Lightweight package init to avoid import cycles.

Consumers should import submodules directly, e.g.:
  from elementquery.core.query import ElementQuery
  from elementquery.core.waiter import ElementWaiter
  from elementquery.core.poller import Deadline, MaxAttempts
"""

__all__: list[str] = []
