"""
Remote package
--------------
The session contract the poll engine relies on, and its Playwright adapter.

Consumers can import the adapter directly, e.g.:
  from elementquery.remote.playwright import PlaywrightSession, launch_session
"""

from .base import ElementSource, RemoteElement

__all__ = ["ElementSource", "RemoteElement"]
