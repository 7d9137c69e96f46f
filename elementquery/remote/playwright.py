# elementquery/remote/playwright.py
from __future__ import annotations

"""Playwright session adapter
-----------------------------
Implements the remote protocols over playwright.async_api so that pages and
element handles can be queried and waited on. Each lookup is a single
Playwright call; retrying is left to the poll engine.
"""

import functools
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, List, Optional, TypeVar

from playwright.async_api import ElementHandle, Error as PlaywrightError, Page, async_playwright

from elementquery.core.errors import NoSuchElementError, RemoteError
from elementquery.core.poller import RetryPolicy
from elementquery.core.query import Queryable
from elementquery.core.waiter import Waitable
from elementquery.selectors.by import By
from elementquery.selectors.locator import selector_for
from elementquery.utils.config import Settings, get_settings
from elementquery.utils.logger import get_logger

log = get_logger(__name__)

T = TypeVar("T")


def _translate_errors(fn: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """Re-raise Playwright failures as RemoteError so the engine can classify them."""

    @functools.wraps(fn)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return await fn(*args, **kwargs)
        except PlaywrightError as exc:
            raise RemoteError(str(exc)) from exc

    return wrapper


# Errors that mean "this element is gone", as opposed to "the session is gone".
_DETACHED_MARKERS = (
    "is disposed",
    "not attached",
    "Execution context was destroyed",
    "Cannot find context with specified id",
    "Frame was detached",
)


def _is_detached_error(exc: PlaywrightError) -> bool:
    message = getattr(exc, "message", None) or str(exc)
    return any(marker in message for marker in _DETACHED_MARKERS)


def _stringify(value: Any) -> Optional[str]:
    """Property values come back as JSON; compare them as strings like attributes."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class PlaywrightSession(Queryable):
    """
    Query root for a Playwright page.

    `default_poller` is fixed at construction (falling back to the POLL_*
    settings) and inherited by every query and wait started from this session
    or from elements it returns. Override per call with with_poller()/wait().
    """

    def __init__(
        self,
        page: Page,
        default_poller: Optional[RetryPolicy] = None,
        settings: Optional[Settings] = None,
    ):
        s = settings or get_settings()
        self.page = page
        self._default_poller = default_poller or s.default_poller()
        self.default_ignore_errors = s.WAIT_IGNORE_ERRORS

    @property
    def default_poller(self) -> RetryPolicy:  # type: ignore[override]
        return self._default_poller

    def _wrap(self, handle: ElementHandle) -> "PlaywrightElement":
        return PlaywrightElement(handle, self)

    @_translate_errors
    async def find_elements(self, by: By) -> List["PlaywrightElement"]:
        handles = await self.page.query_selector_all(selector_for(by))
        return [self._wrap(h) for h in handles]

    @_translate_errors
    async def find_element(self, by: By) -> "PlaywrightElement":
        handle = await self.page.query_selector(selector_for(by))
        if handle is None:
            raise NoSuchElementError(f"No element found for {by}")
        return self._wrap(handle)


class PlaywrightElement(Queryable, Waitable):
    """Opaque element handle; lookups from it are scoped to its subtree."""

    def __init__(self, handle: ElementHandle, session: PlaywrightSession):
        self.handle = handle
        self.session = session
        self.default_ignore_errors = session.default_ignore_errors

    @property
    def default_poller(self) -> RetryPolicy:  # type: ignore[override]
        return self.session.default_poller

    # ---------- Lookups ----------

    @_translate_errors
    async def find_elements(self, by: By) -> List["PlaywrightElement"]:
        handles = await self.handle.query_selector_all(selector_for(by))
        return [self.session._wrap(h) for h in handles]

    @_translate_errors
    async def find_element(self, by: By) -> "PlaywrightElement":
        handle = await self.handle.query_selector(selector_for(by))
        if handle is None:
            raise NoSuchElementError(f"No element found for {by}")
        return self.session._wrap(handle)

    # ---------- Values ----------

    @_translate_errors
    async def text(self) -> str:
        return await self.handle.inner_text()

    @_translate_errors
    async def id(self) -> Optional[str]:
        return await self.handle.get_attribute("id")

    @_translate_errors
    async def class_name(self) -> Optional[str]:
        return await self.handle.get_attribute("class")

    @_translate_errors
    async def tag_name(self) -> str:
        return await self.handle.evaluate("el => el.tagName.toLowerCase()")

    @_translate_errors
    async def value(self) -> Optional[str]:
        return _stringify(await self.handle.evaluate("el => el.value === undefined ? null : el.value"))

    @_translate_errors
    async def get_attribute(self, name: str) -> Optional[str]:
        return await self.handle.get_attribute(name)

    @_translate_errors
    async def get_property(self, name: str) -> Optional[str]:
        prop = await self.handle.get_property(name)
        return _stringify(await prop.json_value())

    @_translate_errors
    async def get_css_property(self, name: str) -> Optional[str]:
        return await self.handle.evaluate(
            "(el, name) => getComputedStyle(el).getPropertyValue(name)", name
        )

    # ---------- State ----------

    @_translate_errors
    async def is_enabled(self) -> bool:
        return await self.handle.is_enabled()

    @_translate_errors
    async def is_selected(self) -> bool:
        return bool(await self.handle.evaluate("el => !!(el.checked || el.selected)"))

    @_translate_errors
    async def is_displayed(self) -> bool:
        return await self.handle.is_visible()

    async def is_clickable(self) -> bool:
        return await self.is_displayed() and await self.is_enabled()

    async def is_present(self) -> bool:
        """
        False once the element is detached, or its handle or execution context
        is gone. A closed page/browser is a session failure and raises RemoteError.
        """
        try:
            return bool(await self.handle.evaluate("el => el.isConnected"))
        except PlaywrightError as exc:
            if not _is_detached_error(exc):
                raise RemoteError(str(exc)) from exc
            log.debug(f"Element handle no longer usable: {exc!r}")
            return False

    def __repr__(self) -> str:
        return f"<PlaywrightElement {self.handle!r}>"


@asynccontextmanager
async def launch_session(
    url: str,
    settings: Optional[Settings] = None,
    default_poller: Optional[RetryPolicy] = None,
) -> AsyncIterator[PlaywrightSession]:
    """
    Start a browser per settings, open `url` and yield a PlaywrightSession.
    The browser is closed on exit. Launch and navigation failures raise RemoteError.
    """
    s = settings or get_settings()
    async with async_playwright() as p:
        browser_type = getattr(p, s.BROWSER_TYPE.value)
        try:
            browser = await browser_type.launch(**s.playwright_launch_kwargs())
        except PlaywrightError as exc:
            raise RemoteError(f"Could not launch {s.BROWSER_TYPE.value}: {exc}") from exc
        try:
            try:
                context = await browser.new_context(**s.playwright_context_kwargs())
                page = await context.new_page()
                log.info(f"Opening {url}")
                await page.goto(url, wait_until="domcontentloaded", timeout=s.PAGE_LOAD_TIMEOUT)
            except PlaywrightError as exc:
                raise RemoteError(f"Could not open {url}: {exc}") from exc
            yield PlaywrightSession(page, default_poller=default_poller, settings=s)
        finally:
            await browser.close()
