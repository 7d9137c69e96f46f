from collections import Counter
from functools import partial

import pytest

from elementquery.core import poller as poller_module
from elementquery.core.errors import NoSuchElementError
from elementquery.core.poller import Immediate
from elementquery.core.query import Queryable
from elementquery.core.waiter import Waitable


class FakeClock:
    """Deterministic stand-in for the poller's monotonic clock and sleep."""

    def __init__(self):
        self.now = 0
        self.sleeps = []

    def now_ms(self) -> int:
        return self.now

    async def sleep_ms(self, ms: int) -> None:
        self.sleeps.append(ms)
        self.now += max(0, ms)

    def advance(self, ms: int) -> None:
        self.now += ms


def _next(script):
    """Pop the next scripted value; the last one repeats forever."""
    if isinstance(script, list):
        return script.pop(0) if len(script) > 1 else script[0]
    return script


class FakeElement(Queryable, Waitable):
    """
    In-memory element. State values may be a list, consumed one per call
    (the last value sticks). Set `errors[accessor] = exc` to make an accessor fail.
    """

    def __init__(
        self,
        name="el",
        *,
        text="",
        tag="div",
        value=None,
        attributes=None,
        properties=None,
        css=None,
        enabled=True,
        selected=False,
        displayed=True,
        present=True,
        default_poller=None,
        clock=None,
        latency_ms=0,
    ):
        self.name = name
        self.default_poller = default_poller or Immediate()
        self.clock = clock
        self.latency_ms = latency_ms
        self.calls = Counter()
        self.errors = {}
        self.children = None
        self._values = {
            "text": text,
            "id": name,
            "class_name": None,
            "tag_name": tag,
            "value": value,
            "is_enabled": enabled,
            "is_selected": selected,
            "is_displayed": displayed,
            "is_present": present,
        }
        self._attributes = dict(attributes or {})
        self._properties = dict(properties or {})
        self._css = dict(css or {})

    async def _access(self, accessor, result):
        self.calls[accessor] += 1
        if self.clock is not None and self.latency_ms:
            self.clock.advance(self.latency_ms)
        if accessor in self.errors:
            raise self.errors[accessor]
        return _next(result)

    async def find_element(self, by):
        return await self.children.find_element(by)

    async def find_elements(self, by):
        return await self.children.find_elements(by)

    async def text(self):
        return await self._access("text", self._values["text"])

    async def id(self):
        return await self._access("id", self._values["id"])

    async def class_name(self):
        return await self._access("class_name", self._values["class_name"])

    async def tag_name(self):
        return await self._access("tag_name", self._values["tag_name"])

    async def value(self):
        return await self._access("value", self._values["value"])

    async def get_attribute(self, name):
        return await self._access("get_attribute", self._attributes.get(name))

    async def get_property(self, name):
        return await self._access("get_property", self._properties.get(name))

    async def get_css_property(self, name):
        return await self._access("get_css_property", self._css.get(name))

    async def is_enabled(self):
        return await self._access("is_enabled", self._values["is_enabled"])

    async def is_selected(self):
        return await self._access("is_selected", self._values["is_selected"])

    async def is_displayed(self):
        return await self._access("is_displayed", self._values["is_displayed"])

    async def is_clickable(self):
        return await self.is_displayed() and await self.is_enabled()

    async def is_present(self):
        return await self._access("is_present", self._values["is_present"])

    def __repr__(self):
        return f"<FakeElement {self.name}>"


class FakeSource(Queryable):
    """
    Scripted lookup source. `script` maps a By to a list of responses, one per
    lookup (the last repeats); a response is a list of elements or an exception.
    Unscripted criteria match nothing.
    """

    def __init__(self, script=None, *, clock=None, latency=None, not_found_raises=False, default_poller=None):
        self.script = {by: list(responses) for by, responses in (script or {}).items()}
        self.clock = clock
        self.latency = dict(latency or {})
        self.not_found_raises = not_found_raises
        self.default_poller = default_poller or Immediate()
        self.calls = []

    def _respond(self, kind, by):
        self.calls.append((kind, str(by)))
        if self.clock is not None:
            self.clock.advance(self.latency.get(by, 0))
        response = _next(self.script.get(by, [[]]))
        if isinstance(response, Exception):
            raise response
        return list(response)

    async def find_elements(self, by):
        elements = self._respond("find_elements", by)
        if not elements and self.not_found_raises:
            raise NoSuchElementError(f"No element found for {by}")
        return elements

    async def find_element(self, by):
        elements = self._respond("find_element", by)
        if not elements:
            raise NoSuchElementError(f"No element found for {by}")
        return elements[0]

    def lookups(self, by=None):
        return [c for c in self.calls if by is None or c[1] == str(by)]


@pytest.fixture
def clock(monkeypatch):
    c = FakeClock()
    monkeypatch.setattr(poller_module, "now_ms", c.now_ms)
    monkeypatch.setattr(poller_module, "async_sleep_ms", c.sleep_ms)
    return c


@pytest.fixture
def make_source(clock):
    return partial(FakeSource, clock=clock)


@pytest.fixture
def make_element(clock):
    return partial(FakeElement, clock=clock)
