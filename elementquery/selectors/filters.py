# elementquery/selectors/filters.py
from __future__ import annotations

"""Element filters
------------------
Small async predicates over a single remote element. Queries use them to
narrow a selector's matches; waits use them as the condition being polled.

`check()` may raise RemoteError (the element went stale, the session hiccuped).
Queries call `matches()`, which counts such an error as "does not match";
waits decide for themselves via their ignore_errors flag.
"""

import inspect
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Optional, Sequence, Tuple, Union

from elementquery.core.errors import RemoteError
from elementquery.remote.base import RemoteElement
from elementquery.selectors.needle import Needle, describe, is_match
from elementquery.utils.logger import get_logger

log = get_logger(__name__)

Predicate = Callable[[RemoteElement], Union[bool, Awaitable[bool]]]


class ElementFilter(ABC):
    """Base class for all filters."""

    @abstractmethod
    async def check(self, element: RemoteElement) -> bool:
        """Evaluate the filter. Remote errors propagate."""

    @abstractmethod
    def describe(self) -> str:
        ...

    async def matches(self, element: RemoteElement) -> bool:
        try:
            return await self.check(element)
        except RemoteError as exc:
            log.debug(f"Filter {self.describe()} rejected element after remote error: {exc!r}")
            return False

    def __invert__(self) -> "ElementFilter":
        return Negated(self)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.describe()}>"


class Negated(ElementFilter):
    def __init__(self, inner: ElementFilter):
        self.inner = inner

    async def check(self, element: RemoteElement) -> bool:
        return not await self.inner.check(element)

    def describe(self) -> str:
        return f"not {self.inner.describe()}"

    def __invert__(self) -> ElementFilter:
        return self.inner


class FunctionFilter(ElementFilter):
    """Wrap a caller-supplied predicate. `fn` may be sync or async."""

    def __init__(self, fn: Predicate, name: Optional[str] = None):
        self.fn = fn
        self.name = name or getattr(fn, "__name__", "predicate")

    async def check(self, element: RemoteElement) -> bool:
        result = self.fn(element)
        if inspect.isawaitable(result):
            result = await result
        return bool(result)

    def describe(self) -> str:
        return self.name


class StateFilter(ElementFilter):
    """enabled / selected / displayed / clickable / present."""

    ACCESSORS = {
        "enabled": "is_enabled",
        "selected": "is_selected",
        "displayed": "is_displayed",
        "clickable": "is_clickable",
        "present": "is_present",
    }

    def __init__(self, state: str):
        if state not in self.ACCESSORS:
            raise ValueError(f"Unknown element state {state!r}; expected one of {sorted(self.ACCESSORS)}")
        self.state = state

    async def check(self, element: RemoteElement) -> bool:
        return bool(await getattr(element, self.ACCESSORS[self.state])())

    def describe(self) -> str:
        return self.state


class ValueFilter(ElementFilter):
    """Compare one of the element's plain values (text, id, class name, tag, value)."""

    FIELDS = ("text", "id", "class_name", "tag_name", "value")

    def __init__(self, field: str, needle: Needle):
        if field not in self.FIELDS:
            raise ValueError(f"Unknown element value {field!r}; expected one of {list(self.FIELDS)}")
        self.field = field
        self.needle = needle

    async def check(self, element: RemoteElement) -> bool:
        return is_match(self.needle, await getattr(element, self.field)())

    def describe(self) -> str:
        return f"{self.field} == {describe(self.needle)}"


class NamedValueFilter(ElementFilter):
    """Compare a named attribute, DOM property or computed CSS property."""

    ACCESSORS = {
        "attribute": "get_attribute",
        "property": "get_property",
        "css_property": "get_css_property",
    }

    def __init__(self, kind: str, name: str, needle: Needle):
        if kind not in self.ACCESSORS:
            raise ValueError(f"Unknown value kind {kind!r}; expected one of {sorted(self.ACCESSORS)}")
        self.kind = kind
        self.name = name
        self.needle = needle

    async def check(self, element: RemoteElement) -> bool:
        return is_match(self.needle, await getattr(element, self.ACCESSORS[self.kind])(self.name))

    def describe(self) -> str:
        return f"{self.kind}[{self.name}] == {describe(self.needle)}"


class AllOf(ElementFilter):
    """All inner filters must pass; stops at the first that does not."""

    def __init__(self, filters: Sequence[ElementFilter]):
        self.filters: Tuple[ElementFilter, ...] = tuple(filters)

    async def check(self, element: RemoteElement) -> bool:
        for f in self.filters:
            if not await f.check(element):
                return False
        return True

    def describe(self) -> str:
        return " and ".join(f.describe() for f in self.filters) or "always"


# ---------- Constructors ----------

def as_filter(f: Union[ElementFilter, Predicate]) -> ElementFilter:
    """Accept either a filter or a bare predicate function."""
    if isinstance(f, ElementFilter):
        return f
    if callable(f):
        return FunctionFilter(f)
    raise TypeError(f"Expected an ElementFilter or callable, got {type(f).__name__}")


def state(name: str) -> ElementFilter:
    return StateFilter(name)


def has_text(needle: Needle) -> ElementFilter:
    return ValueFilter("text", needle)


def has_id(needle: Needle) -> ElementFilter:
    return ValueFilter("id", needle)


def has_class(needle: Needle) -> ElementFilter:
    return ValueFilter("class_name", needle)


def has_tag(needle: Needle) -> ElementFilter:
    return ValueFilter("tag_name", needle)


def has_value(needle: Needle) -> ElementFilter:
    return ValueFilter("value", needle)


def has_attribute(name: str, needle: Needle) -> ElementFilter:
    return NamedValueFilter("attribute", name, needle)


def has_property(name: str, needle: Needle) -> ElementFilter:
    return NamedValueFilter("property", name, needle)


def has_css_property(name: str, needle: Needle) -> ElementFilter:
    return NamedValueFilter("css_property", name, needle)


def has_all(kind: str, desired: Sequence[Tuple[str, Any]]) -> ElementFilter:
    """Every (name, needle) pair must match, e.g. has_all("attribute", [("type", "text")])."""
    return AllOf([NamedValueFilter(kind, name, needle) for name, needle in desired])
