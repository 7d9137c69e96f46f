# elementquery/core/waiter.py
from __future__ import annotations

"""Element waits
----------------
Block, under a retry policy, until a condition over one element holds.

    await elem.wait("search box never became enabled").until().enabled()
    await elem.wait("spinner still attached").with_poller(policy).until().stale()
    await elem.wait("row never went stale").until().ignore_errors(False).condition(my_predicate)

`not_*` conditions reuse the positive filter with the result inverted.
"""

from dataclasses import dataclass, replace
from typing import Optional, Sequence, Tuple, Union

from elementquery.core.errors import RemoteError, WaitTimeout
from elementquery.core.poller import Deadline, Immediate, Poller, RetryPolicy
from elementquery.remote.base import RemoteElement
from elementquery.selectors import filters as flt
from elementquery.selectors.needle import Needle
from elementquery.utils.logger import get_logger, log_with_context
from elementquery.utils.timing import measure

log = get_logger(__name__)


@dataclass(frozen=True)
class ElementWaiter:
    """Binds an element, a retry policy and the message used on timeout."""

    element: RemoteElement
    poller: RetryPolicy
    message: str
    errors_ignored: bool = True

    def with_poller(self, poller: RetryPolicy) -> "ElementWaiter":
        """Use `poller` for this wait only; the session default is untouched."""
        return replace(self, poller=poller)

    def wait(self, timeout_ms: int, interval_ms: int) -> "ElementWaiter":
        return self.with_poller(Deadline(timeout_ms=timeout_ms, interval_ms=interval_ms))

    def nowait(self) -> "ElementWaiter":
        return self.with_poller(Immediate())

    def until(self) -> "ElementWaitCondition":
        return ElementWaitCondition(waiter=self, errors_ignored=self.errors_ignored)


@dataclass(frozen=True)
class ElementWaitCondition:
    """
    The condition half of a wait. Each terminal polls one filter against the
    bound element and returns None once it holds, or raises WaitTimeout with
    the waiter's message once the policy is exhausted.
    """

    waiter: ElementWaiter
    inverted: bool = False
    errors_ignored: bool = True

    def ignore_errors(self, ignore: bool = True) -> "ElementWaitCondition":
        """
        With ignore=True (the default) a remote error while checking counts as
        "not yet" and polling continues. With ignore=False it aborts the wait.
        """
        return replace(self, errors_ignored=ignore)

    def invert(self) -> "ElementWaitCondition":
        """Wait for the opposite of the next condition."""
        return replace(self, inverted=not self.inverted)

    # ---------- Poll loop ----------

    async def _check(self, condition: flt.ElementFilter, inverted: bool) -> bool:
        try:
            value = await condition.check(self.waiter.element)
        except RemoteError as exc:
            if not self.errors_ignored:
                raise
            log.debug(f"Ignoring remote error while checking {condition.describe()}: {exc!r}")
            return False
        return value != inverted

    async def _run_poller(self, condition: flt.ElementFilter, inverted: bool) -> bool:
        policy = self.waiter.poller
        wlog = log_with_context(log, condition=("not " if inverted else "") + condition.describe())
        poller = Poller(policy)
        while True:
            attempt = poller.next_attempt()

            if await self._check(condition, inverted):
                wlog.debug(f"Condition met on attempt {attempt}")
                return True

            if poller.exhausted():
                wlog.debug(f"{policy.describe()} exhausted after {attempt} attempt(s)")
                return False

            await poller.pace()

    @measure("wait.until", level="DEBUG")
    async def _until(self, condition: flt.ElementFilter, negate: bool = False) -> None:
        if not await self._run_poller(condition, self.inverted != negate):
            raise WaitTimeout(self.waiter.message)

    # ---------- Conditions ----------

    async def condition(self, predicate: Union[flt.ElementFilter, flt.Predicate]) -> None:
        """Wait for an arbitrary filter or predicate (sync or async) to hold."""
        await self._until(flt.as_filter(predicate))

    async def stale(self) -> None:
        """Wait until the element is no longer attached to the document."""
        await self._until(flt.state("present"), negate=True)

    async def displayed(self) -> None:
        await self._until(flt.state("displayed"))

    async def not_displayed(self) -> None:
        await self._until(flt.state("displayed"), negate=True)

    async def enabled(self) -> None:
        await self._until(flt.state("enabled"))

    async def not_enabled(self) -> None:
        await self._until(flt.state("enabled"), negate=True)

    async def selected(self) -> None:
        await self._until(flt.state("selected"))

    async def not_selected(self) -> None:
        await self._until(flt.state("selected"), negate=True)

    async def clickable(self) -> None:
        await self._until(flt.state("clickable"))

    async def not_clickable(self) -> None:
        await self._until(flt.state("clickable"), negate=True)

    async def has_attribute(self, attribute_name: str, value: Needle) -> None:
        await self._until(flt.has_attribute(attribute_name, value))

    async def has_not_attribute(self, attribute_name: str, value: Needle) -> None:
        await self._until(flt.has_attribute(attribute_name, value), negate=True)

    async def has_attributes(self, desired_attributes: Sequence[Tuple[str, Needle]]) -> None:
        await self._until(flt.has_all("attribute", desired_attributes))

    async def has_not_attributes(self, desired_attributes: Sequence[Tuple[str, Needle]]) -> None:
        await self._until(flt.has_all("attribute", desired_attributes), negate=True)

    async def has_property(self, property_name: str, value: Needle) -> None:
        await self._until(flt.has_property(property_name, value))

    async def has_not_property(self, property_name: str, value: Needle) -> None:
        await self._until(flt.has_property(property_name, value), negate=True)

    async def has_properties(self, desired_properties: Sequence[Tuple[str, Needle]]) -> None:
        await self._until(flt.has_all("property", desired_properties))

    async def has_not_properties(self, desired_properties: Sequence[Tuple[str, Needle]]) -> None:
        await self._until(flt.has_all("property", desired_properties), negate=True)

    async def has_css_property(self, css_property_name: str, value: Needle) -> None:
        await self._until(flt.has_css_property(css_property_name, value))

    async def has_not_css_property(self, css_property_name: str, value: Needle) -> None:
        await self._until(flt.has_css_property(css_property_name, value), negate=True)

    async def has_css_properties(self, desired_css_properties: Sequence[Tuple[str, Needle]]) -> None:
        await self._until(flt.has_all("css_property", desired_css_properties))

    async def has_not_css_properties(self, desired_css_properties: Sequence[Tuple[str, Needle]]) -> None:
        await self._until(flt.has_all("css_property", desired_css_properties), negate=True)


class Waitable:
    """
    Mixin for elements that can be waited on. Implementers provide the element
    accessors and a read-only `default_poller`.
    """

    default_poller: Optional[RetryPolicy] = None
    default_ignore_errors: bool = True

    def wait(self, message: str) -> ElementWaiter:
        """Start an ElementWaiter on this element; `message` is raised on timeout."""
        poller = self.default_poller or Immediate()
        return ElementWaiter(
            element=self,  # type: ignore[arg-type]
            poller=poller,
            message=message,
            errors_ignored=self.default_ignore_errors,
        )
