# elementquery/core/query.py
from __future__ import annotations

"""Element queries
------------------
Find one or many elements by trying several fallback selectors, each with its
own filter chain, under a retry policy.

    elem = await session.query(By.css("thiswont.match")).or_(By.id("searchInput")).first()

    buttons = await (
        form.query(By.tag("button"))
        .with_text(StringMatch("save").case_insensitive())
        .and_enabled()
        .wait(timeout_ms=5000, interval_ms=250)
        .all_required()
    )
"""

from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Sequence, Tuple, Union

from elementquery.core.errors import SelectorNotFound, selector_summary
from elementquery.core.poller import Deadline, Immediate, Poller, RetryPolicy
from elementquery.remote.base import ElementSource, RemoteElement
from elementquery.selectors import filters as flt
from elementquery.selectors.by import By
from elementquery.selectors.needle import Needle
from elementquery.selectors.selector import ElementSelector
from elementquery.utils.logger import get_logger, log_with_context
from elementquery.utils.timing import measure

log = get_logger(__name__)


@dataclass(frozen=True)
class ElementQuery:
    """
    High-level, immutable query builder. Every builder method returns a new
    query; terminal methods (exists/first/all/all_required) never mutate it.

    Selectors are tried in declaration order on every attempt and the first
    one whose filtered matches are non-empty wins. Filters and
    `with_single_selector()` apply to the most recently added selector.
    """

    source: ElementSource
    poller: RetryPolicy
    selectors: Tuple[ElementSelector, ...] = ()

    # ---------- Policy ----------

    def with_poller(self, poller: RetryPolicy) -> "ElementQuery":
        """Use `poller` for this query only; the session default is untouched."""
        return replace(self, poller=poller)

    def wait(self, timeout_ms: int, interval_ms: int) -> "ElementQuery":
        return self.with_poller(Deadline(timeout_ms=timeout_ms, interval_ms=interval_ms))

    def nowait(self) -> "ElementQuery":
        return self.with_poller(Immediate())

    # ---------- Selectors ----------

    def or_(self, by: By) -> "ElementQuery":
        """Add a fallback selector. Filters added after this apply to it."""
        return replace(self, selectors=self.selectors + (ElementSelector(by),))

    def _map_last(self, fn: Callable[[ElementSelector], ElementSelector]) -> "ElementQuery":
        if not self.selectors:
            return self
        return replace(self, selectors=self.selectors[:-1] + (fn(self.selectors[-1]),))

    def with_filter(self, f: Union[flt.ElementFilter, flt.Predicate]) -> "ElementQuery":
        """Add a filter (or a plain predicate, sync or async) to the last selector."""
        element_filter = flt.as_filter(f)
        return self._map_last(lambda s: s.with_filter(element_filter))

    def with_single_selector(self) -> "ElementQuery":
        """
        Make the last selector fetch only the first raw match.
        Faster, but filters on that selector only ever see one candidate; to
        pick the first element after filtering, use first() instead.
        """
        return self._map_last(ElementSelector.as_single)

    # ---------- Terminals ----------

    async def exists(self) -> bool:
        """True if any selector matches right now. Never waits."""
        elements = await self._run_poller(Immediate())
        return bool(elements)

    @measure("query.first", level="DEBUG")
    async def first(self) -> RemoteElement:
        """The first element matched by the first matching selector."""
        elements = await self._run_poller(self.poller)
        if not elements:
            raise self._not_found()
        return elements[0]

    @measure("query.all", level="DEBUG")
    async def all(self) -> List[RemoteElement]:
        """All elements matched by the first matching selector; [] if none matched."""
        return await self._run_poller(self.poller)

    @measure("query.all_required", level="DEBUG")
    async def all_required(self) -> List[RemoteElement]:
        """Like all(), but raises SelectorNotFound instead of returning []."""
        elements = await self._run_poller(self.poller)
        if not elements:
            raise self._not_found()
        return elements

    # ---------- Poll loop ----------

    def _not_found(self) -> SelectorNotFound:
        return SelectorNotFound([s.by for s in self.selectors])

    async def _run_poller(self, policy: RetryPolicy) -> List[RemoteElement]:
        if not self.selectors:
            raise self._not_found()

        qlog = log_with_context(log, selectors=selector_summary([s.by for s in self.selectors]))
        poller = Poller(policy)
        while True:
            attempt = poller.next_attempt()

            for selector in self.selectors:
                elements = await selector.evaluate(self.source)
                if elements:
                    qlog.debug(f"{selector} matched {len(elements)} element(s) on attempt {attempt}")
                    return elements

                # Checked per selector: a slow selector may use up the timeout
                # before later ones in the same attempt are tried.
                if poller.deadline_reached():
                    qlog.debug(f"{policy.describe()} exhausted after {attempt} attempt(s)")
                    return []

            if poller.exhausted():
                qlog.debug(f"{policy.describe()} exhausted after {attempt} attempt(s)")
                return []

            await poller.pace()

    # ---------- Filter shorthands ----------

    def and_enabled(self) -> "ElementQuery":
        return self.with_filter(flt.state("enabled"))

    def and_not_enabled(self) -> "ElementQuery":
        return self.with_filter(~flt.state("enabled"))

    def and_selected(self) -> "ElementQuery":
        return self.with_filter(flt.state("selected"))

    def and_not_selected(self) -> "ElementQuery":
        return self.with_filter(~flt.state("selected"))

    def and_displayed(self) -> "ElementQuery":
        return self.with_filter(flt.state("displayed"))

    def and_not_displayed(self) -> "ElementQuery":
        return self.with_filter(~flt.state("displayed"))

    def and_clickable(self) -> "ElementQuery":
        return self.with_filter(flt.state("clickable"))

    def and_not_clickable(self) -> "ElementQuery":
        return self.with_filter(~flt.state("clickable"))

    def with_text(self, text: Needle) -> "ElementQuery":
        return self.with_filter(flt.has_text(text))

    def with_id(self, id: Needle) -> "ElementQuery":
        return self.with_filter(flt.has_id(id))

    def with_class(self, class_name: Needle) -> "ElementQuery":
        return self.with_filter(flt.has_class(class_name))

    def with_tag(self, tag_name: Needle) -> "ElementQuery":
        return self.with_filter(flt.has_tag(tag_name))

    def with_value(self, value: Needle) -> "ElementQuery":
        return self.with_filter(flt.has_value(value))

    def with_attribute(self, attribute_name: str, value: Needle) -> "ElementQuery":
        return self.with_filter(flt.has_attribute(attribute_name, value))

    def with_attributes(self, desired_attributes: Sequence[Tuple[str, Needle]]) -> "ElementQuery":
        return self.with_filter(flt.has_all("attribute", desired_attributes))

    def with_property(self, property_name: str, value: Needle) -> "ElementQuery":
        return self.with_filter(flt.has_property(property_name, value))

    def with_properties(self, desired_properties: Sequence[Tuple[str, Needle]]) -> "ElementQuery":
        return self.with_filter(flt.has_all("property", desired_properties))

    def with_css_property(self, css_property_name: str, value: Needle) -> "ElementQuery":
        return self.with_filter(flt.has_css_property(css_property_name, value))

    def with_css_properties(self, desired_css_properties: Sequence[Tuple[str, Needle]]) -> "ElementQuery":
        return self.with_filter(flt.has_all("css_property", desired_css_properties))


class Queryable:
    """
    Mixin for anything elements can be looked up from. Implementers provide
    find_element/find_elements and a read-only `default_poller`.
    """

    default_poller: Optional[RetryPolicy] = None

    def query(self, by: By) -> ElementQuery:
        """Start an ElementQuery from this source using its default poller."""
        poller = self.default_poller or Immediate()
        return ElementQuery(source=self, poller=poller, selectors=(ElementSelector(by),))  # type: ignore[arg-type]
