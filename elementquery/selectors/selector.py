# elementquery/selectors/selector.py
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Tuple

from elementquery.core.errors import NoSuchElementError
from elementquery.remote.base import ElementSource, RemoteElement
from elementquery.selectors.by import By
from elementquery.selectors.filters import ElementFilter


@dataclass(frozen=True)
class ElementSelector:
    """
    One lookup criterion plus the filters applied to whatever it matches.
    Selectors and filters run in full on every poll attempt.

    `single=True` fetches at most one raw match (find_element instead of
    find_elements). It is slightly cheaper but filters then only ever see that
    one candidate, so it only makes sense without filters or when the first
    raw match is the one you want anyway.
    """

    by: By
    filters: Tuple[ElementFilter, ...] = ()
    single: bool = False

    def with_filter(self, f: ElementFilter) -> "ElementSelector":
        return replace(self, filters=self.filters + (f,))

    def as_single(self) -> "ElementSelector":
        return replace(self, single=True)

    async def fetch(self, source: ElementSource) -> List[RemoteElement]:
        """Raw lookup. Zero matches is an empty list; other remote errors propagate."""
        try:
            if self.single:
                return [await source.find_element(self.by)]
            return list(await source.find_elements(self.by))
        except NoSuchElementError:
            return []

    async def run_filters(self, elements: List[RemoteElement]) -> List[RemoteElement]:
        """Apply filters in order, stopping as soon as nothing is left."""
        for f in self.filters:
            elements = [el for el in elements if await f.matches(el)]
            if not elements:
                break
        return elements

    async def evaluate(self, source: ElementSource) -> List[RemoteElement]:
        elements = await self.fetch(source)
        if not elements:
            return elements
        return await self.run_filters(elements)

    def __str__(self) -> str:
        return str(self.by)
