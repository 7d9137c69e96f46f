# elementquery/selectors/needle.py
from __future__ import annotations

"""Text matching rules for value filters
---------------------------------------
A needle is what a filter compares a remote value against:

  - str            exact match
  - StringMatch    configurable (partial / case-insensitive / whole word)
  - re.Pattern     re.search
  - callable       any str -> bool function
"""

import re
from dataclasses import dataclass, replace
from typing import Callable, Optional, Pattern, Union


@dataclass(frozen=True)
class StringMatch:
    """
    Builder for the common string comparisons:

        StringMatch("Never Gonna Give You Up").partial()
        StringMatch("submit").case_insensitive().word()
    """

    text: str
    is_partial: bool = False
    is_case_insensitive: bool = False
    is_word: bool = False

    def partial(self) -> "StringMatch":
        return replace(self, is_partial=True)

    def case_insensitive(self) -> "StringMatch":
        return replace(self, is_case_insensitive=True)

    def word(self) -> "StringMatch":
        """Match `text` as a whole word anywhere in the value (implies partial)."""
        return replace(self, is_word=True)

    def is_match(self, value: str) -> bool:
        if self.is_word:
            flags = re.IGNORECASE if self.is_case_insensitive else 0
            return re.search(rf"\b{re.escape(self.text)}\b", value, flags) is not None

        needle, haystack = self.text, value
        if self.is_case_insensitive:
            needle, haystack = needle.casefold(), haystack.casefold()
        if self.is_partial:
            return needle in haystack
        return needle == haystack

    def __str__(self) -> str:
        mods = [m for m, on in (("partial", self.is_partial), ("ci", self.is_case_insensitive), ("word", self.is_word)) if on]
        return f"{self.text!r}" + (f" ({', '.join(mods)})" if mods else "")


Needle = Union[str, StringMatch, Pattern[str], Callable[[str], bool]]


def is_match(needle: Optional[Needle], value: Optional[str]) -> bool:
    """Return True if `value` satisfies `needle`. A missing value only matches a None needle."""
    if value is None:
        return needle is None
    if needle is None:
        return False
    if isinstance(needle, str):
        return needle == value
    if isinstance(needle, StringMatch):
        return needle.is_match(value)
    if isinstance(needle, re.Pattern):
        return needle.search(value) is not None
    if callable(needle):
        return bool(needle(value))
    raise TypeError(f"Unsupported needle type: {type(needle).__name__}")


def describe(needle: Optional[Needle]) -> str:
    if isinstance(needle, re.Pattern):
        return f"/{needle.pattern}/"
    if isinstance(needle, str):
        return repr(needle)
    if isinstance(needle, StringMatch):
        return str(needle)
    if callable(needle):
        return getattr(needle, "__name__", "<callable>")
    return repr(needle)
