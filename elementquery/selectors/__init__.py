"""
Selectors package
-----------------
Lookup criteria, the filters applied to their matches, and the translation of
criteria into Playwright selector strings.
"""

from .by import By, SelectorStrategy
from .needle import StringMatch, Needle
from .filters import ElementFilter, FunctionFilter, StateFilter, ValueFilter, NamedValueFilter, AllOf
from .selector import ElementSelector
from .locator import selector_for

__all__ = [
    "By",
    "SelectorStrategy",
    "StringMatch",
    "Needle",
    "ElementFilter",
    "FunctionFilter",
    "StateFilter",
    "ValueFilter",
    "NamedValueFilter",
    "AllOf",
    "ElementSelector",
    "selector_for",
]
