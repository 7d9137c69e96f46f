# elementquery/selectors/locator.py
from __future__ import annotations

import json
from typing import Optional, Tuple

from elementquery.selectors.by import By, SelectorStrategy
from elementquery.utils.logger import get_logger

log = get_logger(__name__)


def _quote(value: str) -> str:
    """Double-quoted, escaped string usable inside CSS/Playwright selectors."""
    return json.dumps(value)


def _parse_role_value(value: str) -> Tuple[str, Optional[str]]:
    """
    Accept a few simple role notations for flexibility:

    - "button"                      → role="button"
    - "button|Create Project"       → role="button", name="Create Project"
    - "button name=Create Project"  → same as above (space syntax)

    Returns: (role, accessible_name_or_None)
    """
    v = value.strip()
    if "|" in v:
        role, name = v.split("|", 1)
        return role.strip(), name.strip() or None
    if " name=" in v:
        role, name = v.split(" name=", 1)
        return role.strip(), name.strip() or None
    return v, None


def selector_for(by: By) -> str:
    """
    Convert a By criterion into a Playwright selector string, usable with
    both Page.query_selector_all and ElementHandle.query_selector_all.
    """
    strategy = by.strategy
    value = by.value

    if strategy == SelectorStrategy.css:
        return value

    if strategy == SelectorStrategy.xpath:
        return f"xpath={value}"

    if strategy == SelectorStrategy.text:
        # Playwright's text engine: case-insensitive substring unless quoted
        return f"text={value}"

    if strategy == SelectorStrategy.role:
        role, name = _parse_role_value(value)
        if name:
            return f"internal:role={role}[name={_quote(name)}i]"
        return f"internal:role={role}"

    if strategy == SelectorStrategy.id:
        return f"[id={_quote(value)}]"

    if strategy == SelectorStrategy.class_name:
        return f"[class~={_quote(value)}]"

    if strategy == SelectorStrategy.tag:
        return value

    if strategy == SelectorStrategy.name:
        return f"[name={_quote(value)}]"

    if strategy == SelectorStrategy.link_text:
        return f"a:text-is({_quote(value)})"

    # Fallback: treat as CSS
    log.debug(f"Unknown selector strategy '{strategy}', falling back to css for value={value!r}")
    return value
