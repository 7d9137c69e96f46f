# elementquery/remote/base.py
from __future__ import annotations

"""Remote session contract
--------------------------
The poll engine never talks to a browser directly. It needs a source that can
look elements up and elements that can report their state. Any adapter that
implements these protocols can be queried and waited on.

Adapters raise NoSuchElementError when a lookup matches nothing (an empty
list from find_elements is equally fine) and RemoteError for anything else.
"""

from typing import List, Optional, Protocol

from elementquery.selectors.by import By


class RemoteElement(Protocol):
    """Opaque handle to an element owned by the remote session."""

    async def find_element(self, by: By) -> "RemoteElement": ...

    async def find_elements(self, by: By) -> List["RemoteElement"]: ...

    async def text(self) -> str: ...

    async def id(self) -> Optional[str]: ...

    async def class_name(self) -> Optional[str]: ...

    async def tag_name(self) -> str: ...

    async def value(self) -> Optional[str]: ...

    async def get_attribute(self, name: str) -> Optional[str]: ...

    async def get_property(self, name: str) -> Optional[str]: ...

    async def get_css_property(self, name: str) -> Optional[str]: ...

    async def is_enabled(self) -> bool: ...

    async def is_selected(self) -> bool: ...

    async def is_displayed(self) -> bool: ...

    async def is_clickable(self) -> bool: ...

    async def is_present(self) -> bool: ...


class ElementSource(Protocol):
    """Anything elements can be looked up from: the session root or an element."""

    async def find_element(self, by: By) -> RemoteElement: ...

    async def find_elements(self, by: By) -> List[RemoteElement]: ...
