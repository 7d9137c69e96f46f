# elementquery/selectors/by.py
from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SelectorStrategy(str, Enum):
    css = "css"
    xpath = "xpath"
    text = "text"
    role = "role"
    id = "id"
    class_name = "class_name"
    tag = "tag"
    name = "name"
    link_text = "link_text"


class By(BaseModel):
    """
    A lookup criterion. Opaque to the poll engine apart from its string form,
    which shows up in SelectorNotFound messages and debug logs.

        By.css("form#search input")
        By.role("button|Create Project")
    """

    model_config = ConfigDict(frozen=True)

    strategy: SelectorStrategy = Field(default=SelectorStrategy.css)
    value: str = Field(..., description="Selector string, interpreted per strategy")

    @field_validator("value")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("selector value cannot be empty")
        return v

    def __str__(self) -> str:
        return f"{self.strategy.value}={self.value}"

    # ---------- Shorthand constructors ----------

    @classmethod
    def css(cls, value: str) -> "By":
        return cls(strategy=SelectorStrategy.css, value=value)

    @classmethod
    def xpath(cls, value: str) -> "By":
        return cls(strategy=SelectorStrategy.xpath, value=value)

    @classmethod
    def text(cls, value: str) -> "By":
        return cls(strategy=SelectorStrategy.text, value=value)

    @classmethod
    def role(cls, value: str) -> "By":
        return cls(strategy=SelectorStrategy.role, value=value)

    @classmethod
    def id(cls, value: str) -> "By":
        return cls(strategy=SelectorStrategy.id, value=value)

    @classmethod
    def class_name(cls, value: str) -> "By":
        return cls(strategy=SelectorStrategy.class_name, value=value)

    @classmethod
    def tag(cls, value: str) -> "By":
        return cls(strategy=SelectorStrategy.tag, value=value)

    @classmethod
    def name(cls, value: str) -> "By":
        return cls(strategy=SelectorStrategy.name, value=value)

    @classmethod
    def link_text(cls, value: str) -> "By":
        return cls(strategy=SelectorStrategy.link_text, value=value)
