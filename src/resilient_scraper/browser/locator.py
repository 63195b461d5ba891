"""Locator: a (strategy, value) description of how to find an element."""
import json
from dataclasses import dataclass
from enum import Enum


def _quote(value: str) -> str:
    """Double-quoted string for CSS attribute and Playwright text selectors.

    Non-ASCII characters stay literal; CSS has no \\uXXXX escape.
    """
    return json.dumps(value, ensure_ascii=False)


class By(Enum):
    ID = "id"
    CLASS_NAME = "class_name"
    CSS = "css"
    XPATH = "xpath"
    NAME = "name"
    TAG_NAME = "tag_name"
    LINK_TEXT = "link_text"
    PARTIAL_LINK_TEXT = "partial_link_text"
    TEXT = "text"


@dataclass(frozen=True)
class Locator:
    by: By
    value: str

    def __post_init__(self):
        if not isinstance(self.by, By):
            # Accept the plain strategy name ("class_name", "id", ...)
            object.__setattr__(self, "by", By(self.by))
        if not self.value or not self.value.strip():
            raise ValueError("Locator value must be non-empty and not just whitespace")

    @classmethod
    def css(cls, value: str) -> "Locator":
        return cls(By.CSS, value)

    @classmethod
    def id(cls, value: str) -> "Locator":
        return cls(By.ID, value)

    @classmethod
    def class_name(cls, value: str) -> "Locator":
        return cls(By.CLASS_NAME, value)

    @classmethod
    def xpath(cls, value: str) -> "Locator":
        return cls(By.XPATH, value)

    def selector(self) -> str:
        """Translate into a Playwright selector string."""
        v = self.value
        if self.by is By.CSS:
            return v
        if self.by is By.XPATH:
            return f"xpath={v}"
        if self.by is By.ID:
            return f"[id={_quote(v)}]"
        if self.by is By.NAME:
            return f"[name={_quote(v)}]"
        if self.by is By.CLASS_NAME:
            # Compound class names ("a b") select elements carrying all of them
            return "".join(f".{c}" for c in v.split())
        if self.by is By.TAG_NAME:
            return v
        if self.by is By.LINK_TEXT:
            return f"a:text-is({_quote(v)})"
        if self.by is By.PARTIAL_LINK_TEXT:
            return f"a:has-text({_quote(v)})"
        return f"text={_quote(v)}"

    def __str__(self) -> str:
        return f"{self.by.value}={self.value!r}"
