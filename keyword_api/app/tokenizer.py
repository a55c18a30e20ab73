from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class RestrictToken(str, Enum):
    """Single-character tokens that restrict an address-bar query to one source."""
    HISTORY = "^"
    BOOKMARK = "*"
    TAG = "+"
    OPENPAGE = "%"
    SEARCH = "?"
    TITLE = "#"
    URL = "$"
    ACTION = ">"


_RESTRICT_CHARS = {t.value: t for t in RestrictToken}


@dataclass(frozen=True)
class QueryContext:
    """What the user typed, split for the providers."""
    search_string: str
    tokens: list[str] = field(default_factory=list)
    restrict_source: Optional[RestrictToken] = None
    search_mode: Optional[str] = None

    @property
    def keyword(self) -> Optional[str]:
        return self.tokens[0] if self.tokens else None

    @property
    def keyword_search_string(self) -> str:
        """Raw text after the keyword, trimmed."""
        kw = self.keyword
        if not kw:
            return ""
        return substring_after(self.search_string, kw).strip()


def substring_after(text: str, needle: str) -> str:
    idx = text.find(needle)
    if idx == -1:
        return ""
    return text[idx + len(needle):]


def tokenize(search_string: str, search_mode: Optional[str] = None) -> QueryContext:
    """Split raw input into tokens, pulling out a leading or trailing restriction char."""
    text = (search_string or "").strip()
    tokens = text.split()
    restrict = None

    # A lone restriction char is the whole query, not a restriction
    if len(tokens) > 1:
        if tokens[0] in _RESTRICT_CHARS:
            restrict = _RESTRICT_CHARS[tokens.pop(0)]
            text = text[1:].lstrip()
        elif tokens[-1] in _RESTRICT_CHARS:
            restrict = _RESTRICT_CHARS[tokens.pop()]
            text = text[:-1].rstrip()

    return QueryContext(
        search_string=text,
        tokens=tokens,
        restrict_source=restrict,
        search_mode=search_mode,
    )
