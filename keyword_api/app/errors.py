"""Errors raised while resolving and running keyword bookmarks.

A keyword that is simply not registered is not an error: lookups return
``None``. These exceptions never reach the HTTP layer unhandled; the resolver
contains ``TemplateError`` and the executor contains ``ExecutionError``.
"""


class KeywordError(Exception):
    """Base class for keyword bookmark failures."""

    def __init__(self, message: str = "", keyword: str | None = None):
        self.keyword = keyword
        super().__init__(message)


class TemplateError(KeywordError):
    """Conventional URL/post-data substitution failed (bad or unbindable template)."""


class ExecutionError(KeywordError):
    """Running the resolved text of an action bookmark raised."""

    def __init__(self, message: str = "", keyword: str | None = None, source: str = ""):
        self.source = source
        super().__init__(message, keyword=keyword)
