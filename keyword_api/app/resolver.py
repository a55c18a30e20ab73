from __future__ import annotations

import logging
from typing import Optional

from .config import ACTION_SCHEME, settings
from .errors import TemplateError
from .keywords import KeywordStore
from .models import KeywordRecord, ResolutionResult
from .substitution import substitute

logger = logging.getLogger("keyword_api.resolver")


def is_action_record(record: KeywordRecord) -> bool:
    """ucjs: URL and no form post data."""
    scheme = record.url[:len(ACTION_SCHEME)].lower()
    return scheme == ACTION_SCHEME and not record.post_data


class KeywordActionResolver:
    """Turn a typed keyword plus search string into a URL or an action.

    Resolution strategy:
    1. Fetch the keyword record from the store (missing -> None)
    2. ucjs: record without post data -> action; the body is never URL-parsed
       or percent-encoded, only the first placeholder is replaced
    3. Anything else -> conventional %s substitution; a bad template makes
       the keyword a dead one for this query (None)
    """

    def __init__(self, store: KeywordStore, placeholder: Optional[str] = None):
        self.store = store
        self.placeholder = placeholder or settings.search_placeholder

    async def resolve(self, keyword: str, search_string: str = "") -> Optional[ResolutionResult]:
        search_string = search_string or ""
        record = await self.store.fetch_keyword(keyword)
        if record is None:
            logger.debug(f"No bookmark for keyword '{keyword}'")
            return None

        # Must run before anything treats the URL as a URL
        if is_action_record(record):
            return self._resolve_action(record, search_string)

        try:
            url, post_data = substitute(record.url, record.post_data, search_string)
        except TemplateError as e:
            logger.debug(f"Keyword '{record.keyword}' not bindable: {e}")
            return None

        return ResolutionResult(
            keyword=record.keyword,
            is_action=False,
            resolved_text=url,
            had_placeholder=False,
            url=url,
            post_data=post_data,
            record=record,
        )

    def _resolve_action(self, record: KeywordRecord, search_string: str) -> ResolutionResult:
        body = record.url[len(ACTION_SCHEME):]
        had_placeholder = self.placeholder in body
        resolved = body.replace(self.placeholder, search_string, 1)
        logger.debug(
            f"Action keyword '{record.keyword}' resolved (placeholder={'yes' if had_placeholder else 'no'})"
        )
        return ResolutionResult(
            keyword=record.keyword,
            is_action=True,
            resolved_text=resolved,
            had_placeholder=had_placeholder,
            url=ACTION_SCHEME + resolved,
            post_data=None,
            record=record,
        )
