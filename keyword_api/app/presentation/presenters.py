"""
Presenters for keyword results
Build display fields (title, icon, label, highlights) and Markdown views
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple
from urllib.parse import unquote, urlsplit

from ..config import settings
from ..models import KeywordRecord, KeywordResult, KeywordResultPayload, ResolutionResult
from ..tokenizer import QueryContext

DEFAULT_FAVICON = "chrome://global/skin/icons/defaultFavicon.svg"


def get_token_matches(tokens: List[str], text: str) -> List[Tuple[int, int]]:
    """Return merged (start, length) ranges where any token occurs in text, case-insensitively."""
    if not text or not tokens:
        return []
    haystack = text.lower()
    spans = []
    for token in tokens:
        needle = token.lower()
        if not needle:
            continue
        start = haystack.find(needle)
        while start != -1:
            spans.append((start, start + len(needle)))
            start = haystack.find(needle, start + 1)

    merged: List[List[int]] = []
    for start, end in sorted(spans):
        if merged and start <= merged[-1][1]:
            merged[-1][1] = max(merged[-1][1], end)
        else:
            merged.append([start, end])
    return [(start, end - start) for start, end in merged]


class BasePresenter:
    """Base presenter with common formatting utilities"""

    def escape_markdown(self, text: str) -> str:
        """Escape markdown special characters and inline HTML"""
        if not text:
            return ""

        # markdown passes raw HTML through, so entities go first
        text = text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")

        chars_to_escape = ['\\', '*', '_', '`', '[', ']', '(', ')', '#', '+', '!', '|']
        for char in chars_to_escape:
            text = text.replace(char, f'\\{char}')

        return text

    def code_span(self, text: str) -> str:
        """Wrap text in a code span that survives backticks inside it"""
        if "`" in text:
            return f"`` {text} ``"
        return f"`{text}`"


class KeywordResultPresenter(BasePresenter):
    """Turns a ResolutionResult into the heuristic keyword result shown to the user"""

    def __init__(self, icon_url: Optional[str] = None, action_label: Optional[str] = None):
        self.icon_url = icon_url
        self.action_label_text = action_label

    def title_hint(
        self,
        resolution: ResolutionResult,
        search_terms: str = "",
        bookmark_title: Optional[str] = None,
    ) -> str:
        """Title for the result row.

        Actions are prefixed with their bookmark title, conventional keywords
        with the target host. "prefix: terms" is only used when the search
        string actually lands somewhere, which for actions means the body had
        a placeholder.
        """
        if resolution.is_action:
            prefix = bookmark_title
        else:
            prefix = _host(resolution.url)

        if prefix and search_terms and (resolution.had_placeholder or not resolution.is_action):
            return f"{prefix}: {search_terms}"
        if resolution.is_action and prefix:
            return prefix
        return unquote(resolution.url)

    def icon_for(self, resolution: ResolutionResult) -> str:
        if resolution.is_action:
            return self.icon_url or settings.result_icon_url
        scheme = urlsplit(resolution.url).scheme.lower()
        if scheme in ("http", "https"):
            return f"page-icon:{resolution.url}"
        return DEFAULT_FAVICON

    def action_label(self, payload: KeywordResultPayload) -> str:
        """Text shown next to the row ("Execute", "Visit" or "Search")"""
        if payload.action:
            return self.action_label_text or settings.result_action_label
        if payload.input.strip() == payload.keyword:
            return "Visit"
        return "Search"

    def build_result(
        self,
        resolution: ResolutionResult,
        query_context: QueryContext,
        provider_name: str,
        bookmark_title: Optional[str] = None,
    ) -> KeywordResult:
        search_terms = ""
        if query_context.keyword_search_string:
            search_terms = " ".join(query_context.tokens[1:])

        payload = KeywordResultPayload(
            title=self.title_hint(resolution, search_terms, bookmark_title),
            url=resolution.url,
            keyword=query_context.keyword or resolution.keyword,
            input=query_context.search_string,
            post_data=resolution.post_data,
            icon=self.icon_for(resolution),
            action=resolution.is_action,
        )
        highlights = {
            "title": get_token_matches(query_context.tokens, payload.title),
            "url": get_token_matches(query_context.tokens, payload.url),
            "keyword": get_token_matches(query_context.tokens, payload.keyword),
        }
        return KeywordResult(
            provider_name=provider_name,
            payload=payload,
            highlights=highlights,
            had_placeholder=resolution.had_placeholder,
            action_text=resolution.resolved_text if resolution.is_action else None,
        )

    def to_markdown(self, results: List[KeywordResult], query: str = "") -> str:
        """Convert keyword results to Markdown"""
        query_display = f" '{self.escape_markdown(query)}'" if query else ""
        if not results:
            return f"## Keyword results{query_display}\n\n**No matching keyword.**"

        markdown = [f"## Keyword results{query_display} ({len(results)})", ""]

        for i, result in enumerate(results, 1):
            payload = result.payload
            markdown.append(f"### {i}. {self.escape_markdown(payload.title)}")
            markdown.append(f"**{self.action_label(payload)}** · keyword {self.code_span(payload.keyword)}")

            if payload.action:
                markdown.extend(["", "```python", result.action_text or "", "```"])
            else:
                markdown.append("")
                markdown.append(f"[{self.escape_markdown(unquote(payload.url))}]({payload.url})")
                if payload.post_data:
                    markdown.append("")
                    markdown.append(f"**Post data:** {self.code_span(payload.post_data)}")

            markdown.append("")

        return "\n".join(markdown)


class KeywordListPresenter(BasePresenter):
    """Convert stored keyword bookmarks to a Markdown table"""

    def to_markdown(self, records: List[KeywordRecord]) -> str:
        if not records:
            return "## Keywords\n\n**No keyword bookmarks.**"

        markdown = [
            f"## Keywords ({len(records)})",
            "",
            "| # | Keyword | Title | URL |",
            "|---|---------|-------|-----|",
        ]
        for i, record in enumerate(records, 1):
            title = self.escape_markdown(record.title or "")
            url = record.url.replace("|", "\\|")
            markdown.append(f"| {i} | **{self.escape_markdown(record.keyword)}** | {title} | {self.code_span(url)} |")

        return "\n".join(markdown)


def _host(url: str) -> Optional[str]:
    try:
        netloc = urlsplit(url).netloc
    except ValueError:
        return None
    return netloc.rsplit("@", 1)[-1] or None


# Factory function for easy access
def create_presenter(content_type: str) -> BasePresenter:
    """Create appropriate presenter for content type"""
    presenters: Dict[str, BasePresenter] = {
        'results': KeywordResultPresenter(),
        'keywords': KeywordListPresenter(),
    }

    return presenters.get(content_type, BasePresenter())
