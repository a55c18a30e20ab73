from __future__ import annotations

import codecs
import re
from urllib.parse import quote, unquote, urlsplit

from .config import ACTION_SCHEME
from .errors import TemplateError

# %s -> encoded search terms, %S -> raw search terms
PARAM_RE = re.compile(r"%s", re.IGNORECASE)

# Legacy charset hint appended to keyword URLs, e.g. "...?q=%s&mozcharset=Shift_JIS"
CHARSET_RE = re.compile(r"^(.*)&mozcharset=([a-zA-Z][_\-a-zA-Z0-9]+)\s*$", re.S)

# Characters encodeURIComponent leaves alone beyond [A-Za-z0-9_.-~]
_COMPONENT_SAFE = "!~*'()"


def _resolve_charset(name: str | None) -> str:
    if not name:
        return "utf-8"
    try:
        return codecs.lookup(name).name
    except LookupError:
        return "utf-8"


def encode_search_terms(search_string: str, charset: str = "utf-8") -> tuple[str, str]:
    """Return (encoded, raw) forms of the whitespace-separated search terms.

    Each term is percent-encoded on its own and the terms are joined with %20.
    Terms the charset cannot represent are encoded as UTF-8.
    """
    terms = (search_string or "").split()
    encoded = []
    for term in terms:
        try:
            encoded.append(quote(term, safe=_COMPONENT_SAFE, encoding=charset))
        except UnicodeEncodeError:
            encoded.append(quote(term, safe=_COMPONENT_SAFE, encoding="utf-8"))
    return "%20".join(encoded), " ".join(terms)


def _check_template(url: str) -> None:
    try:
        parts = urlsplit(url)
    except ValueError as e:
        raise TemplateError(f"Unparseable keyword URL: {e}") from e
    if not parts.scheme:
        raise TemplateError(f"Keyword URL is not absolute: {url!r}")
    if (parts.scheme.lower() + ":") == ACTION_SCHEME:
        raise TemplateError("Action bookmarks cannot carry form post data")


def substitute(url_template: str, post_data: str | None, search_string: str) -> tuple[str, str | None]:
    """Bind a search string into a conventional keyword URL and its post data.

    Raises:
        TemplateError: the template is not an absolute URL, or a search string
            was given but neither the URL nor the post data has a %s slot.
    """
    url = (url_template or "").strip()
    _check_template(url)

    has_get_param = bool(PARAM_RE.search(url))
    decoded_post_data = unquote(post_data) if post_data else None
    has_post_param = bool(decoded_post_data and PARAM_RE.search(decoded_post_data))

    if not has_get_param and not has_post_param:
        if search_string:
            raise TemplateError("A search string was given but there is nothing to bind it to")
        return url, post_data

    charset = None
    m = CHARSET_RE.match(url)
    if m:
        url, charset = m.group(1), m.group(2)

    encoded, raw = encode_search_terms(search_string, _resolve_charset(charset))

    def _bind(text: str) -> str:
        return PARAM_RE.sub(lambda p: encoded if p.group(0) == "%s" else raw, text)

    url = _bind(url)
    if has_post_param:
        post_data = _bind(decoded_post_data)
    return url, post_data
