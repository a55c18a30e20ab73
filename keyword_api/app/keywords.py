from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Protocol

import yaml
from pydantic import ValidationError

from .models import Bookmark, KeywordRecord

logger = logging.getLogger("keyword_api.keywords")


class KeywordStore(Protocol):
    """Read side of a bookmark keyword store."""

    async def fetch_keyword(self, keyword: str) -> Optional[KeywordRecord]:
        ...

    async def fetch_bookmark(self, url: str) -> Optional[Bookmark]:
        ...

    async def list_keywords(self) -> List[KeywordRecord]:
        ...


def load_keywords(keywords_file: Path) -> List[KeywordRecord]:
    """
    Read a YAML keyword file into KeywordRecord objects.

    Args:
        keywords_file: path to keywords.yml

    Returns:
        List[KeywordRecord]: records in file order (empty on a missing or empty file)

    File format:
        - keyword: g
          url: https://www.google.com/search?q=%s
        - keyword: gs
          title: Search this site
          url: 'ucjs:open_web_link("https://www.google.com/search?q=%{searchString}")'

    Items that fail validation are skipped; a later duplicate keyword never
    replaces an earlier one.
    """
    if not keywords_file.exists():
        return []
    try:
        data = yaml.safe_load(keywords_file.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        logger.warning(f"Could not parse {keywords_file}: {e}")
        return []
    if not data:
        return []
    if not isinstance(data, list):
        logger.warning(f"{keywords_file} must contain a list of keyword bookmarks")
        return []

    records = []
    seen = set()
    for idx, item in enumerate(data):
        if not isinstance(item, dict):
            logger.warning(f"Skipping keyword entry #{idx}: not a mapping")
            continue
        try:
            record = KeywordRecord(**item)
        except (ValidationError, TypeError) as e:
            logger.warning(f"Skipping keyword entry #{idx}: {e}")
            continue
        if record.keyword in seen:
            logger.warning(f"Skipping duplicate keyword '{record.keyword}'")
            continue
        seen.add(record.keyword)
        records.append(record)
    return records


class InMemoryKeywordStore:
    """Keyword store backed by a dict keyed on the lower-cased keyword."""

    def __init__(self, records: Iterable[KeywordRecord] = ()):
        self._records: dict[str, KeywordRecord] = {}
        for record in records:
            self._records.setdefault(record.keyword, record)

    def _refresh(self) -> None:
        pass

    def insert(self, record: KeywordRecord) -> None:
        self._records[record.keyword] = record

    def remove(self, keyword: str) -> bool:
        return self._records.pop(keyword.strip().lower(), None) is not None

    async def fetch_keyword(self, keyword: str) -> Optional[KeywordRecord]:
        self._refresh()
        return self._records.get((keyword or "").strip().lower())

    async def fetch_bookmark(self, url: str) -> Optional[Bookmark]:
        self._refresh()
        for record in self._records.values():
            if record.url == url:
                return Bookmark(url=record.url, title=record.title)
        return None

    async def list_keywords(self) -> List[KeywordRecord]:
        self._refresh()
        return list(self._records.values())


class YamlKeywordStore(InMemoryKeywordStore):
    """Keyword store read from a YAML file, reloaded when the file changes."""

    def __init__(self, keywords_file: Path):
        super().__init__()
        self.keywords_file = Path(keywords_file)
        self._mtime: float | None = None

    def _refresh(self) -> None:
        try:
            mtime = self.keywords_file.stat().st_mtime
        except FileNotFoundError:
            self._records = {}
            self._mtime = None
            return
        if mtime == self._mtime:
            return
        self._records = {r.keyword: r for r in load_keywords(self.keywords_file)}
        self._mtime = mtime
        logger.debug(f"Loaded {len(self._records)} keywords from {self.keywords_file}")
