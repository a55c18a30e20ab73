from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Literal, Optional, Tuple


class KeywordRecord(BaseModel):
    keyword: str
    url: str
    post_data: Optional[str] = None
    title: Optional[str] = None

    @field_validator("keyword")
    @classmethod
    def _normalize_keyword(cls, v: str) -> str:
        v = (v or "").strip().lower()
        if not v or any(ch.isspace() for ch in v):
            raise ValueError("keyword must be a single non-empty token")
        return v

    @field_validator("url")
    @classmethod
    def _require_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("url must not be empty")
        return v.strip()


class Bookmark(BaseModel):
    url: str
    title: Optional[str] = None


class ResolutionResult(BaseModel):
    keyword: str
    is_action: bool
    resolved_text: str
    had_placeholder: bool = False
    url: str  # navigable URL, or the ucjs: URI for actions
    post_data: Optional[str] = None
    record: KeywordRecord


class KeywordResultPayload(BaseModel):
    title: str
    url: str
    keyword: str
    input: str
    post_data: Optional[str] = None
    icon: Optional[str] = None
    action: bool = False  # True for ucjs: bookmarks


class KeywordResult(BaseModel):
    type: Literal["keyword"] = "keyword"
    source: Literal["bookmarks"] = "bookmarks"
    provider_name: str
    heuristic: bool = False
    payload: KeywordResultPayload
    highlights: Dict[str, List[Tuple[int, int]]] = Field(default_factory=dict)
    had_placeholder: bool = False
    # Resolved body of an action bookmark (without the scheme)
    action_text: Optional[str] = None


class PickOutcome(BaseModel):
    kind: Literal["navigate", "execute"]
    url: str
    post_data: Optional[str] = None
    where: str = "current"
    status: Optional[str] = None  # executor status for "execute"
    error: Optional[str] = None
