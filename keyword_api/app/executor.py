"""Runs the resolved text of ucjs: action bookmarks."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

from .config import ACTION_SCHEME
from .errors import ExecutionError
from .models import KeywordResult, ResolutionResult

logger = logging.getLogger("keyword_api.executor")


@dataclass
class ExecutionResult:
    status: str  # "ok" | "error"
    keyword: Optional[str] = None
    error: Optional[str] = None
    elapsed_ms: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"status": self.status}
        if self.keyword is not None:
            payload["keyword"] = self.keyword
        if self.error is not None:
            payload["error"] = self.error
        if self.elapsed_ms is not None:
            payload["elapsed_ms"] = self.elapsed_ms
        return payload


def _modifier(event: Any, name: str) -> bool:
    if isinstance(event, dict):
        return bool(event.get(name))
    return bool(getattr(event, name, False))


def where_to_open(event: Any = None) -> str:
    """Map the modifier keys of the picking event to a load target."""
    if not event:
        return "current"
    if _modifier(event, "ctrl") or _modifier(event, "meta"):
        return "tabshifted" if _modifier(event, "shift") else "tab"
    if _modifier(event, "shift"):
        return "window"
    if _modifier(event, "alt"):
        return "tab"
    return "current"


def _action_source(target: KeywordResult | ResolutionResult | str) -> tuple[str, Optional[str]]:
    if isinstance(target, KeywordResult):
        text = target.action_text
        if text is None:
            text = target.payload.url
        return _strip_scheme(text), target.payload.keyword
    if isinstance(target, ResolutionResult):
        return target.resolved_text, target.keyword
    return _strip_scheme(target), None


def _strip_scheme(text: str) -> str:
    if text[:len(ACTION_SCHEME)].lower() == ACTION_SCHEME:
        return text[len(ACTION_SCHEME):]
    return text


class ActionExecutor:
    """Execute action bookmark code with the host's context objects.

    The code sees ``result``, ``event``, ``element`` and ``browser`` (any of
    which may be None), the ``where_to_open`` helper, and whatever the host
    passed as ``context``. Failures are logged and never propagate.
    """

    def __init__(self, context: Optional[dict[str, Any]] = None):
        self.context = dict(context or {})

    def execute(
        self,
        target: KeywordResult | ResolutionResult | str,
        event: Any = None,
        element: Any = None,
        browser: Any = None,
    ) -> ExecutionResult:
        source, keyword = _action_source(target)
        namespace = {
            "__name__": "__keyword_action__",
            **self.context,
            "result": target,
            "event": event,
            "element": element,
            "browser": browser,
            "where_to_open": where_to_open,
        }

        start_time = time.time()
        try:
            code = compile(source, f"<keyword {keyword or 'action'}>", "exec")
            exec(code, namespace)
        except Exception as e:
            err = ExecutionError(f"{type(e).__name__}: {e}", keyword=keyword, source=source)
            logger.error(f"Error in bookmark keyword :>> {err}")
            logger.warning(f"Bookmark keyword parsed source :>> {err.source}")
            return ExecutionResult(
                status="error",
                keyword=keyword,
                error=str(err),
                elapsed_ms=int((time.time() - start_time) * 1000),
            )

        return ExecutionResult(
            status="ok",
            keyword=keyword,
            elapsed_ms=int((time.time() - start_time) * 1000),
        )
