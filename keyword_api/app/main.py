from __future__ import annotations

import time
from datetime import datetime
from pathlib import Path

from fastapi import FastAPI, Depends, HTTPException, Query, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, PlainTextResponse

from .config import settings
from .executor import ActionExecutor
from .keywords import YamlKeywordStore
from .logging_utils import setup_logger, log_resolution, create_session_id
from .presentation.html_renderer import HtmlRenderer
from .presentation.presenters import create_presenter
from .providers import ProvidersManager, install_keyword_provider
from .resolver import KeywordActionResolver
from .security import require_api_key
from .tokenizer import tokenize

VERSION = "0.1.0"

app = FastAPI(title="Keyword Actions API", version=VERSION)

origins = (
    [o.strip() for o in settings.cors_origins.split(",")]
    if getattr(settings, "cors_origins", None)
    else ["*"]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger = setup_logger("keyword_api", settings.log_level)

KEYWORDS_FILE = Path(settings.keywords_file)
STORE = YamlKeywordStore(KEYWORDS_FILE)
RESOLVER = KeywordActionResolver(STORE)
MANAGER = ProvidersManager()
install_keyword_provider(MANAGER, RESOLVER, executor=ActionExecutor())

FORMAT_PATTERN = "^(json|markdown|html)$"


def _render(markdown_text: str, fmt: str, title: str, metadata: dict = None):
    if fmt == "html":
        return HTMLResponse(HtmlRenderer().render(markdown_text, title=title, metadata=metadata))
    return PlainTextResponse(markdown_text, media_type="text/markdown; charset=utf-8")


@app.get("/health")
def health(response: Response):
    response.headers["Cache-Control"] = "no-store"
    return {
        "status": "ok",
        "service": "keyword-api",
        "version": VERSION,
        "time": datetime.now().astimezone().isoformat()
    }


@app.get("/keywords", dependencies=[Depends(require_api_key)])
async def keywords(format: str = Query(default="json", pattern=FORMAT_PATTERN)):
    records = await RESOLVER.store.list_keywords()
    if format != "json":
        md = create_presenter("keywords").to_markdown(records)
        return _render(md, format, "Keywords", metadata={"count": len(records)})
    return {"keywords": [r.model_dump() for r in records]}


@app.get("/resolve", dependencies=[Depends(require_api_key)])
async def resolve(
    keyword: str = Query(..., min_length=1),
    q: str = Query(default="", description="Search string typed after the keyword"),
):
    r = await RESOLVER.resolve(keyword, q)
    if r is None:
        return {"found": False}
    return {"found": True, **r.model_dump()}


@app.get("/query", dependencies=[Depends(require_api_key)])
async def query(
    q: str = Query(..., min_length=1, description="Raw address-bar input, e.g. 'g foo bar'"),
    format: str = Query(default="json", pattern=FORMAT_PATTERN),
):
    session_id = create_session_id()
    start_time = time.time()

    ctx = tokenize(q)
    results = await MANAGER.start_query(ctx)

    duration_ms = (time.time() - start_time) * 1000
    first = results[0] if results else None
    log_resolution(
        logger, session_id, q, ctx.keyword, bool(results), duration_ms,
        is_action=bool(first and first.payload.action),
        had_placeholder=bool(first and first.had_placeholder),
        result_count=len(results),
    )

    presenter = create_presenter("results")
    if format != "json":
        metadata = {"session-id": session_id, "results": len(results)}
        return _render(presenter.to_markdown(results, q), format, f"Keyword: {q}", metadata)

    return {
        "q": q,
        "keyword": ctx.keyword,
        "session_id": session_id,
        "duration_ms": duration_ms,
        "results": [
            {**r.model_dump(), "label": presenter.action_label(r.payload)}
            for r in results
        ],
    }


@app.post("/pick", dependencies=[Depends(require_api_key)])
async def pick(
    q: str = Query(..., min_length=1),
    ctrl: bool = False,
    shift: bool = False,
    alt: bool = False,
    meta: bool = False,
):
    ctx = tokenize(q)
    results = await MANAGER.start_query(ctx)
    heuristic = next((r for r in results if r.heuristic), None)
    if heuristic is None:
        raise HTTPException(404, detail="No keyword result")

    if heuristic.payload.action:
        if not settings.enable_action_execution:
            raise HTTPException(403, detail="Action execution is disabled")
        # never on an open API
        if not settings.api_key:
            raise HTTPException(403, detail="Action execution requires KEYWORD_API_KEY")

    event = {"ctrl": ctrl, "shift": shift, "alt": alt, "meta": meta}
    outcome = MANAGER.pick_result(heuristic, event=event)
    logger.info(f"Picked '{heuristic.payload.keyword}' -> {outcome.kind} ({outcome.status or outcome.where})")
    return outcome.model_dump()
