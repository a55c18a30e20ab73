from __future__ import annotations

import logging
import threading
import weakref
from enum import Enum
from typing import Any, Callable, List, Optional, Protocol

from .executor import ActionExecutor, ExecutionResult, where_to_open
from .models import KeywordResult, PickOutcome
from .presentation.presenters import KeywordResultPresenter
from .resolver import KeywordActionResolver
from .tokenizer import QueryContext, RestrictToken

logger = logging.getLogger("keyword_api.providers")


class ProviderType(str, Enum):
    HEURISTIC = "heuristic"


AddCallback = Callable[[Any, KeywordResult], None]


class Provider(Protocol):
    name: str
    type: ProviderType

    def is_active(self, query_context: QueryContext) -> bool:
        ...

    async def start_query(self, query_context: QueryContext, add_callback: AddCallback) -> None:
        ...

    def pick_result(self, result: KeywordResult, event: Any = None,
                    element: Any = None, browser: Any = None) -> Optional[ExecutionResult]:
        ...


class KeywordActionProvider:
    """Heuristic provider for bookmark keywords, including ucjs: action bookmarks.

    Unlike plain bookmark keywords, an action bookmark does not need a search
    string slot: typing extra text after a fire-and-forget action still
    yields a result.
    """

    NAME = "BookmarkKeywords"

    def __init__(
        self,
        resolver: KeywordActionResolver,
        executor: Optional[ActionExecutor] = None,
        presenter: Optional[KeywordResultPresenter] = None,
    ):
        self.resolver = resolver
        self.executor = executor or ActionExecutor()
        self.presenter = presenter or KeywordResultPresenter()

    @property
    def name(self) -> str:
        return self.NAME

    @property
    def type(self) -> ProviderType:
        return ProviderType.HEURISTIC

    def is_active(self, query_context: QueryContext) -> bool:
        return (
            (query_context.restrict_source is None
             or query_context.restrict_source == RestrictToken.BOOKMARK)
            and not query_context.search_mode
            and bool(query_context.tokens)
        )

    async def start_query(self, query_context: QueryContext, add_callback: AddCallback) -> None:
        keyword = query_context.keyword
        if not keyword:
            return

        resolution = await self.resolver.resolve(keyword, query_context.keyword_search_string)
        if resolution is None:
            return

        bookmark_title = None
        if resolution.is_action:
            bookmark = await self.resolver.store.fetch_bookmark(resolution.record.url)
            bookmark_title = bookmark.title if bookmark else resolution.record.title

        result = self.presenter.build_result(
            resolution, query_context, provider_name=self.name, bookmark_title=bookmark_title
        )
        result.heuristic = True
        add_callback(self, result)

    def pick_result(self, result: KeywordResult, event: Any = None,
                    element: Any = None, browser: Any = None) -> ExecutionResult:
        """Run the picked action bookmark.

        ``event`` tells the code which modifier keys were held (see
        ``where_to_open``), ``browser`` is the target surface for any load the
        code starts. ``element`` is the picked row and is often None.
        """
        return self.executor.execute(result, event=event, element=element, browser=browser)


class ProvidersManager:
    """Registry of result providers; runs queries and routes picked results."""

    def __init__(self):
        self._providers: dict[str, Provider] = {}
        self._lock = threading.Lock()

    @property
    def providers(self) -> List[Provider]:
        with self._lock:
            return list(self._providers.values())

    def register_provider(self, provider: Provider) -> None:
        with self._lock:
            if provider.name in self._providers:
                raise ValueError(f"Provider already registered: {provider.name}")
            self._providers[provider.name] = provider

    def unregister_provider(self, provider: Provider | str) -> None:
        name = provider if isinstance(provider, str) else provider.name
        with self._lock:
            self._providers.pop(name, None)

    def get_provider(self, name: str) -> Optional[Provider]:
        with self._lock:
            return self._providers.get(name)

    async def start_query(self, query_context: QueryContext) -> List[KeywordResult]:
        results: List[KeywordResult] = []

        def add_result(provider, result):
            results.append(result)

        for provider in self.providers:
            if not provider.is_active(query_context):
                continue
            try:
                await provider.start_query(query_context, add_result)
            except Exception as e:
                # One broken provider must not take the whole query down
                logger.error(f"Provider {provider.name} failed: {e}")

        results.sort(key=lambda r: not r.heuristic)
        return results

    def pick_result(self, result: KeywordResult, event: Any = None,
                    element: Any = None, browser: Any = None) -> PickOutcome:
        where = where_to_open(event)
        payload = result.payload

        if not payload.action:
            return PickOutcome(kind="navigate", url=payload.url, post_data=payload.post_data, where=where)

        provider = self.get_provider(result.provider_name)
        if provider is None:
            logger.error(f"No provider '{result.provider_name}' to run keyword '{payload.keyword}'")
            return PickOutcome(kind="execute", url=payload.url, where=where,
                               status="error", error="provider not registered")

        execution = provider.pick_result(result, event, element, browser)
        return PickOutcome(
            kind="execute",
            url=payload.url,
            where=where,
            status=execution.status if execution else "ok",
            error=execution.error if execution else None,
        )


# Managers that already carry the keyword provider
_install_lock = threading.Lock()
_installed: "weakref.WeakKeyDictionary[ProvidersManager, KeywordActionProvider]" = weakref.WeakKeyDictionary()


def install_keyword_provider(
    manager: ProvidersManager,
    resolver: KeywordActionResolver,
    executor: Optional[ActionExecutor] = None,
    presenter: Optional[KeywordResultPresenter] = None,
) -> KeywordActionProvider:
    """Replace the manager's BookmarkKeywords provider with the action-aware one.

    Runs once per manager; later calls return the provider installed first.
    """
    with _install_lock:
        provider = _installed.get(manager)
        if provider is not None:
            return provider

        existing = manager.get_provider(KeywordActionProvider.NAME)
        if existing is not None:
            manager.unregister_provider(existing)

        provider = KeywordActionProvider(resolver, executor=executor, presenter=presenter)
        manager.register_provider(provider)
        _installed[manager] = provider
        logger.info(f"Installed {provider.name} provider{' (replaced built-in)' if existing else ''}")
        return provider


def is_keyword_provider_installed(manager: ProvidersManager) -> bool:
    with _install_lock:
        return manager in _installed
