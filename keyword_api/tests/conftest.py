import pytest

from app.keywords import InMemoryKeywordStore
from app.models import KeywordRecord
from app.resolver import KeywordActionResolver


@pytest.fixture
def records():
    return [
        KeywordRecord(keyword="gs", url='ucjs:console.log("%{searchString}")', title="Console log"),
        KeywordRecord(keyword="go", url="ucjs:openTab()"),
        KeywordRecord(keyword="g", url="https://example.com/search?q=%s", title="Example"),
        KeywordRecord(keyword="home", url="https://example.com/%7Euser/"),
        KeywordRecord(keyword="form", url="ucjs:submit()", post_data="q=%s"),
        KeywordRecord(keyword="post", url="https://example.com/find", post_data="q=%s&lang=en"),
    ]


@pytest.fixture
def store(records):
    return InMemoryKeywordStore(records)


@pytest.fixture
def resolver(store):
    return KeywordActionResolver(store, placeholder="%{searchString}")
