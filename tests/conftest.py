# tests/conftest.py
import pathlib
from datetime import timedelta
from typing import Dict, List, Optional

import pytest
from dotenv import load_dotenv

load_dotenv(pathlib.Path(__file__).parent / ".env.test", override=True)

from newsengine.cache import ArticleCache, compute_article_id  # noqa: E402
from newsengine.config import Settings  # noqa: E402
from newsengine.dependencies import Services  # noqa: E402
from newsengine.identity import IdentityProvider  # noqa: E402
from newsengine.schema import ArticleData  # noqa: E402
from newsengine.sources import BaseProvider, ProviderResult, SourceClient  # noqa: E402
from newsengine.store import Database  # noqa: E402
from newsengine.summarize import Summarizer  # noqa: E402
from newsengine.timeutil import utcnow  # noqa: E402

TOKENS = {"token-u": "user-u", "token-v": "user-v"}


class FakeProvider(BaseProvider):
    name = "fake"

    def __init__(self, items: Optional[List[Dict]] = None, error: Optional[Exception] = None):
        self.items = items or []
        self.error = error
        self.calls = 0

    def fetch(self, city, country, max_items=30):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return ProviderResult(items=list(self.items)[:max_items], source_name=self.name)


class FakeIdentity(IdentityProvider):
    def resolve(self, token):
        return TOKENS.get(token)


def auth(token: str = "token-u") -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def source_item(url: str, title: str = "Story", **kw) -> Dict:
    item = {
        "url": url,
        "title": title,
        "description": kw.pop("description", f"{title} description"),
        "content": kw.pop("content", f"{title} full content"),
        "image_url": None,
        "published_at": kw.pop("published_at", utcnow() - timedelta(hours=1)),
        "source": kw.pop("source", "Pune Times"),
    }
    item.update(kw)
    return item


def put_article(cache: ArticleCache, url: str, city: str = "Pune", now=None, **fields):
    fields.setdefault("title", "Story")
    fields.setdefault("published_at", (now or utcnow()) - timedelta(hours=1))
    data = ArticleData(article_id=compute_article_id(url), url=url, location_name=city, **fields)
    return cache.upsert(data, now=now)


@pytest.fixture()
def db():
    database = Database("sqlite://")
    database.init()
    yield database
    database.dispose()


@pytest.fixture()
def cache(db):
    return ArticleCache(db)


@pytest.fixture()
def provider():
    return FakeProvider()


@pytest.fixture()
def summarizer():
    # No OpenAI client: every fresh summary takes the local fallback path
    return Summarizer(client=None)


@pytest.fixture()
def services(db, provider, summarizer):
    return Services.build(
        Settings(db_url="sqlite://"),
        db=db,
        sources=SourceClient([provider]),
        summarizer=summarizer,
        identity=FakeIdentity(),
    )


@pytest.fixture()
def client(services):
    from fastapi.testclient import TestClient
    from newsengine.main import create_app

    app = create_app(Settings(db_url="sqlite://"), services=services)
    with TestClient(app) as c:
        yield c
