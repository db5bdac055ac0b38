# tests/test_summary_api.py
import json
from types import SimpleNamespace

import pytest
from openai import OpenAIError
from sqlmodel import select

from newsengine.cache import compute_article_id
from newsengine.errors import CacheUnavailableError, IdentityUnavailableError
from newsengine.models import UserEvent
from newsengine.summarize import Summarizer

from conftest import auth, put_article

ARTICLE = {
    "title": "Metro approved",
    "description": "Council vote",
    "content": "The city council approved a new metro line for the east side. " * 10,
    "url": "https://example.com/metro",
    "source": "Pune Times",
    "publishedAt": "2025-01-01T10:00:00Z",
}


@pytest.fixture()
def failing_model(mocker):
    client = mocker.MagicMock()
    client.chat.completions.create.side_effect = OpenAIError("model unavailable")
    return client


@pytest.fixture()
def summarizer(failing_model):
    return Summarizer(failing_model)


def audit_events(services):
    with services.db.session() as s:
        return s.exec(select(UserEvent).where(UserEvent.event_type == "summary_generated")).all()


def test_summarizer_failure_is_degraded_success(client, services):
    r = client.post("/news/summarize", json={"article": ARTICLE, "articleId": "abc"})
    assert r.status_code == 200
    body = r.json()
    assert body["summary"]
    assert body["cached"] is False
    assert body["category"] == "General"
    assert 0 < len(body["keywords"]) <= 5

    events = audit_events(services)
    assert len(events) == 1
    assert events[0].properties["provider"] == "fallback"
    assert events[0].properties["summary_length"] == len(body["summary"])


def test_stored_summary_is_returned_from_cache(client, services, failing_model):
    put_article(services.cache, ARTICLE["url"])
    services.cache.set_summary(compute_article_id(ARTICLE["url"]), "Stored summary.", "Politics")

    body = client.post("/news/summarize", json={"article": ARTICLE}).json()
    assert body == {"summary": "Stored summary.", "category": "Politics", "cached": True}
    failing_model.chat.completions.create.assert_not_called()
    assert audit_events(services) == []


def test_fresh_ai_summary_is_stored(client, services, failing_model):
    failing_model.chat.completions.create.side_effect = None
    failing_model.chat.completions.create.return_value = SimpleNamespace(choices=[SimpleNamespace(
        message=SimpleNamespace(content=json.dumps({
            "summary": "A metro line was approved.",
            "keywords": ["metro", "council", "transit"],
            "category": "Politics",
        }))
    )])
    put_article(services.cache, ARTICLE["url"])

    r = client.post("/news/summarize", json={"article": ARTICLE}, headers=auth())
    assert r.status_code == 200
    assert r.json()["keywords"] == ["metro", "council", "transit"]
    assert services.cache.get(compute_article_id(ARTICLE["url"])).ai_summary == "A metro line was approved."

    events = audit_events(services)
    assert events[0].user_id == "user-u"
    assert events[0].properties["keyword_count"] == 3


def test_storage_failure_still_returns_fallback_body(client, services, mocker):
    mocker.patch.object(services.summaries, "summarize", side_effect=CacheUnavailableError("db down"))
    r = client.post("/news/summarize", json={"article": ARTICLE, "articleId": "abc"})
    assert r.status_code == 500
    body = r.json()
    assert body["summary"].endswith("...")
    assert body["cached"] is False


def test_malformed_url_without_content_still_gets_fallback(client):
    article = {**ARTICLE, "title": "T", "description": "", "content": "", "url": "http://[::1"}
    r = client.post("/news/summarize", json={"article": article, "articleId": "x1"})
    assert r.status_code == 200
    assert r.json()["summary"] == "T..."


def test_identity_outage_summarizes_anonymously(client, services, mocker):
    mocker.patch.object(services.identity, "resolve", side_effect=IdentityUnavailableError("auth down"))
    r = client.post("/news/summarize", json={"article": ARTICLE, "articleId": "abc"}, headers=auth())
    assert r.status_code == 200
    assert r.json()["summary"]
    assert audit_events(services)[0].user_id is None

    # endpoints that need a caller still report the outage
    assert client.post("/history/clear", json={"clearType": "all"}, headers=auth()).status_code == 503


def test_ai_summary_survives_write_back_failure(client, services, failing_model, mocker):
    failing_model.chat.completions.create.side_effect = None
    failing_model.chat.completions.create.return_value = SimpleNamespace(choices=[SimpleNamespace(
        message=SimpleNamespace(content=json.dumps({
            "summary": "A metro line was approved.",
            "keywords": ["metro", "council", "transit"],
            "category": "Politics",
        }))
    )])
    put_article(services.cache, ARTICLE["url"])
    mocker.patch.object(services.cache, "set_summary", side_effect=CacheUnavailableError("db down"))

    r = client.post("/news/summarize", json={"article": ARTICLE})
    assert r.status_code == 500
    body = r.json()
    assert body["summary"] == "A metro line was approved."
    assert body["keywords"] == ["metro", "council", "transit"]
    assert body["category"] == "Politics"
    assert body["error"] == "Storage unavailable"
