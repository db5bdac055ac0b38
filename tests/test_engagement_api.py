# tests/test_engagement_api.py
from newsengine.engagement import EngagementCounts

from conftest import auth, put_article


def test_record_engagement(client, services):
    art = put_article(services.cache, "https://example.com/liked")
    r = client.post("/engagement", json={"article_id": art.article_id, "event_type": "share"}, headers=auth())
    assert r.status_code == 201
    assert services.aggregator.counts_for([art.article_id])[art.article_id] == EngagementCounts(shares=1)


def test_engagement_unknown_article_and_type(client):
    r = client.post("/engagement", json={"article_id": "nope", "event_type": "like"}, headers=auth())
    assert r.status_code == 404
    r = client.post("/engagement", json={"article_id": "nope", "event_type": "clap"}, headers=auth())
    assert r.status_code == 400


def test_engagement_requires_identity(client):
    assert client.post("/engagement", json={"article_id": "x", "event_type": "like"}).status_code == 401


def test_counts_default_to_zero(services):
    counts = services.aggregator.counts_for(["a", "b", "a"])
    assert counts == {"a": EngagementCounts(), "b": EngagementCounts()}


def test_prefs_roundtrip(client):
    assert client.get("/prefs", headers=auth()).json() == {"excluded_sources": [], "excluded_categories": []}
    client.put("/prefs", json={"excluded_categories": ["Sports", " sports ", ""]}, headers=auth())
    assert client.get("/prefs", headers=auth()).json() == {
        "excluded_sources": [], "excluded_categories": ["Sports", "sports"],
    }
