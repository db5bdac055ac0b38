# tests/test_logging.py
import logging

import pytest

from newsengine.logging_setup import EventFormatter, RequestIdFilter, request_id_var
from newsengine.middleware import resolve_request_id


def record(**extra):
    rec = logging.LogRecord("newsengine.feed", logging.INFO, __file__, 1, "FEED_CACHE_HIT", None, None)
    for k, v in extra.items():
        setattr(rec, k, v)
    RequestIdFilter().filter(rec)
    return rec


def test_event_formatter_appends_extra_fields():
    token = request_id_var.set("abc123")
    try:
        line = EventFormatter("%(name)s [req=%(request_id)s] %(message)s").format(record(city="Pune", page=2))
    finally:
        request_id_var.reset(token)
    assert line == "newsengine.feed [req=abc123] FEED_CACHE_HIT | city='Pune' page=2"


def test_event_formatter_without_extras():
    assert EventFormatter("%(message)s").format(record()) == "FEED_CACHE_HIT"


@pytest.mark.parametrize("incoming,kept", [
    ("gw-7f3a.01", True),
    ("", False),
    ("has spaces", False),
    ("x" * 65, False),
])
def test_resolve_request_id(incoming, kept):
    rid = resolve_request_id(incoming)
    assert (rid == incoming) is kept
    assert rid


def test_request_id_header_round_trip(client):
    r = client.get("/health", headers={"X-Request-ID": "edge-42"})
    assert r.headers["X-Request-ID"] == "edge-42"
    assert len(client.get("/health").headers["X-Request-ID"]) == 12
