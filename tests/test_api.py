"""
API Tests

HTTP surface over FastAPI's TestClient with in-memory collaborators: feed
paging, validation errors, interaction recording, clear-history, health, and
the 503 "unavailable" response.

Run:
----
    pytest tests/test_api.py -v
"""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from feed_server import AppState, ServerConfig, create_app, set_state
from feed_server.services import (
    InMemoryInteractionStore,
    InMemoryItemCorpus,
    InMemoryKeyValueCache,
)
from feedrank.models import Item, RankingConfig
from feedrank.utils import utc_now


def _items(count):
    now = utc_now()
    return [
        Item(
            id=f"item_{i:02d}",
            item_type="article",
            embedding=[1.0, float(i % 3), 0.0, 0.0],
            source=f"S{i % 4}",
            categories=["sports" if i % 2 else "news"],
            published_at=now - timedelta(hours=i),
        )
        for i in range(count)
    ]


def _state(items):
    state = AppState(
        ServerConfig(cursor_secret="api-test-secret"),
        ranking_config=RankingConfig(index_dimension=4),
        corpus=InMemoryItemCorpus(items),
        interactions=InMemoryInteractionStore(),
        cache=InMemoryKeyValueCache(),
    )
    state.rebuild_indexes()
    return state


@pytest.fixture
def client():
    app = create_app(_state(_items(25)), build_indexes=False)
    yield TestClient(app)
    set_state(None)


@pytest.fixture
def empty_client():
    app = create_app(_state([]), build_indexes=False)
    yield TestClient(app)
    set_state(None)


class TestRootAndHealth:
    def test_root_lists_endpoints(self, client):
        body = client.get("/").json()
        assert body["status"] == "ready"
        assert "/api/feed" in body["endpoints"]["feed"]

    def test_health_reports_index_sizes(self, client):
        body = client.get("/api/health").json()
        assert body["status"] == "healthy"
        assert body["indexes"] == {"article": 25}
        assert body["index_backend"] == "memory"
        assert body["corpus_items"] == 25


class TestFeedEndpoint:
    def test_anonymous_feed_and_cursor(self, client):
        first = client.get("/api/feed", params={"limit": 10})
        assert first.status_code == 200
        body = first.json()
        assert body["strategy_used"] == "trending"
        assert body["has_more"] is True
        assert len(body["items"]) == 10

        second = client.get("/api/feed", params={"limit": 10, "cursor": body["next_cursor"]}).json()
        assert second["page"] == 2
        first_ids = {it["id"] for it in body["items"]}
        assert not first_ids & {it["id"] for it in second["items"]}

    def test_personalized_after_interaction(self, client):
        resp = client.post(
            "/api/interactions", json={"user_id": "u1", "item_id": "item_03", "type": "save"}
        )
        assert resp.status_code == 201
        assert resp.json() == {"recorded": True, "invalidates_profile": True}

        body = client.get("/api/feed", params={"user_id": "u1", "limit": 5}).json()

        assert body["strategy_used"] == "personalized"
        assert len(body["items"]) == 5

    def test_unknown_strategy_is_rejected(self, client):
        assert client.get("/api/feed", params={"strategy": "random"}).status_code == 422

    def test_empty_corpus_is_503(self, empty_client):
        resp = empty_client.get("/api/feed")
        assert resp.status_code == 503
        assert resp.json()["status"] == "unavailable"


class TestInteractionEndpoints:
    def test_view_does_not_invalidate_profile(self, client):
        resp = client.post(
            "/api/interactions",
            json={"user_id": "u1", "item_id": "item_01", "type": "view_partial"},
        )
        assert resp.status_code == 201
        assert resp.json()["invalidates_profile"] is False

    @pytest.mark.parametrize(
        "payload",
        [
            {"user_id": "u1", "item_id": "item_01", "type": "share"},
            {"user_id": "", "item_id": "item_01", "type": "like"},
            {"user_id": "u1", "type": "like"},
        ],
    )
    def test_invalid_interaction_is_422(self, client, payload):
        assert client.post("/api/interactions", json=payload).status_code == 422

    def test_clear_history(self, client):
        client.post("/api/interactions", json={"user_id": "u2", "item_id": "item_01", "type": "like"})
        client.post("/api/interactions", json={"user_id": "u2", "item_id": "item_02", "type": "save"})

        resp = client.delete("/api/users/u2/history")

        assert resp.status_code == 200
        assert resp.json() == {"user_id": "u2", "removed": 2}
        body = client.get("/api/feed", params={"user_id": "u2", "limit": 5}).json()
        assert body["strategy_used"] == "trending"
