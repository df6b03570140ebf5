"""
Shared fixtures: fixed clock, small (4-dim) ranking config, item/interaction
factories, and in-memory collaborators wired into a FeedService.
"""

from datetime import datetime, timedelta, timezone

import pytest

from feed_server.services import (
    InMemoryInteractionStore,
    InMemoryItemCorpus,
    InMemoryKeyValueCache,
)
from feedrank import CandidateIndexRegistry, FeedService
from feedrank.models import (
    EngagementCounters,
    Interaction,
    InteractionType,
    Item,
    RankingConfig,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
CURSOR_SECRET = "test-cursor-secret"


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def config():
    return RankingConfig(index_dimension=4)


@pytest.fixture
def make_item():
    def _make(
        item_id,
        vector=(1.0, 0.0, 0.0, 0.0),
        source="S1",
        categories=("sports",),
        age_days=1.0,
        item_type="article",
        views=0,
        likes=0,
        completion_rate=0.0,
        reduced=None,
    ):
        return Item(
            id=item_id,
            item_type=item_type,
            embedding=list(vector) if vector is not None else None,
            reduced_embedding=list(reduced) if reduced is not None else None,
            source=source,
            categories=list(categories),
            published_at=NOW - timedelta(days=age_days),
            counters=EngagementCounters(
                views=views, likes=likes, completion_rate=completion_rate
            ),
        )

    return _make


@pytest.fixture
def make_interaction():
    def _make(user_id, item_id, type_, age_days=0.0):
        return Interaction(
            user_id=user_id,
            item_id=item_id,
            type=InteractionType(type_),
            timestamp=NOW - timedelta(days=age_days),
        )

    return _make


@pytest.fixture
def corpus(clock):
    return InMemoryItemCorpus(clock=clock)


@pytest.fixture
def interactions(clock):
    return InMemoryInteractionStore(clock=clock)


@pytest.fixture
def kv():
    return InMemoryKeyValueCache(clock=lambda: 1000.0)


@pytest.fixture
def registry(config):
    return CandidateIndexRegistry(config.index_dimension)


@pytest.fixture
def service(interactions, corpus, kv, registry, config, clock):
    return FeedService(
        interactions=interactions,
        corpus=corpus,
        cache=kv,
        indexes=registry,
        cursor_secret=CURSOR_SECRET,
        config=config,
        clock=clock,
    )
