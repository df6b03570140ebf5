"""
Cursor Codec Tests

Signed pagination tokens: round trip, tamper detection, wrong secret, and
expiry. Every rejected token decodes to None rather than raising.

Run:
----
    pytest tests/test_cursor_codec.py -v
"""

from datetime import timedelta

import pytest

from feedrank.models import CursorState, FeedStrategy
from feedrank.stages.cursor_codec import CursorCodec


@pytest.fixture
def codec(clock):
    return CursorCodec("secret-one", clock=clock)


@pytest.fixture
def state(now):
    return CursorState(
        last_served_id="B",
        excluded_ids=["A", "B"],
        page=3,
        strategy=FeedStrategy.TRENDING,
        created_at=now,
    )


class TestCursorCodec:
    def test_round_trip(self, codec, state):
        token = codec.encode(state)
        assert "=" not in token
        assert codec.decode(token) == state

    @pytest.mark.parametrize("token", [None, "", "garbage", "a.b.c", "!!!.???", "é.é"])
    def test_garbage_decodes_to_none(self, codec, token):
        assert codec.decode(token) is None

    def test_tampered_body_is_rejected(self, codec, state):
        body, sig = codec.encode(state).split(".")
        forged = state.model_copy(update={"excluded_ids": []})
        forged_body = codec.encode(forged).split(".")[0]
        assert forged_body != body
        assert codec.decode(f"{forged_body}.{sig}") is None

    def test_wrong_secret_is_rejected(self, codec, state, clock):
        other = CursorCodec("secret-two", clock=clock)
        assert other.decode(codec.encode(state)) is None

    def test_expired_cursor_is_rejected(self, codec, state, now):
        token = codec.encode(state)
        later = CursorCodec("secret-one", clock=lambda: now + timedelta(hours=25))
        assert later.decode(token) is None

    def test_cursor_from_the_future_is_rejected(self, codec, state, now):
        token = codec.encode(state.model_copy(update={"created_at": now + timedelta(hours=1)}))
        assert codec.decode(token) is None

    def test_empty_secret_refused(self):
        with pytest.raises(ValueError):
            CursorCodec("")
