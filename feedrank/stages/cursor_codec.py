"""
Cursor Codec — opaque, signed pagination tokens.

Token: base64url(json(state)) + "." + base64url(hmac_sha256(secret, json)), no padding.
Decoding never raises: malformed, tampered, wrong-secret, and expired tokens all
decode to None, which the service treats as "start of feed".
"""

import base64
import hashlib
import hmac
import logging
from datetime import datetime
from typing import Callable, Optional

from pydantic import ValidationError

from ..models.cursor import CursorState
from ..utils.scores import utc_now

logger = logging.getLogger(__name__)


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _b64decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


class CursorCodec:
    """Signs and verifies CursorState tokens."""

    def __init__(
        self,
        secret: str,
        max_age_seconds: int = 24 * 3600,
        clock: Callable[[], datetime] = utc_now,
    ):
        if not secret:
            raise ValueError("cursor secret must not be empty")
        self._key = secret.encode("utf-8")
        self.max_age_seconds = max_age_seconds
        self.clock = clock

    def _sign(self, body: bytes) -> bytes:
        return hmac.new(self._key, body, hashlib.sha256).digest()

    def encode(self, state: CursorState) -> str:
        body = state.model_dump_json().encode("utf-8")
        return f"{_b64encode(body)}.{_b64encode(self._sign(body))}"

    def decode(self, token: Optional[str]) -> Optional[CursorState]:
        if not token or token.count(".") != 1:
            return None
        body_b64, sig_b64 = token.split(".", 1)
        try:
            body = _b64decode(body_b64)
            sig = _b64decode(sig_b64)
        except (ValueError, TypeError):
            logger.info("[cursor] CURSOR_BAD_ENCODING")
            return None
        if not hmac.compare_digest(sig, self._sign(body)):
            logger.info("[cursor] CURSOR_BAD_SIGNATURE")
            return None
        try:
            state = CursorState.model_validate_json(body)
        except ValidationError:
            logger.info("[cursor] CURSOR_BAD_PAYLOAD")
            return None
        age = (self.clock() - state.created_at).total_seconds()
        if age < 0 or age > self.max_age_seconds:
            logger.info("[cursor] CURSOR_EXPIRED age_s=%.0f", age)
            return None
        return state
