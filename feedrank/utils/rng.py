"""
Deterministic pseudo-randomness for diversity and trending injection.

A linear congruential generator seeded from user, page, and day, so the same
request on the same day picks the same items while other pages and days differ.
"""

from datetime import datetime
from typing import Callable, List, Optional, Sequence, TypeVar

T = TypeVar("T")

_LCG_MULTIPLIER = 1103515245
_LCG_INCREMENT = 12345
_MASK_32 = 0xFFFFFFFF
_MODULUS = 4294967296.0


def lcg(seed: int) -> Callable[[], float]:
    """Return a generator function yielding floats in [0, 1)."""
    state = seed & _MASK_32

    def _next() -> float:
        nonlocal state
        state = (_LCG_MULTIPLIER * state + _LCG_INCREMENT) & _MASK_32
        return state / _MODULUS

    return _next


def string_hash(text: str) -> int:
    """31-multiplier rolling hash over 32 bits, returned as a non-negative int."""
    h = 0
    for ch in text:
        h = ((h << 5) - h + ord(ch)) & _MASK_32
    if h & 0x80000000:
        h -= 1 << 32
    return abs(h)


def day_key(now: datetime) -> str:
    return now.strftime("%Y%m%d")


def novelty_seed(user_id: Optional[str], page: int, now: datetime) -> int:
    """Seed for a user's page on a given UTC day. Anonymous callers share one seed per page."""
    return string_hash(f"{user_id or 'anonymous'}:{page}:{day_key(now)}")


def seeded_shuffle(values: Sequence[T], seed: int) -> List[T]:
    """Stable shuffle: sort by one LCG draw per element."""
    rng = lcg(seed)
    keyed = [(rng(), idx, value) for idx, value in enumerate(values)]
    keyed.sort(key=lambda t: (t[0], t[1]))
    return [value for _, _, value in keyed]


def seeded_insert(base: List[T], extras: Sequence[T], seed: int) -> List[T]:
    """Insert each extra at an LCG-chosen position of the growing list."""
    rng = lcg(seed)
    out = list(base)
    for value in extras:
        out.insert(int(rng() * (len(out) + 1)), value)
    return out
