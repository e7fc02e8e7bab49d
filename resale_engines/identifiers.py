"""
Module: resale_engines.identifiers
Responsibility:
    Produce record keys: a collision-free 128-bit ``record_id`` plus the
    short human-readable ``display_key`` (``PREFIX-YYYYMMDD-RRRR``) the
    admin screens show.

Architecture position:
    Engines -- reads only an injected Clock and an injected random source.

Invariants enforced:
    - ``RRRR`` is drawn uniformly from [1000, 9999].
    - The date part is the UTC calendar date of the clock.
    - Uniqueness is carried by ``record_id`` (UUID4); the display key is
      an alias only and may collide across high daily volumes.

Usage:
    from resale_engines.identifiers import generate_key

    key = generate_key("C")
    key.record_id      # UUID('6f1c...')
    str(key)           # 'C-20240101-4821'
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from uuid import UUID, uuid4

from resale_kernel.domain.clock import Clock, SystemClock

SUFFIX_MIN = 1000
SUFFIX_MAX = 9999

_system_random = random.SystemRandom()


@dataclass(frozen=True)
class RecordKey:
    """Unique record identity with its display alias."""

    record_id: UUID
    display_key: str

    def __str__(self) -> str:
        return self.display_key


def generate_display_key(
    prefix: str,
    *,
    clock: Clock | None = None,
    rng: random.Random | None = None,
) -> str:
    """Return ``PREFIX-YYYYMMDD-RRRR`` for the clock's current UTC date."""
    if not prefix:
        raise ValueError("Key prefix is required")
    clock = clock or SystemClock()
    rng = rng or _system_random
    suffix = rng.randint(SUFFIX_MIN, SUFFIX_MAX)
    return f"{prefix}-{clock.today():%Y%m%d}-{suffix}"


def generate_key(
    prefix: str,
    *,
    clock: Clock | None = None,
    rng: random.Random | None = None,
) -> RecordKey:
    """
    Return a new RecordKey.

    With an explicit ``rng`` the record id is drawn from it (version-4
    layout), so a seeded generator gives reproducible keys in tests.
    """
    display_key = generate_display_key(prefix, clock=clock, rng=rng)
    if rng is None:
        record_id = uuid4()
    else:
        record_id = UUID(int=rng.getrandbits(128), version=4)
    return RecordKey(record_id=record_id, display_key=display_key)
