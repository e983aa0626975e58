"""Striped per-key mutual exclusion for ledger writes."""

from __future__ import annotations

import hashlib
from collections.abc import Hashable, Iterator
from contextlib import contextmanager
from functools import lru_cache
from threading import Lock

from reveal_api.core.settings import settings


class KeyedLockTable:
    """Fixed table of locks addressed by hashing the key.

    Writers on the same key always share a stripe and are serialized. Writers
    on different keys only contend when their keys hash to the same stripe,
    and only for the short critical section around a single record.
    """

    def __init__(self, stripes: int = 256) -> None:
        if stripes < 1:
            raise ValueError("stripes must be positive")
        self._locks = [Lock() for _ in range(stripes)]

    def __len__(self) -> int:
        return len(self._locks)

    def stripe_for(self, key: Hashable) -> int:
        """Return the stripe index that guards ``key``."""
        digest = hashlib.blake2s(repr(key).encode("utf-8"), digest_size=8).digest()
        return int.from_bytes(digest, "big") % len(self._locks)

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        """Hold the lock guarding ``key`` for the duration of the block."""
        lock = self._locks[self.stripe_for(key)]
        with lock:
            yield


@lru_cache(maxsize=1)
def get_vote_locks() -> KeyedLockTable:
    """Return the process-wide lock table for vote transitions."""
    return KeyedLockTable(settings.ledger_lock_stripes)


@lru_cache(maxsize=1)
def get_flag_locks() -> KeyedLockTable:
    """Return the process-wide lock table for flag creation."""
    return KeyedLockTable(settings.ledger_lock_stripes)
