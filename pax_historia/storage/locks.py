"""Per-save mutual exclusion.

Every operation that loads, mutates and rewrites a save document runs under
the lock for that save id, so concurrent requests against the same save are
serialized instead of silently overwriting each other. Different saves never
contend. Locks are handed out through ``saves.save_lock``, which only creates
one for a save that exists.
"""

import asyncio

_locks: dict[str, asyncio.Lock] = {}


def lock_for(save_id: str) -> asyncio.Lock:
    """Return the lock guarding ``save_id``, creating it on first use."""
    return _locks.setdefault(save_id, asyncio.Lock())


def held_lock_count() -> int:
    return len(_locks)


def forget_lock(save_id: str) -> None:
    """Drop the lock of a deleted save."""
    _locks.pop(save_id, None)


def reset_locks() -> None:
    _locks.clear()
