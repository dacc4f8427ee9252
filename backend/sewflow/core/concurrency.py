"""Per-order serialization for the lifecycle operations.

Cutting, distribution and split completion read an order, compute a new
balance and write it back.  Two of those running against the same order would
both start from the same snapshot, so every mutation of one order runs under
that order's lock.  Locks are process-local; a multi-process deployment relies
on row locks and ``expected_updated_at`` checks instead.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator

import anyio


@dataclass
class _OrderLock:
    lock: anyio.Lock = field(default_factory=anyio.Lock)
    users: int = 0  # holder plus waiters


_order_locks: dict[str, _OrderLock] = {}


@asynccontextmanager
async def order_lock(order_id: str) -> AsyncIterator[None]:
    """Hold the lock of ``order_id`` for the duration of the block.

    The registry entry is dropped once nobody holds or waits for it.
    """

    entry = _order_locks.get(order_id)
    if entry is None:
        entry = _order_locks[order_id] = _OrderLock()
    entry.users += 1
    try:
        async with entry.lock:
            yield
    finally:
        entry.users -= 1
        if entry.users == 0 and _order_locks.get(order_id) is entry:
            del _order_locks[order_id]
