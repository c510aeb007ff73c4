"""In-process per-key locks."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict, Hashable

from saved_searches.domain.interfaces import ISearchLock


@dataclass
class _Slot:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class KeyedLockRegistry(ISearchLock):
    """One asyncio lock per key, created on demand and dropped once nobody
    holds or waits for it.

    Only guards work inside a single process and event loop; run a single
    checker process per database.
    """

    def __init__(self):
        self._slots: Dict[Hashable, _Slot] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable, wait: bool = False) -> AsyncIterator[bool]:
        slot = self._slots.get(key)
        if slot is None:
            slot = self._slots[key] = _Slot()
        elif not wait and (slot.lock.locked() or slot.users):
            yield False
            return

        slot.users += 1
        try:
            await slot.lock.acquire()
            try:
                yield True
            finally:
                slot.lock.release()
        finally:
            slot.users -= 1
            if slot.users == 0 and self._slots.get(key) is slot:
                del self._slots[key]

    def is_held(self, key: Hashable) -> bool:
        slot = self._slots.get(key)
        return slot is not None and slot.lock.locked()

    def discard(self, key: Hashable) -> None:
        slot = self._slots.get(key)
        if slot is not None and slot.users == 0:
            del self._slots[key]

    def __len__(self) -> int:
        return len(self._slots)


__all__ = ["KeyedLockRegistry"]
