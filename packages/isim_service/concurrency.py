import asyncio
from contextlib import asynccontextmanager
from typing import Dict

class ConcurrencyManager:
    """
    Serialises multi-step commands per resource on the event loop.
    A command holds the lock across its awaits (question generation,
    summary generation). A second command that cannot acquire the lock
    within `timeout` raises BlockingIOError instead of waiting forever.
    """
    def __init__(self, timeout: float = 5.0):
        self.timeout = timeout
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock_for(self, resource_id: str) -> asyncio.Lock:
        lock = self._locks.get(resource_id)
        if lock is None:
            lock = self._locks[resource_id] = asyncio.Lock()
        return lock

    def is_locked(self, resource_id: str) -> bool:
        return self._lock_for(resource_id).locked()

    @asynccontextmanager
    async def acquire_lock(self, resource_id: str):
        lock = self._lock_for(resource_id)
        try:
            await asyncio.wait_for(lock.acquire(), timeout=self.timeout)
        except asyncio.TimeoutError:
            raise BlockingIOError(f"Resource {resource_id} is currently locked by another command.")
        try:
            yield
        finally:
            lock.release()
