from typing import Dict, Optional
from packages.isim_roster.repository import RosterStorage

class MemoryRosterStorage(RosterStorage):
    """
    In-Memory implementation of RosterStorage.
    Used for local development and testing.
    """
    def __init__(self):
        self._store: Dict[str, str] = {}

    def read(self, key: str) -> Optional[str]:
        return self._store.get(key)

    def write(self, key: str, raw: str) -> None:
        self._store[key] = raw

    def delete(self, key: str) -> None:
        self._store.pop(key, None)
