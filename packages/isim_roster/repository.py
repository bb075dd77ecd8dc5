from abc import ABC, abstractmethod
from typing import Optional

class RosterStorage(ABC):
    """
    Interface for durable key-value storage of the roster payload.
    Plays the role of the browser's local storage: one string per key.
    """
    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """Return the raw payload stored under key, or None if absent."""
        pass

    @abstractmethod
    def write(self, key: str, raw: str) -> None:
        """Replace the payload stored under key."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the payload stored under key. Missing keys are ignored."""
        pass
