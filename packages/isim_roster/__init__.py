from .repository import RosterStorage
from .store import RosterStore, RosterSnapshot, DEFAULT_NAMESPACE
from .migrations import CURRENT_VERSION, migrate
from .infrastructure.file_storage import FileRosterStorage
from .infrastructure.memory_storage import MemoryRosterStorage

__all__ = [
    "RosterStorage",
    "RosterStore",
    "RosterSnapshot",
    "DEFAULT_NAMESPACE",
    "CURRENT_VERSION",
    "migrate",
    "FileRosterStorage",
    "MemoryRosterStorage",
]
