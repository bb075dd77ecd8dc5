import os
import re
from typing import Optional

from packages.isim_core.logging import get_logger
from packages.isim_roster.repository import RosterStorage

logger = get_logger("isim.roster.storage")

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")

class FileRosterStorage(RosterStorage):
    """
    File-based implementation of RosterStorage.
    Each key is stored as a single JSON file inside base_dir.
    Writes go to a temporary file first and are swapped in with os.replace.
    """
    def __init__(self, base_dir: str = "data"):
        self.base_dir = base_dir
        self._ensure_dir()

    def _ensure_dir(self):
        if not os.path.exists(self.base_dir):
            try:
                os.makedirs(self.base_dir, exist_ok=True)
            except OSError as e:
                # write() fails explicitly later if the directory is still missing
                logger.error(f"Failed to create directory {self.base_dir}: {e}")

    def path_for(self, key: str) -> str:
        # Format: persist_root.json for key "persist:root"
        filename = _UNSAFE_CHARS.sub("_", key) + ".json"
        return os.path.join(self.base_dir, filename)

    def read(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not os.path.exists(path):
            return None
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    def write(self, key: str, raw: str) -> None:
        self._ensure_dir()
        path = self.path_for(key)
        tmp_path = f"{path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(raw)
        os.replace(tmp_path, path)

    def delete(self, key: str) -> None:
        path = self.path_for(key)
        if os.path.exists(path):
            os.remove(path)
