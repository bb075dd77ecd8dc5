import json
from typing import Dict, List, Optional

from pydantic import Field, ValidationError

from packages.isim_core.dto import PersistedModel
from packages.isim_core.errors import PersistenceCorruptionError
from packages.isim_core.logging import get_logger
from packages.isim_session.dto import CandidateSession
from .migrations import CURRENT_VERSION, migrate
from .repository import RosterStorage

logger = get_logger("isim.roster")

DEFAULT_NAMESPACE = "persist:root"

class RosterSnapshot(PersistedModel):
    """
    Persisted layout of the roster:
    {version, candidates, currentCandidateId}
    """
    version: int = CURRENT_VERSION
    candidates: List[CandidateSession] = Field(default_factory=list)
    current_candidate_id: Optional[str] = None

class RosterStore:
    """
    Durable collection of every Candidate Session, plus the active pointer.

    Sessions live in one id -> session mapping; "active" is only an id into it,
    so the active session and its roster entry are always the same object.
    Persistence is explicit: load() at start-up, save() after each mutation.
    """
    def __init__(self, storage: RosterStorage, namespace: str = DEFAULT_NAMESPACE):
        self.storage = storage
        self.namespace = namespace
        self._sessions: Dict[str, CandidateSession] = {}
        self._current_id: Optional[str] = None

    # --- Queries ---

    def find_by_id(self, session_id: str) -> Optional[CandidateSession]:
        return self._sessions.get(session_id)

    def list_all(self) -> List[CandidateSession]:
        """Sessions in roster (creation) order."""
        return list(self._sessions.values())

    @property
    def active(self) -> Optional[CandidateSession]:
        if self._current_id is None:
            return None
        return self._sessions.get(self._current_id)

    @property
    def current_candidate_id(self) -> Optional[str]:
        return self._current_id

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    # --- Mutations ---

    def upsert(self, session: CandidateSession) -> None:
        """Insert a new session or replace the entry with the same id."""
        self._sessions[session.id] = session

    def set_active(self, session_id: str) -> bool:
        if session_id not in self._sessions:
            logger.warning(f"Cannot activate unknown session {session_id}")
            return False
        self._current_id = session_id
        return True

    def clear_active(self) -> None:
        self._current_id = None

    def reset_all(self) -> None:
        """Discard every session and the active pointer. Irreversible."""
        count = len(self._sessions)
        self._sessions = {}
        self._current_id = None
        self.save()
        logger.warning(f"Roster reset. {count} session(s) discarded.")

    # --- Persistence boundary ---

    def dump_snapshot(self) -> RosterSnapshot:
        return RosterSnapshot(
            version=CURRENT_VERSION,
            candidates=self.list_all(),
            current_candidate_id=self._current_id,
        )

    def restore_snapshot(self, snapshot: RosterSnapshot) -> None:
        sessions: Dict[str, CandidateSession] = {}
        for candidate in snapshot.candidates:
            if candidate.id in sessions:
                logger.warning(f"Duplicate session id {candidate.id} in snapshot. Keeping first entry.")
                continue
            sessions[candidate.id] = candidate

        current_id = snapshot.current_candidate_id
        if current_id is not None and current_id not in sessions:
            logger.warning(f"Active session {current_id} missing from roster. Clearing pointer.")
            current_id = None

        self._sessions = sessions
        self._current_id = current_id

    def save(self) -> None:
        """
        Write the snapshot to storage.
        Storage failures are logged; the in-memory state stays authoritative.
        """
        raw = json.dumps(self.dump_snapshot().to_storage(), ensure_ascii=False)
        try:
            self.storage.write(self.namespace, raw)
        except OSError as e:
            logger.error(f"Failed to persist roster under '{self.namespace}': {e}")

    def load(self) -> None:
        """
        Restore the roster from storage.
        Missing, unreadable or corrupted payloads yield an empty roster.
        """
        try:
            raw = self.storage.read(self.namespace)
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read roster under '{self.namespace}': {e}")
            raw = None

        if raw is None:
            self.restore_snapshot(RosterSnapshot())
            logger.info("No stored roster found. Starting empty.")
            return

        try:
            snapshot = self.decode(raw)
        except PersistenceCorruptionError as e:
            logger.warning(f"Stored roster discarded: {e}")
            snapshot = RosterSnapshot()

        self.restore_snapshot(snapshot)
        logger.info(f"Roster loaded. {len(self._sessions)} session(s), active={self._current_id}")

    @staticmethod
    def decode(raw: str) -> RosterSnapshot:
        """Parse, migrate and validate a stored payload."""
        try:
            payload = json.loads(raw)
        except ValueError as e:
            raise PersistenceCorruptionError(f"Payload is not valid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise PersistenceCorruptionError(f"Payload has wrong shape: {type(payload).__name__}")

        payload = migrate(payload)

        try:
            return RosterSnapshot.model_validate(payload)
        except ValidationError as e:
            raise PersistenceCorruptionError(
                "Payload failed schema validation",
                details={"errors": e.error_count()}
            ) from e
