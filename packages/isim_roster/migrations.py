"""
Schema migrations for the persisted roster payload.

Version 1 is the legacy layout that kept two copies of the active session:
    {"candidates": [...], "currentCandidate": {...} | null}
Version 2 keeps a single copy and points at it by id:
    {"version": 2, "candidates": [...], "currentCandidateId": "..." | null}
"""
from typing import Any, Callable, Dict

from packages.isim_core.errors import PersistenceCorruptionError
from packages.isim_core.logging import get_logger

logger = get_logger("isim.roster.migrations")

CURRENT_VERSION = 2
LEGACY_VERSION = 1

Payload = Dict[str, Any]

def _v1_to_v2(payload: Payload) -> Payload:
    candidates = payload.get("candidates") or []
    if not isinstance(candidates, list):
        raise PersistenceCorruptionError("Legacy payload 'candidates' is not a list")

    migrated = [c for c in candidates if isinstance(c, dict)]
    current = payload.get("currentCandidate")
    current_id = None

    if isinstance(current, dict) and current.get("id") is not None:
        current_id = str(current["id"])
        # The active copy is the freshest of the two; it replaces the roster entry.
        for i, candidate in enumerate(migrated):
            if str(candidate.get("id")) == current_id:
                migrated[i] = current
                break
        else:
            migrated.append(current)

    return {
        "version": 2,
        "candidates": migrated,
        "currentCandidateId": current_id,
    }

MIGRATIONS: Dict[int, Callable[[Payload], Payload]] = {
    1: _v1_to_v2,
}

def detect_version(payload: Payload) -> int:
    """
    Read the schema version. Payloads written without one are legacy (v1).
    """
    version = payload.get("version")
    if version is None:
        persist_meta = payload.get("_persist")
        if isinstance(persist_meta, dict):
            version = persist_meta.get("version")
    if version is None:
        return LEGACY_VERSION
    if isinstance(version, bool) or not isinstance(version, int):
        raise PersistenceCorruptionError(f"Invalid schema version: {version!r}")
    return version

def migrate(payload: Payload) -> Payload:
    """
    Bring a payload up to CURRENT_VERSION.
    Raises PersistenceCorruptionError when no migration path exists; the
    caller degrades to an empty roster.
    """
    version = detect_version(payload)

    if version > CURRENT_VERSION:
        raise PersistenceCorruptionError(
            f"Stored schema version {version} is newer than supported {CURRENT_VERSION}",
            details={"version": version}
        )

    while version < CURRENT_VERSION:
        step = MIGRATIONS.get(version)
        if step is None:
            raise PersistenceCorruptionError(
                f"No migration path from schema version {version}",
                details={"version": version}
            )
        logger.info(f"Migrating roster payload from v{version}")
        payload = step(payload)
        version = payload["version"]

    return payload
