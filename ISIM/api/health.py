from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from ISIM.api.dependencies import get_config, get_roster_store
from packages.isim_core.config import ISIMConfig
from packages.isim_roster.store import RosterStore

router = APIRouter()

@router.get("/health")
async def health_check(
    config: ISIMConfig = Depends(get_config),
    store: RosterStore = Depends(get_roster_store)
):
    """
    Server liveness check.
    Returns status, version, roster size and current timestamp.
    """
    return {
        "status": "ok",
        "version": config.VERSION,
        "candidates": len(store),
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
