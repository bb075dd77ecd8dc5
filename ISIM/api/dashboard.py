from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi import status as http_status

from ISIM.api.dependencies import get_dashboard_aggregator, get_roster_store
from ISIM.api.schemas import (
    CandidateDetailResponse,
    CandidateListResponse,
    map_message,
    map_question,
)
from packages.isim_dashboard.dto import DashboardSummary
from packages.isim_dashboard.engine import DashboardAggregator, SORT_KEYS
from packages.isim_roster.store import RosterStore
from packages.isim_session.state import SessionStatus

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])

@router.get("", response_model=DashboardSummary)
def get_summary(
    store: RosterStore = Depends(get_roster_store),
    aggregator: DashboardAggregator = Depends(get_dashboard_aggregator)
):
    """
    Roster-wide analytics. Recomputed from the roster on every call.
    """
    return aggregator.summarize(store.list_all())

@router.get("/candidates", response_model=CandidateListResponse)
def list_candidates(
    status: Optional[SessionStatus] = Query(None, description="Filter by session status"),
    sort_by: str = Query("started_at", description=f"One of {', '.join(SORT_KEYS)}"),
    descending: bool = Query(False),
    store: RosterStore = Depends(get_roster_store),
    aggregator: DashboardAggregator = Depends(get_dashboard_aggregator)
):
    try:
        rows = aggregator.list_candidates(store.list_all(), status=status, sort_by=sort_by, descending=descending)
    except ValueError as e:
        raise HTTPException(status_code=http_status.HTTP_400_BAD_REQUEST, detail=str(e))
    return CandidateListResponse(candidates=rows)

@router.get("/candidates/{candidate_id}", response_model=CandidateDetailResponse)
def get_candidate(
    candidate_id: str,
    store: RosterStore = Depends(get_roster_store),
    aggregator: DashboardAggregator = Depends(get_dashboard_aggregator)
):
    """
    Full record of one candidate.
    Analytics are only present for completed sessions.
    """
    session = store.find_by_id(candidate_id)
    if session is None:
        raise HTTPException(status_code=http_status.HTTP_404_NOT_FOUND, detail="Candidate not found")

    return CandidateDetailResponse(
        candidate_id=session.id,
        name=session.name,
        email=session.email,
        phone=session.phone,
        status=session.status.value,
        score=session.score,
        summary=session.summary,
        questions=[map_question(q) for q in session.questions],
        messages=[map_message(m) for m in session.messages],
        started_at=session.started_at,
        completed_at=session.completed_at,
        analytics=aggregator.analyze_candidate(session),
    )
