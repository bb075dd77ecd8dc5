from typing import Dict, List, Optional
from pydantic import BaseModel, Field

class TopPerformer(BaseModel):
    """
    Completed session with the highest score.
    """
    candidate_id: str
    name: str
    score: int

class DashboardSummary(BaseModel):
    """
    Roster-wide analytics. Recomputed on every read.
    """
    total_candidates: int = Field(..., description="Sessions in the roster")
    completed_count: int = Field(..., description="Sessions with status completed")
    completion_rate: int = Field(..., description="Percentage of completed sessions (0-100)")
    avg_score: int = Field(..., description="Mean score of completed sessions")
    avg_time_per_question: int = Field(..., description="Mean seconds per submitted question")
    top_performer: Optional[TopPerformer] = None
    difficulty_time_stats: Dict[str, List[int]] = Field(
        default_factory=dict,
        description="Seconds taken per answered question, grouped by difficulty"
    )

class CandidateAnalytics(BaseModel):
    """
    Detailed analytics for one completed session.
    """
    answered: int
    total: int
    answer_rate: int = Field(..., description="Percentage of questions with a non-empty answer")
    difficulty_performance: Dict[str, int] = Field(..., description="Average efficiency per difficulty")
    time_management: int = Field(..., description="Closeness of time usage to 75% of the limits")
    recommendation: str

class CandidateRow(BaseModel):
    """
    One line of the interviewer's candidate table.
    """
    candidate_id: str
    name: str
    email: str
    phone: str
    status: str
    score: Optional[int] = None
    started_at: str
    completed_at: Optional[str] = None
