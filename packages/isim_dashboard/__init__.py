from .engine import DashboardAggregator
from .dto import DashboardSummary, CandidateAnalytics, CandidateRow, TopPerformer
from .mapping import RecommendationMapper

__all__ = [
    "DashboardAggregator",
    "DashboardSummary",
    "CandidateAnalytics",
    "CandidateRow",
    "TopPerformer",
    "RecommendationMapper",
]
