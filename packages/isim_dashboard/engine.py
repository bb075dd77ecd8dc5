import math
from typing import Dict, Iterable, List, Optional

from packages.isim_session.dto import CandidateSession
from packages.isim_session.state import SessionStatus, Difficulty
from packages.isim_dashboard.dto import (
    DashboardSummary, TopPerformer, CandidateAnalytics, CandidateRow
)
from packages.isim_dashboard.mapping import RecommendationMapper

SORT_KEYS = ("name", "score", "started_at")

def round_half_up(value: float) -> int:
    """Rounds .5 upwards, matching the dashboard's published figures."""
    return int(math.floor(value + 0.5))

class DashboardAggregator:
    """
    Read-only analytics over a roster snapshot.
    Pure functions: nothing here mutates a session.
    """

    @staticmethod
    def summarize(candidates: Iterable[CandidateSession]) -> DashboardSummary:
        candidates = list(candidates)
        completed = [c for c in candidates if c.status == SessionStatus.COMPLETED]

        # 1. Scores
        avg_score = 0
        if completed:
            avg_score = round_half_up(sum(c.score or 0 for c in completed) / len(completed))

        # 2. Time per question, zero-second entries excluded
        times = [
            q.time_taken
            for c in completed
            for q in c.questions
            if q.time_taken
        ]
        avg_time = round_half_up(sum(times) / len(times)) if times else 0

        # 3. Difficulty breakdown
        difficulty_stats: Dict[str, List[int]] = {d.value: [] for d in Difficulty}
        for c in completed:
            for q in c.questions:
                if q.has_answer:
                    difficulty_stats[q.difficulty.value].append(q.time_taken or 0)

        completion_rate = 0
        if candidates:
            completion_rate = round_half_up(len(completed) / len(candidates) * 100)

        # max() keeps the first of equal scores, i.e. roster order breaks ties
        top = max(completed, key=lambda c: c.score or 0) if completed else None

        return DashboardSummary(
            total_candidates=len(candidates),
            completed_count=len(completed),
            completion_rate=completion_rate,
            avg_score=avg_score,
            avg_time_per_question=avg_time,
            top_performer=TopPerformer(
                candidate_id=top.id, name=top.name, score=top.score or 0
            ) if top else None,
            difficulty_time_stats=difficulty_stats,
        )

    @staticmethod
    def analyze_candidate(session: CandidateSession) -> Optional[CandidateAnalytics]:
        """Per-candidate analytics. Only completed sessions are analysed."""
        if session.status != SessionStatus.COMPLETED:
            return None

        questions = session.questions
        total = len(questions)
        answered = sum(1 for q in questions if q.has_answer)

        perf_sum: Dict[str, int] = {d.value: 0 for d in Difficulty}
        perf_count: Dict[str, int] = {d.value: 0 for d in Difficulty}
        for q in questions:
            if q.has_answer:
                perf_count[q.difficulty.value] += 1
                perf_sum[q.difficulty.value] += RecommendationMapper.get_efficiency(
                    q.time_taken or 0, q.time_limit
                )

        difficulty_performance = {
            key: round_half_up(perf_sum[key] / perf_count[key]) if perf_count[key] else 0
            for key in perf_sum
        }

        # Unsubmitted questions count as zero usage
        ratio_sum = sum(
            q.time_taken / q.time_limit
            for q in questions
            if q.time_taken is not None and q.time_limit
        )
        avg_ratio = ratio_sum / total if total else 0.0
        time_management = round_half_up((1 - abs(avg_ratio - 0.75)) * 100)

        return CandidateAnalytics(
            answered=answered,
            total=total,
            answer_rate=round_half_up(answered / total * 100) if total else 0,
            difficulty_performance=difficulty_performance,
            time_management=time_management,
            recommendation=RecommendationMapper.get_tier(session.score or 0),
        )

    @staticmethod
    def list_candidates(
        candidates: Iterable[CandidateSession],
        status: Optional[SessionStatus] = None,
        sort_by: str = "started_at",
        descending: bool = False
    ) -> List[CandidateRow]:
        """Candidate table rows, optionally filtered by status and sorted."""
        if sort_by not in SORT_KEYS:
            raise ValueError(f"Unknown sort key: {sort_by}. Supported: {SORT_KEYS}")

        rows = [c for c in candidates if status is None or c.status == status]

        if sort_by == "name":
            rows.sort(key=lambda c: (c.name or "").casefold(), reverse=descending)
        elif sort_by == "score":
            rows.sort(key=lambda c: c.score or 0, reverse=descending)
        else:
            rows.sort(key=lambda c: c.started_at, reverse=descending)

        return [
            CandidateRow(
                candidate_id=c.id,
                name=c.name,
                email=c.email,
                phone=c.phone,
                status=c.status.value,
                score=c.score,
                started_at=c.started_at.isoformat(),
                completed_at=c.completed_at.isoformat() if c.completed_at else None,
            )
            for c in rows
        ]
