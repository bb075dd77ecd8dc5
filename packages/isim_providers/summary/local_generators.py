import hashlib
import math
from typing import List

from packages.isim_core.dto import SummaryResultDTO
from packages.isim_providers.summary.base import SummaryGenerator
from packages.isim_session.dto import Question

LONG_ANSWER_CHARS = 50
LONG_ANSWER_POINTS = 15
SHORT_ANSWER_POINTS = 10
SAMPLE_SCORE_CAP = 85

SAMPLE_SUMMARY_TEMPLATES = [
    "{first_name} completed {answered} out of {total} questions. Demonstrated solid understanding of React fundamentals and full-stack concepts. Strong potential for the role.",
    "Good grasp of JavaScript and React concepts. Answered questions thoughtfully with {answered}/{total} responses provided. Shows promise for full-stack development.",
    "Candidate showed familiarity with modern web technologies. Completed {answered}/{total} questions. Would benefit from more hands-on experience with advanced React patterns.",
]

class HeuristicSummaryGenerator(SummaryGenerator):
    """
    Deterministic local scoring, weighted by answer presence and length.
    Fallback for the language-model summary.
    """
    async def summarize(
        self,
        candidate_name: str,
        questions: List[Question],
        session_id: str = ""
    ) -> SummaryResultDTO:
        total = 0
        for q in questions:
            if not q.answer:
                continue
            total += LONG_ANSWER_POINTS if len(q.answer) > LONG_ANSWER_CHARS else SHORT_ANSWER_POINTS

        answered = sum(1 for q in questions if q.has_answer)
        name = candidate_name or "The candidate"
        return SummaryResultDTO(
            score=min(total, 100),
            summary=f"{name} completed the interview. Answered {answered} out of {len(questions)} questions.",
        )

class SampleSummaryGenerator(SummaryGenerator):
    """
    Demo-mode summary: completion based score, capped.
    The template is picked by a stable hash of the session id.
    """
    async def summarize(
        self,
        candidate_name: str,
        questions: List[Question],
        session_id: str = ""
    ) -> SummaryResultDTO:
        total = len(questions)
        answered = sum(1 for q in questions if q.has_answer)
        completion = math.floor(answered / total * 100 + 0.5) if total else 0

        template = SAMPLE_SUMMARY_TEMPLATES[pick_index(session_id, len(SAMPLE_SUMMARY_TEMPLATES))]
        first_name = candidate_name.split()[0] if candidate_name and candidate_name.split() else "The candidate"
        return SummaryResultDTO(
            score=min(completion, SAMPLE_SCORE_CAP),
            summary=template.format(first_name=first_name, answered=answered, total=total),
        )

def pick_index(key: str, size: int) -> int:
    digest = hashlib.sha256((key or "").encode("utf-8")).hexdigest()
    return int(digest, 16) % size
