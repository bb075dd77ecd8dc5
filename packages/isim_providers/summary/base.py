from abc import ABC, abstractmethod
from typing import List
from packages.isim_core.dto import SummaryResultDTO
from packages.isim_session.dto import Question

class SummaryGenerator(ABC):
    @abstractmethod
    async def summarize(
        self,
        candidate_name: str,
        questions: List[Question],
        session_id: str = ""
    ) -> SummaryResultDTO:
        """
        Score (0-100) and summarise a finished question set.
        Must never raise: failures resolve to a local heuristic.
        """
        pass
