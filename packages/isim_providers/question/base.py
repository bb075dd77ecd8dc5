from abc import ABC, abstractmethod
from typing import List
from packages.isim_session.dto import Question

class QuestionGenerator(ABC):
    @abstractmethod
    async def generate(self, resume_text: str) -> List[Question]:
        """
        Generate the interview question set for a résumé.
        Must return exactly 6 questions (2 Easy, 2 Medium, 2 Hard) and
        never raise: failures resolve to a deterministic built-in set.
        """
        pass
