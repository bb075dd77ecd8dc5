from typing import List

from packages.isim_providers.question.base import QuestionGenerator
from packages.isim_providers.sample_data import get_builtin_questions
from packages.isim_session.dto import Question

class StaticQuestionGenerator(QuestionGenerator):
    """
    Built-in question set.
    Serves demo sessions and is the fallback of every other generator.
    """
    async def generate(self, resume_text: str) -> List[Question]:
        return get_builtin_questions()
