import asyncio
import json
from typing import Any, Dict, List, Optional

from packages.isim_core.dto import LLMMessageDTO
from packages.isim_core.errors import GenerationError
from packages.isim_core.logging import get_logger
from packages.isim_providers.llm.base import ILLMProvider
from packages.isim_providers.prompts import QUESTION_SYSTEM_PROMPT, QUESTION_USER_PROMPT
from packages.isim_providers.question.base import QuestionGenerator
from packages.isim_providers.question.static_generator import StaticQuestionGenerator
from packages.isim_session.dto import Question
from packages.isim_session.state import Difficulty, DIFFICULTY_PLAN, QUESTION_COUNT

logger = get_logger("isim.providers.question")

class LLMQuestionGenerator(QuestionGenerator):
    """
    Résumé-aware questions from a language model.
    Any failure (network, timeout, malformed response) falls back to the
    built-in set; generate() never raises.
    """
    def __init__(
        self,
        llm: ILLMProvider,
        fallback: Optional[QuestionGenerator] = None,
        timeout_sec: float = 30.0
    ):
        self.llm = llm
        self.fallback = fallback or StaticQuestionGenerator()
        self.timeout_sec = timeout_sec

    async def generate(self, resume_text: str) -> List[Question]:
        messages = [
            LLMMessageDTO(role="system", content=QUESTION_SYSTEM_PROMPT),
            LLMMessageDTO(role="user", content=QUESTION_USER_PROMPT.format(resume_text=resume_text)),
        ]
        try:
            response = await asyncio.wait_for(
                self.llm.chat(messages, temperature=0.7),
                timeout=self.timeout_sec
            )
            questions = parse_questions(response.content)
            logger.info("Generated question set from language model")
            return questions
        except asyncio.TimeoutError:
            logger.warning(f"Question generation timed out after {self.timeout_sec}s. Using built-in set.")
        except GenerationError as e:
            logger.warning(f"Question generation returned unusable output: {e}. Using built-in set.")
        except Exception as e:
            logger.error(f"Question generation failed: {e}. Using built-in set.", exc_info=True)
        return await self.fallback.generate(resume_text)

def parse_questions(content: str) -> List[Question]:
    """
    Validate a model response and normalise it to the canonical plan:
    ids 1..6, two questions per difficulty, fixed time limits.
    """
    try:
        parsed = json.loads(content)
    except ValueError as e:
        raise GenerationError(f"Response is not valid JSON: {e}") from e

    # Both a bare array and {"questions": [...]} are accepted
    items = parsed.get("questions") if isinstance(parsed, dict) else parsed
    if not isinstance(items, list):
        raise GenerationError("Response has no question list")
    if len(items) != QUESTION_COUNT:
        raise GenerationError(f"Expected {QUESTION_COUNT} questions, got {len(items)}")

    by_difficulty: Dict[Difficulty, List[str]] = {d: [] for d in Difficulty}
    for item in items:
        difficulty, text = _read_item(item)
        by_difficulty[difficulty].append(text)

    questions = []
    for position, difficulty in enumerate(DIFFICULTY_PLAN, start=1):
        bucket = by_difficulty[difficulty]
        if not bucket:
            raise GenerationError(
                "Difficulty plan not met",
                details={d.value: len(v) for d, v in by_difficulty.items()}
            )
        questions.append(Question.create(position, difficulty, bucket.pop(0)))
    return questions

def _read_item(item: Any):
    if not isinstance(item, dict):
        raise GenerationError("Question entry is not an object")
    text = item.get("question")
    if not isinstance(text, str) or not text.strip():
        raise GenerationError("Question entry has no text")
    raw_difficulty = str(item.get("difficulty", "")).strip().capitalize()
    try:
        difficulty = Difficulty(raw_difficulty)
    except ValueError:
        raise GenerationError(f"Unknown difficulty: {item.get('difficulty')!r}")
    return difficulty, text.strip()
