import asyncio
import json
from typing import List, Optional

from packages.isim_core.dto import LLMMessageDTO, SummaryResultDTO
from packages.isim_core.errors import GenerationError
from packages.isim_core.logging import get_logger
from packages.isim_providers.llm.base import ILLMProvider
from packages.isim_providers.prompts import SUMMARY_SYSTEM_PROMPT, SUMMARY_USER_PROMPT, format_transcript
from packages.isim_providers.summary.base import SummaryGenerator
from packages.isim_providers.summary.local_generators import HeuristicSummaryGenerator
from packages.isim_session.dto import Question

logger = get_logger("isim.providers.summary")

class LLMSummaryGenerator(SummaryGenerator):
    """
    Final score and summary from a language model.
    Falls back to the local heuristic on any failure.
    """
    def __init__(
        self,
        llm: ILLMProvider,
        fallback: Optional[SummaryGenerator] = None,
        timeout_sec: float = 30.0
    ):
        self.llm = llm
        self.fallback = fallback or HeuristicSummaryGenerator()
        self.timeout_sec = timeout_sec

    async def summarize(
        self,
        candidate_name: str,
        questions: List[Question],
        session_id: str = ""
    ) -> SummaryResultDTO:
        messages = [
            LLMMessageDTO(role="system", content=SUMMARY_SYSTEM_PROMPT),
            LLMMessageDTO(role="user", content=SUMMARY_USER_PROMPT.format(
                candidate_name=candidate_name or "the candidate",
                transcript=format_transcript(questions),
            )),
        ]
        try:
            response = await asyncio.wait_for(
                self.llm.chat(messages, temperature=0.5),
                timeout=self.timeout_sec
            )
            result = parse_summary(response.content)
            logger.info(f"Generated summary for session {session_id}. Score: {result.score}")
            return result
        except asyncio.TimeoutError:
            logger.warning(f"Summary generation timed out after {self.timeout_sec}s. Using heuristic.")
        except GenerationError as e:
            logger.warning(f"Summary generation returned unusable output: {e}. Using heuristic.")
        except Exception as e:
            logger.error(f"Summary generation failed: {e}. Using heuristic.", exc_info=True)
        return await self.fallback.summarize(candidate_name, questions, session_id)

def parse_summary(content: str) -> SummaryResultDTO:
    try:
        parsed = json.loads(content)
    except ValueError as e:
        raise GenerationError(f"Response is not valid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise GenerationError("Response is not an object")

    raw_score = parsed.get("score")
    if isinstance(raw_score, bool) or not isinstance(raw_score, (int, float)):
        raise GenerationError(f"Invalid score: {raw_score!r}")
    summary = parsed.get("summary")
    if not isinstance(summary, str) or not summary.strip():
        raise GenerationError("Summary text missing")

    return SummaryResultDTO(score=max(0, min(100, int(round(raw_score)))), summary=summary.strip())
