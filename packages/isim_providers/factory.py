from typing import Optional

from packages.isim_core.config import ISIMConfig
from packages.isim_core.logging import get_logger
from packages.isim_providers.llm.base import ILLMProvider
from packages.isim_providers.llm.openai_provider import OpenAIChatProvider
from packages.isim_providers.question.base import QuestionGenerator
from packages.isim_providers.question.llm_generator import LLMQuestionGenerator
from packages.isim_providers.question.static_generator import StaticQuestionGenerator
from packages.isim_providers.summary.base import SummaryGenerator
from packages.isim_providers.summary.llm_generator import LLMSummaryGenerator
from packages.isim_providers.summary.local_generators import HeuristicSummaryGenerator

logger = get_logger("isim.providers.factory")

def build_llm_provider(config: ISIMConfig) -> Optional[ILLMProvider]:
    if not config.OPENAI_API_KEY:
        logger.info("OPENAI_API_KEY not set. Using local generators only.")
        return None
    return OpenAIChatProvider(
        api_key=config.OPENAI_API_KEY,
        model=config.OPENAI_MODEL,
        timeout_sec=config.LLM_TIMEOUT_SEC,
    )

def build_question_generator(config: ISIMConfig, llm: Optional[ILLMProvider] = None) -> QuestionGenerator:
    llm = llm or build_llm_provider(config)
    if llm is None:
        return StaticQuestionGenerator()
    return LLMQuestionGenerator(llm, fallback=StaticQuestionGenerator(), timeout_sec=config.LLM_TIMEOUT_SEC)

def build_summary_generator(config: ISIMConfig, llm: Optional[ILLMProvider] = None) -> SummaryGenerator:
    llm = llm or build_llm_provider(config)
    if llm is None:
        return HeuristicSummaryGenerator()
    return LLMSummaryGenerator(llm, fallback=HeuristicSummaryGenerator(), timeout_sec=config.LLM_TIMEOUT_SEC)
