from functools import lru_cache
from typing import Optional

from packages.isim_core.config import ISIMConfig
from packages.isim_roster.infrastructure.file_storage import FileRosterStorage
from packages.isim_roster.repository import RosterStorage
from packages.isim_roster.store import RosterStore
from packages.isim_session.engine import InterviewSessionEngine
from packages.isim_service.concurrency import ConcurrencyManager
from packages.isim_service.interview_flow import IntervieweeFlow
from packages.isim_dashboard.engine import DashboardAggregator

# --- Providers (External Adapters) ---

from packages.isim_providers.llm.base import ILLMProvider
from packages.isim_providers.factory import (
    build_llm_provider,
    build_question_generator,
    build_summary_generator,
)
from packages.isim_providers.question.base import QuestionGenerator
from packages.isim_providers.resume.base import IResumeExtractor
from packages.isim_providers.resume.local_provider import LocalResumeExtractor
from packages.isim_providers.summary.base import SummaryGenerator

@lru_cache
def get_config() -> ISIMConfig:
    return ISIMConfig.load()

@lru_cache
def get_llm_provider() -> Optional[ILLMProvider]:
    """
    Singleton LLM client. None when no API key is configured.
    """
    return build_llm_provider(get_config())

@lru_cache
def get_question_generator() -> QuestionGenerator:
    return build_question_generator(get_config(), llm=get_llm_provider())

@lru_cache
def get_summary_generator() -> SummaryGenerator:
    return build_summary_generator(get_config(), llm=get_llm_provider())

@lru_cache
def get_resume_extractor() -> IResumeExtractor:
    return LocalResumeExtractor()

# --- Repositories (Persistence) ---

@lru_cache
def get_roster_storage() -> RosterStorage:
    """
    Singleton key-value storage (one JSON file per key under DATA_DIR).
    """
    return FileRosterStorage(base_dir=get_config().DATA_DIR)

@lru_cache
def get_roster_store() -> RosterStore:
    """
    Singleton Roster Store.
    Loaded once; must be shared across requests to keep the active pointer.
    """
    store = RosterStore(get_roster_storage(), namespace=get_config().STORAGE_NAMESPACE)
    store.load()
    return store

# --- Domain Services (Application Logic) ---

@lru_cache
def get_session_engine() -> InterviewSessionEngine:
    return InterviewSessionEngine(store=get_roster_store())

@lru_cache
def get_concurrency_manager() -> ConcurrencyManager:
    return ConcurrencyManager()

@lru_cache
def get_interview_flow() -> IntervieweeFlow:
    """
    Singleton flow. Commands share its active-session lock, so it cannot be
    rebuilt per request.
    """
    return IntervieweeFlow(
        engine=get_session_engine(),
        extractor=get_resume_extractor(),
        question_generator=get_question_generator(),
        summary_generator=get_summary_generator(),
        concurrency=get_concurrency_manager(),
    )

def get_dashboard_aggregator() -> DashboardAggregator:
    return DashboardAggregator()
