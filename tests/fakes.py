import asyncio
import json
from typing import List, Optional

from packages.isim_core.dto import LLMMessageDTO, LLMResponseDTO
from packages.isim_providers.llm.base import ILLMProvider
from packages.isim_roster.infrastructure.memory_storage import MemoryRosterStorage
from packages.isim_roster.store import RosterStore
from packages.isim_session.engine import InterviewSessionEngine

START_MS = 1_700_000_000_000

class FakeClock:
    """Manually advanced epoch-millisecond clock."""
    def __init__(self, start_ms: int = START_MS):
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: float):
        self.now += int(seconds * 1000)

class SequentialIds:
    def __init__(self, prefix: str = "cand"):
        self.prefix = prefix
        self.count = 0

    def __call__(self) -> str:
        self.count += 1
        return f"{self.prefix}-{self.count}"

class FakeLLM(ILLMProvider):
    """Returns canned content, or raises / hangs on demand."""
    def __init__(self, content: str = "", error: Optional[Exception] = None, delay: float = 0.0):
        self.content = content
        self.error = error
        self.delay = delay
        self.calls: List[List[LLMMessageDTO]] = []

    async def chat(self, messages, temperature=0.7, json_mode=True) -> LLMResponseDTO:
        self.calls.append(messages)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return LLMResponseDTO(content=self.content, finish_reason="stop")

def llm_questions_payload() -> str:
    return json.dumps({"questions": [
        {"difficulty": "Hard", "question": "Design a sharded cache."},
        {"difficulty": "easy", "question": "What is a closure?"},
        {"difficulty": "Medium", "question": "Explain event loop phases."},
        {"difficulty": "Easy", "question": "What is hoisting?"},
        {"difficulty": "Hard", "question": "Scale a websocket fan-out."},
        {"difficulty": "Medium", "question": "Compare REST and GraphQL."},
    ]})

def build_engine(clock: Optional[FakeClock] = None, storage=None):
    storage = storage or MemoryRosterStorage()
    store = RosterStore(storage)
    store.load()
    engine = InterviewSessionEngine(store, clock=clock or FakeClock(), id_factory=SequentialIds())
    return engine, store, storage

FULL_FIELDS = {"name": "Jane Smith", "email": "jane@example.com", "phone": "555-123-4567"}
