from datetime import datetime, timezone
from typing import List, Optional

from pydantic import Field

from packages.isim_core.dto import PersistedModel
from .state import SessionStatus, Difficulty, ContactField, MessageType, TIME_LIMITS

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

class ChatMessage(PersistedModel):
    """
    One transcript entry. Append-only once recorded.
    """
    type: MessageType
    content: str
    timestamp: datetime = Field(default_factory=utcnow)

class Question(PersistedModel):
    """
    Interview question record.
    `answer` and `time_taken` are recorded together, exactly once.
    """
    id: int = Field(..., description="1-based position in the question set")
    difficulty: Difficulty
    question: str
    time_limit: int = Field(..., description="Seconds allowed for this question")
    answer: Optional[str] = None
    time_taken: Optional[int] = Field(default=None, description="Seconds spent, set on submission")

    @classmethod
    def create(cls, position: int, difficulty: Difficulty, text: str) -> "Question":
        return cls(
            id=position,
            difficulty=difficulty,
            question=text,
            time_limit=TIME_LIMITS[difficulty],
        )

    @property
    def is_answered(self) -> bool:
        """Submission recorded (possibly with an empty answer)."""
        return self.time_taken is not None

    @property
    def has_answer(self) -> bool:
        """Submission recorded with non-empty text."""
        return bool(self.answer)

class CandidateSession(PersistedModel):
    """
    One interview attempt.
    Persisted as part of the roster snapshot (camelCase on disk).
    """
    id: str
    name: str = ""
    email: str = ""
    phone: str = ""
    resume_text: str = ""
    status: SessionStatus = SessionStatus.INFO_COLLECTION
    messages: List[ChatMessage] = Field(default_factory=list)
    questions: List[Question] = Field(default_factory=list)
    current_question_index: int = -1
    current_answer: str = ""
    timer_start_time: Optional[int] = Field(default=None, description="Epoch milliseconds")
    score: Optional[int] = None
    summary: str = ""
    missing_fields: List[ContactField] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=utcnow)
    completed_at: Optional[datetime] = None

    @property
    def current_question(self) -> Optional[Question]:
        if 0 <= self.current_question_index < len(self.questions):
            return self.questions[self.current_question_index]
        return None

    @property
    def answered_count(self) -> int:
        return sum(1 for q in self.questions if q.has_answer)

    @property
    def is_pending(self) -> bool:
        return self.status != SessionStatus.COMPLETED

    @property
    def all_questions_submitted(self) -> bool:
        return bool(self.questions) and self.current_question_index >= len(self.questions)

    @property
    def progress_percent(self) -> int:
        if not self.questions or self.current_question_index < 0:
            return 0
        return int(self.current_question_index / len(self.questions) * 100 + 0.5)
