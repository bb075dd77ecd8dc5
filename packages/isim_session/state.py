from enum import Enum
from typing import Dict, List

class SessionStatus(str, Enum):
    """
    Candidate Session Status.
    Monotonic: INFO_COLLECTION -> INTERVIEWING -> COMPLETED.
    """
    INFO_COLLECTION = "info_collection"
    INTERVIEWING = "interviewing"
    COMPLETED = "completed"

    @classmethod
    def can_transition(cls, src: "SessionStatus", dst: "SessionStatus") -> bool:
        """Only the two forward edges exist. No state is re-enterable."""
        return (src, dst) in _ALLOWED_TRANSITIONS

_ALLOWED_TRANSITIONS = {
    (SessionStatus.INFO_COLLECTION, SessionStatus.INTERVIEWING),
    (SessionStatus.INTERVIEWING, SessionStatus.COMPLETED),
}

class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

class ContactField(str, Enum):
    """
    Contact fields collected before the interview.
    Declaration order is the prompting order.
    """
    NAME = "name"
    EMAIL = "email"
    PHONE = "phone"

class MessageType(str, Enum):
    BOT = "bot"
    USER = "user"

# Seconds allowed per difficulty
TIME_LIMITS: Dict[Difficulty, int] = {
    Difficulty.EASY: 20,
    Difficulty.MEDIUM: 60,
    Difficulty.HARD: 120,
}

QUESTION_COUNT = 6

# Position -> difficulty for a question set
DIFFICULTY_PLAN: List[Difficulty] = [
    Difficulty.EASY, Difficulty.EASY,
    Difficulty.MEDIUM, Difficulty.MEDIUM,
    Difficulty.HARD, Difficulty.HARD,
]
