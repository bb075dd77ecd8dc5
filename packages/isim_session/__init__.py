from .state import SessionStatus, Difficulty, ContactField, MessageType, TIME_LIMITS, QUESTION_COUNT, DIFFICULTY_PLAN
from .dto import CandidateSession, ChatMessage, Question

__all__ = [
    "SessionStatus",
    "Difficulty",
    "ContactField",
    "MessageType",
    "TIME_LIMITS",
    "QUESTION_COUNT",
    "DIFFICULTY_PLAN",
    "CandidateSession",
    "ChatMessage",
    "Question",
]
