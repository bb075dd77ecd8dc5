from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, Field

from packages.isim_dashboard.dto import CandidateAnalytics, CandidateRow
from packages.isim_session.dto import CandidateSession

# --- Request Schemas ---

class MessageRequest(BaseModel):
    text: str = Field(..., description="Chat input of the candidate")

class ScratchAnswerRequest(BaseModel):
    text: str = ""

class AnswerSubmitRequest(BaseModel):
    text: Optional[str] = Field(default=None, description="Falls back to the scratch answer when omitted")

# --- Response Schemas ---

class MessageSchema(BaseModel):
    type: str
    content: str
    timestamp: datetime

class QuestionSchema(BaseModel):
    id: int
    difficulty: str
    question: str
    time_limit: int
    answer: Optional[str] = None
    time_taken: Optional[int] = None

class SessionResponse(BaseModel):
    candidate_id: str
    name: str
    email: str
    phone: str
    status: str
    missing_fields: List[str]
    messages: List[MessageSchema]
    current_question_index: int
    total_questions: int
    current_question: Optional[QuestionSchema] = None
    current_answer: str = ""
    remaining_seconds: Optional[int] = None
    progress_percent: int = 0
    score: Optional[int] = None
    summary: str = ""
    started_at: datetime
    completed_at: Optional[datetime] = None

class ActiveSessionResponse(BaseModel):
    session: Optional[SessionResponse] = None

class CommandResponse(BaseModel):
    accepted: bool
    session: Optional[SessionResponse] = None

class WelcomeBackResponse(BaseModel):
    pending: bool
    candidate_id: Optional[str] = None
    name: Optional[str] = None
    status: Optional[str] = None

class CandidateListResponse(BaseModel):
    candidates: List[CandidateRow]

class CandidateDetailResponse(BaseModel):
    candidate_id: str
    name: str
    email: str
    phone: str
    status: str
    score: Optional[int] = None
    summary: str = ""
    questions: List[QuestionSchema]
    messages: List[MessageSchema]
    started_at: datetime
    completed_at: Optional[datetime] = None
    analytics: Optional[CandidateAnalytics] = None

def map_session(session: CandidateSession, remaining_seconds: Optional[int] = None) -> SessionResponse:
    current = session.current_question
    return SessionResponse(
        candidate_id=session.id,
        name=session.name,
        email=session.email,
        phone=session.phone,
        status=session.status.value,
        missing_fields=[f.value for f in session.missing_fields],
        messages=[map_message(m) for m in session.messages],
        current_question_index=session.current_question_index,
        total_questions=len(session.questions),
        current_question=map_question(current) if current else None,
        current_answer=session.current_answer,
        remaining_seconds=remaining_seconds,
        progress_percent=session.progress_percent,
        score=session.score,
        summary=session.summary,
        started_at=session.started_at,
        completed_at=session.completed_at,
    )

def map_message(message) -> MessageSchema:
    return MessageSchema(type=message.type.value, content=message.content, timestamp=message.timestamp)

def map_question(question) -> QuestionSchema:
    return QuestionSchema(
        id=question.id,
        difficulty=question.difficulty.value,
        question=question.question,
        time_limit=question.time_limit,
        answer=question.answer,
        time_taken=question.time_taken,
    )
