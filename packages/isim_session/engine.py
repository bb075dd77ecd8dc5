import threading
import uuid
from datetime import datetime, timezone
from typing import Callable, Mapping, Optional, Sequence, Union

from packages.isim_core.errors import InvalidTransitionError
from packages.isim_core.logging import get_logger
from packages.isim_roster.store import RosterStore
from .dto import CandidateSession, ChatMessage, Question
from .state import SessionStatus, ContactField, MessageType, QUESTION_COUNT
from . import timer
from .timer import Clock

logger = get_logger("isim.session")

class InterviewSessionEngine:
    """
    Finite-state machine for Candidate Sessions.

    Operates on the active session of a RosterStore. Every mutating
    operation runs under one lock, mutates in memory, then persists.

    Two kinds of misuse are distinguished:
      - racy or unguarded intents (double submit, no active session, ...)
        are rejected as no-ops and return False;
      - lifecycle misuse (beginning twice, completing with questions
        pending, malformed input) raises InvalidTransitionError.
    """
    def __init__(
        self,
        store: RosterStore,
        clock: Clock = timer.now_ms,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4())
    ):
        self.store = store
        self.clock = clock
        self.id_factory = id_factory
        self._lock = threading.RLock()

    @property
    def active(self) -> Optional[CandidateSession]:
        return self.store.active

    # --- Lifecycle ---

    def create_session(
        self,
        fields: Mapping[str, Optional[str]],
        resume_text: str
    ) -> CandidateSession:
        """
        Build a session from extracted résumé fields, add it to the roster
        and make it active. Status starts at INFO_COLLECTION; when nothing is
        missing the caller proceeds straight to begin_interview().
        """
        if not isinstance(fields, Mapping):
            raise InvalidTransitionError("Extracted fields must be a mapping")
        if not isinstance(resume_text, str):
            raise InvalidTransitionError("Resume text must be a string")

        values = {}
        for field in ContactField:
            value = fields.get(field.value)
            if value is not None and not isinstance(value, str):
                raise InvalidTransitionError(
                    f"Field '{field.value}' must be a string",
                    details={"field": field.value}
                )
            values[field.value] = (value or "").strip()

        with self._lock:
            session = CandidateSession(
                id=self.id_factory(),
                name=values["name"],
                email=values["email"],
                phone=values["phone"],
                resume_text=resume_text,
                status=SessionStatus.INFO_COLLECTION,
                missing_fields=[f for f in ContactField if not values[f.value]],
                started_at=self._now_dt(),
            )
            if session.id in self.store:
                raise InvalidTransitionError(f"Session id {session.id} already exists")

            self.store.upsert(session)
            self.store.set_active(session.id)
            self._commit()

        logger.info(f"Created session {session.id}. Missing fields: {[f.value for f in session.missing_fields]}")
        return session

    def begin_interview(self, questions: Sequence[Question]) -> None:
        """Transition INFO_COLLECTION -> INTERVIEWING with a fixed question set."""
        with self._lock:
            session = self.active
            if session is None:
                raise InvalidTransitionError("No active session to begin")
            self._require_transition(session, SessionStatus.INTERVIEWING)
            if session.missing_fields:
                raise InvalidTransitionError(
                    f"Session {session.id} still has missing fields",
                    details={"missing_fields": [f.value for f in session.missing_fields]}
                )
            if len(questions) != QUESTION_COUNT:
                raise InvalidTransitionError(
                    f"Interview requires exactly {QUESTION_COUNT} questions, got {len(questions)}"
                )

            session.questions = [
                q.model_copy(update={"id": i + 1, "answer": None, "time_taken": None}, deep=True)
                for i, q in enumerate(questions)
            ]
            session.status = SessionStatus.INTERVIEWING
            session.current_question_index = 0
            session.current_answer = ""
            session.timer_start_time = None
            self._commit()

        logger.info(f"Session {session.id} started interviewing")

    def complete_interview(self, score: int, summary: str) -> None:
        """Transition INTERVIEWING -> COMPLETED. Score and summary are set once."""
        with self._lock:
            session = self.active
            if session is None:
                raise InvalidTransitionError("No active session to complete")
            self._require_transition(session, SessionStatus.COMPLETED)
            if not session.all_questions_submitted:
                raise InvalidTransitionError(
                    f"Session {session.id} still has questions pending",
                    details={"current_question_index": session.current_question_index}
                )

            session.score = max(0, min(100, int(score)))
            session.summary = summary or ""
            session.status = SessionStatus.COMPLETED
            session.completed_at = self._now_dt()
            session.timer_start_time = None
            self._commit()

        logger.info(f"Session {session.id} completed. Score: {session.score}")

    def deactivate_session(self) -> None:
        """Clear the active pointer. The session stays in the roster."""
        with self._lock:
            previous = self.store.current_candidate_id
            self.store.clear_active()
            self._commit()
        if previous:
            logger.info(f"Session {previous} deactivated")

    def activate_session(self, session_id: str) -> bool:
        """Point the active pointer at an existing roster entry."""
        with self._lock:
            if not self.store.set_active(session_id):
                return False
            self._commit()
        logger.info(f"Session {session_id} activated")
        return True

    def reset_all(self) -> None:
        with self._lock:
            self.store.reset_all()

    # --- Intents ---

    def record_message(self, message_type: Union[MessageType, str], content: str) -> bool:
        """Append a transcript entry to the active session."""
        with self._lock:
            session = self._active_or_warn("record_message")
            if session is None:
                return False
            session.messages.append(ChatMessage(
                type=MessageType(message_type),
                content=content,
                timestamp=self._now_dt(),
            ))
            self._commit()
        return True

    def supply_field(self, field: Union[ContactField, str], value: str) -> bool:
        """Fill a contact field during INFO_COLLECTION and drop it from missing_fields."""
        try:
            field = ContactField(field)
        except ValueError:
            raise InvalidTransitionError(f"Unknown contact field: {field}", details={"field": str(field)})

        with self._lock:
            session = self._active_or_warn("supply_field")
            if session is None:
                return False
            if session.status != SessionStatus.INFO_COLLECTION:
                logger.warning(f"Session {session.id}: supply_field rejected in status {session.status.value}")
                return False
            value = (value or "").strip()
            if not value:
                logger.warning(f"Session {session.id}: empty value for '{field.value}' ignored")
                return False

            setattr(session, field.value, value)
            session.missing_fields = [f for f in session.missing_fields if f != field]
            self._commit()

        logger.info(f"Session {session.id}: field '{field.value}' supplied")
        return True

    def start_timer(self) -> bool:
        """Start the countdown of the pending question. A running timer is kept."""
        with self._lock:
            session = self._active_or_warn("start_timer")
            if session is None:
                return False
            question = session.current_question
            if session.status != SessionStatus.INTERVIEWING or question is None or question.is_answered:
                logger.warning(f"Session {session.id}: no pending question to time")
                return False
            if session.timer_start_time is not None:
                logger.debug(f"Session {session.id}: timer already running for question {question.id}")
                return False
            session.timer_start_time = self.clock()
            self._commit()
        return True

    def update_scratch_answer(self, text: str) -> bool:
        with self._lock:
            session = self._active_or_warn("update_scratch_answer")
            if session is None:
                return False
            if session.status != SessionStatus.INTERVIEWING:
                logger.warning(f"Session {session.id}: scratch answer rejected in status {session.status.value}")
                return False
            session.current_answer = text or ""
            self._commit()
        return True

    def submit_answer(
        self,
        answer_text: Optional[str],
        time_taken: float,
        expected_index: Optional[int] = None
    ) -> bool:
        """
        Record the answer of the current question.
        At most one submission takes effect per question index; later
        attempts (and attempts aimed at a stale index) are rejected.
        """
        with self._lock:
            session = self._active_or_warn("submit_answer")
            if session is None:
                return False
            if session.status != SessionStatus.INTERVIEWING:
                logger.warning(f"Session {session.id}: submit rejected in status {session.status.value}")
                return False

            index = session.current_question_index
            if expected_index is not None and expected_index != index:
                logger.warning(f"Session {session.id}: stale submit for index {expected_index} (current {index})")
                return False
            question = session.current_question
            if question is None:
                logger.warning(f"Session {session.id}: no question at index {index}")
                return False
            if question.is_answered:
                logger.warning(f"Session {session.id}: question {question.id} already answered")
                return False

            question.answer = answer_text or ""
            question.time_taken = max(0, min(question.time_limit, int(time_taken)))
            session.current_answer = ""
            session.timer_start_time = None
            self._commit()

        logger.info(f"Session {session.id}: question {question.id} answered in {question.time_taken}s")
        return True

    def advance_question(self) -> bool:
        """
        Move to the next question. Reaching len(questions) does not complete
        the session; the caller detects it and calls complete_interview().
        """
        with self._lock:
            session = self._active_or_warn("advance_question")
            if session is None:
                return False
            question = session.current_question
            if session.status != SessionStatus.INTERVIEWING or question is None:
                logger.warning(f"Session {session.id}: nothing to advance from")
                return False
            if not question.is_answered:
                logger.warning(f"Session {session.id}: question {question.id} not answered yet")
                return False
            session.current_question_index += 1
            self._commit()
        return True

    # --- Timer ---

    def remaining_seconds(self, current_ms: Optional[int] = None) -> Optional[int]:
        """Seconds left on the running countdown, None when no timer runs."""
        session = self.active
        if session is None or session.status != SessionStatus.INTERVIEWING:
            return None
        question = session.current_question
        if question is None or session.timer_start_time is None:
            return None
        current_ms = self.clock() if current_ms is None else current_ms
        return timer.remaining_seconds(question.time_limit, session.timer_start_time, current_ms)

    def is_timer_expired(self, current_ms: Optional[int] = None) -> bool:
        remaining = self.remaining_seconds(current_ms)
        return remaining is not None and remaining <= 0

    def elapsed_time_taken(self, current_ms: Optional[int] = None) -> Optional[int]:
        """Seconds spent on the current question so far, clamped to its limit."""
        session = self.active
        if session is None:
            return None
        question = session.current_question
        if question is None or session.timer_start_time is None:
            return None
        current_ms = self.clock() if current_ms is None else current_ms
        return timer.time_taken_seconds(question.time_limit, session.timer_start_time, current_ms)

    # --- Internals ---

    def _active_or_warn(self, operation: str) -> Optional[CandidateSession]:
        session = self.active
        if session is None:
            logger.warning(f"{operation} ignored: no active session")
        return session

    def _require_transition(self, session: CandidateSession, target: SessionStatus):
        if not SessionStatus.can_transition(session.status, target):
            raise InvalidTransitionError(
                f"Session {session.id} cannot move from {session.status.value} to {target.value}",
                details={"from": session.status.value, "to": target.value}
            )

    def _now_dt(self) -> datetime:
        return datetime.fromtimestamp(self.clock() / 1000, tz=timezone.utc)

    def _commit(self):
        """Reflect the mutation in the roster, then persist."""
        session = self.store.active
        if session is not None:
            self.store.upsert(session)
        self.store.save()
