import asyncio
from typing import Optional

from packages.isim_core.dto import ResumeExtractionDTO
from packages.isim_core.logging import get_logger
from packages.isim_providers.question.base import QuestionGenerator
from packages.isim_providers.question.static_generator import StaticQuestionGenerator
from packages.isim_providers.resume.base import IResumeExtractor
from packages.isim_providers.resume.local_provider import validate_contact_field
from packages.isim_providers.sample_data import get_sample_resume, is_sample_resume
from packages.isim_providers.summary.base import SummaryGenerator
from packages.isim_providers.summary.local_generators import SampleSummaryGenerator
from packages.isim_service.concurrency import ConcurrencyManager
from packages.isim_session.dto import CandidateSession
from packages.isim_session.engine import InterviewSessionEngine
from packages.isim_session.state import SessionStatus, MessageType, ContactField

logger = get_logger("isim.service.flow")

ACTIVE_RESOURCE = "active-session"

WELCOME_UPLOAD = "Welcome to your AI interview! I've received your resume."
WELCOME_SAMPLE = "Welcome to your AI interview! I've loaded sample data for you to test."
PREPARING = "Great! I have all your information. Let me prepare your interview questions..."
PLAN = (
    "Perfect! I've prepared 6 questions for you:\n"
    "- 2 Easy questions (20 seconds each)\n"
    "- 2 Medium questions (60 seconds each)\n"
    "- 2 Hard questions (120 seconds each)\n\n"
    "Ready to begin? Let's start with Question 1!"
)
ANSWER_RECORDED = "Answer recorded! Moving to next question..."
NO_ANSWER = "(No answer provided - time expired)"
EVALUATING = "Congratulations! You've completed all questions. Let me evaluate your performance..."

class IntervieweeFlow:
    """
    Candidate-side conversation built on the session primitives.

    Decides what happens after each primitive: which field to ask for next,
    when to generate questions, when an expired timer auto-submits, and
    when the interview is complete.

    Every public coroutine is one command and holds the active-session lock
    for its whole duration, generator awaits included. Underscore helpers
    assume the lock is held. start_new(), activate() and reset_all() are a
    single engine call with no await, so they run without the lock; commands
    re-check the active session after each await because of them.
    """
    def __init__(
        self,
        engine: InterviewSessionEngine,
        extractor: IResumeExtractor,
        question_generator: QuestionGenerator,
        summary_generator: SummaryGenerator,
        sample_question_generator: Optional[QuestionGenerator] = None,
        sample_summary_generator: Optional[SummaryGenerator] = None,
        concurrency: Optional[ConcurrencyManager] = None
    ):
        self.engine = engine
        self.extractor = extractor
        self.question_generator = question_generator
        self.summary_generator = summary_generator
        self.sample_question_generator = sample_question_generator or StaticQuestionGenerator()
        self.sample_summary_generator = sample_summary_generator or SampleSummaryGenerator()
        self.concurrency = concurrency or ConcurrencyManager()

    @property
    def active(self) -> Optional[CandidateSession]:
        return self.engine.active

    # --- Session start ---

    async def start_from_upload(self, file_bytes: bytes, mime_type: str) -> CandidateSession:
        """
        Read a résumé and open a session for it.
        ExtractionError propagates: no session is created for an unreadable file.
        """
        resume = self.extractor.extract(file_bytes, mime_type)
        async with self.concurrency.acquire_lock(ACTIVE_RESOURCE):
            return await self._open_session(resume, WELCOME_UPLOAD)

    async def start_from_sample(self) -> CandidateSession:
        async with self.concurrency.acquire_lock(ACTIVE_RESOURCE):
            return await self._open_session(get_sample_resume(), WELCOME_SAMPLE)

    async def _open_session(self, resume: ResumeExtractionDTO, welcome: str) -> CandidateSession:
        session = self.engine.create_session(
            {"name": resume.name, "email": resume.email, "phone": resume.phone},
            resume.text
        )
        self.engine.record_message(MessageType.BOT, welcome)
        await self._advance_info_collection()
        return session

    # --- Info collection ---

    async def handle_user_input(self, text: str) -> bool:
        """
        Chat input from the candidate.
        INFO_COLLECTION: answers the pending contact question.
        INTERVIEWING: replaces the scratch answer.
        """
        text = (text or "").strip()
        if not text:
            return False

        async with self.concurrency.acquire_lock(ACTIVE_RESOURCE):
            session = self.active
            if session is None:
                return False

            if session.status == SessionStatus.INFO_COLLECTION:
                if not self._supply_next_field(text):
                    return False
                await self._advance_info_collection()
                return True

            if session.status == SessionStatus.INTERVIEWING:
                # Transcript entry is written on submission
                return self.engine.update_scratch_answer(text)

        return False

    def _supply_next_field(self, text: str) -> bool:
        session = self.active
        if session is None or not session.missing_fields:
            return False
        field = session.missing_fields[0]
        self.engine.record_message(MessageType.USER, text)

        error = validate_contact_field(field.value, text)
        if error:
            self.engine.record_message(
                MessageType.BOT,
                f"{error}. Could you please provide your {field.value} again?"
            )
            return False

        if not self.engine.supply_field(field, text):
            return False
        self.engine.record_message(MessageType.BOT, f"Thank you! {field.value.capitalize()} recorded.")
        return True

    async def _advance_info_collection(self):
        session = self.active
        if session is None or session.status != SessionStatus.INFO_COLLECTION:
            return
        if session.missing_fields:
            self._ask_for(session.missing_fields[0])
            return
        await self._start_interview()

    def _ask_for(self, field: ContactField):
        self.engine.record_message(
            MessageType.BOT,
            f"I noticed your {field.value.capitalize()} is missing. Could you please provide your {field.value}?"
        )

    async def _start_interview(self):
        session = self.active
        if session is None:
            return
        session_id = session.id
        self.engine.record_message(MessageType.BOT, PREPARING)
        generator = self.sample_question_generator if is_sample_resume(session.resume_text) else self.question_generator
        questions = await generator.generate(session.resume_text)

        current = self.active
        if current is None or current.id != session_id or current.status != SessionStatus.INFO_COLLECTION:
            logger.warning(f"Session {session_id} changed while questions were generated. Discarding them.")
            return
        self.engine.begin_interview(questions)
        self.engine.record_message(MessageType.BOT, PLAN)
        self._present_question()

    # --- Interviewing ---

    def _present_question(self):
        session = self.active
        question = session.current_question if session else None
        if question is None:
            return
        self.engine.record_message(
            MessageType.BOT,
            f"**Question {question.id}** ({question.difficulty.value} - {question.time_limit}s)\n\n{question.question}"
        )
        self.engine.start_timer()

    async def submit_current_answer(self, text: Optional[str] = None) -> bool:
        """
        Manual submission of the current question.
        Time taken is derived from the stored timer start, never from ticks.
        """
        async with self.concurrency.acquire_lock(ACTIVE_RESOURCE):
            session = self.active
            if session is None or session.status != SessionStatus.INTERVIEWING:
                return False
            if session.current_question is None:
                return False

            answer = (text or "").strip() or session.current_answer.strip()
            if not answer:
                logger.info(f"Session {session.id}: empty manual submission ignored")
                return False

            index = session.current_question_index
            time_taken = self.engine.elapsed_time_taken() or 0
            if not self._record_submission(answer, time_taken, index, transcript_text=answer):
                return False
            await self._after_submission()
            return True

    async def tick(self) -> bool:
        """
        Sample the countdown. An expired question is auto-submitted with
        whatever is in the scratch buffer and time_taken == time_limit.
        Skipped while another command runs. Returns True when a submission happened.
        """
        if self.concurrency.is_locked(ACTIVE_RESOURCE):
            return False
        async with self.concurrency.acquire_lock(ACTIVE_RESOURCE):
            return await self._submit_if_expired()

    async def _submit_if_expired(self) -> bool:
        session = self.active
        if session is None or not self.engine.is_timer_expired():
            return False
        question = session.current_question
        answer = session.current_answer
        if not self._record_submission(
            answer,
            question.time_limit,
            session.current_question_index,
            transcript_text=answer or NO_ANSWER
        ):
            return False
        logger.info(f"Session {session.id}: question {question.id} timed out")
        await self._after_submission()
        return True

    def _record_submission(self, answer: str, time_taken: int, index: int, transcript_text: str) -> bool:
        if not self.engine.submit_answer(answer, time_taken, expected_index=index):
            return False
        self.engine.record_message(MessageType.USER, transcript_text)
        self.engine.record_message(MessageType.BOT, ANSWER_RECORDED)
        self.engine.advance_question()
        return True

    async def _after_submission(self):
        session = self.active
        if session is None:
            return
        if session.all_questions_submitted:
            await self._finish_interview()
        else:
            self._present_question()

    async def finish_interview(self) -> bool:
        """Score the submitted question set and complete the session once."""
        async with self.concurrency.acquire_lock(ACTIVE_RESOURCE):
            return await self._finish_interview()

    async def _finish_interview(self) -> bool:
        session = self.active
        if session is None or session.status != SessionStatus.INTERVIEWING or not session.all_questions_submitted:
            return False

        session_id = session.id
        self.engine.record_message(MessageType.BOT, EVALUATING)
        generator = self.sample_summary_generator if is_sample_resume(session.resume_text) else self.summary_generator
        result = await generator.summarize(session.name, session.questions, session_id)

        current = self.active
        if current is None or current.id != session_id or current.status != SessionStatus.INTERVIEWING:
            logger.warning(f"Session {session_id} no longer active. Completion deferred.")
            return False
        self.engine.complete_interview(result.score, result.summary)
        self.engine.record_message(
            MessageType.BOT,
            f"## Interview Complete!\n\n**Final Score: {result.score}/100**\n\n{result.summary}\n\n"
            "Thank you for participating! You can view your detailed results in the Interviewer Dashboard."
        )
        return True

    # --- Session lifecycle ---

    def welcome_back(self) -> Optional[CandidateSession]:
        """The restored active session if it is still in progress."""
        session = self.active
        if session is not None and session.is_pending:
            return session
        return None

    async def resume_pending(self):
        """
        Continue work interrupted by a restart: generate questions for a
        session with nothing missing, complete a fully answered session,
        or re-present a question whose timer never started.
        """
        async with self.concurrency.acquire_lock(ACTIVE_RESOURCE):
            session = self.active
            if session is None or not session.is_pending:
                return

            if session.status == SessionStatus.INFO_COLLECTION:
                if not session.missing_fields:
                    logger.info(f"Resuming question generation for session {session.id}")
                    await self._start_interview()
                return

            if session.all_questions_submitted:
                logger.info(f"Resuming completion for session {session.id}")
                await self._finish_interview()
            elif session.timer_start_time is None:
                self._present_question()
            else:
                await self._submit_if_expired()

    async def continue_session(self) -> Optional[CandidateSession]:
        await self.resume_pending()
        return self.active

    def activate(self, session_id: str) -> bool:
        return self.engine.activate_session(session_id)

    def start_new(self):
        """Retire the active session. It stays in the roster."""
        self.engine.deactivate_session()

    def reset_all(self):
        self.engine.reset_all()

    # --- Timer sampling ---

    async def watch_timers(self, stop_event: asyncio.Event, interval_ms: int = 100):
        """Tick every interval until stop_event is set."""
        interval = interval_ms / 1000.0
        while not stop_event.is_set():
            try:
                await self.tick()
            except Exception:
                logger.exception("Timer tick failed")
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass
