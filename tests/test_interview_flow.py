import asyncio
import unittest
from typing import List, Optional

from packages.isim_core.dto import ResumeExtractionDTO, SummaryResultDTO
from packages.isim_core.errors import UnsupportedFormatError
from packages.isim_providers.question.base import QuestionGenerator
from packages.isim_providers.question.static_generator import StaticQuestionGenerator
from packages.isim_providers.resume.base import IResumeExtractor
from packages.isim_providers.sample_data import get_builtin_questions
from packages.isim_providers.summary.base import SummaryGenerator
from packages.isim_providers.summary.local_generators import HeuristicSummaryGenerator
from packages.isim_service.concurrency import ConcurrencyManager
from packages.isim_service.interview_flow import IntervieweeFlow, NO_ANSWER
from packages.isim_session.state import SessionStatus, ContactField, MessageType
from tests.fakes import FakeClock, build_engine, FULL_FIELDS

class FakeExtractor(IResumeExtractor):
    def __init__(self, name="", email="", phone="", text="resume body"):
        self.result = ResumeExtractionDTO(name=name, email=email, phone=phone, text=text)

    def extract(self, file_bytes: bytes, mime_type: str) -> ResumeExtractionDTO:
        if mime_type == "text/plain":
            raise UnsupportedFormatError(mime_type)
        return self.result

class GatedQuestionGenerator(QuestionGenerator):
    """Holds generation until released."""
    def __init__(self):
        self.release = asyncio.Event()
        self.calls = 0

    async def generate(self, resume_text: str):
        self.calls += 1
        await self.release.wait()
        return get_builtin_questions()

class CountingSummaryGenerator(SummaryGenerator):
    def __init__(self, score: int = 72, delay: float = 0.0):
        self.score = score
        self.delay = delay
        self.calls = 0

    async def summarize(self, candidate_name, questions, session_id="") -> SummaryResultDTO:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        return SummaryResultDTO(score=self.score, summary=f"{candidate_name} summary")

class FlowTestCase(unittest.IsolatedAsyncioTestCase):
    def build_flow(
        self,
        extractor: Optional[IResumeExtractor] = None,
        question_generator: Optional[QuestionGenerator] = None,
        summary_generator: Optional[SummaryGenerator] = None,
        concurrency: Optional[ConcurrencyManager] = None
    ) -> IntervieweeFlow:
        self.clock = FakeClock()
        self.engine, self.store, self.storage = build_engine(self.clock)
        return IntervieweeFlow(
            engine=self.engine,
            extractor=extractor or FakeExtractor(**FULL_FIELDS),
            question_generator=question_generator or StaticQuestionGenerator(),
            summary_generator=summary_generator or HeuristicSummaryGenerator(),
            concurrency=concurrency,
        )

    def bot_messages(self, session) -> List[str]:
        return [m.content for m in session.messages if m.type == MessageType.BOT]

class TestSessionStart(FlowTestCase):
    async def test_complete_resume_skips_info_collection(self):
        flow = self.build_flow()
        session = await flow.start_from_upload(b"%PDF", "application/pdf")
        self.assertEqual(session.status, SessionStatus.INTERVIEWING)
        self.assertEqual(session.current_question_index, 0)
        self.assertEqual(session.timer_start_time, self.clock.now)
        self.assertTrue(self.bot_messages(session)[-1].startswith("**Question 1** (Easy - 20s)"))

    async def test_extraction_failure_creates_no_session(self):
        flow = self.build_flow()
        with self.assertRaises(UnsupportedFormatError):
            await flow.start_from_upload(b"hello", "text/plain")
        self.assertEqual(len(self.store), 0)

    async def test_missing_fields_are_collected_in_order(self):
        flow = self.build_flow(extractor=FakeExtractor(name="Jane Smith"))
        session = await flow.start_from_upload(b"doc", "application/msword")
        self.assertEqual(session.missing_fields, [ContactField.EMAIL, ContactField.PHONE])
        self.assertIn("Could you please provide your email?", self.bot_messages(session)[-1])

        self.assertFalse(await flow.handle_user_input("not an email"))
        self.assertIn("email again", self.bot_messages(session)[-1])
        self.assertEqual(session.missing_fields, [ContactField.EMAIL, ContactField.PHONE])

        self.assertTrue(await flow.handle_user_input("jane@example.com"))
        self.assertIn("Thank you! Email recorded.", self.bot_messages(session))
        self.assertIn("provide your phone?", self.bot_messages(session)[-1])

        self.assertTrue(await flow.handle_user_input("555-123-4567"))
        self.assertEqual(session.missing_fields, [])
        self.assertEqual(session.status, SessionStatus.INTERVIEWING)
        self.assertEqual(session.phone, "555-123-4567")

    async def test_sample_session_uses_demo_generators(self):
        flow = self.build_flow()
        session = await flow.start_from_sample()
        self.assertEqual(session.status, SessionStatus.INTERVIEWING)
        for _ in range(6):
            await flow.submit_current_answer("a sample answer")
        self.assertEqual(session.status, SessionStatus.COMPLETED)
        self.assertLessEqual(session.score, 85)

class TestAnswering(FlowTestCase):
    async def asyncSetUp(self):
        self.summary = CountingSummaryGenerator(score=72)
        self.flow = self.build_flow(summary_generator=self.summary)
        self.session = await self.flow.start_from_upload(b"%PDF", "application/pdf")

    async def test_manual_submit_uses_stored_start_time(self):
        self.clock.advance(7.4)
        self.assertTrue(await self.flow.submit_current_answer("React is a UI library"))
        first = self.session.questions[0]
        self.assertEqual(first.answer, "React is a UI library")
        self.assertEqual(first.time_taken, 7)
        self.assertEqual(self.session.current_question_index, 1)
        self.assertEqual(self.session.timer_start_time, self.clock.now)

    async def test_scratch_answer_is_submitted(self):
        await self.flow.handle_user_input("typed so far")
        self.assertEqual(self.session.current_answer, "typed so far")
        self.assertTrue(await self.flow.submit_current_answer())
        self.assertEqual(self.session.questions[0].answer, "typed so far")

    async def test_empty_manual_submit_is_rejected(self):
        self.assertFalse(await self.flow.submit_current_answer("   "))
        self.assertIsNone(self.session.questions[0].time_taken)

    async def test_expiry_submits_exactly_once(self):
        await self.flow.handle_user_input("partial")
        self.clock.advance(20)
        self.assertTrue(await self.flow.tick())
        self.assertFalse(await self.flow.tick())

        first = self.session.questions[0]
        self.assertEqual(first.answer, "partial")
        self.assertEqual(first.time_taken, first.time_limit)
        self.assertIsNone(self.session.questions[1].time_taken)
        self.assertEqual(self.session.current_question_index, 1)

    async def test_expiry_without_answer(self):
        self.clock.advance(25)
        self.assertTrue(await self.flow.tick())
        self.assertEqual(self.session.questions[0].answer, "")
        user_messages = [m.content for m in self.session.messages if m.type == MessageType.USER]
        self.assertEqual(user_messages[-1], NO_ANSWER)

    async def test_manual_submit_wins_over_late_tick(self):
        self.clock.advance(30)
        self.assertTrue(await self.flow.submit_current_answer("manual"))
        self.assertFalse(await self.flow.tick())
        self.assertEqual(self.session.questions[0].answer, "manual")
        self.assertEqual(self.session.questions[0].time_taken, 20)
        self.assertIsNone(self.session.questions[1].answer)

    async def test_stale_submission_is_rejected(self):
        await self.flow.submit_current_answer("first")
        self.assertFalse(self.engine.submit_answer("again", 3, expected_index=0))
        self.assertEqual(self.session.questions[0].answer, "first")

    async def test_full_interview_completes_once(self):
        for i in range(6):
            self.clock.advance(5)
            self.assertTrue(await self.flow.submit_current_answer(f"answer {i}"))
        self.assertEqual(self.session.status, SessionStatus.COMPLETED)
        self.assertEqual(self.session.score, 72)
        self.assertEqual(self.summary.calls, 1)
        self.assertIn("Final Score: 72/100", self.bot_messages(self.session)[-1])
        self.assertFalse(await self.flow.submit_current_answer("late"))
        self.assertFalse(await self.flow.finish_interview())

class TestConcurrency(FlowTestCase):
    async def test_concurrent_completion_runs_once(self):
        summary = CountingSummaryGenerator(delay=0.01)
        flow = self.build_flow(summary_generator=summary)
        await flow.start_from_upload(b"%PDF", "application/pdf")
        for _ in range(6):
            self.engine.submit_answer("answer", 3)
            self.engine.advance_question()

        results = await asyncio.gather(flow.finish_interview(), flow.finish_interview())
        self.assertEqual(sorted(results), [False, True])
        self.assertEqual(summary.calls, 1)
        self.assertEqual(flow.active.status, SessionStatus.COMPLETED)

    async def test_generation_for_abandoned_session_is_discarded(self):
        generator = GatedQuestionGenerator()
        flow = self.build_flow(question_generator=generator)
        task = asyncio.create_task(flow.start_from_upload(b"%PDF", "application/pdf"))
        while generator.calls == 0:
            await asyncio.sleep(0)

        flow.start_new()
        generator.release.set()
        session = await task

        self.assertEqual(session.status, SessionStatus.INFO_COLLECTION)
        self.assertEqual(session.questions, [])
        self.assertIsNone(flow.active)

    async def test_command_during_generation_fails_fast(self):
        generator = GatedQuestionGenerator()
        flow = self.build_flow(question_generator=generator, concurrency=ConcurrencyManager(timeout=0.05))
        task = asyncio.create_task(flow.start_from_upload(b"%PDF", "application/pdf"))
        while generator.calls == 0:
            await asyncio.sleep(0)

        with self.assertRaises(BlockingIOError):
            await flow.handle_user_input("hello")
        with self.assertRaises(BlockingIOError):
            await flow.submit_current_answer("too early")
        self.assertFalse(await flow.tick())

        generator.release.set()
        session = await task
        self.assertEqual(session.status, SessionStatus.INTERVIEWING)
        self.assertEqual(generator.calls, 1)
        self.assertTrue(await flow.handle_user_input("hello"))
        self.assertEqual(session.current_answer, "hello")

    async def test_tick_during_summary_is_skipped(self):
        summary = CountingSummaryGenerator(delay=0.05)
        flow = self.build_flow(summary_generator=summary)
        session = await flow.start_from_upload(b"%PDF", "application/pdf")
        for _ in range(6):
            self.engine.submit_answer("answer", 3)
            self.engine.advance_question()

        task = asyncio.create_task(flow.finish_interview())
        while summary.calls == 0:
            await asyncio.sleep(0)
        self.assertFalse(await flow.tick())
        self.assertTrue(await task)
        self.assertEqual(session.status, SessionStatus.COMPLETED)

class TestConcurrencyManager(unittest.IsolatedAsyncioTestCase):
    async def test_second_acquire_times_out(self):
        manager = ConcurrencyManager(timeout=0.01)
        self.assertFalse(manager.is_locked("r1"))
        async with manager.acquire_lock("r1"):
            self.assertTrue(manager.is_locked("r1"))
            with self.assertRaises(BlockingIOError):
                async with manager.acquire_lock("r1"):
                    pass
            async with manager.acquire_lock("r2"):
                self.assertTrue(manager.is_locked("r2"))
        self.assertFalse(manager.is_locked("r1"))

    async def test_lock_is_released_on_error(self):
        manager = ConcurrencyManager(timeout=0.01)
        with self.assertRaises(ValueError):
            async with manager.acquire_lock("r1"):
                raise ValueError("boom")
        self.assertFalse(manager.is_locked("r1"))

class TestLifecycle(FlowTestCase):
    async def test_resume_pending_generates_questions(self):
        flow = self.build_flow()
        session = self.engine.create_session(FULL_FIELDS, "resume")
        self.assertIs(flow.welcome_back(), session)

        await flow.resume_pending()
        self.assertEqual(session.status, SessionStatus.INTERVIEWING)
        self.assertIsNotNone(session.timer_start_time)

    async def test_resume_pending_completes_answered_session(self):
        flow = self.build_flow()
        session = self.engine.create_session(FULL_FIELDS, "resume")
        self.engine.begin_interview(get_builtin_questions())
        for _ in range(6):
            self.engine.submit_answer("done", 4)
            self.engine.advance_question()

        session = await flow.continue_session()
        self.assertEqual(session.status, SessionStatus.COMPLETED)
        self.assertIsNone(flow.welcome_back())

    async def test_start_new_keeps_roster(self):
        flow = self.build_flow()
        session = await flow.start_from_upload(b"%PDF", "application/pdf")
        flow.start_new()
        self.assertIsNone(flow.active)
        self.assertIn(session.id, self.store)
        self.assertTrue(flow.activate(session.id))
        self.assertIs(flow.active, session)

    async def test_reset_all(self):
        flow = self.build_flow()
        await flow.start_from_upload(b"%PDF", "application/pdf")
        flow.reset_all()
        self.assertEqual(len(self.store), 0)
        self.assertIsNone(flow.welcome_back())

    async def test_watch_timers_auto_submits(self):
        flow = self.build_flow()
        session = await flow.start_from_upload(b"%PDF", "application/pdf")
        self.clock.advance(21)

        stop_event = asyncio.Event()
        watcher = asyncio.create_task(flow.watch_timers(stop_event, interval_ms=1))
        for _ in range(100):
            if session.current_question_index == 1:
                break
            await asyncio.sleep(0.005)
        stop_event.set()
        await watcher

        self.assertEqual(session.current_question_index, 1)
        self.assertEqual(session.questions[0].time_taken, 20)

if __name__ == "__main__":
    unittest.main()
