import json
import os
import tempfile
import unittest

from packages.isim_core.errors import PersistenceCorruptionError
from packages.isim_providers.sample_data import get_builtin_questions
from packages.isim_roster.infrastructure.file_storage import FileRosterStorage
from packages.isim_roster.infrastructure.memory_storage import MemoryRosterStorage
from packages.isim_roster.migrations import CURRENT_VERSION, migrate, detect_version
from packages.isim_roster.store import RosterStore, DEFAULT_NAMESPACE
from packages.isim_session.state import SessionStatus
from tests.fakes import FakeClock, build_engine, FULL_FIELDS

def legacy_candidate(candidate_id: str, name: str, status: str = "completed", score=70) -> dict:
    return {
        "id": candidate_id,
        "name": name,
        "email": f"{candidate_id}@example.com",
        "phone": "5551234567",
        "resumeText": "",
        "status": status,
        "messages": [],
        "questions": [],
        "currentQuestionIndex": -1,
        "currentAnswer": "",
        "timerStartTime": None,
        "score": score,
        "summary": "",
        "missingFields": [],
        "startedAt": "2024-01-01T10:00:00.000Z",
        "completedAt": None,
    }

class TestRosterPersistence(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.engine, self.store, self.storage = build_engine(self.clock)

    def test_round_trip_preserves_sessions_and_pointer(self):
        first = self.engine.create_session(FULL_FIELDS, "resume one")
        self.engine.begin_interview(get_builtin_questions())
        self.engine.start_timer()
        self.engine.update_scratch_answer("half typed")
        self.engine.create_session({"name": "Bob Stone"}, "resume two")

        reloaded = RosterStore(self.storage)
        reloaded.load()

        self.assertEqual([s.id for s in reloaded.list_all()], [s.id for s in self.store.list_all()])
        self.assertEqual(reloaded.current_candidate_id, self.store.current_candidate_id)
        restored = reloaded.find_by_id(first.id)
        self.assertEqual(restored.status, SessionStatus.INTERVIEWING)
        self.assertEqual(restored.current_answer, "half typed")
        self.assertEqual(restored.timer_start_time, self.clock.now)
        self.assertEqual(restored.questions, first.questions)

    def test_active_is_the_roster_entry(self):
        session = self.engine.create_session(FULL_FIELDS, "")
        reloaded = RosterStore(self.storage)
        reloaded.load()
        self.assertIs(reloaded.active, reloaded.find_by_id(session.id))

    def test_stored_layout_uses_camel_case(self):
        self.engine.create_session(FULL_FIELDS, "")
        payload = json.loads(self.storage.read(DEFAULT_NAMESPACE))
        self.assertEqual(payload["version"], CURRENT_VERSION)
        self.assertIn("currentCandidateId", payload)
        self.assertIn("missingFields", payload["candidates"][0])

    def test_reset_all_clears_storage(self):
        self.engine.create_session(FULL_FIELDS, "")
        self.store.reset_all()
        self.assertEqual(len(self.store), 0)
        reloaded = RosterStore(self.storage)
        reloaded.load()
        self.assertEqual(len(reloaded), 0)
        self.assertIsNone(reloaded.active)

class TestCorruptPayloads(unittest.TestCase):
    def _load(self, raw: str) -> RosterStore:
        storage = MemoryRosterStorage()
        storage.write(DEFAULT_NAMESPACE, raw)
        store = RosterStore(storage)
        store.load()
        return store

    def test_invalid_json_yields_empty_roster(self):
        store = self._load("{not json")
        self.assertEqual(len(store), 0)
        self.assertIsNone(store.active)

    def test_wrong_shape_yields_empty_roster(self):
        self.assertEqual(len(self._load("[1, 2, 3]")), 0)
        self.assertEqual(len(self._load(json.dumps({"version": 2, "candidates": [{"id": 1, "status": "bogus"}]}))), 0)

    def test_newer_version_is_discarded(self):
        store = self._load(json.dumps({"version": CURRENT_VERSION + 1, "candidates": []}))
        self.assertEqual(len(store), 0)

    def test_dangling_pointer_is_cleared(self):
        payload = {"version": 2, "candidates": [legacy_candidate("a", "Ann Lee")], "currentCandidateId": "zzz"}
        store = self._load(json.dumps(payload))
        self.assertEqual(len(store), 1)
        self.assertIsNone(store.active)

    def test_decode_raises_typed_error(self):
        with self.assertRaises(PersistenceCorruptionError):
            RosterStore.decode("null")

class TestMigrations(unittest.TestCase):
    def test_unversioned_payload_is_legacy(self):
        self.assertEqual(detect_version({"candidates": []}), 1)
        self.assertEqual(detect_version({"_persist": {"version": 1}}), 1)

    def test_non_integer_version_raises(self):
        with self.assertRaises(PersistenceCorruptionError):
            detect_version({"version": "2"})
        with self.assertRaises(PersistenceCorruptionError):
            detect_version({"version": True})

    def test_legacy_active_copy_wins(self):
        stale = legacy_candidate("a", "Ann Lee", status="interviewing", score=None)
        fresh = dict(stale, currentAnswer="newer text")
        payload = migrate({"candidates": [stale, legacy_candidate("b", "Ben Ray")], "currentCandidate": fresh})
        self.assertEqual(payload["version"], CURRENT_VERSION)
        self.assertEqual(payload["currentCandidateId"], "a")
        self.assertEqual(len(payload["candidates"]), 2)
        self.assertEqual(payload["candidates"][0]["currentAnswer"], "newer text")

    def test_legacy_active_missing_from_roster_is_appended(self):
        payload = migrate({"candidates": [], "currentCandidate": legacy_candidate("c", "Cy Park")})
        self.assertEqual([c["id"] for c in payload["candidates"]], ["c"])

    def test_legacy_payload_loads_through_store(self):
        storage = MemoryRosterStorage()
        storage.write(DEFAULT_NAMESPACE, json.dumps({
            "candidates": [legacy_candidate("a", "Ann Lee")],
            "currentCandidate": None,
        }))
        store = RosterStore(storage)
        store.load()
        self.assertEqual(store.find_by_id("a").name, "Ann Lee")
        self.assertIsNone(store.active)

class TestFileRosterStorage(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.storage = FileRosterStorage(base_dir=os.path.join(self.tmp.name, "data"))

    def tearDown(self):
        self.tmp.cleanup()

    def test_key_is_sanitised(self):
        self.assertTrue(self.storage.path_for("persist:root").endswith("persist_root.json"))

    def test_write_read_delete(self):
        self.assertIsNone(self.storage.read("persist:root"))
        self.storage.write("persist:root", '{"version": 2}')
        self.assertEqual(self.storage.read("persist:root"), '{"version": 2}')
        self.assertFalse(os.path.exists(self.storage.path_for("persist:root") + ".tmp"))
        self.storage.delete("persist:root")
        self.assertIsNone(self.storage.read("persist:root"))

    def test_engine_survives_restart_on_disk(self):
        engine, _, _ = build_engine(storage=self.storage)
        session = engine.create_session(FULL_FIELDS, "on disk")
        store = RosterStore(self.storage)
        store.load()
        self.assertEqual(store.active.id, session.id)
        self.assertEqual(store.active.resume_text, "on disk")

if __name__ == "__main__":
    unittest.main()
