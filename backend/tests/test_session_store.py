"""
Tests for the session store adapter and read retries
"""
import pytest
from sqlalchemy.exc import OperationalError

from examguard.core.database import retry_read
from examguard.core.exceptions import StoreUnavailable
from examguard.models import SessionViolation
from examguard.services.session_store import SessionStore
from tests.conftest import NOW

QUESTIONS = [{"id": "q1", "text": "Question q1", "choices": ["A", "B"]}]


@pytest.fixture
def store(db):
    return SessionStore(db)


@pytest.fixture
def no_sleep(monkeypatch):
    monkeypatch.setattr("examguard.core.database.time.sleep", lambda seconds: None)


class TestCreateIfAbsent:

    def test_create_then_get_existing(self, store, add_exam):
        exam = add_exam()

        session, created = store.create_if_absent(exam.id, "student-1", QUESTIONS, NOW)
        again, created_again = store.create_if_absent(exam.id, "student-1", [], NOW)

        assert created is True
        assert created_again is False
        assert again.id == session.id
        assert again.questions == QUESTIONS

    def test_concurrent_insert_resolves_to_winner(self, store, add_exam, monkeypatch):
        exam = add_exam()
        winner, _ = store.create_if_absent(exam.id, "student-1", QUESTIONS, NOW)

        real_get = store.get
        calls = []

        def stale_first_read(exam_id, user_id):
            # Simulate a request that checked before the winner committed
            calls.append((exam_id, user_id))
            return None if len(calls) == 1 else real_get(exam_id, user_id)

        monkeypatch.setattr(store, "get", stale_first_read)

        session, created = store.create_if_absent(
            exam.id, "student-1", [{"id": "q9", "text": "other", "choices": []}], NOW
        )

        assert created is False
        assert session.id == winner.id
        assert session.questions == QUESTIONS


class TestAppend:

    def test_append_applies_updates_atomically(self, store, add_exam):
        exam = add_exam()
        session, _ = store.create_if_absent(exam.id, "student-1", QUESTIONS, NOW)

        session, appended = store.append_to(
            session, "violations", {"reason": "copy", "time": NOW},
            status="paused", awaiting_approval=True
        )

        assert appended is True
        assert session.status == "paused"
        assert [v.reason for v in session.violations] == ["copy"]

    def test_unknown_field_is_rejected(self, store, add_exam):
        exam = add_exam()
        session, _ = store.create_if_absent(exam.id, "student-1", QUESTIONS, NOW)

        with pytest.raises(ValueError):
            store.append_to(session, "answers", {"q1": "A"})

    def test_failed_write_leaves_no_partial_state(self, store, db, add_exam, monkeypatch):
        exam = add_exam()
        session, _ = store.create_if_absent(exam.id, "student-1", QUESTIONS, NOW)

        def broken_commit():
            raise OperationalError("COMMIT", {}, Exception("connection lost"))

        monkeypatch.setattr(db, "commit", broken_commit)
        with pytest.raises(StoreUnavailable):
            store.append_to(session, "violations", {"reason": "copy", "time": NOW},
                            status="paused", awaiting_approval=True)
        monkeypatch.undo()

        assert db.query(SessionViolation).count() == 0
        assert store.get(exam.id, "student-1").status == "ongoing"


class TestRetryRead:

    def test_transient_failures_are_retried(self, db, no_sleep):
        attempts = []

        def flaky():
            attempts.append(1)
            if len(attempts) < 3:
                raise OperationalError("SELECT 1", {}, Exception("db restarting"))
            return "ok"

        assert retry_read(db, flaky) == "ok"
        assert len(attempts) == 3

    def test_exhausted_retries_raise_store_unavailable(self, db, no_sleep):
        attempts = []

        def down():
            attempts.append(1)
            raise OperationalError("SELECT 1", {}, Exception("db down"))

        with pytest.raises(StoreUnavailable):
            retry_read(db, down)
        assert len(attempts) == 3
