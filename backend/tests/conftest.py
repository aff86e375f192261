"""
Pytest configuration for ExamGuard tests
"""
import os
import random
from datetime import datetime, timedelta

# Settings are read at import time, so the environment must be ready first
os.environ.setdefault("SECRET_KEY", "test-secret-key-32-chars-minimum!!")
os.environ["DATABASE_URL_OVERRIDE"] = "sqlite://"
os.environ["CACHE_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient

from examguard import models
from examguard.core.cache import CacheManager
from examguard.core.database import Base, SessionLocal, engine
from examguard.core.security import create_access_token
from examguard.services.exam_service import ExamService
from examguard.services.question_selector import QuestionBank, QuestionSelector
from examguard.services.session_service import ExamSessionService
from examguard.services.session_store import SessionStore
from examguard.utils.timezone import utc_now

NOW = datetime(2026, 3, 10, 9, 30, 0)


@pytest.fixture(autouse=True)
def tables():
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    from examguard.main import app
    return TestClient(app)


@pytest.fixture
def auth_headers():
    """Build bearer headers for a user id"""
    def _headers(user_id, email=None):
        token = create_access_token(user_id, email or f"{user_id}@example.com")
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def add_user(db):
    def _add(user_id, role="student", year=None, department=None):
        user = models.User(
            id=user_id,
            email=f"{user_id}@example.com",
            full_name=user_id.title(),
            role=role,
            year=year,
            department=department,
        )
        db.add(user)
        db.commit()
        return user
    return _add


@pytest.fixture
def add_exam(db):
    def _add(year=2, department="cse", section="a", start=None, end=None,
             random_question_count=5, name="Midterm", exam_id=None):
        now = utc_now()
        exam = models.Exam(
            id=exam_id or f"exam-{random.randrange(10**9)}",
            name=name,
            year=year,
            department=department,
            section=section,
            duration_minutes=60,
            start_time=start or now - timedelta(hours=1),
            end_time=end or now + timedelta(hours=1),
            random_question_count=random_question_count,
            created_by="admin-1",
            created_at=now,
        )
        db.add(exam)
        db.commit()
        return exam
    return _add


@pytest.fixture
def add_questions(db):
    def _add(count, year=2, department="cse", section="a", prefix="q"):
        questions = []
        for i in range(count):
            question = models.Question(
                id=f"{prefix}{i}",
                text=f"Question {prefix}{i}",
                choices=["A", "B", "C", "D"],
                answer="A",
                year=year,
                department=department,
                section=section,
                created_by="admin-1",
            )
            db.add(question)
            questions.append(question)
        db.commit()
        return questions
    return _add


@pytest.fixture
def clock():
    """Mutable fixed clock; set ``clock.now`` to move time"""
    class Clock:
        now = NOW

        def __call__(self):
            return self.now

    return Clock()


@pytest.fixture
def make_service(db, clock):
    def _make(**policy):
        return ExamSessionService(
            store=SessionStore(db),
            exams=ExamService(db, cache=CacheManager(enabled=False)),
            selector=QuestionSelector(QuestionBank(db), rng=random.Random(1234)),
            clock=clock,
            **policy
        )
    return _make
