from sqlalchemy import (
    Column, String, DateTime, ForeignKey, Boolean, Integer, Text, JSON, UniqueConstraint
)
from sqlalchemy.orm import relationship
from datetime import datetime
from ..core.database import Base


class Exam(Base):
    __tablename__ = "exams"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    year = Column(Integer, index=True, nullable=False)
    department = Column(String, index=True, default="general")
    section = Column(String, default="general")
    duration_minutes = Column(Integer, nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    random_question_count = Column(Integer, nullable=True)
    created_by = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    sessions = relationship("ExamSession", back_populates="exam")


class ExamSession(Base):
    __tablename__ = "exam_sessions"
    __table_args__ = (
        UniqueConstraint("exam_id", "user_id", name="uq_exam_sessions_exam_user"),
    )

    id = Column(Integer, primary_key=True, index=True)
    exam_id = Column(String, ForeignKey("exams.id"), nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    status = Column(String, default="ongoing", nullable=False)
    # Snapshot of the drawn questions, frozen for the session's lifetime
    questions = Column(JSON, default=list)
    awaiting_approval = Column(Boolean, default=False, nullable=False)
    answers = Column(JSON, nullable=True)
    started_at = Column(DateTime, default=datetime.utcnow)
    finished_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    exam = relationship("Exam", back_populates="sessions")
    violations = relationship(
        "SessionViolation",
        back_populates="session",
        order_by="SessionViolation.id",
        lazy="selectin",
    )
    approvals = relationship(
        "SessionApproval",
        back_populates="session",
        order_by="SessionApproval.id",
        lazy="selectin",
    )


class SessionViolation(Base):
    __tablename__ = "session_violations"
    __table_args__ = (
        UniqueConstraint("session_id", "event_id", name="uq_session_violations_event"),
    )

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("exam_sessions.id"), nullable=False, index=True)
    reason = Column(Text, nullable=False)
    event_id = Column(String, nullable=True)
    time = Column(DateTime, nullable=False)

    session = relationship("ExamSession", back_populates="violations")

    def __repr__(self):
        return f"<SessionViolation {self.reason} for session {self.session_id}>"


class SessionApproval(Base):
    __tablename__ = "session_approvals"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("exam_sessions.id"), nullable=False, index=True)
    approver_id = Column(String, nullable=False)
    approved = Column(Boolean, nullable=False)
    note = Column(Text, default="")
    time = Column(DateTime, nullable=False)

    session = relationship("ExamSession", back_populates="approvals")
