"""
Exam session state machine.

    ongoing --violation--> paused --approve--> ongoing
                             |---deny----> blocked
                             +---violation--> paused (record appended)
    any state --submit--> submitted

``submitted`` and ``blocked`` are terminal for the state machine, although by
default a blocked session can still submit and a new violation reopens it for
review; both are controlled by settings.
"""
from typing import Any, Callable, Dict, Optional, Tuple
from datetime import datetime
import logging

from ..core.config import settings
from ..core.exceptions import ExamNotActive, ExamNotFound, SessionLocked, SessionNotFound
from ..models.exam import ExamSession
from ..schemas.exam import Exam, ExamStatus
from ..schemas.session import SessionStatus, ViolationReason
from ..utils.timezone import utc_now
from .exam_service import ExamService
from .question_selector import QuestionSelector
from .scheduling import classify
from .session_store import SessionStore

logger = logging.getLogger(__name__)

UNKNOWN_REASON = "Unknown"


class ExamSessionService:
    def __init__(self, store: SessionStore, exams: ExamService, selector: QuestionSelector,
                 clock: Callable[[], datetime] = utc_now,
                 allow_submit_while_locked: Optional[bool] = None,
                 violation_reopens_blocked: Optional[bool] = None):
        self.store = store
        self.exams = exams
        self.selector = selector
        self.clock = clock
        self.allow_submit_while_locked = (
            settings.allow_submit_while_locked
            if allow_submit_while_locked is None else allow_submit_while_locked
        )
        self.violation_reopens_blocked = (
            settings.violation_reopens_blocked
            if violation_reopens_blocked is None else violation_reopens_blocked
        )

    def start(self, exam_id: str, user_id: str) -> Tuple[Exam, ExamSession]:
        exam = self.exams.get_exam(exam_id)
        if exam is None:
            logger.warning(f"start: exam {exam_id} not found (user={user_id})")
            raise ExamNotFound()

        existing = self.store.get(exam_id, user_id)
        if existing is not None:
            # Idempotent: no window check and no re-draw for an existing session
            return exam, existing

        now = self.clock()
        status = classify(exam.start_time, exam.end_time, now)
        if status != ExamStatus.LIVE:
            logger.info(f"start: exam {exam_id} is {status.value}, rejecting user {user_id}")
            raise ExamNotActive()

        questions = self.selector.draw(exam)
        db_session, created = self.store.create_if_absent(
            exam_id, user_id, self.selector.snapshot(questions), started_at=now
        )
        if created:
            logger.info(f"Session started (exam={exam_id}, user={user_id}, questions={len(questions)})")
        return exam, db_session

    def get_session(self, exam_id: str, user_id: str) -> ExamSession:
        return self._require(exam_id, user_id, "get_session")

    def report_violation(self, exam_id: str, user_id: str, reason: Optional[str],
                         event_id: Optional[str] = None) -> ExamSession:
        db_session = self._require(exam_id, user_id, "report_violation")

        reason = reason if reason and reason.strip() else UNKNOWN_REASON
        if not ViolationReason.is_known(reason):
            logger.info(f"Uncategorized violation reason '{reason}' (exam={exam_id}, user={user_id})")

        updates = {"status": SessionStatus.PAUSED.value, "awaiting_approval": True}
        if db_session.status == SessionStatus.BLOCKED.value and not self.violation_reopens_blocked:
            updates = {}

        db_session, appended = self.store.append_to(
            db_session,
            "violations",
            {"reason": reason, "time": self.clock(), "event_id": event_id},
            **updates
        )
        if appended:
            logger.info(f"Violation '{reason}' recorded (exam={exam_id}, user={user_id}, "
                        f"total={len(db_session.violations)}, status={db_session.status})")
        return db_session

    def resolve_approval(self, exam_id: str, user_id: str, approver_id: str,
                         approve: bool, note: Optional[str] = None) -> ExamSession:
        db_session = self._require(exam_id, user_id, "resolve_approval")

        status = SessionStatus.ONGOING if approve else SessionStatus.BLOCKED
        db_session, _ = self.store.append_to(
            db_session,
            "approvals",
            {
                "approver_id": approver_id,
                "approved": bool(approve),
                "note": note or "",
                "time": self.clock(),
            },
            status=status.value,
            awaiting_approval=False
        )
        logger.info(f"Session {'approved' if approve else 'blocked'} by {approver_id} "
                    f"(exam={exam_id}, user={user_id})")
        return db_session

    def submit(self, exam_id: str, user_id: str, answers: Optional[Dict[str, Any]]) -> ExamSession:
        db_session = self._require(exam_id, user_id, "submit")

        locked = db_session.status == SessionStatus.BLOCKED.value or db_session.awaiting_approval
        if locked and not self.allow_submit_while_locked:
            logger.warning(f"submit rejected for locked session (exam={exam_id}, user={user_id}, "
                           f"status={db_session.status})")
            raise SessionLocked()
        if locked:
            logger.warning(f"Accepting submission from locked session (exam={exam_id}, user={user_id}, "
                           f"status={db_session.status})")

        db_session = self.store.merge_update(
            db_session,
            status=SessionStatus.SUBMITTED.value,
            answers=dict(answers or {}),
            finished_at=self.clock()
        )
        logger.info(f"Session submitted (exam={exam_id}, user={user_id}, answers={len(db_session.answers)})")
        return db_session

    def _require(self, exam_id: str, user_id: str, operation: str) -> ExamSession:
        db_session = self.store.get(exam_id, user_id)
        if db_session is None:
            logger.warning(f"{operation}: no session (exam={exam_id}, user={user_id})")
            raise SessionNotFound()
        return db_session
