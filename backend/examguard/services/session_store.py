"""
Persistence boundary for exam sessions.

Sessions are addressed by ``(exam_id, user_id)``. Creation is guarded by the
table's unique constraint, and the violation/approval lists are separate
insert-only tables, so concurrent appends can never overwrite each other.
Session fields are always written with an explicit UPDATE, never diffed
against a possibly stale in-memory row.
"""
from sqlalchemy import update
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
import logging

from ..core.database import retry_read
from ..core.exceptions import StoreUnavailable
from ..models.exam import ExamSession, SessionViolation, SessionApproval

logger = logging.getLogger(__name__)


class SessionStore:
    APPENDABLE = {
        "violations": SessionViolation,
        "approvals": SessionApproval,
    }

    def __init__(self, db: Session):
        self.db = db

    def get(self, exam_id: str, user_id: str) -> Optional[ExamSession]:
        return retry_read(
            self.db,
            lambda: self.db.query(ExamSession).filter(
                ExamSession.exam_id == exam_id,
                ExamSession.user_id == user_id
            ).first(),
            description=f"session get (exam={exam_id}, user={user_id})"
        )

    def list_for_exam(self, exam_id: str) -> List[ExamSession]:
        return retry_read(
            self.db,
            lambda: self.db.query(ExamSession)
            .filter(ExamSession.exam_id == exam_id)
            .order_by(ExamSession.id)
            .all(),
            description=f"session list (exam={exam_id})"
        )

    def create_if_absent(self, exam_id: str, user_id: str,
                         questions: List[Dict[str, Any]],
                         started_at: datetime) -> Tuple[ExamSession, bool]:
        """Returns ``(session, created)``; an existing session is returned untouched."""
        existing = self.get(exam_id, user_id)
        if existing is not None:
            return existing, False

        db_session = ExamSession(
            exam_id=exam_id,
            user_id=user_id,
            status="ongoing",
            questions=questions,
            awaiting_approval=False,
            started_at=started_at,
            updated_at=started_at,
        )
        self.db.add(db_session)
        try:
            self.db.commit()
        except IntegrityError:
            # Another request created the session between our check and insert
            self.db.rollback()
            winner = self.get(exam_id, user_id)
            if winner is None:
                logger.error(f"Session insert conflicted but no session found (exam={exam_id}, user={user_id})")
                raise StoreUnavailable()
            logger.info(f"Concurrent start resolved to existing session (exam={exam_id}, user={user_id})")
            return winner, False
        except SQLAlchemyError as e:
            self._fail(e, "create", exam_id, user_id)

        self.db.refresh(db_session)
        return db_session, True

    def merge_update(self, db_session: ExamSession, **fields) -> ExamSession:
        """Overwrite only the named fields."""
        try:
            self._write(db_session.id, fields)
            self.db.commit()
        except SQLAlchemyError as e:
            self._fail(e, "merge_update", db_session.exam_id, db_session.user_id)

        self.db.refresh(db_session)
        return db_session

    def append_to(self, db_session: ExamSession, field: str, record: Dict[str, Any],
                  **updates) -> Tuple[ExamSession, bool]:
        """
        Append one record to ``violations`` or ``approvals`` and apply
        ``updates`` to the session in the same transaction.

        Returns ``(session, appended)``. A record whose ``event_id`` is already
        stored for this session is skipped, which makes client retries safe.
        Records without an ``event_id`` are appended on every call, so a
        blindly retried request can duplicate them.
        """
        try:
            model = self.APPENDABLE[field]
        except KeyError:
            raise ValueError(f"Unknown appendable field: {field}")

        event_id = record.get("event_id")
        if event_id and self._has_event(model, db_session.id, event_id):
            logger.info(f"Duplicate {field} event {event_id} ignored "
                        f"(exam={db_session.exam_id}, user={db_session.user_id})")
            return db_session, False

        try:
            self.db.add(model(session_id=db_session.id, **record))
            self._write(db_session.id, updates)
            self.db.commit()
        except IntegrityError:
            # Lost a race with a retry of the same event
            self.db.rollback()
            self.db.refresh(db_session)
            return db_session, False
        except SQLAlchemyError as e:
            self._fail(e, f"append {field}", db_session.exam_id, db_session.user_id)

        self.db.refresh(db_session)
        return db_session, True

    def _write(self, session_id: int, fields: Dict[str, Any]):
        # Values are sent even when they match the loaded row, which may be stale
        if fields:
            self.db.execute(
                update(ExamSession)
                .where(ExamSession.id == session_id)
                .values(**fields)
                .execution_options(synchronize_session=False)
            )

    def _has_event(self, model, session_id: int, event_id: str) -> bool:
        if not hasattr(model, "event_id"):
            return False
        return retry_read(
            self.db,
            lambda: self.db.query(model.id).filter(
                model.session_id == session_id,
                model.event_id == event_id
            ).first() is not None,
            description=f"event lookup (session={session_id})"
        )

    def _fail(self, error: Exception, operation: str, exam_id: str, user_id: str):
        self.db.rollback()
        logger.error(f"Session {operation} failed (exam={exam_id}, user={user_id}): {error}")
        raise StoreUnavailable()
