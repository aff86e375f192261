from typing import List, Optional

from ..core.exceptions import ExamNotFound
from ..models.exam import ExamSession
from .session_service import ExamSessionService


class ApprovalService:
    """
    Admin side of the violation review loop: list sessions, find the ones
    waiting for a decision, and resolve them. Decisions are committed before
    returning, so the next listing on any connection sees them.
    """

    def __init__(self, sessions: ExamSessionService):
        self.sessions = sessions

    def list_sessions(self, exam_id: str) -> List[ExamSession]:
        return self.sessions.store.list_for_exam(exam_id)

    def pending_approvals(self, exam_id: str) -> List[ExamSession]:
        return [s for s in self.list_sessions(exam_id) if s.awaiting_approval]

    def resolve(self, exam_id: str, user_id: str, approver_id: str,
                approve: bool, note: Optional[str] = None) -> ExamSession:
        if self.sessions.exams.get_exam(exam_id) is None:
            raise ExamNotFound()

        return self.sessions.resolve_approval(exam_id, user_id, approver_id, approve, note)
