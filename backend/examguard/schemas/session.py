from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from .exam import Exam


class SessionStatus(str, Enum):
    ONGOING = "ongoing"
    PAUSED = "paused"
    BLOCKED = "blocked"
    SUBMITTED = "submitted"


class ViolationReason(str, Enum):
    """Tags emitted by the browser monitor. Other reasons are accepted as-is."""
    FULLSCREEN_EXIT = "fullscreen_exit"
    TAB_CHANGE = "tab_change"
    FORBIDDEN_SHORTCUT = "forbidden_shortcut"
    RIGHT_CLICK = "right_click"
    COPY = "copy"
    PASTE = "paste"
    LEAVE_ATTEMPT = "leave_attempt"

    @classmethod
    def is_known(cls, reason: str) -> bool:
        return reason in cls._value2member_map_


class CamelModel(BaseModel):
    class Config:
        from_attributes = True
        populate_by_name = True
        alias_generator = to_camel


class SessionQuestion(CamelModel):
    id: str
    text: str
    choices: List[Any] = []


class ViolationRecord(CamelModel):
    reason: str
    time: datetime
    event_id: Optional[str] = None


class ApprovalRecord(CamelModel):
    approver_id: str
    approved: bool
    note: str = ""
    time: datetime


class ExamSession(CamelModel):
    exam_id: str
    user_id: str
    status: SessionStatus
    questions: List[SessionQuestion] = []
    violations: List[ViolationRecord] = []
    approvals: List[ApprovalRecord] = []
    awaiting_approval: bool = False
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    answers: Optional[Dict[str, Any]] = None


class AdminExamSession(ExamSession):
    """Reviewer view of a session, with the row id and last write time."""
    id: int
    updated_at: Optional[datetime] = None


class StartExamResponse(CamelModel):
    exam: Exam
    session: ExamSession


class ViolationReport(CamelModel):
    reason: Optional[str] = None
    event_id: Optional[str] = Field(default=None, max_length=128)


class ApprovalDecision(CamelModel):
    approve: bool = True
    note: Optional[str] = None


class SubmitRequest(CamelModel):
    answers: Dict[str, Any] = {}
