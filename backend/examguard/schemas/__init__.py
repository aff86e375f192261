from .exam import Exam, ExamCreate, ExamListing, ExamStatus
from .session import (
    AdminExamSession,
    ExamSession,
    SessionQuestion,
    SessionStatus,
    ViolationReason,
    ViolationRecord,
    ApprovalRecord,
    StartExamResponse,
    ViolationReport,
    ApprovalDecision,
    SubmitRequest,
)

__all__ = [
    "Exam",
    "ExamCreate",
    "ExamListing",
    "ExamStatus",
    "ExamSession",
    "AdminExamSession",
    "SessionQuestion",
    "SessionStatus",
    "ViolationReason",
    "ViolationRecord",
    "ApprovalRecord",
    "StartExamResponse",
    "ViolationReport",
    "ApprovalDecision",
    "SubmitRequest"
]
