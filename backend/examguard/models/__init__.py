from .user import User
from .question import Question
from .exam import Exam, ExamSession, SessionViolation, SessionApproval

__all__ = [
    "User",
    "Question",
    "Exam",
    "ExamSession",
    "SessionViolation",
    "SessionApproval"
]
