from typing import Optional


class ExamGuardError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500
    error = "internal_error"
    default_message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(ExamGuardError):
    status_code = 401
    error = "unauthenticated"
    default_message = "Could not validate credentials"


class Forbidden(ExamGuardError):
    status_code = 403
    error = "forbidden"
    default_message = "Admin access required"


class ExamNotFound(ExamGuardError):
    status_code = 404
    error = "exam_not_found"
    default_message = "Exam not found"


class SessionNotFound(ExamGuardError):
    status_code = 404
    error = "session_not_found"
    default_message = "Exam session not found"


class ExamNotActive(ExamGuardError):
    status_code = 400
    error = "exam_not_active"
    default_message = "Exam not active"


class ValidationError(ExamGuardError):
    status_code = 400
    error = "validation_error"
    default_message = "Invalid request"


class SessionLocked(ExamGuardError):
    status_code = 409
    error = "session_locked"
    default_message = "Session is blocked or awaiting approval"


class StoreUnavailable(ExamGuardError):
    status_code = 503
    error = "store_unavailable"
    default_message = "Storage backend is temporarily unavailable"
