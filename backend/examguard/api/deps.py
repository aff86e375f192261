from datetime import datetime
from typing import Callable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from ..core.database import get_db
from ..core.exceptions import Forbidden, Unauthenticated
from ..core.security import Identity, IdentityVerifier, bearer_scheme, identity_verifier
from ..services.approval_service import ApprovalService
from ..services.exam_service import ExamService
from ..services.question_selector import QuestionBank, QuestionSelector
from ..services.session_service import ExamSessionService
from ..services.session_store import SessionStore
from ..services.user_service import UserService
from ..utils.timezone import utc_now


def get_identity_verifier() -> IdentityVerifier:
    return identity_verifier


def get_clock() -> Callable[[], datetime]:
    return utc_now


def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    verifier: IdentityVerifier = Depends(get_identity_verifier)
) -> Identity:
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("Missing token")
    return verifier.verify(credentials.credentials)


def get_current_admin(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
) -> Identity:
    if not UserService(db).is_admin(identity.user_id):
        raise Forbidden()
    return identity


def get_exam_service(db: Session = Depends(get_db)) -> ExamService:
    return ExamService(db)


def get_session_service(
    db: Session = Depends(get_db),
    exams: ExamService = Depends(get_exam_service),
    clock: Callable[[], datetime] = Depends(get_clock)
) -> ExamSessionService:
    return ExamSessionService(
        store=SessionStore(db),
        exams=exams,
        selector=QuestionSelector(QuestionBank(db)),
        clock=clock
    )


def get_approval_service(
    sessions: ExamSessionService = Depends(get_session_service)
) -> ApprovalService:
    return ApprovalService(sessions)
