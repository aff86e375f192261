from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session
from typing import List

from ....core.config import settings
from ....core.database import get_db
from ....core.security import Identity
from ....api import deps
from ....models.exam import ExamSession as ExamSessionModel
from ....schemas.exam import Exam, ExamCreate, ExamListing
from ....schemas.session import (
    AdminExamSession,
    ApprovalDecision,
    ExamSession,
    StartExamResponse,
    SubmitRequest,
    ViolationReport,
)
from ....services.approval_service import ApprovalService
from ....services.exam_service import ExamService
from ....services.session_service import ExamSessionService
from ....services.user_service import UserService

router = APIRouter()


def _session_response(db_session: ExamSessionModel, response: Response) -> ExamSession:
    # Clients poll their session until an admin decides
    if db_session.awaiting_approval:
        response.headers["X-Poll-Interval"] = str(settings.approval_poll_interval_seconds)
    return ExamSession.model_validate(db_session)


@router.post("", response_model=Exam)
def create_exam(
    exam_data: ExamCreate,
    admin: Identity = Depends(deps.get_current_admin),
    exams: ExamService = Depends(deps.get_exam_service)
):
    """Create an exam. Department and section are normalized to lower case."""
    return exams.create_exam(exam_data, created_by=admin.user_id)


@router.get("/admin", response_model=List[ExamListing])
def list_exams_for_admin(
    admin: Identity = Depends(deps.get_current_admin),
    exams: ExamService = Depends(deps.get_exam_service)
):
    return exams.list_for_admin()


@router.get("/student", response_model=List[ExamListing])
def list_exams_for_student(
    identity: Identity = Depends(deps.get_current_identity),
    exams: ExamService = Depends(deps.get_exam_service),
    db: Session = Depends(get_db)
):
    """Live and upcoming exams matching the caller's year and department."""
    profile = UserService(db).get_user_by_id(identity.user_id)
    return exams.list_for_student(profile)


@router.post("/{exam_id}/start", response_model=StartExamResponse)
def start_exam(
    exam_id: str,
    response: Response,
    identity: Identity = Depends(deps.get_current_identity),
    sessions: ExamSessionService = Depends(deps.get_session_service)
):
    exam, db_session = sessions.start(exam_id, identity.user_id)
    return StartExamResponse(exam=exam, session=_session_response(db_session, response))


@router.get("/{exam_id}/session", response_model=ExamSession)
def get_my_session(
    exam_id: str,
    response: Response,
    identity: Identity = Depends(deps.get_current_identity),
    sessions: ExamSessionService = Depends(deps.get_session_service)
):
    return _session_response(sessions.get_session(exam_id, identity.user_id), response)


@router.post("/{exam_id}/submit", response_model=ExamSession)
def submit_exam(
    exam_id: str,
    body: SubmitRequest,
    response: Response,
    identity: Identity = Depends(deps.get_current_identity),
    sessions: ExamSessionService = Depends(deps.get_session_service)
):
    return _session_response(sessions.submit(exam_id, identity.user_id, body.answers), response)


@router.post("/{exam_id}/violation", response_model=ExamSession)
def report_violation(
    exam_id: str,
    body: ViolationReport,
    response: Response,
    identity: Identity = Depends(deps.get_current_identity),
    sessions: ExamSessionService = Depends(deps.get_session_service)
):
    """Record a monitor signal; the session pauses until an admin decides."""
    db_session = sessions.report_violation(exam_id, identity.user_id, body.reason, body.event_id)
    return _session_response(db_session, response)


@router.get("/{exam_id}/sessions", response_model=List[AdminExamSession])
def list_sessions(
    exam_id: str,
    admin: Identity = Depends(deps.get_current_admin),
    approvals: ApprovalService = Depends(deps.get_approval_service)
):
    return [AdminExamSession.model_validate(s) for s in approvals.list_sessions(exam_id)]


@router.get("/{exam_id}/sessions/pending", response_model=List[AdminExamSession])
def list_pending_sessions(
    exam_id: str,
    response: Response,
    admin: Identity = Depends(deps.get_current_admin),
    approvals: ApprovalService = Depends(deps.get_approval_service)
):
    response.headers["X-Poll-Interval"] = str(settings.approval_poll_interval_seconds)
    return [AdminExamSession.model_validate(s) for s in approvals.pending_approvals(exam_id)]


@router.post("/{exam_id}/sessions/{user_id}/approve", response_model=AdminExamSession)
def resolve_session(
    exam_id: str,
    user_id: str,
    decision: ApprovalDecision,
    admin: Identity = Depends(deps.get_current_admin),
    approvals: ApprovalService = Depends(deps.get_approval_service)
):
    db_session = approvals.resolve(exam_id, user_id, admin.user_id, decision.approve, decision.note)
    return AdminExamSession.model_validate(db_session)
