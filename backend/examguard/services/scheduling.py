"""
Exam scheduling window and student eligibility rules.
"""
from datetime import datetime
from typing import Optional

from ..schemas.exam import ExamStatus

GENERAL_DEPARTMENT = "general"


def normalize_department(value: Optional[str]) -> str:
    return str(value).strip().lower() if value and str(value).strip() else GENERAL_DEPARTMENT


def normalize_section(value: Optional[str]) -> str:
    return str(value).strip().lower() if value and str(value).strip() else GENERAL_DEPARTMENT


def classify(start_time: datetime, end_time: datetime, now: datetime) -> ExamStatus:
    """The live window is inclusive at both ends."""
    if now < start_time:
        return ExamStatus.UPCOMING
    if now > end_time:
        return ExamStatus.ENDED
    return ExamStatus.LIVE


def is_eligible(exam_year: int, exam_department: str,
                student_year: int, student_department: Optional[str]) -> bool:
    """
    An exam is eligible when it targets the student's year and either the
    student's department or the general pool. First-year students have no
    declared major yet, so they only ever see general exams.
    """
    if int(exam_year) != int(student_year):
        return False

    exam_department = normalize_department(exam_department)
    if int(student_year) == 1:
        return exam_department == GENERAL_DEPARTMENT

    return exam_department in (normalize_department(student_department), GENERAL_DEPARTMENT)


def is_visible_to_students(status: ExamStatus) -> bool:
    return status in (ExamStatus.LIVE, ExamStatus.UPCOMING)
