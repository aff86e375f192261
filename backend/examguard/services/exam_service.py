from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime
from typing import List, Optional
import logging
import uuid

from ..core.cache import CacheManager, cache as default_cache
from ..core.database import retry_read
from ..core.exceptions import StoreUnavailable, ValidationError
from ..models.exam import Exam as ExamModel
from ..models.user import User
from ..schemas.exam import Exam, ExamCreate, ExamListing, ExamStatus
from ..utils.timezone import utc_now
from . import scheduling

logger = logging.getLogger(__name__)


class ExamService:
    CACHE_PREFIX = "exam:"

    def __init__(self, db: Session, cache: Optional[CacheManager] = None):
        self.db = db
        self.cache = cache or default_cache

    def create_exam(self, exam_data: ExamCreate, created_by: str) -> Exam:
        db_exam = ExamModel(
            id=uuid.uuid4().hex,
            name=exam_data.name,
            year=int(exam_data.year),
            department=scheduling.normalize_department(exam_data.department),
            section=scheduling.normalize_section(exam_data.section),
            duration_minutes=exam_data.duration_minutes,
            start_time=exam_data.start_time,
            end_time=exam_data.end_time,
            random_question_count=exam_data.random_question_count,
            created_by=created_by,
            created_at=utc_now(),
        )
        self.db.add(db_exam)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Create exam failed (name={exam_data.name}, by={created_by}): {e}")
            raise StoreUnavailable()

        self.db.refresh(db_exam)
        exam = Exam.model_validate(db_exam)
        logger.info(f"Exam {exam.id} created by {created_by} "
                    f"(year={exam.year}, department={exam.department}, section={exam.section})")
        return exam

    def get_exam(self, exam_id: str) -> Optional[Exam]:
        """Exams are immutable once created, so cached copies never go stale."""
        cache_key = f"{self.CACHE_PREFIX}{exam_id}"
        cached = self.cache.get(cache_key)
        if cached:
            return Exam.model_validate(cached)

        db_exam = retry_read(
            self.db,
            lambda: self.db.query(ExamModel).filter(ExamModel.id == exam_id).first(),
            description=f"exam get (exam={exam_id})"
        )
        if db_exam is None:
            return None

        exam = Exam.model_validate(db_exam)
        self.cache.set(cache_key, exam.model_dump(mode="json"))
        return exam

    def list_for_admin(self, now: Optional[datetime] = None) -> List[ExamListing]:
        now = now or utc_now()
        exams = retry_read(
            self.db,
            lambda: self.db.query(ExamModel).order_by(ExamModel.start_time).all(),
            description="exam list"
        )
        return [self._with_status(exam, now) for exam in exams]

    def list_for_student(self, profile: Optional[User], now: Optional[datetime] = None) -> List[ExamListing]:
        if profile is None or not profile.year or not (profile.department or "").strip():
            raise ValidationError("User profile (year, department) not set")

        try:
            student_year = int(profile.year)
        except (TypeError, ValueError):
            raise ValidationError("User profile year must be a number")

        now = now or utc_now()
        exams = retry_read(
            self.db,
            lambda: self.db.query(ExamModel)
            .filter(ExamModel.year == student_year)
            .order_by(ExamModel.start_time)
            .all(),
            description=f"exam list (year={student_year})"
        )

        listings = []
        for exam in exams:
            if not scheduling.is_eligible(exam.year, exam.department, student_year, profile.department):
                continue
            listing = self._with_status(exam, now)
            if scheduling.is_visible_to_students(listing.status):
                listings.append(listing)
        return listings

    @staticmethod
    def _with_status(db_exam: ExamModel, now: datetime) -> ExamListing:
        status = scheduling.classify(db_exam.start_time, db_exam.end_time, now)
        return ExamListing(
            **Exam.model_validate(db_exam).model_dump(),
            status=status,
            is_live=status == ExamStatus.LIVE,
            is_upcoming=status == ExamStatus.UPCOMING,
        )
