from sqlalchemy.orm import Session
from typing import Dict, List, Optional
import logging
import random

from ..models.question import Question
from ..schemas.exam import Exam
from ..core.database import retry_read
from .scheduling import GENERAL_DEPARTMENT, normalize_department, normalize_section

logger = logging.getLogger(__name__)


class QuestionBank:
    """Filtered, read-only lookup over the question pool."""

    def __init__(self, db: Session):
        self.db = db

    def find(self, section: Optional[str] = None, year: Optional[int] = None,
             department: Optional[str] = None) -> List[Question]:
        query = self.db.query(Question)
        if section:
            query = query.filter(Question.section == normalize_section(section))
        if year:
            query = query.filter(Question.year == int(year))
        if department:
            query = query.filter(Question.department == normalize_department(department))

        return retry_read(
            self.db,
            lambda: query.order_by(Question.created_at, Question.id).all(),
            description=f"question lookup (section={section}, year={year}, department={department})"
        )


class QuestionSelector:
    def __init__(self, bank: QuestionBank, rng: Optional[random.Random] = None):
        self.bank = bank
        self.rng = rng or random.SystemRandom()

    def candidates(self, exam: Exam) -> List[Question]:
        # A general exam draws from every department's questions
        department = None if exam.department == GENERAL_DEPARTMENT else exam.department
        return self.bank.find(section=exam.section, year=exam.year, department=department)

    def draw(self, exam: Exam) -> List[Question]:
        """
        Sample ``min(random_question_count, len(candidates))`` questions
        without replacement. ``random.sample`` is uniform over both the chosen
        subset and its order. A missing or zero count selects every candidate.
        """
        candidates = self.candidates(exam)
        count = exam.random_question_count or len(candidates)
        count = min(count, len(candidates))

        if not candidates:
            logger.warning(f"No questions match exam {exam.id} "
                           f"(section={exam.section}, year={exam.year}, department={exam.department})")

        return self.rng.sample(candidates, count)

    @staticmethod
    def snapshot(questions: List[Question]) -> List[Dict]:
        """Student-facing copy of the drawn questions, without the answer key"""
        return [
            {"id": q.id, "text": q.text, "choices": list(q.choices or [])}
            for q in questions
        ]
