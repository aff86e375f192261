from sqlalchemy import Column, String, DateTime, Integer, Text, JSON
from datetime import datetime
from ..core.database import Base


class Question(Base):
    __tablename__ = "questions"

    id = Column(String, primary_key=True, index=True)
    text = Column(Text, nullable=False)
    choices = Column(JSON, default=list)
    answer = Column(Text, nullable=True)
    year = Column(Integer, index=True)
    department = Column(String, index=True)
    section = Column(String, index=True)
    created_by = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<Question {self.id} {self.section}/{self.year}/{self.department}>"
