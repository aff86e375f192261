from sqlalchemy import Column, String, Integer, DateTime
from datetime import datetime
from ..core.database import Base


class User(Base):
    """Profile record kept by the identity provider; read-only here."""
    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True)
    email = Column(String, unique=True, index=True)
    full_name = Column(String, nullable=True)
    role = Column(String, default="student")
    year = Column(Integer, nullable=True)
    department = Column(String, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
