from sqlalchemy.orm import Session
from typing import Optional

from ..core.database import retry_read
from ..models.user import User


class UserService:
    """Read-only access to profiles kept by the identity provider."""

    def __init__(self, db: Session):
        self.db = db

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        return retry_read(
            self.db,
            lambda: self.db.query(User).filter(User.id == user_id).first(),
            description=f"user get (user={user_id})"
        )

    def is_admin(self, user_id: str) -> bool:
        user = self.get_user_by_id(user_id)
        return bool(user and user.is_admin)
