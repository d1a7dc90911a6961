"""
Auth feature: credential store over the users table.
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from notesapp.core.exceptions import ConflictError
from notesapp.features.auth.models import User


class UserRepository:
    """Persists user records. Emails are matched exactly as stored."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, email: str, password_hash: str) -> User:
        """Insert a user.

        Raises:
            ConflictError: If the email is already registered.
        """
        user = User(email=email, password_hash=password_hash)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("Email already registered") from e
        self.db.refresh(user)
        return user

    def find_by_email(self, email: str) -> User | None:
        return self.db.scalars(select(User).where(User.email == email)).first()

    def find_by_id(self, user_id: str) -> User | None:
        return self.db.get(User, user_id)
