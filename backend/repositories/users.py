"""
User repository backed by SQLAlchemy.
"""
from typing import Optional
from sqlalchemy.orm import Session

from domain.models import User
from repositories.models import UserORM


def _user_from_orm(orm: UserORM) -> User:
    return User(
        id=orm.id,
        email=orm.email,
        password_hash=orm.password_hash,
        created_at=orm.created_at,
    )


class UsersRepository:
    """Lookup and creation of user accounts."""

    def get_user(self, session: Session, user_id: int) -> Optional[User]:
        orm = session.get(UserORM, user_id)
        return _user_from_orm(orm) if orm else None

    def get_by_email(self, session: Session, email: str) -> Optional[User]:
        orm = session.query(UserORM).filter(UserORM.email == email).first()
        return _user_from_orm(orm) if orm else None

    def create_user(self, session: Session, email: str, password_hash: Optional[str]) -> User:
        """Insert a user. A duplicate email surfaces as sqlalchemy's IntegrityError."""
        orm = UserORM(email=email, password_hash=password_hash)
        session.add(orm)
        try:
            session.commit()
        except Exception:
            session.rollback()
            raise
        session.refresh(orm)
        return _user_from_orm(orm)
