"""
Wishlist repository backed by SQLAlchemy.
"""
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session, joinedload

from domain.models import WishlistEntry
from repositories.models import WishlistEntryORM
from repositories.places import place_from_orm

_UNSET = object()


def _entry_from_orm(orm: WishlistEntryORM) -> WishlistEntry:
    return WishlistEntry(
        id=orm.id,
        user_id=orm.user_id,
        place_id=orm.place_id,
        notes=orm.notes,
        visit_date=orm.visit_date,
        created_at=orm.created_at,
        updated_at=orm.updated_at,
        place=place_from_orm(orm.place) if orm.place else None,
    )


class WishlistRepository:
    """CRUD operations for wishlist entries."""

    def list_for_user(self, session: Session, user_id: int, limit: Optional[int] = None) -> List[WishlistEntry]:
        query = (
            session.query(WishlistEntryORM)
            .options(joinedload(WishlistEntryORM.place))
            .filter(WishlistEntryORM.user_id == user_id)
            .order_by(WishlistEntryORM.created_at.desc(), WishlistEntryORM.id.desc())
        )
        if limit:
            query = query.limit(limit)
        return [_entry_from_orm(e) for e in query.all()]

    def get_entry(self, session: Session, entry_id: int) -> Optional[WishlistEntry]:
        orm = session.get(WishlistEntryORM, entry_id)
        return _entry_from_orm(orm) if orm else None

    def find_entry(self, session: Session, user_id: int, place_id: int) -> Optional[WishlistEntry]:
        orm = (
            session.query(WishlistEntryORM)
            .filter(WishlistEntryORM.user_id == user_id, WishlistEntryORM.place_id == place_id)
            .first()
        )
        return _entry_from_orm(orm) if orm else None

    def create_entry(
        self,
        session: Session,
        user_id: int,
        place_id: int,
        notes: Optional[str] = None,
        visit_date: Optional[datetime] = None,
    ) -> WishlistEntry:
        """Insert an entry. The (user_id, place_id) unique constraint raises IntegrityError on duplicates."""
        orm = WishlistEntryORM(user_id=user_id, place_id=place_id, notes=notes, visit_date=visit_date)
        session.add(orm)
        try:
            session.commit()
        except Exception:
            session.rollback()
            raise
        session.refresh(orm)
        return _entry_from_orm(orm)

    def update_entry(self, session: Session, entry_id: int, notes=_UNSET, visit_date=_UNSET) -> Optional[WishlistEntry]:
        orm = session.get(WishlistEntryORM, entry_id)
        if not orm:
            return None
        if notes is not _UNSET:
            orm.notes = notes
        if visit_date is not _UNSET:
            orm.visit_date = visit_date
        orm.updated_at = datetime.utcnow()
        session.add(orm)
        session.commit()
        session.refresh(orm)
        return _entry_from_orm(orm)

    def delete_entry(self, session: Session, entry_id: int) -> None:
        orm = session.get(WishlistEntryORM, entry_id)
        if orm:
            session.delete(orm)
            session.commit()

    def count_for_user(self, session: Session, user_id: int) -> int:
        return session.query(WishlistEntryORM).filter(WishlistEntryORM.user_id == user_id).count()
