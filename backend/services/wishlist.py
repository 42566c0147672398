"""
Wishlist operations with ownership checks.

An entry is either absent or present for a (user, place) pair. Adding a pair
that already exists is rejected, and the database unique constraint backs
that check up when two requests race.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from domain.errors import BadRequest, Forbidden, NotFound
from domain.models import WishlistEntry
from repositories import PlacesRepository, WishlistRepository

logger = logging.getLogger(__name__)

ALREADY_EXISTS_MESSAGE = "Place already in your wishlist"


class WishlistService:
    def __init__(
        self,
        wishlist_repo: Optional[WishlistRepository] = None,
        places_repo: Optional[PlacesRepository] = None,
    ):
        self.wishlist_repo = wishlist_repo or WishlistRepository()
        self.places_repo = places_repo or PlacesRepository()

    def list_entries(self, session: Session, user_id: int) -> List[WishlistEntry]:
        return self.wishlist_repo.list_for_user(session, user_id)

    def add(
        self,
        session: Session,
        user_id: int,
        place_id: Optional[int],
        notes: Optional[str] = None,
        visit_date: Optional[datetime] = None,
    ) -> WishlistEntry:
        if not place_id:
            raise BadRequest("placeId is required")
        if not self.places_repo.get_place(session, place_id):
            raise NotFound("Place not found")
        if self.wishlist_repo.find_entry(session, user_id, place_id):
            raise BadRequest(ALREADY_EXISTS_MESSAGE)
        try:
            return self.wishlist_repo.create_entry(
                session, user_id, place_id, notes=notes or None, visit_date=visit_date
            )
        except IntegrityError:
            logger.info("Concurrent wishlist add lost the race: user=%s place=%s", user_id, place_id)
            raise BadRequest(ALREADY_EXISTS_MESSAGE)

    def _owned_entry(self, session: Session, user_id: int, entry_id: int, action: str) -> WishlistEntry:
        entry = self.wishlist_repo.get_entry(session, entry_id)
        if not entry:
            raise NotFound("Wishlist item not found")
        if entry.user_id != user_id:
            raise Forbidden(f"You are not authorized to {action} this item")
        return entry

    def update(self, session: Session, user_id: int, entry_id: int, **changes: Any) -> WishlistEntry:
        """Update notes and/or visit_date; only keys present in `changes` are written."""
        self._owned_entry(session, user_id, entry_id, "update")
        fields = {k: v for k, v in changes.items() if k in ("notes", "visit_date")}
        return self.wishlist_repo.update_entry(session, entry_id, **fields)

    def remove(self, session: Session, user_id: int, entry_id: int) -> Dict[str, Any]:
        entry = self._owned_entry(session, user_id, entry_id, "delete")
        self.wishlist_repo.delete_entry(session, entry_id)
        return {"id": entry.place.id, "name": entry.place.name} if entry.place else {"id": entry.place_id}
