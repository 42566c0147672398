"""
Wishlist API routes. Every route acts on the authenticated user's entries.
"""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from api.deps import get_current_user
from db import SessionLocal
from domain.models import User
from services.wishlist import WishlistService

router = APIRouter()
wishlist_service = WishlistService()
logger = logging.getLogger(__name__)


class WishlistCreate(BaseModel):
    placeId: Optional[int] = None
    notes: Optional[str] = None
    visitDate: Optional[datetime] = None


class WishlistUpdate(BaseModel):
    notes: Optional[str] = None
    visitDate: Optional[datetime] = None


@router.get("")
def list_wishlist(user: User = Depends(get_current_user)):
    with SessionLocal() as session:
        entries = wishlist_service.list_entries(session, user.id)
    return [e.to_dict() for e in entries]


@router.post("", status_code=201)
def add_to_wishlist(payload: WishlistCreate, user: User = Depends(get_current_user)):
    with SessionLocal() as session:
        entry = wishlist_service.add(
            session, user.id, payload.placeId, notes=payload.notes, visit_date=payload.visitDate
        )
    logger.info("User %s saved place %s", user.id, entry.place_id)
    return entry.to_dict()


@router.put("/{entry_id}")
def update_wishlist_item(entry_id: int, payload: WishlistUpdate, user: User = Depends(get_current_user)):
    """Partial update: only fields present in the body are written."""
    sent = payload.model_dump(exclude_unset=True)
    changes = {}
    if "notes" in sent:
        changes["notes"] = sent["notes"]
    if "visitDate" in sent:
        changes["visit_date"] = sent["visitDate"]
    with SessionLocal() as session:
        entry = wishlist_service.update(session, user.id, entry_id, **changes)
    return {"message": "Wishlist item updated", "data": entry.to_dict()}


@router.delete("/{entry_id}")
def remove_from_wishlist(entry_id: int, user: User = Depends(get_current_user)):
    with SessionLocal() as session:
        removed = wishlist_service.remove(session, user.id, entry_id)
    logger.info("User %s removed wishlist item %s", user.id, entry_id)
    return {"message": "Place removed from your wishlist", "removedPlace": removed}
