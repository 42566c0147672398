"""
Places API routes.

Listing and lookup read the curated repository only. Search and nearby also
pull live Geoapify results and merge them behind the repository places.
"""
from typing import Optional

from fastapi import APIRouter

from db import SessionLocal
from domain.errors import BadRequest, NotFound
from repositories import PlacesRepository
from services.place_search import DEFAULT_RADIUS_KM, PlaceSearchService

router = APIRouter()
places_repo = PlacesRepository()
search_service = PlaceSearchService(places_repo=places_repo)


@router.get("")
def list_places(category: Optional[str] = None, search: Optional[str] = None):
    with SessionLocal() as session:
        places = places_repo.list_places(session, category=category, search=search)
    return [p.to_dict() for p in places]


@router.get("/search")
def search_places(q: Optional[str] = None, external: bool = True):
    with SessionLocal() as session:
        return search_service.search(session, q or "", include_external=external)


@router.get("/nearby")
def nearby_places(
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    radius: float = DEFAULT_RADIUS_KM,
    external: bool = True,
):
    """Places within `radius` km of (lat, lng), nearest first."""
    if lat is None or lng is None:
        raise BadRequest("Latitude and longitude are required")
    with SessionLocal() as session:
        return search_service.nearby(session, lat, lng, radius_km=radius, include_external=external)


@router.get("/{place_id}")
def get_place(place_id: int):
    with SessionLocal() as session:
        place = places_repo.get_place(session, place_id)
    if not place:
        raise NotFound("Place not found")
    return place.to_dict()
