"""
Geoapify proxy routes.

These forward to Geoapify directly; upstream failures surface as 502
instead of degrading to empty results.
"""
from typing import Optional

from fastapi import APIRouter

from domain.errors import BadRequest
from services.geoapify_client import get_default_geoapify_client

router = APIRouter()


@router.get("/search")
def search(
    query: Optional[str] = None,
    lat: Optional[float] = None,
    lon: Optional[float] = None,
    radius: float = 50000,
    categories: str = "tourism",
    limit: int = 20,
):
    if not query and (lat is None or lon is None):
        raise BadRequest("Query or coordinates (lat, lon) are required")
    places = get_default_geoapify_client().search(
        query=query, lat=lat, lon=lon, radius_m=radius, categories=categories, limit=limit
    )
    return {
        "total": len(places),
        "searchParams": {"query": query, "lat": lat, "lon": lon, "radius": radius, "categories": categories},
        "places": [p.to_dict() for p in places],
    }


@router.get("/nearby")
def nearby(
    lat: Optional[float] = None,
    lon: Optional[float] = None,
    radius: float = 10000,
    type: str = "attraction",
):
    """Attractions around a point; `radius` is in metres."""
    if lat is None or lon is None:
        raise BadRequest("Latitude and longitude are required")
    attractions = get_default_geoapify_client().nearby(lat, lon, radius_m=radius, kind=type)
    return {
        "searchCenter": {"lat": lat, "lon": lon},
        "radius": radius,
        "type": type,
        "totalFound": len(attractions),
        "attractions": [a.to_dict() for a in attractions],
    }


@router.get("/details/{place_id}")
def details(place_id: str):
    return get_default_geoapify_client().place_details(place_id)


@router.get("/geocode")
def geocode(address: Optional[str] = None):
    if not address or not address.strip():
        raise BadRequest("Address is required")
    results = get_default_geoapify_client().geocode(address.strip())
    return {"query": address, "totalResults": len(results), "results": results}


@router.get("/autocomplete")
def autocomplete(text: Optional[str] = None):
    if not text or len(text.strip()) < 2:
        raise BadRequest("Text must be at least 2 characters")
    suggestions = get_default_geoapify_client().autocomplete(text.strip())
    return {"query": text, "suggestions": suggestions}
