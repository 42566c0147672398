"""
Location and text search over repository places plus live Geoapify results.

Repository results come first, Geoapify results second, and the two lists go
through merge_places. A Geoapify failure only costs its own results.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from domain.errors import BadRequest, ExternalAPIError
from domain.models import Place
from repositories import PlacesRepository
from services.geoapify_client import GeoapifyClient, get_default_geoapify_client
from services.place_merge import merge_places
from settings import settings

logger = logging.getLogger(__name__)

DEFAULT_RADIUS_KM = 10.0


def validate_coordinates(lat: float, lon: float) -> None:
    if not math.isfinite(lat) or not -90 <= lat <= 90:
        raise BadRequest("Invalid latitude")
    if not math.isfinite(lon) or not -180 <= lon <= 180:
        raise BadRequest("Invalid longitude")


class PlaceSearchService:
    def __init__(
        self,
        places_repo: Optional[PlacesRepository] = None,
        geoapify: Optional[GeoapifyClient] = None,
        external_enabled: Optional[bool] = None,
    ):
        self.places_repo = places_repo or PlacesRepository()
        self._geoapify = geoapify
        self._external_enabled = external_enabled

    @property
    def geoapify(self) -> GeoapifyClient:
        return self._geoapify or get_default_geoapify_client()

    def _external_allowed(self, requested: bool) -> bool:
        enabled = settings.EXTERNAL_SEARCH_ENABLED if self._external_enabled is None else self._external_enabled
        return requested and enabled and self.geoapify.configured

    def nearby(
        self,
        session: Session,
        lat: float,
        lon: float,
        radius_km: float = DEFAULT_RADIUS_KM,
        include_external: bool = True,
    ) -> Dict[str, Any]:
        validate_coordinates(lat, lon)
        if not math.isfinite(radius_km) or radius_km <= 0:
            raise BadRequest("Radius must be greater than 0")

        repo_places: List[Place] = []
        for place, distance_km in self.places_repo.find_nearby(session, lat, lon, radius_km):
            place.distance_m = round(distance_km * 1000, 1)
            repo_places.append(place)

        external: List[Place] = []
        if self._external_allowed(include_external):
            try:
                external = self.geoapify.nearby(lat, lon, radius_m=radius_km * 1000)
            except ExternalAPIError as exc:
                logger.warning("Nearby search continuing without Geoapify results: %s", exc)

        places = merge_places(repo_places, external)
        return {
            "searchLocation": {"latitude": lat, "longitude": lon},
            "radius": f"{radius_km:g}km",
            "totalFound": len(places),
            "places": [p.to_dict() for p in places],
        }

    def search(self, session: Session, query: str, include_external: bool = True) -> Dict[str, Any]:
        term = (query or "").strip()
        if not term:
            raise BadRequest("Search query is required")

        repo_places = self.places_repo.search(session, term)
        external: List[Place] = []
        if self._external_allowed(include_external):
            try:
                external = self.geoapify.search(query=term)
            except ExternalAPIError as exc:
                logger.warning("Text search continuing without Geoapify results: %s", exc)

        places = merge_places(repo_places, external)
        return {
            "query": term,
            "totalFound": len(places),
            "places": [p.to_dict() for p in places],
        }
