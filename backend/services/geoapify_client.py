"""
Geoapify Places / Geocoding client.

Maps Geoapify GeoJSON features into the internal Place shape. Every provider
failure (network, HTTP status, bad JSON, missing key) is raised as a single
ExternalAPIError so callers only have one thing to catch.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import requests

from domain.errors import ExternalAPIError, NotFound
from domain.models import Coordinate, NamedLocation, Place, PlaceSource
from services.image_search import fallback_image_url
from settings import settings

GEOAPIFY_PLACES_URL = "https://api.geoapify.com/v2"
GEOAPIFY_GEOCODE_URL = "https://api.geoapify.com/v1/geocode"

NEARBY_CATEGORIES = {
    "attraction": "tourism.attraction,tourism.sights",
    "museum": "tourism.museum",
    "beach": "beach",
    "mountain": "natural.mountain",
}
NEARBY_MAX_RESULTS = 20
NEARBY_DEFAULT_RATING = 4.0

# Order matters: the first tag present decides the label.
CATEGORY_LABELS = [
    ("tourism.attraction", "Attraction"),
    ("tourism.sights", "Sights"),
    ("tourism.museum", "Museum"),
    ("beach", "Pantai"),
    ("natural", "Natural"),
    ("entertainment", "Entertainment"),
]
DEFAULT_CATEGORY_LABEL = "Tourism"


def category_label(categories: Optional[Sequence[str]]) -> str:
    """Human-readable label for a list of Geoapify category tags."""
    tags = list(categories or [])
    for key, label in CATEGORY_LABELS:
        for tag in tags:
            if tag == key or tag.startswith(key + "."):
                return label
    return DEFAULT_CATEGORY_LABEL


def short_location(formatted: Optional[str]) -> Optional[str]:
    """Last two comma-separated parts of a formatted address ('Badung, Indonesia')."""
    if not formatted:
        return formatted
    parts = formatted.split(",")
    if len(parts) > 1:
        return ",".join(parts[-2:]).strip()
    return formatted


def _describe(name: Optional[str], location: Optional[str], label: str, distance_m: Optional[float]) -> str:
    if name and distance_m is not None:
        return (
            f"Interesting place in {location}. Category: {label}. "
            f"Distance: {distance_m / 1000:.1f} km from your location."
        )
    return f"Tourist destination in {location}"


def _to_float(value: Any) -> Optional[float]:
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


class GeoapifyClient:
    def __init__(
        self,
        api_key: Optional[str],
        session: Optional[requests.Session] = None,
        places_url: str = GEOAPIFY_PLACES_URL,
        geocode_url: str = GEOAPIFY_GEOCODE_URL,
        timeout: float = 10.0,
    ):
        self.api_key = api_key
        self.session = session or requests.Session()
        self.places_url = places_url.rstrip("/")
        self.geocode_url = geocode_url.rstrip("/")
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _get(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        if not self.api_key:
            raise ExternalAPIError("Geoapify API Error: API key is not configured")
        query = dict(params, apiKey=self.api_key)
        try:
            resp = self.session.get(url, params=query, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ExternalAPIError(f"Geoapify API Error: {exc}") from exc

        if resp.status_code >= 400:
            message = f"HTTP {resp.status_code}"
            try:
                body = resp.json()
                if isinstance(body, dict) and body.get("message"):
                    message = body["message"]
            except ValueError:
                pass
            raise ExternalAPIError(f"Geoapify API Error: {message}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise ExternalAPIError(f"Geoapify API Error: invalid JSON response ({exc})") from exc
        if not isinstance(data, dict):
            raise ExternalAPIError("Geoapify API Error: unexpected response shape")
        return data

    @staticmethod
    def _features(data: Dict[str, Any]) -> List[Dict[str, Any]]:
        return [f.get("properties") or {} for f in data.get("features") or []]

    def search(
        self,
        query: Optional[str] = None,
        lat: Optional[float] = None,
        lon: Optional[float] = None,
        radius_m: float = 50000,
        categories: str = "tourism",
        limit: int = 20,
    ) -> List[Place]:
        """Free-text and/or circle search. Unnamed features are dropped."""
        params: Dict[str, Any] = {"categories": categories, "limit": limit}
        if lat is not None and lon is not None:
            params["filter"] = f"circle:{lon},{lat},{radius_m}"
            params["bias"] = f"proximity:{lon},{lat}"
        if query:
            params["text"] = query

        data = self._get(f"{self.places_url}/places", params)
        results: List[Place] = []
        for props in self._features(data):
            name = props.get("name") or props.get("formatted")
            if not name:
                continue
            plat, plon = _to_float(props.get("lat")), _to_float(props.get("lon"))
            results.append(
                Place(
                    name=name,
                    description=props.get("formatted"),
                    address=props.get("formatted"),
                    location=Coordinate(plat, plon) if plat is not None and plon is not None else None,
                    latitude=plat,
                    longitude=plon,
                    category=category_label(props.get("categories")),
                    source=PlaceSource.GEOAPIFY,
                    external_id=props.get("place_id"),
                    distance_m=_to_float(props.get("distance")),
                )
            )
        self.logger.debug("Geoapify search query=%r lat=%s lon=%s got %d results", query, lat, lon, len(results))
        return results

    def nearby(
        self,
        lat: float,
        lon: float,
        radius_m: float = 10000,
        kind: str = "attraction",
        limit: int = 30,
    ) -> List[Place]:
        """Attractions around a point, nearest first, deduplicated by name."""
        params = {
            "categories": NEARBY_CATEGORIES.get(kind, "tourism"),
            "filter": f"circle:{lon},{lat},{radius_m}",
            "bias": f"proximity:{lon},{lat}",
            "limit": limit,
        }
        data = self._get(f"{self.places_url}/places", params)

        seen: set[str] = set()
        attractions: List[Place] = []
        for props in self._features(data):
            name = props.get("name")
            if not name or name.lower() in seen:
                continue
            seen.add(name.lower())
            label = category_label(props.get("categories"))
            location = short_location(props.get("formatted"))
            distance = _to_float(props.get("distance"))
            attractions.append(
                Place(
                    name=name,
                    description=_describe(name, location, label, distance),
                    location=NamedLocation(location) if location else None,
                    address=props.get("formatted"),
                    latitude=_to_float(props.get("lat")),
                    longitude=_to_float(props.get("lon")),
                    image_url=fallback_image_url(name, label),
                    category=label,
                    rating=NEARBY_DEFAULT_RATING,
                    source=PlaceSource.GEOAPIFY,
                    external_id=props.get("place_id"),
                    distance_m=distance,
                )
            )
            if len(attractions) >= NEARBY_MAX_RESULTS:
                break

        attractions.sort(key=lambda p: p.distance_m if p.distance_m is not None else float("inf"))
        self.logger.debug(
            "Geoapify nearby lat=%.6f lon=%.6f radius_m=%.0f kind=%s got %d results",
            lat,
            lon,
            radius_m,
            kind,
            len(attractions),
        )
        return attractions

    def place_details(self, place_id: str) -> Dict[str, Any]:
        data = self._get(f"{self.places_url}/place-details", {"id": place_id})
        features = self._features(data)
        if not features:
            raise NotFound("Place not found")
        props = features[0]
        contact = props.get("contact") or {}
        return {
            "id": props.get("place_id"),
            "name": props.get("name") or props.get("formatted"),
            "address": props.get("formatted"),
            "location": {"lat": props.get("lat"), "lon": props.get("lon")},
            "categories": props.get("categories"),
            "datasource": props.get("datasource"),
            "contact": {
                "phone": contact.get("phone"),
                "email": contact.get("email"),
                "website": props.get("website"),
            },
            "openingHours": props.get("opening_hours"),
            "facilities": props.get("facilities"),
            "wiki": props.get("wiki_and_media"),
        }

    def geocode(self, address: str, limit: int = 5) -> List[Dict[str, Any]]:
        data = self._get(f"{self.geocode_url}/search", {"text": address, "limit": limit})
        return [
            {
                "formatted": props.get("formatted"),
                "location": {"lat": props.get("lat"), "lon": props.get("lon")},
                "country": props.get("country"),
                "state": props.get("state"),
                "city": props.get("city"),
                "place_id": props.get("place_id"),
            }
            for props in self._features(data)
        ]

    def autocomplete(self, text: str, limit: int = 10) -> List[Dict[str, Any]]:
        data = self._get(
            f"{self.geocode_url}/autocomplete",
            {"text": text, "type": "city,amenity", "limit": limit},
        )
        return [
            {
                "text": props.get("formatted"),
                "name": props.get("name"),
                "location": {"lat": props.get("lat"), "lon": props.get("lon")},
                "place_id": props.get("place_id"),
                "category": props.get("result_type"),
            }
            for props in self._features(data)
        ]


_default_geoapify_client: Optional[GeoapifyClient] = None


def get_default_geoapify_client() -> GeoapifyClient:
    global _default_geoapify_client
    if _default_geoapify_client is None:
        _default_geoapify_client = GeoapifyClient(api_key=settings.GEOAPIFY_API_KEY)
    return _default_geoapify_client
