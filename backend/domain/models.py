"""
Core domain models for the tourism places service.
These are framework-agnostic and can be used across all services.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Union


class PlaceCategory(str, Enum):
    """Categories allowed for curated (repository) places."""
    PANTAI = "Pantai"
    GUNUNG = "Gunung"
    CANDI = "Candi"
    MUSEUM = "Museum"
    TAMAN = "Taman"
    KULINER = "Kuliner"
    LAINNYA = "Lainnya"


class PlaceSource(str, Enum):
    """Where a place record came from."""
    DATABASE = "database"
    GEOAPIFY = "geoapify"
    GEMINI = "gemini"


@dataclass(frozen=True)
class NamedLocation:
    """A human-readable location such as 'Kuta, Bali'."""
    name: str


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lon: float


Location = Union[NamedLocation, Coordinate]


def location_to_json(location: Optional[Location]) -> Any:
    """Serialize a Location: a string for named locations, {lat, lon} for coordinates."""
    if location is None:
        return None
    if isinstance(location, NamedLocation):
        return location.name
    if isinstance(location, Coordinate):
        return {"lat": location.lat, "lon": location.lon}
    raise TypeError(f"Unsupported location type: {type(location).__name__}")


@dataclass
class Place:
    """
    A place shown to users.

    Repository places always have an integer id. Places that come from
    Geoapify or Gemini are ephemeral and keep id=None unless they were
    matched against a repository place.
    """
    name: str
    id: Optional[int] = None
    description: Optional[str] = None
    location: Optional[Location] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    image_url: Optional[str] = None
    category: Optional[str] = None
    rating: float = 0.0
    source: PlaceSource = PlaceSource.DATABASE
    # External-only fields
    external_id: Optional[str] = None  # provider place_id (Geoapify)
    address: Optional[str] = None
    distance_m: Optional[float] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "location": location_to_json(self.location),
            "latitude": self.latitude,
            "longitude": self.longitude,
            "imageUrl": self.image_url,
            "category": self.category,
            "rating": self.rating,
            "source": self.source.value,
        }
        if self.external_id is not None:
            data["placeId"] = self.external_id
        if self.address is not None:
            data["address"] = self.address
        if self.distance_m is not None:
            data["distance"] = self.distance_m
            data["distanceKm"] = round(self.distance_m / 1000, 2)
        return data


@dataclass
class User:
    id: int
    email: str
    password_hash: Optional[str] = None  # None for Google-only accounts
    created_at: datetime = field(default_factory=datetime.utcnow)

    def to_public_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "email": self.email}


@dataclass
class WishlistEntry:
    """A (user, place) pair the user wants to visit."""
    id: int
    user_id: int
    place_id: int
    notes: Optional[str] = None
    visit_date: Optional[datetime] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)
    place: Optional[Place] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "placeId": self.place_id,
            "notes": self.notes,
            "visitDate": self.visit_date.isoformat() if self.visit_date else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
            "place": self.place.to_dict() if self.place else None,
        }
