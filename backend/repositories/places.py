"""
Place repository backed by SQLAlchemy.
"""
import math
from typing import Iterable, List, Optional, Tuple
from sqlalchemy import or_
from sqlalchemy.orm import Session

from domain.models import NamedLocation, Place, PlaceSource
from repositories.models import PlaceORM

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two coordinates in kilometres."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))


def place_from_orm(orm: PlaceORM) -> Place:
    return Place(
        id=orm.id,
        name=orm.name,
        description=orm.description,
        location=NamedLocation(orm.location) if orm.location else None,
        latitude=orm.latitude,
        longitude=orm.longitude,
        image_url=orm.image_url,
        category=orm.category,
        rating=orm.rating if orm.rating is not None else 0.0,
        source=PlaceSource.DATABASE,
        created_at=orm.created_at,
    )


def _contains_pattern(term: str) -> str:
    """LIKE pattern matching `term` literally anywhere in the value."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _text_filter(term: str, columns: Iterable):
    pattern = _contains_pattern(term)
    return or_(*[col.ilike(pattern, escape="\\") for col in columns])


class PlacesRepository:
    """Read/write operations for curated places."""

    def list_places(
        self, session: Session, category: Optional[str] = None, search: Optional[str] = None
    ) -> List[Place]:
        query = session.query(PlaceORM)
        if category:
            query = query.filter(PlaceORM.category == category)
        if search:
            query = query.filter(_text_filter(search, [PlaceORM.name, PlaceORM.location]))
        rows = query.order_by(PlaceORM.rating.desc(), PlaceORM.created_at.desc()).all()
        return [place_from_orm(p) for p in rows]

    def get_place(self, session: Session, place_id: int) -> Optional[Place]:
        orm = session.get(PlaceORM, place_id)
        return place_from_orm(orm) if orm else None

    def search(self, session: Session, term: str, limit: Optional[int] = None) -> List[Place]:
        """Places whose name, location, description or category contains `term` (rating-sorted)."""
        query = session.query(PlaceORM).filter(
            _text_filter(
                term,
                [PlaceORM.name, PlaceORM.location, PlaceORM.description, PlaceORM.category],
            )
        ).order_by(PlaceORM.rating.desc(), PlaceORM.created_at.desc())
        if limit:
            query = query.limit(limit)
        return [place_from_orm(p) for p in query.all()]

    def find_by_keywords(self, session: Session, keywords: List[str], limit: int = 5) -> List[Place]:
        if not keywords:
            return []
        columns = [PlaceORM.name, PlaceORM.location, PlaceORM.description, PlaceORM.category]
        rows = (
            session.query(PlaceORM)
            .filter(or_(*[_text_filter(k, columns) for k in keywords]))
            .order_by(PlaceORM.rating.desc())
            .limit(limit)
            .all()
        )
        return [place_from_orm(p) for p in rows]

    def find_by_name_match(self, session: Session, name: str) -> Optional[Place]:
        """Case-insensitive substring match in either direction between `name` and stored names."""
        needle = (name or "").strip()
        if not needle:
            return None
        orm = (
            session.query(PlaceORM)
            .filter(PlaceORM.name.ilike(_contains_pattern(needle), escape="\\"))
            .order_by(PlaceORM.rating.desc())
            .first()
        )
        if orm:
            return place_from_orm(orm)
        lowered = needle.lower()
        for candidate in session.query(PlaceORM).order_by(PlaceORM.rating.desc()).all():
            if candidate.name and candidate.name.lower() in lowered:
                return place_from_orm(candidate)
        return None

    def find_nearby(
        self, session: Session, lat: float, lon: float, radius_km: float
    ) -> List[Tuple[Place, float]]:
        """Places within `radius_km`, nearest first, paired with their distance in km."""
        # Bounding box prefilter, exact distance computed below.
        dlat = radius_km / 111.0
        cos_lat = max(math.cos(math.radians(lat)), 1e-6)
        dlon = min(radius_km / (111.0 * cos_lat), 360.0)
        rows = (
            session.query(PlaceORM)
            .filter(
                PlaceORM.latitude.between(lat - dlat, lat + dlat),
                PlaceORM.longitude.between(lon - dlon, lon + dlon),
            )
            .all()
        )
        hits: List[Tuple[Place, float]] = []
        for orm in rows:
            distance = haversine_km(lat, lon, orm.latitude, orm.longitude)
            if distance <= radius_km:
                hits.append((place_from_orm(orm), distance))
        hits.sort(key=lambda pair: pair[1])
        return hits

    def create_place(
        self,
        session: Session,
        *,
        name: str,
        description: str,
        location: str,
        latitude: float,
        longitude: float,
        category: str,
        rating: float = 0.0,
        image_url: Optional[str] = None,
    ) -> Place:
        orm = PlaceORM(
            name=name,
            description=description,
            location=location,
            latitude=latitude,
            longitude=longitude,
            category=category,
            rating=rating,
            image_url=image_url,
        )
        session.add(orm)
        session.commit()
        session.refresh(orm)
        return place_from_orm(orm)

    def delete_place(self, session: Session, place_id: int) -> None:
        orm = session.get(PlaceORM, place_id)
        if orm:
            session.delete(orm)
            session.commit()
