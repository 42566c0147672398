"""
SQLAlchemy ORM models for persistence.
"""
import re
from datetime import datetime
from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship, validates

from db import Base
from domain.errors import BadRequest
from domain.models import PlaceCategory

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
URL_RE = re.compile(r"^https?://\S+$")


def _require_text(value, message: str):
    if value is None or not str(value).strip():
        raise BadRequest(message)
    return value


def _require_range(value, low: float, high: float, label: str):
    if value is None:
        raise BadRequest(f"{label} is required")
    if value < low:
        raise BadRequest(f"{label} must be at least {low:g}")
    if value > high:
        raise BadRequest(f"{label} must be at most {high:g}")
    return value


class PlaceORM(Base):
    __tablename__ = "places"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=False)
    location = Column(String, nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    image_url = Column(String, nullable=True)
    category = Column(String, nullable=False)
    rating = Column(Float, nullable=True, default=0.0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    wishlist_entries = relationship(
        "WishlistEntryORM",
        back_populates="place",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @validates("name")
    def _validate_name(self, key, value):
        return _require_text(value, "Place name cannot be empty")

    @validates("description")
    def _validate_description(self, key, value):
        return _require_text(value, "Description cannot be empty")

    @validates("location")
    def _validate_location(self, key, value):
        return _require_text(value, "Location cannot be empty")

    @validates("latitude")
    def _validate_latitude(self, key, value):
        return _require_range(value, -90, 90, "Latitude")

    @validates("longitude")
    def _validate_longitude(self, key, value):
        return _require_range(value, -180, 180, "Longitude")

    @validates("image_url")
    def _validate_image_url(self, key, value):
        if value is not None and not URL_RE.match(value):
            raise BadRequest("Invalid image URL format")
        return value

    @validates("category")
    def _validate_category(self, key, value):
        allowed = [c.value for c in PlaceCategory]
        if value not in allowed:
            raise BadRequest(f"Category must be one of: {', '.join(allowed)}")
        return value

    @validates("rating")
    def _validate_rating(self, key, value):
        if value is None:
            return 0.0
        return _require_range(value, 0, 5, "Rating")


class UserORM(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String, nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    wishlist_entries = relationship(
        "WishlistEntryORM",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @validates("email")
    def _validate_email(self, key, value):
        _require_text(value, "Email cannot be empty")
        if not EMAIL_RE.match(value):
            raise BadRequest("Invalid email format")
        return value


class WishlistEntryORM(Base):
    __tablename__ = "wishlist_entries"
    __table_args__ = (UniqueConstraint("user_id", "place_id", name="unique_user_place"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    place_id = Column(Integer, ForeignKey("places.id", ondelete="CASCADE"), nullable=False, index=True)
    notes = Column(Text, nullable=True)
    visit_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("UserORM", back_populates="wishlist_entries")
    place = relationship("PlaceORM", back_populates="wishlist_entries")
