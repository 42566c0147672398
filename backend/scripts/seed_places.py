"""Seed the places table with a small set of Indonesian destinations.

Usage (from backend/):
    python -m scripts.seed_places [--reset]

Places whose name already exists are skipped, so the script can be re-run.
`--reset` deletes every place (and, by cascade, wishlist entries) first.
"""

from __future__ import annotations

import argparse
import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from db import SessionLocal, init_db
from repositories import PlacesRepository
from repositories.models import PlaceORM

LOG = logging.getLogger("seed_places")

DEMO_PLACES: List[Dict] = [
    {
        "name": "Pantai Kuta",
        "description": "Pantai terkenal di Bali dengan pasir putih dan sunset yang indah. Cocok untuk surfing dan bersantai.",
        "location": "Kuta, Bali",
        "latitude": -8.7184,
        "longitude": 115.1686,
        "image_url": "https://example.com/kuta.jpg",
        "category": "Pantai",
        "rating": 4.5,
    },
    {
        "name": "Candi Borobudur",
        "description": "Candi Buddha terbesar di dunia yang merupakan situs warisan dunia UNESCO.",
        "location": "Magelang, Jawa Tengah",
        "latitude": -7.6079,
        "longitude": 110.2038,
        "image_url": "https://example.com/borobudur.jpg",
        "category": "Candi",
        "rating": 4.8,
    },
    {
        "name": "Gunung Bromo",
        "description": "Gunung berapi aktif dengan pemandangan sunrise yang spektakuler dan lautan pasir.",
        "location": "Probolinggo, Jawa Timur",
        "latitude": -7.9425,
        "longitude": 112.9531,
        "image_url": "https://example.com/bromo.jpg",
        "category": "Gunung",
        "rating": 4.7,
    },
    {
        "name": "Tanah Lot",
        "description": "Pura di atas batu karang dengan pemandangan sunset yang memukau.",
        "location": "Tabanan, Bali",
        "latitude": -8.6211,
        "longitude": 115.0869,
        "image_url": "https://example.com/tanahlot.jpg",
        "category": "Candi",
        "rating": 4.6,
    },
    {
        "name": "Raja Ampat",
        "description": "Surga diving dengan keanekaragaman hayati laut terkaya di dunia.",
        "location": "Papua Barat",
        "latitude": -0.2554,
        "longitude": 130.5173,
        "image_url": "https://example.com/rajaampat.jpg",
        "category": "Pantai",
        "rating": 5.0,
    },
    {
        "name": "Kawah Ijen",
        "description": "Kawah vulkanik dengan fenomena blue fire yang langka dan danau asam berwarna tosca.",
        "location": "Banyuwangi, Jawa Timur",
        "latitude": -8.0583,
        "longitude": 114.2425,
        "image_url": "https://example.com/ijen.jpg",
        "category": "Gunung",
        "rating": 4.7,
    },
    {
        "name": "Taman Mini Indonesia Indah",
        "description": "Taman rekreasi yang menampilkan miniatur budaya dan arsitektur dari seluruh provinsi Indonesia.",
        "location": "Jakarta Timur",
        "latitude": -6.3025,
        "longitude": 106.8953,
        "image_url": "https://example.com/tmii.jpg",
        "category": "Taman",
        "rating": 4.2,
    },
    {
        "name": "Nusa Penida",
        "description": "Pulau dengan tebing dramatis, pantai berpasir putih dan spot snorkeling yang menakjubkan.",
        "location": "Klungkung, Bali",
        "latitude": -8.7274,
        "longitude": 115.5447,
        "image_url": "https://example.com/nusapenida.jpg",
        "category": "Pantai",
        "rating": 4.8,
    },
    {
        "name": "Museum Nasional Indonesia",
        "description": "Museum terbesar di Asia Tenggara dengan koleksi prasejarah, arkeologi, etnografi dan seni.",
        "location": "Jakarta Pusat",
        "latitude": -6.1753,
        "longitude": 106.8249,
        "image_url": "https://example.com/museum.jpg",
        "category": "Museum",
        "rating": 4.3,
    },
    {
        "name": "Labuan Bajo",
        "description": "Kota pelabuhan sebagai gerbang menuju Taman Nasional Komodo dengan pantai-pantai eksotis.",
        "location": "Flores, Nusa Tenggara Timur",
        "latitude": -8.4969,
        "longitude": 119.8878,
        "image_url": "https://example.com/labuanbajo.jpg",
        "category": "Pantai",
        "rating": 4.6,
    },
]


def seed_places(session: Session, places: Optional[List[Dict]] = None, reset: bool = False) -> int:
    """Insert demo places, returning how many were created."""
    repo = PlacesRepository()
    if reset:
        deleted = session.query(PlaceORM).delete()
        session.commit()
        LOG.info("Deleted %s existing places", deleted)

    existing = {name for (name,) in session.query(PlaceORM.name).all()}
    created = 0
    for data in places if places is not None else DEMO_PLACES:
        if data["name"] in existing:
            LOG.info("Skipping existing place %s", data["name"])
            continue
        repo.create_place(session, **data)
        created += 1
    return created


def main():
    parser = argparse.ArgumentParser(description="Seed demo tourism places")
    parser.add_argument("--reset", action="store_true", help="delete all places before seeding")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    init_db()
    with SessionLocal() as session:
        created = seed_places(session, reset=args.reset)
    LOG.info("Seeded %s places", created)


if __name__ == "__main__":
    main()
