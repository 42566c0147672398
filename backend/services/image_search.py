"""
Image lookup for places that have no stored photo.

Uses the Unsplash search API when UNSPLASH_ACCESS_KEY is configured and
otherwise falls back to a keyword-based Unsplash "source" URL, which needs no
network call.
"""
from __future__ import annotations

import logging
from typing import Optional

import requests

from settings import settings

UNSPLASH_SEARCH_URL = "https://api.unsplash.com/search/photos"
FALLBACK_IMAGE_BASE = "https://source.unsplash.com/500x300/"

logger = logging.getLogger(__name__)

# Well-known destinations first, matched as substrings of the lower-cased name.
_DESTINATION_KEYWORDS = [
    ("borobudur", ["borobudur", "temple", "indonesia"]),
    ("bromo", ["bromo", "volcano", "indonesia"]),
    ("bali", ["bali", "beach", "indonesia"]),
    ("kuta", ["bali", "beach", "indonesia"]),
    ("seminyak", ["bali", "beach", "indonesia"]),
    ("raja ampat", ["raja-ampat", "papua", "coral"]),
    ("komodo", ["komodo", "island", "indonesia"]),
    ("prambanan", ["prambanan", "temple", "java"]),
    ("toba", ["lake-toba", "sumatra", "indonesia"]),
    ("tanah lot", ["tanah-lot", "bali", "temple"]),
    ("ijen", ["kawah-ijen", "volcano", "blue-fire"]),
    ("nusa penida", ["nusa-penida", "cliff", "bali"]),
]

_CATEGORY_KEYWORDS = {
    "pantai": ["beach", "tropical", "indonesia"],
    "beach": ["beach", "tropical", "indonesia"],
    "gunung": ["mountain", "volcano", "nature"],
    "mountain": ["mountain", "volcano", "nature"],
    "museum": ["museum", "architecture", "culture"],
    "attraction": ["attraction", "tourism", "indonesia"],
    "sights": ["attraction", "tourism", "indonesia"],
    "natural": ["nature", "landscape", "indonesia"],
    "nature": ["nature", "landscape", "indonesia"],
}

_DEFAULT_KEYWORDS = ["tourism", "travel", "indonesia"]


def fallback_image_url(place_name: Optional[str], category: Optional[str] = None) -> str:
    """Keyword-based image URL for a place, chosen by name first and category second."""
    lower_name = (place_name or "").lower()
    keywords = None
    for needle, words in _DESTINATION_KEYWORDS:
        if needle in lower_name:
            keywords = words
            break
    if keywords is None:
        keywords = _CATEGORY_KEYWORDS.get((category or "").lower(), _DEFAULT_KEYWORDS)
    return f"{FALLBACK_IMAGE_BASE}?{','.join(keywords)}"


class ImageSearchClient:
    def __init__(
        self,
        access_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
    ):
        self.access_key = access_key
        self.session = session or requests.Session()
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

    def find_image(self, place_name: str, category: Optional[str] = None) -> str:
        """Return an image URL for the place; never raises."""
        if self.access_key:
            url = self._search_unsplash(f"{place_name} indonesia")
            if url:
                return url
        return fallback_image_url(place_name, category)

    def _search_unsplash(self, query: str) -> Optional[str]:
        params = {"query": query, "per_page": 1, "orientation": "landscape"}
        headers = {"Authorization": f"Client-ID {self.access_key}"}
        try:
            resp = self.session.get(UNSPLASH_SEARCH_URL, params=params, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            self.logger.warning("Unsplash search failed for %r: %s", query, exc)
            return None
        if resp.status_code != 200:
            self.logger.warning("Unsplash search for %r returned HTTP %s", query, resp.status_code)
            return None
        try:
            results = resp.json().get("results") or []
            return results[0]["urls"]["regular"] if results else None
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            self.logger.warning("Unsplash search for %r returned an unexpected payload: %s", query, exc)
            return None


_default_image_search: Optional[ImageSearchClient] = None


def get_default_image_search() -> ImageSearchClient:
    global _default_image_search
    if _default_image_search is None:
        _default_image_search = ImageSearchClient(access_key=settings.UNSPLASH_ACCESS_KEY)
    return _default_image_search
