"""
Gemini-backed travel assistant.

Builds prompts from the user's message, recent conversation and repository
matches, parses the model's JSON defensively and reconciles the places it
suggests with the curated repository:

- a suggestion whose name matches a repository place (case-insensitive
  substring, either direction) is replaced by that place, so it carries the
  real id, coordinates and image;
- anything else stays ephemeral (id=None) and gets an image from the image
  search client. Those lookups run in parallel.

Chat never fails because of Gemini: API and parse errors fall back to a
templated reply built from repository matches, or a canned greeting.
"""
from __future__ import annotations

import json
import logging
import re
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from domain.errors import BadRequest, ExternalAPIError
from domain.models import Coordinate, NamedLocation, Place, PlaceSource
from repositories import PlacesRepository, WishlistRepository
from services.gemini_client import GeminiClient, get_default_gemini_client
from services.image_search import ImageSearchClient, get_default_image_search
from services.place_merge import merge_places, normalize_name

logger = logging.getLogger(__name__)

HISTORY_TURNS = 3
CHAT_REPO_MATCH_LIMIT = 5
CHAT_WISHLIST_LIMIT = 10
GREETINGS = ("hi", "halo", "hello", "hai", "hei", "hey")
PARSE_FAILURE_MESSAGE = "Failed to parse AI response. Please try again."

_FENCE_RE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)
_KEYWORD_RE = re.compile(r"\b\w{4,}\b")


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text or "").strip()


def parse_ai_json(text: str) -> Any:
    """json.loads after removing markdown code fences. Raises ValueError on bad input."""
    return json.loads(strip_code_fences(text))


def extract_keywords(message: str) -> List[str]:
    return _KEYWORD_RE.findall((message or "").lower())


def is_greeting(message: str) -> bool:
    lowered = (message or "").lower().strip()
    return any(lowered == g or lowered.startswith(g + " ") for g in GREETINGS)


def _truncate(text: Optional[str], length: int) -> str:
    text = text or ""
    return text if len(text) <= length else text[:length] + "..."


def _location_text(place: Place) -> str:
    if isinstance(place.location, NamedLocation):
        return place.location.name
    if isinstance(place.location, Coordinate):
        return f"{place.location.lat:.4f}, {place.location.lon:.4f}"
    return ""


def build_chat_prompt(
    message: str,
    history: Sequence[Dict[str, Any]] = (),
    repo_matches: Sequence[Place] = (),
    saved_place_names: Sequence[str] = (),
) -> str:
    sections = [
        "You are a friendly tourism assistant helping travellers plan trips in Indonesia.",
        "You recommend destinations, answer questions about places (access, prices, best time to visit),",
        "and give practical travel tips about budget, transport, accommodation, food and local culture.",
    ]
    if saved_place_names:
        sections.append(f"\nUser's saved places: {', '.join(saved_place_names)}")
    if repo_matches:
        lines = [
            f"- {p.name} ({_location_text(p)})\n  Category: {p.category}\n  Rating: {p.rating}/5\n"
            f"  Description: {_truncate(p.description, 150)}"
            for p in repo_matches
        ]
        sections.append("\nRelevant places from our database:\n" + "\n\n".join(lines))
    recent = list(history)[-HISTORY_TURNS:]
    if recent:
        turns = "\n".join(f"{h.get('role', 'user')}: {h.get('text', '')}" for h in recent)
        sections.append("\nPrevious conversation:\n" + turns)
    sections.append(f"\nUser question: {message}")
    sections.append(
        "\nAnswer in 2-4 short paragraphs with practical details, mention matching database places and "
        "the user's saved places when relevant.\n"
        "Respond ONLY with valid JSON of the form:\n"
        '{"reply": "string", "places": [{"name": "string", "location": "string", "category": "string", '
        '"description": "string", "latitude": number, "longitude": number}]}\n'
        'Use an empty "places" list when you are not suggesting specific places.'
    )
    return "\n".join(sections)


def fallback_reply(message: str, repo_matches: Sequence[Place]) -> str:
    """Reply used when Gemini is unavailable or its answer cannot be parsed."""
    if repo_matches:
        lines = [f"I found {len(repo_matches)} places that match your search!\n"]
        for idx, place in enumerate(repo_matches, start=1):
            lines.append(f"{idx}. {place.name} ({_location_text(place)})")
            lines.append(f"   Category: {place.category} | Rating: {place.rating}/5")
            lines.append(f"   {_truncate(place.description, 100)}\n")
        lines.append("Open a card below to see the full details!")
        return "\n".join(lines)

    if is_greeting(message):
        return (
            "Hello! Welcome to NextTrip!\n\n"
            "I'm a tourism assistant ready to help you plan trips around Indonesia.\n\n"
            "You can ask me about:\n"
            "- Destination recommendations\n"
            "- Information about a specific place\n"
            "- Travel tips (budget, transport, accommodation)\n"
            "- Local food and culture\n\n"
            "For example: \"Beach recommendations in Bali\" or \"Mountains for beginner hikers\"."
        )

    return (
        "Sorry, the AI assistant is not reachable right now.\n\n"
        "You can still:\n"
        "- Browse destinations on the home page\n"
        "- Search by city or category\n"
        "- Try searching for \"beach\", \"mountain\", \"temple\" or a city such as \"bali\" or \"jogja\""
    )


def _suggestion_location(item: Dict[str, Any]):
    loc = item.get("location")
    if isinstance(loc, str) and loc.strip():
        return NamedLocation(loc.strip())
    if isinstance(loc, dict) and loc.get("lat") is not None and loc.get("lon") is not None:
        try:
            return Coordinate(float(loc["lat"]), float(loc["lon"]))
        except (TypeError, ValueError):
            return None
    return None


def _float_or_none(value: Any) -> Optional[float]:
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def resolve_suggested_places(
    session: Session,
    suggestions: Sequence[Any],
    places_repo: PlacesRepository,
    image_search: ImageSearchClient,
) -> List[Place]:
    """Turn AI place suggestions into Places, reusing repository rows where names match."""
    resolved: List[Place] = []
    pending: List[Place] = []
    for item in suggestions or []:
        if not isinstance(item, dict) or normalize_name(item.get("name")) is None:
            continue
        name = item["name"].strip()
        match = places_repo.find_by_name_match(session, name)
        if match:
            resolved.append(match)
            continue
        place = Place(
            id=None,
            name=name,
            description=item.get("description"),
            location=_suggestion_location(item),
            latitude=_float_or_none(item.get("latitude")),
            longitude=_float_or_none(item.get("longitude")),
            category=item.get("category"),
            rating=_float_or_none(item.get("rating")) or 0.0,
            source=PlaceSource.GEMINI,
        )
        pending.append(place)
        resolved.append(place)

    if pending:
        with ThreadPoolExecutor(max_workers=len(pending)) as pool:
            urls = list(pool.map(lambda p: image_search.find_image(p.name, p.category), pending))
        for place, url in zip(pending, urls):
            place.image_url = url

    return resolved


class AIAssistant:
    """Chat, trip planning, recommendations and descriptions backed by Gemini."""

    def __init__(
        self,
        gemini: Optional[GeminiClient] = None,
        places_repo: Optional[PlacesRepository] = None,
        wishlist_repo: Optional[WishlistRepository] = None,
        image_search: Optional[ImageSearchClient] = None,
    ):
        self._gemini = gemini
        self._image_search = image_search
        self.places_repo = places_repo or PlacesRepository()
        self.wishlist_repo = wishlist_repo or WishlistRepository()

    @property
    def gemini(self) -> GeminiClient:
        return self._gemini or get_default_gemini_client()

    @property
    def image_search(self) -> ImageSearchClient:
        return self._image_search or get_default_image_search()

    def chat(
        self,
        session: Session,
        user_id: int,
        message: str,
        history: Optional[Sequence[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        if not message or not message.strip():
            raise BadRequest("Message is required")
        history = list(history or [])

        repo_matches = self.places_repo.find_by_keywords(
            session, extract_keywords(message), limit=CHAT_REPO_MATCH_LIMIT
        )
        saved = self.wishlist_repo.list_for_user(session, user_id, limit=CHAT_WISHLIST_LIMIT)
        saved_names = [e.place.name for e in saved if e.place]

        prompt = build_chat_prompt(message, history, repo_matches, saved_names)
        ai_places: List[Place] = []
        try:
            payload = parse_ai_json(self.gemini.generate(prompt))
            if not isinstance(payload, dict) or not isinstance(payload.get("reply"), str):
                raise ValueError("AI reply is missing the 'reply' field")
            reply = payload["reply"]
            suggestions = payload.get("places") if isinstance(payload.get("places"), list) else []
            ai_places = resolve_suggested_places(session, suggestions, self.places_repo, self.image_search)
        except ExternalAPIError as exc:
            logger.warning("Chat falling back to template reply: %s", exc)
            reply = fallback_reply(message, repo_matches)
        except ValueError as exc:
            logger.warning("Chat could not parse Gemini reply, using template: %s", exc)
            reply = fallback_reply(message, repo_matches)

        places = merge_places(repo_matches, ai_places)
        return {
            "response": reply,
            "places": [p.to_dict() for p in places] if places else None,
            "conversationId": len(history) + 1,
        }

    def trip_plan(
        self,
        session: Session,
        user_id: int,
        destination: str,
        days: int = 3,
        budget: Optional[str] = None,
        preferences: Optional[Sequence[str]] = None,
    ) -> Dict[str, Any]:
        if not destination or not destination.strip():
            raise BadRequest("Destination is required")
        preferences = list(preferences or [])
        wishlist = [e for e in self.wishlist_repo.list_for_user(session, user_id) if e.place]

        if wishlist:
            lines = [
                f"- {e.place.name} ({_location_text(e.place)}) - Category: {e.place.category}" for e in wishlist
            ]
            notes = [f"- {e.place.name}: {e.notes}" for e in wishlist if e.notes]
            wishlist_text = "User's wishlist (prioritise these places):\n" + "\n".join(lines)
            if notes:
                wishlist_text += "\n\nUser notes:\n" + "\n".join(notes)
        else:
            wishlist_text = "The user has no wishlist yet; recommend popular destinations."

        prompt = f"""
You are an expert travel planner. Build a detailed, practical itinerary.

Destination: {destination}
Duration: {days} days
Budget: {budget or 'flexible'}
User preferences: {', '.join(preferences) if preferences else 'general tourism'}

{wishlist_text}

Respond ONLY with valid JSON using this structure:
{{
  "tripTitle": "string",
  "destination": "string",
  "duration": number,
  "estimatedBudget": {{"min": number, "max": number, "currency": "IDR"}},
  "itinerary": [
    {{
      "day": number,
      "title": "string",
      "activities": [
        {{"time": "HH:MM", "activity": "string", "location": "string", "duration": "string",
          "estimatedCost": number, "tips": "string", "category": "string"}}
      ],
      "meals": [{{"type": "breakfast/lunch/dinner", "recommendation": "string", "estimatedCost": number}}],
      "accommodation": {{"suggestion": "string", "estimatedCost": number}}
    }}
  ],
  "transportation": {{"suggestions": ["string"], "estimatedCost": number}},
  "packingList": ["string"],
  "importantTips": ["string"],
  "emergencyContacts": ["string"]
}}

Make sure travel time between locations is realistic, budget estimates fit Indonesia,
and wishlist places are prioritised.
"""
        text = self.gemini.generate(prompt)
        try:
            itinerary = parse_ai_json(text)
        except ValueError as exc:
            logger.warning("Trip planner could not parse Gemini reply: %s", exc)
            raise ExternalAPIError(PARSE_FAILURE_MESSAGE) from exc
        return {"message": "Trip itinerary generated successfully", "itinerary": itinerary}

    def recommendations(self, session: Session, user_id: int) -> Dict[str, Any]:
        wishlist = [e for e in self.wishlist_repo.list_for_user(session, user_id) if e.place]
        if not wishlist:
            return {
                "message": "No wishlist data yet. Start exploring and save some places!",
                "recommendations": [],
            }

        saved = [e.place for e in wishlist]
        top_categories = [cat for cat, _ in Counter(p.category for p in saved).most_common(3)]
        avg_rating = sum(p.rating or 0 for p in saved) / len(saved)
        saved_lines = "\n".join(
            f"- {p.name} ({_location_text(p)}) - Category: {p.category}, Rating: {p.rating}" for p in saved
        )
        prompt = f"""
You are a recommendation expert for tourist destinations.

The user has saved {len(saved)} destinations:
{saved_lines}

User preference analysis:
- Top categories: {', '.join(top_categories)}
- Average rating preference: {avg_rating:.1f}

Recommend 8 new destinations in Indonesia that match the favourite categories, are NOT already
in the wishlist, resemble the saved places, and are spread across different regions.

Respond ONLY with valid JSON:
{{
  "analysis": {{"userPreference": "string", "recommendationReason": "string"}},
  "recommendations": [
    {{"name": "string", "location": "string", "category": "string", "description": "string",
      "whyRecommended": "string", "estimatedBudget": "string", "bestTime": "string"}}
  ]
}}
"""
        text = self.gemini.generate(prompt)
        try:
            payload = parse_ai_json(text)
        except ValueError as exc:
            logger.warning("Recommendations could not parse Gemini reply: %s", exc)
            raise ExternalAPIError(PARSE_FAILURE_MESSAGE) from exc
        if not isinstance(payload, dict):
            raise ExternalAPIError(PARSE_FAILURE_MESSAGE)

        raw = [r for r in payload.get("recommendations") or [] if isinstance(r, dict)]
        saved_keys = {normalize_name(p.name) for p in saved}
        raw = [r for r in merge_places(raw) if normalize_name(r.get("name")) not in saved_keys]
        resolved = resolve_suggested_places(session, raw, self.places_repo, self.image_search)
        saved_ids = {p.id for p in saved}

        recommendations = []
        for item, place in zip(raw, resolved):
            # A suggestion can resolve to a saved place under a different name.
            if place.id is not None and place.id in saved_ids:
                continue
            recommendations.append(
                dict(
                    item,
                    id=place.id,
                    imageUrl=place.image_url,
                    latitude=place.latitude,
                    longitude=place.longitude,
                )
            )
        return {"analysis": payload.get("analysis"), "recommendations": recommendations}

    def generate_description(
        self, place_name: str, location: str, category: Optional[str] = None
    ) -> Dict[str, Any]:
        if not place_name or not location:
            raise BadRequest("Place name and location are required")
        prompt = f"""
Write an engaging, informative description of this tourist destination:

Name: {place_name}
Location: {location}
Category: {category or 'tourist destination'}

The description should be 3-4 paragraphs (150-200 words) covering what makes the place unique,
activities, the best time to visit, accessibility and facilities.
Plain text only, no markdown or bullet points.
"""
        description = self.gemini.generate(prompt).strip()
        return {
            "placeName": place_name,
            "location": location,
            "category": category,
            "description": description,
        }
