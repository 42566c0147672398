import json
from unittest.mock import MagicMock

import pytest

from domain.errors import BadRequest, ExternalAPIError
from domain.models import PlaceSource
from repositories import WishlistRepository
from services.ai_assistant import (
    PARSE_FAILURE_MESSAGE,
    AIAssistant,
    build_chat_prompt,
    extract_keywords,
    fallback_reply,
    is_greeting,
    parse_ai_json,
)

IMAGE_URL = "https://images.example.com/generated.jpg"


def _assistant(reply=None, error=None):
    gemini = MagicMock()
    if error is not None:
        gemini.generate.side_effect = error
    else:
        gemini.generate.return_value = reply
    image_search = MagicMock()
    image_search.find_image.return_value = IMAGE_URL
    return AIAssistant(gemini=gemini, image_search=image_search), gemini, image_search


def test_parse_ai_json_strips_markdown_fences():
    assert parse_ai_json('```json\n{"reply": "hi"}\n```') == {"reply": "hi"}
    with pytest.raises(ValueError):
        parse_ai_json("Sure! Here is your plan.")


def test_keywords_and_greetings():
    assert extract_keywords("Pantai di Bali yang bagus") == ["pantai", "bali", "yang", "bagus"]
    assert is_greeting("Halo kak")
    assert not is_greeting("hiking trails")


def test_chat_prompt_only_includes_recent_history():
    history = [{"role": "user", "text": f"turn {i}"} for i in range(5)]
    prompt = build_chat_prompt("next?", history)
    assert "turn 1" not in prompt
    assert "turn 2" in prompt and "turn 4" in prompt
    assert '"reply"' in prompt


def test_fallback_reply_lists_repository_matches(make_place):
    place = make_place()
    text = fallback_reply("pantai", [place])
    assert "I found 1 places" in text
    assert "Pantai Kuta (Kuta, Bali)" in text
    assert "Welcome" in fallback_reply("hello", [])


def test_chat_merges_repository_and_ai_places(session, user, make_place):
    kuta = make_place()
    reply = json.dumps(
        {
            "reply": "Try these beaches.",
            "places": [
                {"name": "pantai kuta", "location": "Bali"},
                {"name": "Gili Trawangan", "location": "Lombok", "category": "Pantai", "description": "Island"},
            ],
        }
    )
    assistant, gemini, image_search = _assistant(reply=reply)

    result = assistant.chat(session, user.id, "pantai di bali", [{"role": "user", "text": "hi"}])

    assert result["response"] == "Try these beaches."
    assert result["conversationId"] == 2
    names = [p["name"] for p in result["places"]]
    assert names == ["Pantai Kuta", "Gili Trawangan"]
    assert result["places"][0]["id"] == kuta.id
    gili = result["places"][1]
    assert gili["id"] is None
    assert gili["source"] == PlaceSource.GEMINI.value
    assert gili["imageUrl"] == IMAGE_URL
    image_search.find_image.assert_called_once_with("Gili Trawangan", "Pantai")


def test_chat_falls_back_when_gemini_fails(session, user, make_place):
    make_place()
    assistant, _, _ = _assistant(error=ExternalAPIError("Gemini API Error: quota"))

    result = assistant.chat(session, user.id, "pantai di bali")

    assert "I found 1 places" in result["response"]
    assert [p["name"] for p in result["places"]] == ["Pantai Kuta"]


def test_chat_falls_back_on_unparseable_reply(session, user):
    assistant, _, _ = _assistant(reply="not json at all")
    result = assistant.chat(session, user.id, "hello")
    assert "Welcome" in result["response"]
    assert result["places"] is None


def test_chat_requires_message(session, user):
    assistant, gemini, _ = _assistant(reply="{}")
    with pytest.raises(BadRequest):
        assistant.chat(session, user.id, "   ")
    gemini.generate.assert_not_called()


def test_trip_plan_parses_itinerary(session, user):
    plan = {"tripTitle": "Bali in 2 days", "duration": 2, "itinerary": []}
    assistant, gemini, _ = _assistant(reply="```json\n" + json.dumps(plan) + "\n```")

    result = assistant.trip_plan(session, user.id, "Bali", days=2, preferences=["beach"])

    assert result["message"] == "Trip itinerary generated successfully"
    assert result["itinerary"] == plan
    prompt = gemini.generate.call_args[0][0]
    assert "Duration: 2 days" in prompt
    assert "beach" in prompt


def test_trip_plan_parse_failure_is_external_error(session, user):
    assistant, _, _ = _assistant(reply="I cannot do that")
    with pytest.raises(ExternalAPIError) as exc_info:
        assistant.trip_plan(session, user.id, "Bali")
    assert exc_info.value.message == PARSE_FAILURE_MESSAGE


def test_recommendations_without_wishlist(session, user):
    assistant, gemini, _ = _assistant(reply="{}")
    result = assistant.recommendations(session, user.id)
    assert result["recommendations"] == []
    gemini.generate.assert_not_called()


def test_recommendations_skip_saved_and_duplicate_names(session, user, make_place):
    kuta = make_place()
    WishlistRepository().create_entry(session, user.id, kuta.id)
    reply = json.dumps(
        {
            "analysis": {"userPreference": "beaches"},
            "recommendations": [
                {"name": "Pantai Kuta", "category": "Pantai"},
                {"name": "Gili Trawangan", "category": "Pantai"},
                {"name": "gili trawangan", "category": "Pantai"},
            ],
        }
    )
    assistant, _, _ = _assistant(reply=reply)

    result = assistant.recommendations(session, user.id)

    assert result["analysis"] == {"userPreference": "beaches"}
    assert [r["name"] for r in result["recommendations"]] == ["Gili Trawangan"]
    assert result["recommendations"][0]["id"] is None
    assert result["recommendations"][0]["imageUrl"] == IMAGE_URL


def test_generate_description_requires_name_and_location():
    assistant, _, _ = _assistant(reply="A lovely place.")
    with pytest.raises(BadRequest):
        assistant.generate_description("Tanah Lot", "")
    result = assistant.generate_description("Tanah Lot", "Tabanan, Bali", "Candi")
    assert result == {
        "placeName": "Tanah Lot",
        "location": "Tabanan, Bali",
        "category": "Candi",
        "description": "A lovely place.",
    }


def test_recommendations_skip_saved_place_under_another_name(session, user, make_place):
    kuta = make_place()
    WishlistRepository().create_entry(session, user.id, kuta.id)
    reply = json.dumps(
        {
            "recommendations": [
                {"name": "Kuta", "category": "Pantai"},
                {"name": "Gili Trawangan", "category": "Pantai"},
            ]
        }
    )
    assistant, _, _ = _assistant(reply=reply)

    result = assistant.recommendations(session, user.id)

    assert [r["name"] for r in result["recommendations"]] == ["Gili Trawangan"]
