from unittest.mock import MagicMock

import pytest
import requests

from domain.errors import ExternalAPIError, NotFound
from domain.models import Coordinate, NamedLocation, PlaceSource
from services.geoapify_client import GeoapifyClient, category_label, short_location


def _feature(**props):
    return {"type": "Feature", "properties": props}


def _client(payload=None, status_code=200, side_effect=None):
    session = MagicMock()
    if side_effect is not None:
        session.get.side_effect = side_effect
    else:
        resp = MagicMock()
        resp.status_code = status_code
        resp.json.return_value = payload
        session.get.return_value = resp
    return GeoapifyClient(api_key="test-key", session=session), session


def test_category_label_uses_first_known_tag():
    assert category_label(["tourism.sights.castle", "tourism.attraction"]) == "Attraction"
    assert category_label(["beach.beach_resort"]) == "Pantai"
    assert category_label(["natural.mountain.peak"]) == "Natural"
    assert category_label(["catering.restaurant"]) == "Tourism"
    assert category_label(None) == "Tourism"


def test_short_location_keeps_last_two_parts():
    assert short_location("Jalan Pantai Kuta, Kuta, Badung, Indonesia") == "Badung, Indonesia"
    assert short_location("Indonesia") == "Indonesia"
    assert short_location(None) is None


def test_search_maps_features_and_passes_circle_filter():
    client, session = _client(
        {
            "features": [
                _feature(
                    name="Pantai Kuta",
                    formatted="Pantai Kuta, Kuta, Badung, Indonesia",
                    lat=-8.718,
                    lon=115.168,
                    categories=["beach"],
                    place_id="abc123",
                    distance=1200,
                ),
                _feature(lat=1.0, lon=2.0),
            ]
        }
    )
    places = client.search(query="kuta", lat=-8.7, lon=115.2, radius_m=5000)

    assert len(places) == 1
    place = places[0]
    assert place.name == "Pantai Kuta"
    assert place.location == Coordinate(-8.718, 115.168)
    assert place.source == PlaceSource.GEOAPIFY
    assert place.external_id == "abc123"
    assert place.category == "Pantai"
    assert place.id is None

    _, kwargs = session.get.call_args
    params = kwargs["params"]
    assert params["text"] == "kuta"
    assert params["filter"] == "circle:115.2,-8.7,5000"
    assert params["bias"] == "proximity:115.2,-8.7"
    assert params["apiKey"] == "test-key"


def test_nearby_dedupes_by_name_and_sorts_by_distance():
    client, _ = _client(
        {
            "features": [
                _feature(name="Far Temple", formatted="Far Temple, Ubud, Bali, Indonesia",
                         lat=-8.5, lon=115.2, categories=["tourism.sights"], distance=900),
                _feature(name="Near Museum", formatted="Near Museum, Denpasar, Bali, Indonesia",
                         lat=-8.6, lon=115.2, categories=["tourism.museum"], distance=100),
                _feature(name="near museum", formatted="dup", lat=0, lon=0, distance=50),
                _feature(formatted="No name", lat=0, lon=0, distance=10),
            ]
        }
    )
    attractions = client.nearby(-8.6, 115.2, radius_m=10000, kind="museum")

    assert [a.name for a in attractions] == ["Near Museum", "Far Temple"]
    first = attractions[0]
    assert first.location == NamedLocation("Bali, Indonesia")
    assert first.rating == 4.0
    assert first.distance_m == 100
    assert first.image_url.startswith("https://source.unsplash.com/")
    assert "Distance: 0.1 km" in first.description


def test_nearby_caps_results_at_twenty():
    features = [_feature(name=f"Spot {i}", formatted="x, y", lat=0, lon=0, distance=i) for i in range(30)]
    client, _ = _client({"features": features})
    assert len(client.nearby(0.0, 0.0)) == 20


def test_http_error_becomes_external_api_error_with_provider_message():
    client, _ = _client({"message": "Invalid apiKey"}, status_code=401)
    with pytest.raises(ExternalAPIError) as exc_info:
        client.search(query="bali")
    assert "Invalid apiKey" in exc_info.value.message
    assert exc_info.value.status_code == 502


def test_network_error_becomes_external_api_error():
    client, _ = _client(side_effect=requests.ConnectionError("boom"))
    with pytest.raises(ExternalAPIError):
        client.geocode("Bali")


def test_missing_api_key_fails_without_calling_provider():
    session = MagicMock()
    client = GeoapifyClient(api_key=None, session=session)
    assert not client.configured
    with pytest.raises(ExternalAPIError):
        client.autocomplete("ba")
    session.get.assert_not_called()


def test_place_details_not_found():
    client, _ = _client({"features": []})
    with pytest.raises(NotFound):
        client.place_details("missing")


def test_place_details_maps_contact_fields():
    client, _ = _client(
        {
            "features": [
                _feature(
                    place_id="p1",
                    name="Museum Nasional",
                    formatted="Jakarta Pusat, Indonesia",
                    lat=-6.17,
                    lon=106.82,
                    contact={"phone": "+62 21 000"},
                    website="https://museumnasional.example",
                )
            ]
        }
    )
    details = client.place_details("p1")
    assert details["name"] == "Museum Nasional"
    assert details["location"] == {"lat": -6.17, "lon": 106.82}
    assert details["contact"]["phone"] == "+62 21 000"
    assert details["contact"]["website"] == "https://museumnasional.example"


def test_geocode_and_autocomplete_shapes():
    client, session = _client(
        {"features": [_feature(formatted="Denpasar, Bali, Indonesia", name="Denpasar", lat=-8.65, lon=115.22,
                               country="Indonesia", state="Bali", city="Denpasar", place_id="d1",
                               result_type="city")]}
    )
    results = client.geocode("Denpasar")
    assert results[0]["city"] == "Denpasar"
    assert results[0]["location"] == {"lat": -8.65, "lon": 115.22}

    suggestions = client.autocomplete("Denp")
    assert suggestions[0]["text"] == "Denpasar, Bali, Indonesia"
    assert suggestions[0]["category"] == "city"
    url = session.get.call_args[0][0]
    assert url.endswith("/geocode/autocomplete")
