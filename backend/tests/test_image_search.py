from unittest.mock import MagicMock

import requests

from services.image_search import ImageSearchClient, fallback_image_url


def test_fallback_prefers_destination_keywords_over_category():
    url = fallback_image_url("Candi Borobudur", "Museum")
    assert url == "https://source.unsplash.com/500x300/?borobudur,temple,indonesia"


def test_fallback_uses_category_then_default():
    assert fallback_image_url("Unknown Cove", "Pantai").endswith("?beach,tropical,indonesia")
    assert fallback_image_url("Unknown Spot", None).endswith("?tourism,travel,indonesia")


def test_find_image_without_key_does_not_call_network():
    session = MagicMock()
    client = ImageSearchClient(access_key=None, session=session)
    assert client.find_image("Gunung Bromo").endswith("?bromo,volcano,indonesia")
    session.get.assert_not_called()


def test_find_image_uses_unsplash_result():
    session = MagicMock()
    resp = MagicMock()
    resp.status_code = 200
    resp.json.return_value = {"results": [{"urls": {"regular": "https://images.unsplash.com/photo-1"}}]}
    session.get.return_value = resp

    client = ImageSearchClient(access_key="key", session=session)
    assert client.find_image("Raja Ampat") == "https://images.unsplash.com/photo-1"
    _, kwargs = session.get.call_args
    assert kwargs["headers"]["Authorization"] == "Client-ID key"
    assert kwargs["params"]["query"] == "Raja Ampat indonesia"


def test_find_image_falls_back_on_errors():
    session = MagicMock()
    session.get.side_effect = requests.Timeout("slow")
    client = ImageSearchClient(access_key="key", session=session)
    assert client.find_image("Tanah Lot").endswith("?tanah-lot,bali,temple")

    resp = MagicMock()
    resp.status_code = 403
    session.get.side_effect = None
    session.get.return_value = resp
    assert client.find_image("Nowhere", "Gunung").endswith("?mountain,volcano,nature")
