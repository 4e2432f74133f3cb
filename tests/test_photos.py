import json

from app.utils.photos import encode_photos, decode_photos


def test_photo_list_keeps_order():
    urls = ["https://cdn/x/3.jpg", "https://cdn/x/1.jpg", "https://cdn/x/2.jpg"]
    encoded = encode_photos(urls)
    assert json.loads(encoded) == urls
    assert decode_photos(encoded) == urls


def test_single_photo_is_stored_bare():
    assert encode_photos(["https://cdn/x/1.jpg"]) == "https://cdn/x/1.jpg"
    assert decode_photos("https://cdn/x/1.jpg") == ["https://cdn/x/1.jpg"]


def test_empty_values():
    assert encode_photos([]) is None
    assert decode_photos(None) == []
    assert decode_photos("") == []


def test_malformed_json_is_treated_as_a_single_url():
    assert decode_photos("[not json") == ["[not json"]
