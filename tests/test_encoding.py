from app.models.encoding import decode_list, encode_list


def test_encode_preserves_order_and_unicode():
    text = encode_list(["Aéreo", "Hotel", "Traslado"])
    assert text == '["Aéreo", "Hotel", "Traslado"]'
    assert decode_list(text) == ["Aéreo", "Hotel", "Traslado"]


def test_encode_none_is_empty_array():
    assert encode_list(None) == "[]"


def test_decode_degrades_to_empty_list():
    assert decode_list(None) == []
    assert decode_list("") == []
    assert decode_list("[1, 2") == []
    assert decode_list('{"a": 1}') == []
    assert decode_list("42") == []


def test_decode_numbers():
    assert decode_list("[5, 9]") == [5, 9]
