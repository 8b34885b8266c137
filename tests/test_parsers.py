import pytest

from decision_companion.utils.parsers import extract_json, looks_like_json, try_extract_json


def test_fenced_json_with_surrounding_prose():
    text = "Sure!\n```json\n{\"options\": [1, 2]}\n```\nAnything else?"
    assert try_extract_json(text) == {"options": [1, 2]}


def test_json_followed_by_trailing_prose():
    assert try_extract_json('{"framing": "Go"} hope this helps') == {"framing": "Go"}


@pytest.mark.parametrize("text", ["", "   ", "no json here", '"just a string"', "42", None])
def test_non_container_replies_yield_none(text):
    assert try_extract_json(text) is None


def test_extract_json_raises_with_snippet():
    with pytest.raises(ValueError, match="No JSON object found"):
        extract_json("plain words")


def test_looks_like_json():
    assert looks_like_json('  {"a": 1}')
    assert looks_like_json("```json\n[]\n```")
    assert not looks_like_json("Take Job A")
