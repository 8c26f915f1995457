from __future__ import annotations

import json

from reco_core.extract import extract_json, strip_code_fences
from reco_core.records import ResponseShape


def test_fenced_array_round_trips():
    payload = [{"title": "Stethoscope", "rating": 4.5}, {"title": "Books"}]
    text = "```json\n" + json.dumps(payload) + "\n```"
    assert extract_json(text, ResponseShape.ARRAY) == payload


def test_prose_around_object_is_ignored():
    text = 'Here is the analysis you asked for:\n{"productName": "Thermometer", "confidence": 90}\nHope it helps!'
    assert extract_json(text, ResponseShape.OBJECT) == {"productName": "Thermometer", "confidence": 90}


def test_no_brackets_returns_none():
    assert extract_json("I cannot help with that.", ResponseShape.ARRAY) is None
    assert extract_json("I cannot help with that.", ResponseShape.OBJECT) is None


def test_invalid_json_returns_none():
    assert extract_json("[{'title': 'single quotes'}]", ResponseShape.ARRAY) is None


def test_empty_reply_returns_none():
    assert extract_json("", ResponseShape.ARRAY) is None
    assert extract_json(None, ResponseShape.OBJECT) is None


def test_strip_code_fences_handles_language_tags():
    assert strip_code_fences("```JSON\n[]\n```") == "[]"
    assert strip_code_fences("plain") == "plain"
