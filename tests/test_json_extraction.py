"""Tests for JSON extraction from model output."""

from todo_assistant.providers.json_extraction import extract_json


def test_plain_object() -> None:
    """Test a bare JSON object."""
    assert extract_json('{"title": "meeting"}') == {"title": "meeting"}


def test_code_fence_removed() -> None:
    """Test that markdown code fences are stripped."""
    content = '  ```json\n{"title": "meeting", "tags": []}\n```  '

    assert extract_json(content) == {"title": "meeting", "tags": []}


def test_surrounding_prose_fails_without_strict() -> None:
    """Test that prose around the object is not removed in lenient mode."""
    content = 'Sure! Here it is: {"title": "meeting"} Hope that helps.'

    assert extract_json(content) is None


def test_surrounding_prose_removed_with_strict() -> None:
    """Test first-brace to last-brace extraction in strict mode."""
    content = 'Sure! Here it is:\n```json\n{"updates": {"priority": "high"}}\n```\nDone.'

    assert extract_json(content, strict=True) == {"updates": {"priority": "high"}}


def test_invalid_json_returns_none() -> None:
    """Test that undecodable content yields None instead of raising."""
    assert extract_json("{title: meeting}") is None
    assert extract_json("no braces at all", strict=True) is None
    assert extract_json("") is None
    assert extract_json(None) is None


def test_non_object_returns_none() -> None:
    """Test that JSON arrays and scalars are rejected."""
    assert extract_json('["a", "b"]') is None
    assert extract_json("42") is None
