"""
Tests for the optional Claude enhancement client.

The live check only runs when ANTHROPIC_API_KEY is set.
"""

import os
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from procure_engine.config import Settings
from procure_engine.exceptions import EnhancementError
from procure_engine.reasoner import ClaudeClient

TOOL = {
    "name": "record_items",
    "description": "Record parsed procurement items",
    "input_schema": {"type": "object", "properties": {"items": {"type": "array"}}},
}


def make_message(*blocks):
    return SimpleNamespace(content=list(blocks), stop_reason="tool_use")


def tool_block(name, payload):
    return SimpleNamespace(type="tool_use", name=name, input=payload)


@pytest.fixture
def client():
    return ClaudeClient(api_key="test-key")


def test_from_settings_without_key():
    """Test no client is built without an API key."""
    assert ClaudeClient.from_settings(Settings()) is None


def test_from_settings_with_key():
    """Test the configured model is passed through."""
    client = ClaudeClient.from_settings(Settings(anthropic_api_key="test-key", anthropic_model="claude-x"))
    assert client.model == "claude-x"


def test_generate_structured_returns_tool_input(client):
    """Test the tool call input is extracted."""
    message = make_message(
        SimpleNamespace(type="text", text="Here you go"),
        tool_block("record_items", {"items": [{"name": "Chair", "quantity": 5}]})
    )

    with patch.object(client.client.messages, "create", return_value=message) as create:
        result = client.generate_structured("5 chairs", "You parse requests", TOOL)

    assert result == {"items": [{"name": "Chair", "quantity": 5}]}
    kwargs = create.call_args.kwargs
    assert kwargs["tool_choice"] == {"type": "tool", "name": "record_items"}
    assert kwargs["tools"] == [TOOL]


def test_missing_tool_call_raises(client):
    """Test a text-only answer is an enhancement failure."""
    message = make_message(SimpleNamespace(type="text", text="No tools today"))

    with patch.object(client.client.messages, "create", return_value=message):
        with pytest.raises(EnhancementError):
            client.generate_structured("5 chairs", "You parse requests", TOOL)


def test_wrong_tool_name_raises(client):
    """Test a call to a different tool is ignored."""
    message = make_message(tool_block("something_else", {"items": []}))

    with patch.object(client.client.messages, "create", return_value=message):
        with pytest.raises(EnhancementError):
            client.generate_structured("5 chairs", "You parse requests", TOOL)


def test_api_failure_raises_enhancement_error(client):
    """Test transport errors are wrapped."""
    with patch.object(client.client.messages, "create", side_effect=ConnectionError("offline")):
        with pytest.raises(EnhancementError, match="offline") as exc_info:
            client.generate_structured("5 chairs", "You parse requests", TOOL)

    assert exc_info.value.code == "ENHANCEMENT_UNAVAILABLE"


def test_validate_api_key_false_on_error(client):
    """Test key validation reports failure instead of raising."""
    with patch.object(client.client.messages, "create", side_effect=RuntimeError("401")):
        assert client.validate_api_key() is False


@pytest.mark.skipif(
    not os.getenv('ANTHROPIC_API_KEY'),
    reason="ANTHROPIC_API_KEY not set"
)
def test_live_api_key():
    """Test the configured key against the real API."""
    client = ClaudeClient(api_key=os.getenv('ANTHROPIC_API_KEY'))
    assert client.validate_api_key() is True
