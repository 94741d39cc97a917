"""
Tests for the AzureAIClient routing and response normalisation.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from req_integrity.utils.azure_ai_client import AzureAIClient


@pytest.fixture
def openai_client():
    item = MagicMock()
    item.model_dump.return_value = {"type": "message", "content": [{"type": "output_text", "text": "hi"}]}
    client = MagicMock()
    client.responses.create.return_value = SimpleNamespace(
        output=[item], usage=SimpleNamespace(input_tokens=11, output_tokens=3)
    )
    return client


@pytest.fixture
def foundation_client():
    client = MagicMock()
    client.complete.return_value = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content="from foundation"))],
        usage=SimpleNamespace(prompt_tokens=7, completion_tokens=2),
    )
    return client


def test_openai_model_uses_responses_api(openai_client):
    client = AzureAIClient(system_prompt="Be strict.", openai_client=openai_client)

    result = client.respond("gpt-4.1-mini", "Check this", max_tokens=100)

    assert result["output"][0]["content"][0]["text"] == "hi"
    assert result["usage"] == {"input_tokens": 11, "output_tokens": 3}
    kwargs = openai_client.responses.create.call_args.kwargs
    assert kwargs["instructions"] == "Be strict."
    assert kwargs["input"] == "Check this"
    assert kwargs["max_output_tokens"] == 100
    assert kwargs["temperature"] == 0


def test_reasoning_model_without_temperature(openai_client):
    AzureAIClient(openai_client=openai_client).respond("o4-mini", "x")

    assert "temperature" not in openai_client.responses.create.call_args.kwargs


def test_foundation_model_is_normalised(foundation_client):
    client = AzureAIClient(foundation_client=foundation_client)

    result = client.respond("Phi-4", "x")

    assert result["output"] == [
        {"type": "message", "content": [{"type": "output_text", "text": "from foundation"}]}
    ]
    assert result["usage"] == {"input_tokens": 7, "output_tokens": 2}
    assert foundation_client.complete.call_args.kwargs["model"] == "Phi-4"


def test_unknown_model():
    with pytest.raises(ValueError):
        AzureAIClient(openai_client=MagicMock()).respond("no-such-model", "x")
